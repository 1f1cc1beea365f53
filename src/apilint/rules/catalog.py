# SPDX-License-Identifier: MIT
"""Rule catalog — ordered registry of rules with per-kind dispatch."""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from apilint.errors import DuplicateIdError
from apilint.model import NodeKind
from apilint.rules.base import Rule

if TYPE_CHECKING:
    from apilint.model import SchemaNode
    from apilint.rules.context import RuleContext

log = logging.getLogger(__name__)


class RuleCatalog:
    """Rules in registration order, indexed by id and by target node kind.

    Registration order is the tie-break order everywhere and is never
    re-sorted. Once frozen, the catalog rejects further registration.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: list[Rule] = []
        self._by_id: dict[str, Rule] = {}
        self._by_kind: dict[NodeKind, list[Rule]] = {kind: [] for kind in NodeKind}
        self._frozen = False
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> None:
        """Add *rule* to the catalog.

        Raises:
            DuplicateIdError: If a rule with the same id is already registered.
            RuntimeError: If the catalog has been frozen.
            TypeError: If *rule* does not satisfy the Rule protocol.
            ValueError: If *rule* targets no node kinds.
        """
        if not isinstance(rule, Rule):
            msg = f"{type(rule).__name__} does not satisfy the Rule protocol"
            raise TypeError(msg)
        if self._frozen:
            msg = f"Cannot register {rule.id!r}: catalog is frozen"
            raise RuntimeError(msg)
        if rule.id in self._by_id:
            raise DuplicateIdError(rule.id)
        if not rule.targets:
            msg = f"Rule {rule.id!r} targets no node kinds"
            raise ValueError(msg)
        self._rules.append(rule)
        self._by_id[rule.id] = rule
        for kind in NodeKind:
            if kind in rule.targets:
                self._by_kind[kind].append(rule)

    def freeze(self) -> RuleCatalog:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(tuple(self._rules))

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._by_id

    def all(self) -> tuple[Rule, ...]:
        return tuple(self._rules)

    def ids(self) -> list[str]:
        return [r.id for r in self._rules]

    def get(self, rule_id: str) -> Rule:
        return self._by_id[rule_id]

    def rules_for_kind(self, kind: NodeKind) -> tuple[Rule, ...]:
        """Rules targeting *kind*, in catalog order."""
        return tuple(self._by_kind[kind])

    def applicable_rules(self, node: SchemaNode, ctx: RuleContext) -> list[Rule]:
        """Rules whose targets include ``node.kind`` and whose predicate accepts *node*."""
        return [r for r in self._by_kind[node.kind] if r.applies(node, ctx)]


def build_catalog(rule_classes: Iterable[type] | None = None) -> RuleCatalog:
    """Instantiate rule classes (the built-in registry by default) into a frozen catalog."""
    if rule_classes is None:
        from apilint.rules.registry import RULE_REGISTRY

        rule_classes = RULE_REGISTRY
    catalog = RuleCatalog(cls() for cls in rule_classes)
    log.debug("Rule catalog loaded: %d rules", len(catalog))
    return catalog.freeze()


@functools.cache
def default_catalog() -> RuleCatalog:
    """Process-wide catalog of the built-in rules, built once on first use."""
    return build_catalog()
