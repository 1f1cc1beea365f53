# SPDX-License-Identifier: MIT
"""Rule severity, violation record, and Rule protocol for the rule catalog."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from apilint.model import NodeKind, SchemaNode
    from apilint.rules.context import RuleContext


class Severity(IntEnum):
    """Severity levels for rules, ordered for gate comparison."""

    MAY = 0
    SHOULD = 1
    MUST = 2

    @classmethod
    def parse(cls, value: str) -> Severity:
        """Parse a case-insensitive severity name."""
        try:
            return cls[value.strip().upper()]
        except KeyError:
            msg = f"Unknown severity: {value!r}. Valid severities: {[s.name.lower() for s in cls]}"
            raise ValueError(msg) from None


@dataclass(frozen=True)
class Violation:
    """One problem reported by a rule check. ``severity`` overrides the rule default."""

    message: str
    severity: Severity | None = None


@runtime_checkable
class Rule(Protocol):
    """Protocol that every catalog rule must satisfy."""

    id: str
    title: str
    targets: frozenset[NodeKind]
    default_severity: Severity

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool: ...

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]: ...


Predicate = Callable[["SchemaNode", "RuleContext"], bool]
CheckFn = Callable[["SchemaNode", "RuleContext"], list[Violation]]


def _always(node: SchemaNode, ctx: RuleContext) -> bool:
    return True


@dataclass(frozen=True)
class RuleDefinition:
    """A rule assembled from two pure functions instead of a class."""

    id: str
    title: str
    targets: frozenset[NodeKind]
    check_fn: CheckFn
    predicate: Predicate = _always
    default_severity: Severity = Severity.MUST
    default_enabled: bool = True
    url: str | None = None

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        return self.predicate(node, ctx)

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        return self.check_fn(node, ctx)


def is_default_enabled(rule: Rule) -> bool:
    """Rules are enabled unless they opt out with ``default_enabled = False``."""
    return bool(getattr(rule, "default_enabled", True))


def rule_url(rule: Rule) -> str | None:
    """Documentation link: explicit ``url`` or derived from a ``core::NNNN::`` id."""
    explicit = getattr(rule, "url", None)
    if explicit:
        return str(explicit)
    parts = rule.id.split("::")
    if len(parts) == 3 and parts[0] == "core" and parts[1].isdigit():
        return f"https://google.aip.dev/{int(parts[1])}"
    return None
