# SPDX-License-Identifier: MIT
"""Suppression resolver — inline directives and config overrides to an exact index.

Three override layers feed the index:

- inline: ``apilint: disable <rule-id>`` comment lines on a node, scoped to
  that node's path and the options declared on it;
- path-prefix: config entries with ``path_scope``, expanded here into one
  exact entry per node at or below the scope;
- global: config entries without ``path_scope`` (and CLI ``--disable``).

Lookups are exact ``(rule_id, path)`` / ``(rule_id, "*")`` dictionary hits.
The layer consulted first is set by :class:`SuppressionPolicy`; by default the
most specific layer wins, and a rule's own default applies when no layer has
an entry.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

from apilint.findings import SUPPRESSION_SYNTAX_RULE_ID, Finding, FindingKind
from apilint.model import NodeKind
from apilint.rules.base import Severity, is_default_enabled

if TYPE_CHECKING:
    from apilint.model import SchemaModel, SchemaNode
    from apilint.rules.catalog import RuleCatalog
    from apilint.rules.config import LintConfig

log = logging.getLogger(__name__)

GLOBAL_PATH = "*"

_DIRECTIVE_RE = re.compile(r"^\s*(?:/{2,}|#)?\s*apilint:\s*(?P<body>.*?)\s*$")
_DISABLE_RE = re.compile(r"^disable\s+(?P<rule_id>\S+)$")


class SuppressionScope(StrEnum):
    INLINE = "inline"
    PATH_PREFIX = "path-prefix"
    GLOBAL = "global"


@dataclass(frozen=True)
class SuppressionPolicy:
    """Order in which override layers are consulted; the first hit decides."""

    precedence: tuple[SuppressionScope, ...] = (
        SuppressionScope.INLINE,
        SuppressionScope.PATH_PREFIX,
        SuppressionScope.GLOBAL,
    )

    def __post_init__(self) -> None:
        if sorted(self.precedence) != sorted(SuppressionScope):
            msg = f"Policy must order each scope exactly once, got {list(self.precedence)}"
            raise ValueError(msg)


DEFAULT_POLICY = SuppressionPolicy()


@dataclass(frozen=True)
class SuppressionDecision:
    """Whether a rule is enabled at a path, and which layer decided it."""

    enabled: bool
    scope: SuppressionScope | None  # None: the rule's default


@dataclass(frozen=True)
class Directive:
    rule_id: str
    path: str


class DirectiveSyntaxError(ValueError):
    """Raised by :func:`parse_directive` for a malformed directive line."""


def parse_directive(line: str) -> str | None:
    """Return the rule id disabled by a comment line, or None if it is not a directive.

    Raises:
        DirectiveSyntaxError: If the line is an ``apilint:`` directive but does
            not carry exactly the ``disable`` action and one rule id.
    """
    match = _DIRECTIVE_RE.match(line)
    if match is None:
        return None
    body = match.group("body")
    action = _DISABLE_RE.match(body)
    if action is None:
        msg = f"expected 'apilint: disable <rule-id>', got {body!r}"
        raise DirectiveSyntaxError(msg)
    return action.group("rule_id")


def _syntax_finding(node: SchemaNode, message: str) -> Finding:
    return Finding(
        rule_id=SUPPRESSION_SYNTAX_RULE_ID,
        path=node.path,
        severity=Severity.MAY,
        message=f"Ignored suppression directive: {message}",
        location=node.location,
        kind=FindingKind.SUPPRESSION_SYNTAX_ERROR,
    )


def _under_scope(path: str, scope: str) -> bool:
    if path == scope:
        return True
    return path.startswith(scope) and path[len(scope)] in ".#"


class SuppressionIndex:
    """Exact-match lookup of rule enablement per (rule id, node path)."""

    def __init__(
        self,
        *,
        inline: Mapping[tuple[str, str], bool],
        path_prefix: Mapping[tuple[str, str], bool],
        global_: Mapping[tuple[str, str], bool],
        defaults: Mapping[str, bool],
        policy: SuppressionPolicy = DEFAULT_POLICY,
        warnings: tuple[Finding, ...] = (),
    ) -> None:
        self._layers: dict[SuppressionScope, Mapping[tuple[str, str], bool]] = {
            SuppressionScope.INLINE: MappingProxyType(dict(inline)),
            SuppressionScope.PATH_PREFIX: MappingProxyType(dict(path_prefix)),
            SuppressionScope.GLOBAL: MappingProxyType(dict(global_)),
        }
        self._defaults = MappingProxyType(dict(defaults))
        self.policy = policy
        self.warnings = warnings

    @classmethod
    def empty(cls) -> SuppressionIndex:
        return cls(inline={}, path_prefix={}, global_={}, defaults={})

    def decision(self, rule_id: str, path: str) -> SuppressionDecision:
        for scope in self.policy.precedence:
            key = (rule_id, GLOBAL_PATH if scope is SuppressionScope.GLOBAL else path)
            enabled = self._layers[scope].get(key)
            if enabled is not None:
                return SuppressionDecision(enabled=enabled, scope=scope)
        return SuppressionDecision(enabled=self._defaults.get(rule_id, True), scope=None)

    def is_enabled(self, rule_id: str, path: str) -> bool:
        return self.decision(rule_id, path).enabled

    def is_suppressed(self, rule_id: str, path: str) -> bool:
        return not self.decision(rule_id, path).enabled

    def entries(self, scope: SuppressionScope) -> Mapping[tuple[str, str], bool]:
        return self._layers[scope]


def collect_directives(
    model: SchemaModel, catalog: RuleCatalog
) -> tuple[list[Directive], list[Finding]]:
    """Parse inline directives from node comments.

    A directive on a declaration or package also covers the options declared
    on it. Malformed directives and directives naming unknown rules become
    suppression-syntax findings and are otherwise ignored.
    """
    directives: list[Directive] = []
    warnings: list[Finding] = []
    for node in model.walk():
        for line in node.comments:
            try:
                rule_id = parse_directive(line)
            except DirectiveSyntaxError as exc:
                warnings.append(_syntax_finding(node, str(exc)))
                continue
            if rule_id is None:
                continue
            if rule_id not in catalog:
                warnings.append(_syntax_finding(node, f"unknown rule id {rule_id!r}"))
                continue
            directives.append(Directive(rule_id=rule_id, path=node.path))
            # options have no comments of their own; they follow their owner
            directives.extend(
                Directive(rule_id=rule_id, path=child.path)
                for child in model.children(node.path)
                if child.kind is NodeKind.OPTION
            )
    return directives, warnings


def _expand_path_scopes(model: SchemaModel, config: LintConfig) -> dict[tuple[str, str], bool]:
    """Turn path-scoped overrides into exact entries; the longest scope wins."""
    scoped: dict[str, list[tuple[str, bool]]] = {}
    for rule_id, overrides in config.rules.items():
        for o in overrides:
            if o.path_scope is not None:
                scoped.setdefault(rule_id, []).append((o.path_scope, o.enabled))

    entries: dict[tuple[str, str], bool] = {}
    matched: set[tuple[str, str]] = set()
    for node in model.walk():
        for rule_id, scopes in scoped.items():
            best: tuple[str, bool] | None = None
            for scope, enabled in scopes:
                if _under_scope(node.path, scope) and (best is None or len(scope) >= len(best[0])):
                    best = (scope, enabled)
            if best is not None:
                entries[(rule_id, node.path)] = best[1]
                matched.add((rule_id, best[0]))

    for rule_id, scopes in scoped.items():
        for scope, _ in scopes:
            if (rule_id, scope) not in matched:
                log.warning("Config path_scope %r for %s matches no node", scope, rule_id)
    return entries


def resolve(
    model: SchemaModel,
    config: LintConfig,
    catalog: RuleCatalog,
    *,
    policy: SuppressionPolicy = DEFAULT_POLICY,
) -> SuppressionIndex:
    """Build the suppression index for one run.

    Raises:
        UnknownRuleError: If the config names a rule id absent from *catalog*.
    """
    config.validate_against(catalog)

    global_: dict[tuple[str, str], bool] = {}
    for rule_id, overrides in config.rules.items():
        for o in overrides:
            if o.is_global:
                global_[(rule_id, GLOBAL_PATH)] = o.enabled

    directives, warnings = collect_directives(model, catalog)
    inline = {(d.rule_id, d.path): False for d in directives}

    index = SuppressionIndex(
        inline=inline,
        path_prefix=_expand_path_scopes(model, config),
        global_=global_,
        defaults={r.id: is_default_enabled(r) for r in catalog},
        policy=policy,
        warnings=tuple(warnings),
    )
    log.debug(
        "Suppression index: %d inline, %d path-scoped, %d global, %d directive warnings",
        len(inline),
        len(index.entries(SuppressionScope.PATH_PREFIX)),
        len(global_),
        len(warnings),
    )
    return index
