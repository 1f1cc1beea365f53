# SPDX-License-Identifier: MIT
"""AIP-203: field behavior annotations must not contradict each other."""

from __future__ import annotations

from apilint.model import FieldNode, NodeKind, SchemaNode
from apilint.rules.base import Severity, Violation
from apilint.rules.context import RuleContext

CONFLICTING_BEHAVIORS: tuple[tuple[str, str], ...] = (
    ("REQUIRED", "OPTIONAL"),
    ("OUTPUT_ONLY", "INPUT_ONLY"),
)


class BehaviorConflictRule:
    id = "core::0203::behavior-conflict"
    title = "Field behaviors do not conflict"
    targets = frozenset({NodeKind.FIELD})
    default_severity = Severity.MUST

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        return isinstance(node, FieldNode) and len(node.behaviors) > 1

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if not isinstance(node, FieldNode):
            return []
        behaviors = {b.upper() for b in node.behaviors}
        return [
            Violation(f"Field {node.name} cannot be both {a} and {b}")
            for a, b in CONFLICTING_BEHAVIORS
            if a in behaviors and b in behaviors
        ]
