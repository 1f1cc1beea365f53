# SPDX-License-Identifier: MIT
"""AIP-192: public elements carry a leading comment. Off unless enabled."""

from __future__ import annotations

from apilint.model import MessageNode, NodeKind, SchemaNode
from apilint.rules.base import Severity, Violation
from apilint.rules.context import RuleContext
from apilint.suppression import parse_directive


def _is_prose(line: str) -> bool:
    if not line.strip():
        return False
    try:
        return parse_directive(line) is None
    except ValueError:
        return False


class HasCommentsRule:
    id = "core::0192::has-comments"
    title = "Services, methods and messages are documented"
    targets = frozenset({NodeKind.SERVICE, NodeKind.METHOD, NodeKind.MESSAGE})
    default_severity = Severity.MAY
    default_enabled = False

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        return not (isinstance(node, MessageNode) and node.map_entry)

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        # Suppression directives do not count as documentation.
        if not any(_is_prose(line) for line in node.comments):
            return [Violation(f"{node.kind.capitalize()} {node.name} has no leading comment")]
        return []
