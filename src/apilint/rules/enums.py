# SPDX-License-Identifier: MIT
"""AIP-126: enum zero values and value casing."""

from __future__ import annotations

from apilint.model import NodeKind, SchemaNode
from apilint.rules.base import Severity, Violation
from apilint.rules.context import RuleContext, is_upper_snake, to_upper_snake


class EnumUnspecifiedRule:
    """The first value of ``BookView`` is ``BOOK_VIEW_UNSPECIFIED = 0``."""

    id = "core::0126::unspecified"
    title = "Enums start with an _UNSPECIFIED zero value"
    targets = frozenset({NodeKind.ENUM})
    default_severity = Severity.SHOULD

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        return True

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        expected = f"{to_upper_snake(node.name)}_UNSPECIFIED"
        values = ctx.enum_values(node.path)
        if not values:
            return [Violation(f"Enum {node.name} has no values; expected {expected} = 0")]
        first = values[0]
        if first.name != expected or first.number != 0:
            return [
                Violation(
                    f"First value of {node.name} should be {expected} = 0, "
                    f"not {first.name} = {first.number}"
                )
            ]
        return []


class EnumValueCasingRule:
    id = "core::0126::value-casing"
    title = "Enum values are UPPER_SNAKE_CASE"
    targets = frozenset({NodeKind.ENUM_VALUE})
    default_severity = Severity.MUST

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        return True

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if not is_upper_snake(node.name):
            return [Violation(f"Enum value {node.name!r} must be UPPER_SNAKE_CASE")]
        return []
