# SPDX-License-Identifier: MIT
"""Naming rules for resources (AIP-123), messages (AIP-122) and fields (AIP-140)."""

from __future__ import annotations

from apilint.model import FieldNode, MessageNode, NodeKind, SchemaNode
from apilint.rules.base import Severity, Violation
from apilint.rules.context import RuleContext, is_lower_snake, is_upper_camel

# Field names that collide with a keyword in at least one widely used
# generated-client language.
RESERVED_WORDS: frozenset[str] = frozenset(
    {
        "abstract", "and", "as", "assert", "async", "await", "boolean", "break",
        "case", "catch", "char", "class", "const", "continue", "def", "default",
        "del", "delete", "do", "double", "elif", "else", "enum", "except",
        "export", "extends", "false", "final", "finally", "float", "for", "from",
        "func", "function", "global", "goto", "if", "implements", "import", "in",
        "instanceof", "int", "interface", "is", "lambda", "let", "long", "new",
        "nil", "none", "nonlocal", "not", "null", "or", "package", "pass",
        "private", "protected", "public", "raise", "return", "short", "static",
        "struct", "super", "switch", "this", "throw", "throws", "true", "try",
        "typeof", "var", "void", "volatile", "while", "with", "yield",
    }
)  # fmt: skip


class ResourceNameFieldRule:
    """Resource messages carry their identity in a singular string ``name``."""

    id = "core::0123::resource-name-field"
    title = "Resources have a singular string name field"
    targets = frozenset({NodeKind.MESSAGE})
    default_severity = Severity.MUST

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        return isinstance(node, MessageNode) and node.resource is not None

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        fld = ctx.field_named(node.path, "name")
        if fld is None:
            return [Violation(f"Resource {node.name} has no name field")]
        if fld.type != "string" or fld.repeated:
            return [Violation(f"Resource {node.name} name field must be a singular string")]
        return []


class MessageNameCasingRule:
    id = "core::0122::message-name-casing"
    title = "Message names are UpperCamelCase"
    targets = frozenset({NodeKind.MESSAGE})
    default_severity = Severity.MUST

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        # Map entry messages are synthesized by the compiler.
        return isinstance(node, MessageNode) and not node.map_entry

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if not is_upper_camel(node.name):
            return [Violation(f"Message name {node.name!r} must be UpperCamelCase")]
        return []


class FieldLowerSnakeRule:
    id = "core::0140::lower-snake"
    title = "Field names are lower_snake_case"
    targets = frozenset({NodeKind.FIELD})
    default_severity = Severity.MUST

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        return isinstance(node, FieldNode)

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if not is_lower_snake(node.name):
            return [Violation(f"Field name {node.name!r} must be lower_snake_case")]
        return []


class FieldReservedWordsRule:
    id = "core::0140::reserved-words"
    title = "Field names avoid language keywords"
    targets = frozenset({NodeKind.FIELD})
    default_severity = Severity.SHOULD

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        return isinstance(node, FieldNode)

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if node.name.lower() in RESERVED_WORDS:
            return [Violation(f"Field name {node.name!r} is a reserved word in a common language")]
        return []
