# SPDX-License-Identifier: MIT
"""Rule context and the naming helpers shared by the built-in rules."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from apilint.model import EnumValueNode, FieldNode, MessageNode, MethodNode

if TYPE_CHECKING:
    from apilint.model import SchemaModel, SchemaNode

LRO_OPERATION = "google.longrunning.Operation"
EMPTY_MESSAGE = "google.protobuf.Empty"
FIELD_MASK = "google.protobuf.FieldMask"

STANDARD_VERBS: tuple[str, ...] = ("Get", "List", "Create", "Update", "Delete")

_UPPER_CAMEL_RE = re.compile(r"^[A-Z][a-zA-Z0-9]*$")
_LOWER_SNAKE_RE = re.compile(r"^[a-z][a-z0-9]*(?:_[a-z0-9]+)*$")
_UPPER_SNAKE_RE = re.compile(r"^[A-Z][A-Z0-9]*(?:_[A-Z0-9]+)*$")
_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def is_upper_camel(name: str) -> bool:
    return bool(_UPPER_CAMEL_RE.match(name))


def is_lower_snake(name: str) -> bool:
    return bool(_LOWER_SNAKE_RE.match(name))


def is_upper_snake(name: str) -> bool:
    return bool(_UPPER_SNAKE_RE.match(name))


def to_upper_snake(name: str) -> str:
    """``BookView`` -> ``BOOK_VIEW``; ``HTTPMethod`` -> ``HTTP_METHOD``."""
    return _CAMEL_BOUNDARY_RE.sub("_", name).upper()


def standard_method(name: str) -> tuple[str, str] | None:
    """Split ``GetBook`` into ``("Get", "Book")``; None for custom methods.

    The verb must be followed by an uppercase letter, so ``Getaway`` and a
    bare ``List`` are not standard methods.
    """
    for verb in STANDARD_VERBS:
        rest = name[len(verb) :]
        if name.startswith(verb) and rest[:1].isupper():
            return verb, rest
    return None


def method_verb(node: SchemaNode) -> str | None:
    if not isinstance(node, MethodNode):
        return None
    split = standard_method(node.name)
    return split[0] if split else None


@dataclass(frozen=True)
class RuleContext:
    """Read-only context passed to every applicability predicate and check."""

    model: SchemaModel

    def message(self, path: str) -> MessageNode:
        node = self.model.get(path)
        if not isinstance(node, MessageNode):
            msg = f"{path} is a {node.kind}, not a message"
            raise TypeError(msg)
        return node

    def request_of(self, method: MethodNode) -> MessageNode:
        return self.message(method.request_type)

    def response_of(self, method: MethodNode) -> MessageNode:
        return self.message(method.response_type)

    def fields_of(self, message_path: str) -> list[FieldNode]:
        return [
            n for n in self.model.children(message_path) if isinstance(n, FieldNode)
        ]

    def field_named(self, message_path: str, name: str) -> FieldNode | None:
        for fld in self.fields_of(message_path):
            if fld.name == name:
                return fld
        return None

    def parent_of(self, node: SchemaNode) -> SchemaNode | None:
        return self.model.find(node.parent) if node.parent is not None else None

    def is_lro(self, method: MethodNode) -> bool:
        return method.response_type == LRO_OPERATION

    def enum_values(self, enum_path: str) -> list[EnumValueNode]:
        return [n for n in self.model.children(enum_path) if isinstance(n, EnumValueNode)]
