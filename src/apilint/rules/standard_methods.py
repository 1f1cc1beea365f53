# SPDX-License-Identifier: MIT
"""Standard method rules: Get (AIP-131), List (AIP-132), Create (AIP-133),
Update (AIP-134) and Delete (AIP-135).

Each rule applies only to methods whose name starts with its verb followed by
the resource name, e.g. ``GetBook``; custom methods are left alone.
"""

from __future__ import annotations

from apilint.model import MethodNode, NodeKind, SchemaNode
from apilint.rules.base import Severity, Violation
from apilint.rules.context import EMPTY_MESSAGE, RuleContext, method_verb, standard_method


def _resource_of(node: SchemaNode) -> str:
    split = standard_method(node.name)
    return split[1] if split is not None else node.name


class _VerbRule:
    """Base for rules scoped to one standard verb."""

    verb = ""
    targets = frozenset({NodeKind.METHOD})

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        return method_verb(node) == self.verb


# --- Get ---


class GetHttpMethodRule(_VerbRule):
    id = "core::0131::http-method"
    title = "Get binds to HTTP GET without a body"
    default_severity = Severity.MUST
    verb = "Get"

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        return super().applies(node, ctx) and isinstance(node, MethodNode) and node.http is not None

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if not isinstance(node, MethodNode) or node.http is None:
            return []
        violations: list[Violation] = []
        if node.http.method != "get":
            violations.append(
                Violation(f"{node.name} must use HTTP GET, not {node.http.method.upper()}")
            )
        if node.http.body:
            violations.append(Violation(f"{node.name} must not declare an HTTP body"))
        return violations


class GetRequestNameRule(_VerbRule):
    id = "core::0131::request-message-name"
    title = "Get request message is named Get<Resource>Request"
    default_severity = Severity.MUST
    verb = "Get"

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if not isinstance(node, MethodNode):
            return []
        expected = f"{node.name}Request"
        actual = ctx.request_of(node).name
        if actual != expected:
            return [Violation(f"Request message should be named {expected}, not {actual}")]
        return []


class GetResponseNameRule(_VerbRule):
    id = "core::0131::response-message-name"
    title = "Get returns the resource itself"
    default_severity = Severity.SHOULD
    verb = "Get"

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if not isinstance(node, MethodNode):
            return []
        resource = _resource_of(node)
        actual = ctx.response_of(node).name
        if actual != resource:
            return [Violation(f"{node.name} should return {resource}, not {actual}")]
        return []


# --- List ---


class ListResponseNameRule(_VerbRule):
    id = "core::0132::response-message-name"
    title = "List response message is named List<Resources>Response"
    default_severity = Severity.MUST
    verb = "List"

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if not isinstance(node, MethodNode):
            return []
        expected = f"{node.name}Response"
        actual = ctx.response_of(node).name
        if actual != expected:
            return [Violation(f"Response message should be named {expected}, not {actual}")]
        return []


_PAGINATION_FIELDS: tuple[tuple[str, str], ...] = (
    ("page_size", "int32"),
    ("page_token", "string"),
)


class ListPaginationRule(_VerbRule):
    id = "core::0132::request-pagination"
    title = "List request supports pagination"
    default_severity = Severity.SHOULD
    verb = "List"

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if not isinstance(node, MethodNode):
            return []
        violations: list[Violation] = []
        for name, type_name in _PAGINATION_FIELDS:
            fld = ctx.field_named(node.request_type, name)
            if fld is None:
                violations.append(Violation(f"{node.name} request is missing {name}"))
            elif fld.type != type_name or fld.repeated:
                violations.append(
                    Violation(f"{node.name} request field {name} should be a singular {type_name}")
                )
        return violations


# --- Create ---


class CreateHttpBodyRule(_VerbRule):
    id = "core::0133::http-body"
    title = "Create binds to HTTP POST with a body"
    default_severity = Severity.MUST
    verb = "Create"

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        return super().applies(node, ctx) and isinstance(node, MethodNode) and node.http is not None

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if not isinstance(node, MethodNode) or node.http is None:
            return []
        violations: list[Violation] = []
        if node.http.method != "post":
            violations.append(
                Violation(f"{node.name} must use HTTP POST, not {node.http.method.upper()}")
            )
        if not node.http.body:
            violations.append(Violation(f"{node.name} must declare an HTTP body"))
        return violations


# --- Update ---


class UpdateMaskRule(_VerbRule):
    id = "core::0134::request-mask-required"
    title = "Update request carries an update_mask"
    default_severity = Severity.SHOULD
    verb = "Update"

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if not isinstance(node, MethodNode):
            return []
        if ctx.field_named(node.request_type, "update_mask") is None:
            return [Violation(f"{node.name} request should have an update_mask field")]
        return []


# --- Delete ---


class DeleteResponseEmptyRule(_VerbRule):
    id = "core::0135::response-empty"
    title = "Delete returns google.protobuf.Empty"
    default_severity = Severity.SHOULD
    verb = "Delete"

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        return super().applies(node, ctx) and isinstance(node, MethodNode) and not ctx.is_lro(node)

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if not isinstance(node, MethodNode):
            return []
        if node.response_type != EMPTY_MESSAGE:
            return [Violation(f"{node.name} should return {EMPTY_MESSAGE}, not {node.response_type}")]
        return []
