# SPDX-License-Identifier: MIT
"""AIP-151: long-running methods say what their operation resolves to."""

from __future__ import annotations

from apilint.model import MethodNode, NodeKind, SchemaNode
from apilint.rules.base import Severity, Violation
from apilint.rules.context import LRO_OPERATION, RuleContext


class OperationInfoRule:
    """Methods returning ``google.longrunning.Operation`` declare operation_info."""

    id = "core::0151::operation-info"
    title = "Long-running methods declare operation_info"
    targets = frozenset({NodeKind.METHOD})
    default_severity = Severity.MUST

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        return isinstance(node, MethodNode) and ctx.is_lro(node)

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if not isinstance(node, MethodNode):
            return []
        info = node.operation_info
        if info is None:
            return [Violation(f"{node.name} returns {LRO_OPERATION} but has no operation_info")]

        # Unqualified names are looked up from the method's package.
        package = ctx.model.ancestors_of(node.path)[-1].path
        violations: list[Violation] = []
        for label, type_ref in (
            ("response_type", info.response_type),
            ("metadata_type", info.metadata_type),
        ):
            if not type_ref:
                violations.append(Violation(f"operation_info is missing {label}"))
                continue
            target = ctx.model.resolve(type_ref, scope=package)
            if target is None or target.kind is not NodeKind.MESSAGE:
                violations.append(
                    Violation(f"operation_info {label} {type_ref!r} does not resolve to a message")
                )
        return violations
