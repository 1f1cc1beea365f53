# SPDX-License-Identifier: MIT
"""AIP-127: every unary method is exposed over HTTP with a well-formed template."""

from __future__ import annotations

from apilint.model import MethodNode, NodeKind, SchemaNode
from apilint.rules.base import Severity, Violation
from apilint.rules.context import RuleContext


def _template_problems(path: str) -> list[str]:
    """Return the syntax problems of an HTTP path template, in scan order."""
    problems: list[str] = []
    if not path.startswith("/"):
        problems.append("must start with '/'")
    depth = 0
    for ch in path:
        if ch == "{":
            depth += 1
            if depth > 1:
                problems.append("has nested '{'")
                break
        elif ch == "}":
            depth -= 1
            if depth < 0:
                problems.append("has '}' without a matching '{'")
                break
    if depth > 0:
        problems.append("has an unclosed '{'")
    if "{}" in path:
        problems.append("has an empty variable '{}'")
    return problems


class HttpAnnotationRule:
    """Non-streaming methods must declare an HTTP binding."""

    id = "core::0127::http-annotation"
    title = "Methods declare an HTTP binding"
    targets = frozenset({NodeKind.METHOD})
    default_severity = Severity.MUST

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        return isinstance(node, MethodNode) and not node.is_streaming

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if not isinstance(node, MethodNode):
            return []
        if node.http is None:
            return [Violation(f"Method {node.name} has no HTTP binding")]
        return []


class HttpTemplateSyntaxRule:
    """Binding paths start with ``/`` and keep ``{}`` variables balanced."""

    id = "core::0127::http-template-syntax"
    title = "HTTP path templates are well-formed"
    targets = frozenset({NodeKind.METHOD})
    default_severity = Severity.MUST

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        return isinstance(node, MethodNode) and node.http is not None

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if not isinstance(node, MethodNode) or node.http is None:
            return []
        return [
            Violation(f"HTTP path {node.http.path!r} {problem}")
            for problem in _template_problems(node.http.path)
        ]
