# SPDX-License-Identifier: MIT
"""AIP-191: language package options on proto files."""

from __future__ import annotations

from apilint.model import NodeKind, OptionNode, SchemaNode
from apilint.rules.base import Severity, Violation
from apilint.rules.context import RuleContext, is_upper_camel


class CsharpNamespaceRule:
    """``csharp_namespace`` is dotted UpperCamelCase, e.g. ``Google.Cloud.Library.V1``."""

    id = "core::0191::csharp-namespace"
    title = "csharp_namespace uses UpperCamelCase segments"
    targets = frozenset({NodeKind.OPTION})
    default_severity = Severity.SHOULD

    def applies(self, node: SchemaNode, ctx: RuleContext) -> bool:
        return isinstance(node, OptionNode) and node.name == "csharp_namespace"

    def check(self, node: SchemaNode, ctx: RuleContext) -> list[Violation]:
        if not isinstance(node, OptionNode):
            return []
        value = node.value
        if not isinstance(value, str):
            return [Violation("csharp_namespace must be a string")]
        bad = [seg for seg in value.split(".") if not is_upper_camel(seg)]
        if bad:
            return [
                Violation(
                    f"csharp_namespace {value!r} has segments that are not UpperCamelCase: "
                    f"{', '.join(repr(s) for s in bad)}"
                )
            ]
        return []
