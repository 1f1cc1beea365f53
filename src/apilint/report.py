# SPDX-License-Identifier: MIT
"""Renderers for aggregated findings and the rule catalog.

Both finding formats consume the already-sorted sequence as is; neither
renderer reorders anything.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import TYPE_CHECKING

from apilint.findings import Finding, FindingKind, summarize
from apilint.rules.base import is_default_enabled, rule_url

if TYPE_CHECKING:
    from apilint.rules.catalog import RuleCatalog

OUTPUT_FORMATS: tuple[str, ...] = ("text", "json")

_TOOLING_TAGS: dict[FindingKind, str] = {
    FindingKind.RULE_INTERNAL_ERROR: "[internal error] ",
    FindingKind.SUPPRESSION_SYNTAX_ERROR: "[suppression] ",
}


def format_finding(f: Finding) -> str:
    """One line: ``path: SEVERITY rule_id: message``; tooling errors are tagged."""
    tag = _TOOLING_TAGS.get(f.kind, "")
    return f"{f.path}: {f.severity.name} {f.rule_id}: {tag}{f.message}"


def _summary_line(findings: Sequence[Finding]) -> str:
    counts = summarize(findings)
    parts = ", ".join(f"{count} {sev.name}" for sev, count in counts.items())
    noun = "finding" if len(findings) == 1 else "findings"
    return f"{len(findings)} {noun} ({parts})"


def render_text(findings: Sequence[Finding], *, incomplete: bool = False) -> str:
    lines = [format_finding(f) for f in findings]
    if lines:
        lines.append("")
    lines.append(_summary_line(findings))
    if incomplete:
        lines.append("INCOMPLETE: run was cancelled before every rule was evaluated")
    return "\n".join(lines)


def render_json(findings: Sequence[Finding], *, incomplete: bool = False) -> str:
    output: dict[str, object] = {
        "findings": [f.to_dict() for f in findings],
        "summary": {sev.name: count for sev, count in summarize(findings).items()},
        "incomplete": incomplete,
    }
    return json.dumps(output, indent=2)


def render(findings: Sequence[Finding], output_format: str, *, incomplete: bool = False) -> str:
    if output_format == "text":
        return render_text(findings, incomplete=incomplete)
    if output_format == "json":
        return render_json(findings, incomplete=incomplete)
    msg = f"Unknown output format: {output_format!r}. Valid formats: {list(OUTPUT_FORMATS)}"
    raise ValueError(msg)


def render_catalog(catalog: RuleCatalog, output_format: str = "text") -> str:
    """List every rule in catalog order."""
    records = [
        {
            "id": rule.id,
            "severity": rule.default_severity.name,
            "enabled_by_default": is_default_enabled(rule),
            "targets": sorted(k.value for k in rule.targets),
            "title": rule.title,
            "url": rule_url(rule),
        }
        for rule in catalog
    ]
    if output_format == "json":
        return json.dumps(records, indent=2)
    if output_format != "text":
        msg = f"Unknown output format: {output_format!r}. Valid formats: {list(OUTPUT_FORMATS)}"
        raise ValueError(msg)
    width = max((len(str(r["id"])) for r in records), default=0)
    lines = []
    for r in records:
        marker = " " if r["enabled_by_default"] else "-"
        lines.append(f"{marker} {str(r['id']).ljust(width)}  {str(r['severity']).ljust(6)}  {r['title']}")
    return "\n".join(lines)
