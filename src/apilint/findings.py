# SPDX-License-Identifier: MIT
"""Finding record and the aggregator: dedupe, suppress, sort, summarize."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from apilint.model import SourceLocation
from apilint.rules.base import Severity

if TYPE_CHECKING:
    from apilint.suppression import SuppressionIndex

SUPPRESSION_SYNTAX_RULE_ID = "apilint::suppression-syntax"


class FindingKind(StrEnum):
    """Separates style violations from tooling problems in one report."""

    VIOLATION = "violation"
    RULE_INTERNAL_ERROR = "rule-internal-error"
    SUPPRESSION_SYNTAX_ERROR = "suppression-syntax-error"


@dataclass(frozen=True)
class Finding:
    """A single outcome of checking one rule against one schema node."""

    rule_id: str
    path: str
    severity: Severity
    message: str
    location: SourceLocation
    kind: FindingKind = FindingKind.VIOLATION

    @property
    def dedupe_key(self) -> tuple[str, str, str]:
        return (self.rule_id, self.path, self.message)

    @property
    def sort_key(self) -> tuple[str, int, int, str, str, str]:
        return (
            self.location.file,
            self.location.line,
            -self.severity.value,
            self.rule_id,
            self.path,
            self.message,
        )

    @property
    def is_tooling_error(self) -> bool:
        return self.kind is not FindingKind.VIOLATION

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "path": self.path,
            "severity": self.severity.name,
            "message": self.message,
            "kind": self.kind.value,
            "location": {"file": self.location.file, "line": self.location.line},
        }


def dedupe(findings: Iterable[Finding]) -> list[Finding]:
    """Drop repeated (rule_id, path, message) triples, keeping the first."""
    seen: set[tuple[str, str, str]] = set()
    result: list[Finding] = []
    for f in findings:
        if f.dedupe_key in seen:
            continue
        seen.add(f.dedupe_key)
        result.append(f)
    return result


def aggregate(
    raw: Iterable[Finding], index: SuppressionIndex | None = None
) -> list[Finding]:
    """Dedupe, drop suppressed findings, and sort into stable report order.

    Sort order is (file, line, severity descending, rule id, path, message).
    Applying this to its own output returns the same list.
    """
    kept = [
        f
        for f in dedupe(raw)
        if index is None or not index.is_suppressed(f.rule_id, f.path)
    ]
    return sorted(kept, key=lambda f: f.sort_key)


def summarize(findings: Iterable[Finding]) -> dict[Severity, int]:
    """Count findings per severity; every severity is present in the result."""
    counts = {s: 0 for s in sorted(Severity, reverse=True)}
    for f in findings:
        counts[f.severity] += 1
    return counts


def check_gate(findings: Iterable[Finding], fail_on: Severity) -> bool:
    """Return True if any finding meets or exceeds the *fail_on* threshold."""
    return any(f.severity >= fail_on for f in findings)
