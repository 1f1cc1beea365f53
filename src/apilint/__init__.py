# SPDX-License-Identifier: MIT
"""apilint — deterministic style linter for protobuf API surfaces."""

from pathlib import Path

from apilint.errors import (
    ApilintError,
    ConfigError,
    DuplicateIdError,
    FatalError,
    ParseError,
    UnknownRuleError,
)
from apilint.findings import Finding, FindingKind, aggregate, summarize
from apilint.findings import check_gate as _check_gate
from apilint.model import NodeKind, SchemaModel, load, load_file
from apilint.rules.base import Severity
from apilint.rules.config import LintConfig, load_config
from apilint.runner import LintResult, LintRun, RunState, run_lint

__all__ = [
    "ApilintError",
    "ConfigError",
    "DuplicateIdError",
    "FatalError",
    "Finding",
    "FindingKind",
    "LintConfig",
    "LintResult",
    "LintRun",
    "NodeKind",
    "ParseError",
    "RunState",
    "SchemaModel",
    "Severity",
    "UnknownRuleError",
    "aggregate",
    "check_gate",
    "lint",
    "load",
    "load_config",
    "load_file",
    "run_lint",
    "summarize",
]


def lint(descriptor: Path | str, config_path: Path | str | None = None) -> LintResult:
    """Convenience: lint a descriptor file with an optional config file."""
    return run_lint(Path(descriptor), config=load_config(config_path))


def check_gate(result: LintResult, fail_on: Severity | None = None) -> bool:
    """Convenience: check if a result has findings at or above the threshold."""
    return _check_gate(result.findings, fail_on if fail_on is not None else result.fail_on)
