# SPDX-License-Identifier: MIT
"""Exception taxonomy for apilint.

Fatal errors abort a run before any finding is reported. Non-fatal problems
(broken rule checks, malformed inline directives) never raise: they are folded
into the finding stream as their own ``FindingKind``.
"""

from __future__ import annotations

from collections.abc import Iterable


class ApilintError(Exception):
    """Base class for every apilint exception."""


class FatalError(ApilintError):
    """An error that aborts the run and yields no findings."""


class ParseError(FatalError):
    """Raised when a descriptor is malformed or has unresolvable references."""

    def __init__(self, message: str, errors: Iterable[str] = ()) -> None:
        self.errors = list(errors)
        detail = f": {'; '.join(self.errors[:5])}" if self.errors else ""
        if len(self.errors) > 5:
            detail += f" (+{len(self.errors) - 5} more)"
        super().__init__(f"{message}{detail}")


class DuplicateIdError(FatalError):
    """Raised when a rule id is registered twice in one catalog."""

    def __init__(self, rule_id: str) -> None:
        self.rule_id = rule_id
        super().__init__(f"Duplicate rule id: {rule_id!r}")


class UnknownRuleError(FatalError):
    """Raised when configuration names rule ids the catalog does not contain."""

    def __init__(self, rule_ids: Iterable[str], source: str = "configuration") -> None:
        self.rule_ids = sorted(set(rule_ids))
        self.source = source
        super().__init__(f"Unknown rule id(s) in {source}: {', '.join(self.rule_ids)}")


class ConfigError(FatalError):
    """Raised when a configuration file cannot be read or is malformed."""
