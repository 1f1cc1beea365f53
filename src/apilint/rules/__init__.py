# SPDX-License-Identifier: MIT
"""Rule catalog — severities, the Rule protocol, and rule configuration.

The engine lives in :mod:`apilint.rules.engine`; it is not re-exported here
because findings import :mod:`apilint.rules.base` through this package.
"""

from apilint.rules.base import Rule, RuleDefinition, Severity, Violation
from apilint.rules.catalog import RuleCatalog, build_catalog, default_catalog
from apilint.rules.config import LintConfig, RuleOverride, load_config
from apilint.rules.context import RuleContext

__all__ = [
    "LintConfig",
    "Rule",
    "RuleCatalog",
    "RuleContext",
    "RuleDefinition",
    "RuleOverride",
    "Severity",
    "Violation",
    "build_catalog",
    "default_catalog",
    "load_config",
]
