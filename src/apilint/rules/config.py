# SPDX-License-Identifier: MIT
"""Lint configuration — rule overrides and the failure threshold."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from apilint.descriptor import summarize_validation_error
from apilint.errors import ConfigError, UnknownRuleError
from apilint.rules.base import Severity

if TYPE_CHECKING:
    from collections.abc import Iterable

    from apilint.rules.catalog import RuleCatalog

DEFAULT_FAIL_ON = Severity.SHOULD
FAIL_ON_ENV = "APILINT_FAIL_ON"
WORKERS_ENV = "APILINT_WORKERS"


class RuleOverride(BaseModel):
    """Enable or disable one rule, everywhere or below ``path_scope``."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    enabled: bool
    path_scope: str | None = Field(default=None, alias="pathScope", min_length=1)

    @property
    def is_global(self) -> bool:
        return self.path_scope is None


class LintConfig(BaseModel):
    """Parsed configuration file. Rule ids map to one override or a list of them."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    fail_on: Severity | None = None
    rules: dict[str, list[RuleOverride]] = Field(default_factory=dict)

    @field_validator("fail_on", mode="before")
    @classmethod
    def _parse_severity(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Severity.parse(value)
        return value

    @field_validator("rules", mode="before")
    @classmethod
    def _listify_overrides(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {k: [v] if isinstance(v, dict) else v for k, v in value.items()}
        return value

    def with_disabled(self, rule_ids: Iterable[str]) -> LintConfig:
        """Layer global disables (the CLI ``--disable`` flag) over this config.

        A global entry already present for the rule is replaced; path-scoped
        entries are kept.
        """
        rules = {k: list(v) for k, v in self.rules.items()}
        for rule_id in rule_ids:
            scoped = [o for o in rules.get(rule_id, []) if not o.is_global]
            rules[rule_id] = [*scoped, RuleOverride(enabled=False)]
        return self.model_copy(update={"rules": rules})

    def validate_against(self, catalog: RuleCatalog, source: str = "configuration") -> None:
        """Raise UnknownRuleError if any configured rule id is not in *catalog*."""
        unknown = [rule_id for rule_id in self.rules if rule_id not in catalog]
        if unknown:
            raise UnknownRuleError(unknown, source=source)


def load_config(path: Path | str | None) -> LintConfig:
    """Load a YAML (or JSON) configuration file; ``None`` yields an empty config.

    Raises:
        ConfigError: If the file cannot be read, is not a mapping, or fails
            validation.
    """
    if path is None:
        return LintConfig()
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read config {path}: {exc.strerror or exc}"
        raise ConfigError(msg) from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in config {path}"
        raise ConfigError(msg) from exc
    if data is None:
        return LintConfig()
    if not isinstance(data, dict):
        msg = f"Config {path} must be a mapping, got {type(data).__name__}"
        raise ConfigError(msg)
    try:
        return LintConfig.model_validate(data)
    except ValidationError as exc:
        detail = "; ".join(summarize_validation_error(exc))
        msg = f"Invalid config {path}: {detail}"
        raise ConfigError(msg) from exc


def resolve_fail_on(cli_value: str | None, config: LintConfig | None = None) -> Severity:
    """Resolve the failure threshold with CLI > env > config file > default priority.

    Raises:
        ValueError: If the CLI or environment value is not a severity name.
    """
    if cli_value:
        return Severity.parse(cli_value)
    env_value = os.environ.get(FAIL_ON_ENV)
    if env_value:
        return Severity.parse(env_value)
    if config is not None and config.fail_on is not None:
        return config.fail_on
    return DEFAULT_FAIL_ON


def resolve_workers(cli_value: int | None) -> int:
    """Worker pool size with CLI > env > ``min(8, cpu_count)`` priority.

    Raises:
        ValueError: If the resolved value is not a positive integer.
    """
    if cli_value is not None:
        workers = cli_value
    else:
        env_value = os.environ.get(WORKERS_ENV)
        workers = int(env_value) if env_value else min(8, os.cpu_count() or 1)
    if workers < 1:
        msg = f"Worker count must be at least 1, got {workers}"
        raise ValueError(msg)
    return workers
