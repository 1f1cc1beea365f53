# SPDX-License-Identifier: MIT
"""Lint run orchestration — load, evaluate, suppress, aggregate, report.

A :class:`LintRun` walks a fixed state sequence::

    INIT -> LOAD_MODEL -> LOAD_CATALOG -> EVALUATE -> SUPPRESS
         -> AGGREGATE -> REPORT -> DONE

Any exception moves the run to ``ABORT`` and propagates. A run that aborts
while loading evaluates no rule and reports no finding.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from apilint import model as schema
from apilint.errors import UnknownRuleError
from apilint.findings import Finding, aggregate, check_gate, summarize
from apilint.rules.base import Severity
from apilint.rules.catalog import RuleCatalog, default_catalog
from apilint.rules.config import LintConfig, resolve_fail_on
from apilint.rules.engine import DEFAULT_GRACE_PERIOD, RuleEngine
from apilint.suppression import DEFAULT_POLICY, SuppressionPolicy, resolve

if TYPE_CHECKING:
    from apilint.model import SchemaModel

log = logging.getLogger(__name__)


class RunState(StrEnum):
    INIT = "init"
    LOAD_MODEL = "load_model"
    LOAD_CATALOG = "load_catalog"
    EVALUATE = "evaluate"
    SUPPRESS = "suppress"
    AGGREGATE = "aggregate"
    REPORT = "report"
    DONE = "done"
    ABORT = "abort"


@dataclass(frozen=True)
class LintResult:
    """Sorted findings of a completed run plus its completion status."""

    findings: list[Finding]
    fail_on: Severity
    incomplete: bool = False
    units_total: int = 0
    units_evaluated: int = 0
    states: tuple[RunState, ...] = ()

    @property
    def summary(self) -> dict[Severity, int]:
        return summarize(self.findings)

    @property
    def failed(self) -> bool:
        """True if any finding meets the failure threshold."""
        return check_gate(self.findings, self.fail_on)


class LintRun:
    """One lint invocation. Instances are single-use."""

    def __init__(
        self,
        *,
        config: LintConfig | None = None,
        disable: Iterable[str] = (),
        catalog: RuleCatalog | None = None,
        workers: int | None = None,
        deadline: float | None = None,
        cancel: threading.Event | None = None,
        policy: SuppressionPolicy = DEFAULT_POLICY,
        fail_on: Severity | None = None,
        grace_period: float = DEFAULT_GRACE_PERIOD,
    ) -> None:
        self.config = config if config is not None else LintConfig()
        self.disable = tuple(disable)
        self.catalog = catalog
        self.workers = workers
        self.deadline = deadline
        self.cancel = cancel
        self.policy = policy
        self.fail_on = fail_on
        self.grace_period = grace_period
        self.states: list[RunState] = [RunState.INIT]

    @property
    def state(self) -> RunState:
        return self.states[-1]

    def _enter(self, state: RunState) -> None:
        log.debug("Lint run: %s -> %s", self.state, state)
        self.states.append(state)

    def run(self, data: bytes | str) -> LintResult:
        """Lint an in-memory JSON descriptor set."""
        return self._execute(lambda: schema.load(data))

    def run_file(self, path: Path | str) -> LintResult:
        """Lint a descriptor set read from *path*."""
        return self._execute(lambda: schema.load_file(path))

    def _execute(self, load_model: Callable[[], SchemaModel]) -> LintResult:
        if self.state is not RunState.INIT:
            msg = f"LintRun already used (state: {self.state})"
            raise RuntimeError(msg)
        try:
            return self._pipeline(load_model)
        except Exception:
            self._enter(RunState.ABORT)
            raise

    def _pipeline(self, load_model: Callable[[], SchemaModel]) -> LintResult:
        self._enter(RunState.LOAD_MODEL)
        model = load_model()
        log.debug("Schema model loaded: %d nodes", len(model))

        self._enter(RunState.LOAD_CATALOG)
        catalog = self.catalog if self.catalog is not None else default_catalog()
        self.config.validate_against(catalog)
        unknown = [rule_id for rule_id in self.disable if rule_id not in catalog]
        if unknown:
            raise UnknownRuleError(unknown, source="--disable")
        config = self.config.with_disabled(self.disable)
        fail_on = self.fail_on if self.fail_on is not None else resolve_fail_on(None, config)
        engine = RuleEngine(catalog, workers=self.workers, grace_period=self.grace_period)

        self._enter(RunState.EVALUATE)
        evaluation = engine.evaluate(model, deadline=self.deadline, cancel=self.cancel)

        self._enter(RunState.SUPPRESS)
        index = resolve(model, config, catalog, policy=self.policy)

        self._enter(RunState.AGGREGATE)
        findings = aggregate([*evaluation.findings, *index.warnings], index)

        self._enter(RunState.REPORT)
        if evaluation.incomplete:
            log.warning(
                "Lint run incomplete: %d of %d rule evaluations finished",
                evaluation.units_evaluated,
                evaluation.units_total,
            )
        result = LintResult(
            findings=findings,
            fail_on=fail_on,
            incomplete=evaluation.incomplete,
            units_total=evaluation.units_total,
            units_evaluated=evaluation.units_evaluated,
            states=(*self.states, RunState.DONE),
        )
        self._enter(RunState.DONE)
        return result


def run_lint(source: bytes | str | Path, **options: Any) -> LintResult:
    """Convenience: lint a descriptor given as JSON bytes/text or a file path."""
    run = LintRun(**options)
    if isinstance(source, Path):
        return run.run_file(source)
    return run.run(source)
