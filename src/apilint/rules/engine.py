# SPDX-License-Identifier: MIT
"""Rule engine — runs every applicable (rule, node) unit on a worker pool.

Nodes are split into contiguous pre-order batches. Each batch writes into its
own buffer, and buffers are concatenated in batch order once the pool is
joined, so the raw output does not depend on scheduling. A failing check is
converted into a rule-internal-error finding at the unit boundary and never
reaches the scheduler.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from apilint.findings import Finding, FindingKind
from apilint.rules.base import Rule, Severity, Violation
from apilint.rules.catalog import RuleCatalog, default_catalog
from apilint.rules.config import resolve_workers
from apilint.rules.context import RuleContext

if TYPE_CHECKING:
    from apilint.model import SchemaModel, SchemaNode

log = logging.getLogger(__name__)

DEFAULT_GRACE_PERIOD = 2.0
_BATCHES_PER_WORKER = 4
_CANCEL_POLL_SECONDS = 0.05


@dataclass(frozen=True)
class CheckOutcome:
    """Result of one (rule, node) unit: violations, or the error the check raised."""

    violations: tuple[Violation, ...] = ()
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _validated(v: object) -> Violation:
    """Return *v* as a well-formed Violation; raise TypeError/ValueError otherwise."""
    if not isinstance(v, Violation):
        msg = f"check returned {type(v).__name__}, expected Violation"
        raise TypeError(msg)
    if not isinstance(v.message, str):
        msg = f"Violation message is {type(v.message).__name__}, expected str"
        raise TypeError(msg)
    if v.severity is None or isinstance(v.severity, Severity):
        return v
    if isinstance(v.severity, bool) or not isinstance(v.severity, int):
        msg = f"Violation severity is {type(v.severity).__name__}, expected Severity"
        raise TypeError(msg)
    return Violation(v.message, Severity(v.severity))


def run_unit(rule: Rule, node: SchemaNode, ctx: RuleContext) -> CheckOutcome:
    """Evaluate *rule*'s predicate and check on *node*, capturing any failure."""
    try:
        if not rule.applies(node, ctx):
            return CheckOutcome()
        violations = tuple(_validated(v) for v in rule.check(node, ctx))
    except Exception as exc:
        return CheckOutcome(error=exc)
    return CheckOutcome(violations=violations)


def outcome_findings(rule: Rule, node: SchemaNode, outcome: CheckOutcome) -> list[Finding]:
    """Convert a unit outcome into findings scoped to *rule* and *node*."""
    if outcome.error is not None:
        exc = outcome.error
        return [
            Finding(
                rule_id=rule.id,
                path=node.path,
                severity=Severity.MUST,
                message=f"Internal error in rule check: {type(exc).__name__}: {exc}",
                location=node.location,
                kind=FindingKind.RULE_INTERNAL_ERROR,
            )
        ]
    return [
        Finding(
            rule_id=rule.id,
            path=node.path,
            severity=v.severity if v.severity is not None else rule.default_severity,
            message=v.message,
            location=node.location,
        )
        for v in outcome.violations
    ]


@dataclass
class _Batch:
    nodes: list[SchemaNode]
    buffer: list[Finding] = field(default_factory=list)
    evaluated: int = 0


@dataclass(frozen=True)
class Evaluation:
    """Raw findings of one engine pass.

    ``stopped`` is set whenever the pass was cut short, so a unit that finishes
    on an abandoned thread after the buffers were read still counts as missing.
    """

    findings: list[Finding]
    units_total: int
    units_evaluated: int
    rule_errors: int = 0
    stopped: bool = False

    @property
    def incomplete(self) -> bool:
        return self.stopped or self.units_evaluated < self.units_total


class RuleEngine:
    """Evaluates a catalog against a schema model on a thread pool."""

    def __init__(
        self,
        catalog: RuleCatalog | None = None,
        *,
        workers: int | None = None,
        grace_period: float = DEFAULT_GRACE_PERIOD,
    ) -> None:
        self.catalog = catalog if catalog is not None else default_catalog()
        self.workers = max(1, workers if workers is not None else resolve_workers(None))
        self.grace_period = grace_period

    def count_units(self, model: SchemaModel) -> int:
        return sum(len(self.catalog.rules_for_kind(n.kind)) for n in model.walk())

    def _run_batch(self, batch: _Batch, ctx: RuleContext, stop: threading.Event) -> None:
        for node in batch.nodes:
            for rule in self.catalog.rules_for_kind(node.kind):
                if stop.is_set():
                    return
                outcome = run_unit(rule, node, ctx)
                if outcome.error is not None:
                    log.warning(
                        "Rule %s failed on %s: %s: %s",
                        rule.id,
                        node.path,
                        type(outcome.error).__name__,
                        outcome.error,
                    )
                batch.buffer.extend(outcome_findings(rule, node, outcome))
                batch.evaluated += 1

    def _batches(self, model: SchemaModel) -> list[_Batch]:
        nodes = list(model.walk())
        if not nodes:
            return []
        size = max(1, math.ceil(len(nodes) / (self.workers * _BATCHES_PER_WORKER)))
        return [_Batch(nodes=nodes[i : i + size]) for i in range(0, len(nodes), size)]

    def evaluate(
        self,
        model: SchemaModel,
        *,
        deadline: float | None = None,
        cancel: threading.Event | None = None,
    ) -> Evaluation:
        """Run every unit; stop early after *deadline* seconds or when *cancel* is set.

        On early stop, units already running get ``grace_period`` seconds to
        finish; anything still running after that is abandoned and the
        evaluation reports itself incomplete.
        """
        ctx = RuleContext(model=model)
        batches = self._batches(model)
        total = self.count_units(model)
        stop_at = time.monotonic() + deadline if deadline is not None else None
        stop = threading.Event()
        abandoned = False

        executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="apilint")
        try:
            pending: set[Future[None]] = {
                executor.submit(self._run_batch, batch, ctx, stop) for batch in batches
            }
            while pending:
                done, pending = wait(
                    pending, timeout=self._wait_timeout(stop_at, cancel), return_when=FIRST_COMPLETED
                )
                for fut in done:
                    fut.result()
                if pending and self._should_stop(stop_at, cancel):
                    stop.set()
                    for fut in pending:
                        fut.cancel()
                    _, still_running = wait(pending, timeout=self.grace_period)
                    if still_running:
                        abandoned = True
                        log.warning(
                            "Abandoning %d batch(es) still running after %.1fs grace period",
                            len(still_running),
                            self.grace_period,
                        )
                    break
        finally:
            executor.shutdown(wait=not abandoned, cancel_futures=True)

        findings = [f for batch in batches for f in list(batch.buffer)]
        evaluated = sum(batch.evaluated for batch in batches)
        errors = sum(1 for f in findings if f.kind is FindingKind.RULE_INTERNAL_ERROR)
        log.debug(
            "Evaluated %d/%d units on %d worker(s): %d raw findings, %d rule errors",
            evaluated,
            total,
            self.workers,
            len(findings),
            errors,
        )
        return Evaluation(
            findings=findings,
            units_total=total,
            units_evaluated=evaluated,
            rule_errors=errors,
            stopped=stop.is_set(),
        )

    @staticmethod
    def _should_stop(stop_at: float | None, cancel: threading.Event | None) -> bool:
        if cancel is not None and cancel.is_set():
            return True
        return stop_at is not None and time.monotonic() >= stop_at

    @staticmethod
    def _wait_timeout(stop_at: float | None, cancel: threading.Event | None) -> float | None:
        remaining = None if stop_at is None else max(0.0, stop_at - time.monotonic())
        if cancel is None:
            return remaining
        if remaining is None:
            return _CANCEL_POLL_SECONDS
        return min(remaining, _CANCEL_POLL_SECONDS)
