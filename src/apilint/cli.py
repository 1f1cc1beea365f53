# SPDX-License-Identifier: MIT
"""Command-line interface: ``apilint lint`` and ``apilint rules``.

Exit codes:
    0  no finding at or above the failure severity
    1  findings at or above the failure severity
    2  fatal error (bad descriptor, config, or rule id)
    3  run cancelled by the deadline before every rule was evaluated
"""

from __future__ import annotations

import argparse
import logging
import re
import sys

from apilint.errors import FatalError
from apilint.report import OUTPUT_FORMATS, render, render_catalog
from apilint.rules.base import Severity
from apilint.rules.catalog import default_catalog
from apilint.rules.config import load_config, resolve_fail_on
from apilint.runner import LintRun

log = logging.getLogger(__name__)

EXIT_CLEAN = 0
EXIT_FINDINGS = 1
EXIT_FATAL = 2
EXIT_INCOMPLETE = 3

_DURATION_RE = re.compile(r"^\s*(?P<value>\d+(?:\.\d+)?)\s*(?P<unit>ms|s|m|h)?\s*$")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(text: str) -> float:
    """Parse ``250ms``, ``30s``, ``2m``, ``1h`` or a bare number of seconds."""
    match = _DURATION_RE.match(text)
    if match is None:
        msg = f"invalid duration: {text!r} (expected e.g. 250ms, 30s, 2m, 1h)"
        raise argparse.ArgumentTypeError(msg)
    return float(match.group("value")) * _UNIT_SECONDS[match.group("unit") or "s"]


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        value = 0
    if value < 1:
        msg = f"expected a positive integer, got {text!r}"
        raise argparse.ArgumentTypeError(msg)
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apilint", description="Style linter for protobuf API surfaces"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    lint = sub.add_parser("lint", help="Lint a JSON descriptor set")
    lint.add_argument("descriptor", help="Path to the descriptor set JSON file")
    lint.add_argument("--config", default=None, help="YAML configuration file")
    lint.add_argument(
        "--disable",
        action="append",
        default=[],
        metavar="RULE_ID",
        help="Disable a rule everywhere (repeatable)",
    )
    lint.add_argument("--format", choices=OUTPUT_FORMATS, default="text", dest="output_format")
    lint.add_argument(
        "--deadline",
        type=parse_duration,
        default=None,
        help="Stop evaluating after this long (e.g. 30s, 2m)",
    )
    lint.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="Worker threads (overrides APILINT_WORKERS env var)",
    )
    lint.add_argument(
        "--fail-on",
        choices=[s.name.lower() for s in sorted(Severity, reverse=True)],
        default=None,
        help="Lowest severity that fails the run (overrides APILINT_FAIL_ON env var)",
    )
    lint.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")

    rules = sub.add_parser("rules", help="List the built-in rules")
    rules.add_argument("--format", choices=OUTPUT_FORMATS, default="text", dest="output_format")
    return parser


def _cmd_lint(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    try:
        fail_on = resolve_fail_on(args.fail_on, config)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_FATAL

    run = LintRun(
        config=config,
        disable=args.disable,
        workers=args.workers,
        deadline=args.deadline,
        fail_on=fail_on,
    )
    result = run.run_file(args.descriptor)
    print(render(result.findings, args.output_format, incomplete=result.incomplete))

    if result.incomplete:
        return EXIT_INCOMPLETE
    return EXIT_FINDINGS if result.failed else EXIT_CLEAN


def _cmd_rules(args: argparse.Namespace) -> int:
    print(render_catalog(default_catalog(), args.output_format))
    return EXIT_CLEAN


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        if args.command == "lint":
            return _cmd_lint(args)
        return _cmd_rules(args)
    except FatalError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_FATAL
    except ValueError as exc:
        # Bad APILINT_WORKERS value.
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_FATAL
