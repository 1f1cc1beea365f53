#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""Test parity check: every apilint module over 50 LOC must have a test module.

Usage:
    python scripts/check_test_parity.py
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = ROOT / "src" / "apilint"
TEST_DIR = ROOT / "tests"

# Files that are never expected to have tests
SKIP_FILES = {"__init__.py", "__main__.py"}

MIN_LOC = 50

# Source stem -> test module, or "skip"
TOP_LEVEL_MAP: dict[str, str] = {
    "descriptor": "test_apilint_model.py",
}

RULES_MAP: dict[str, str] = {
    "base": "skip",
    "registry": "test_apilint_rules_catalog.py",
    "catalog": "test_apilint_rules_catalog.py",
    "context": "test_apilint_rules_context.py",
    "engine": "test_apilint_rules_engine.py",
    "config": "test_apilint_rules_config.py",
}


def _count_loc(path: Path) -> int:
    """Count non-blank, non-comment lines."""
    count = 0
    with open(path, encoding="utf-8") as f:
        for line in f:
            stripped = line.strip()
            if stripped and not stripped.startswith("#"):
                count += 1
    return count


def _expected_test(stem: str, test_map: dict[str, str], prefix: str) -> Path | None:
    override = test_map.get(stem)
    if override == "skip":
        return None
    return TEST_DIR / (override or f"{prefix}{stem}.py")


def find_violations() -> list[str]:
    """Return source modules missing test files, as printable lines."""
    layout = [
        (SRC_DIR, "", TOP_LEVEL_MAP, "test_apilint_"),
        (SRC_DIR / "rules", "rules/", RULES_MAP, "test_apilint_rule_"),
    ]
    violations = []
    for src_path, label, test_map, prefix in layout:
        for src_file in sorted(src_path.glob("*.py")):
            if src_file.name in SKIP_FILES:
                continue
            loc = _count_loc(src_file)
            if loc < MIN_LOC:
                continue
            test_file = _expected_test(src_file.stem, test_map, prefix)
            if test_file is not None and not test_file.exists():
                violations.append(f"{label}{src_file.name} ({loc} LOC) -> missing {test_file.name}")
    return violations


def main() -> None:
    violations = find_violations()
    if not violations:
        print("All source modules have test files.")
        sys.exit(0)
    print(f"Missing test files ({len(violations)}):", file=sys.stderr)
    for v in violations:
        print(f"  {v}", file=sys.stderr)
    sys.exit(1)


if __name__ == "__main__":
    main()
