# SPDX-License-Identifier: MIT
"""Tests for the opt-in AIP-192 comment rule."""

from __future__ import annotations

from descriptors import message, rule_findings, single_file

from apilint.rules.config import LintConfig

RULE = "core::0192::has-comments"
ENABLED = LintConfig.model_validate({"rules": {RULE: {"enabled": True}}})


class TestHasComments:
    def test_disabled_by_default(self) -> None:
        assert rule_findings(single_file(messages=[message("Book")]), RULE) == []

    def test_enabled_undocumented_message(self) -> None:
        [finding] = rule_findings(single_file(messages=[message("Book")]), RULE, config=ENABLED)
        assert finding.message == "Message Book has no leading comment"
        assert finding.severity.name == "MAY"

    def test_documented_message(self) -> None:
        data = single_file(messages=[message("Book", comments="A book in the library.")])
        assert rule_findings(data, RULE, config=ENABLED) == []

    def test_directive_is_not_documentation(self) -> None:
        data = single_file(
            messages=[message("Book", comments=["apilint: disable core::0122::message-name-casing"])]
        )
        assert len(rule_findings(data, RULE, config=ENABLED)) == 1
