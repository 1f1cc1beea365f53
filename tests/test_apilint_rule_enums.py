# SPDX-License-Identifier: MIT
"""Tests for AIP-126 enum rules."""

from __future__ import annotations

from descriptors import enum, message, rule_findings, single_file

UNSPECIFIED = "core::0126::unspecified"
CASING = "core::0126::value-casing"


class TestEnumUnspecified:
    def test_compliant(self) -> None:
        data = single_file(enums=[enum("BookView", [("BOOK_VIEW_UNSPECIFIED", 0), ("BASIC", 1)])])
        assert rule_findings(data, UNSPECIFIED) == []

    def test_wrong_first_value(self) -> None:
        data = single_file(enums=[enum("BookView", [("BASIC", 0), ("FULL", 1)])])
        [finding] = rule_findings(data, UNSPECIFIED)
        assert finding.message == "First value of BookView should be BOOK_VIEW_UNSPECIFIED = 0, not BASIC = 0"

    def test_unspecified_not_zero(self) -> None:
        data = single_file(enums=[enum("BookView", [("BOOK_VIEW_UNSPECIFIED", 1)])])
        assert len(rule_findings(data, UNSPECIFIED)) == 1

    def test_no_values(self) -> None:
        [finding] = rule_findings(single_file(enums=[enum("BookView", [])]), UNSPECIFIED)
        assert "has no values" in finding.message

    def test_nested_enum(self) -> None:
        data = single_file(
            messages=[message("Book", enums=[enum("State", [("ACTIVE", 0)])])]
        )
        [finding] = rule_findings(data, UNSPECIFIED)
        assert finding.path == "library.v1.Book.State"


class TestEnumValueCasing:
    def test_mixed_case_value(self) -> None:
        data = single_file(enums=[enum("BookView", [("BOOK_VIEW_UNSPECIFIED", 0), ("Basic", 1)])])
        [finding] = rule_findings(data, CASING)
        assert finding.path == "library.v1.BookView.Basic"

    def test_upper_snake_values(self) -> None:
        data = single_file(enums=[enum("BookView", [("BOOK_VIEW_UNSPECIFIED", 0), ("FULL_TEXT", 1)])])
        assert rule_findings(data, CASING) == []
