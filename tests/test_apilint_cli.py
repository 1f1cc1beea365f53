# SPDX-License-Identifier: MIT
"""Tests for apilint.cli — argument handling, output, and exit codes."""

from __future__ import annotations

import argparse
import json

import pytest
from descriptors import (
    descriptor,
    field,
    library_descriptor,
    message,
    method,
    proto_file,
    service,
)

from apilint.cli import (
    EXIT_CLEAN,
    EXIT_FATAL,
    EXIT_FINDINGS,
    EXIT_INCOMPLETE,
    main,
    parse_duration,
)


@pytest.fixture
def clean_api(tmp_path):
    path = tmp_path / "clean.json"
    path.write_bytes(library_descriptor())
    return path


@pytest.fixture
def dirty_api(tmp_path):
    path = tmp_path / "dirty.json"
    path.write_bytes(
        descriptor(
            proto_file(
                services=[service("Library", [method("GetBook", "GetBookRequest", "Book")])],
                messages=[message("GetBookRequest"), message("Book")],
            )
        )
    )
    return path


class TestParseDuration:
    @pytest.mark.parametrize(
        ("text", "seconds"),
        [("250ms", 0.25), ("30s", 30.0), ("2m", 120.0), ("1h", 3600.0), ("1.5", 1.5)],
    )
    def test_units(self, text: str, seconds: float) -> None:
        assert parse_duration(text) == pytest.approx(seconds)

    @pytest.mark.parametrize("text", ["", "fast", "10d", "-1s"])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            parse_duration(text)


class TestLint:
    def test_clean_exit(self, clean_api, capsys) -> None:
        assert main(["lint", str(clean_api)]) == EXIT_CLEAN
        assert capsys.readouterr().out.strip() == "0 findings (0 MUST, 0 SHOULD, 0 MAY)"

    def test_findings_exit(self, dirty_api, capsys) -> None:
        assert main(["lint", str(dirty_api)]) == EXIT_FINDINGS
        out = capsys.readouterr().out
        assert (
            "library.v1.Library.GetBook: MUST core::0127::http-annotation: "
            "Method GetBook has no HTTP binding"
        ) in out

    def test_json_output(self, dirty_api, capsys) -> None:
        main(["lint", str(dirty_api), "--format", "json"])
        data = json.loads(capsys.readouterr().out)
        assert data["incomplete"] is False
        assert data["summary"]["MUST"] >= 1

    def test_disable_flag(self, dirty_api, capsys) -> None:
        code = main(
            [
                "lint",
                str(dirty_api),
                "--disable",
                "core::0127::http-annotation",
                "--format",
                "json",
            ]
        )
        data = json.loads(capsys.readouterr().out)
        assert "core::0127::http-annotation" not in {f["rule_id"] for f in data["findings"]}
        assert code == EXIT_CLEAN

    def test_fail_on_must_ignores_should(self, tmp_path, capsys) -> None:
        path = tmp_path / "api.json"
        path.write_bytes(
            descriptor(proto_file(messages=[message("Book", [field("class", 1)])]))
        )
        assert main(["lint", str(path)]) == EXIT_FINDINGS
        assert main(["lint", str(path), "--fail-on", "must"]) == EXIT_CLEAN

    def test_fail_on_from_env(self, dirty_api, monkeypatch) -> None:
        monkeypatch.setenv("APILINT_FAIL_ON", "may")
        assert main(["lint", str(dirty_api)]) == EXIT_FINDINGS

    def test_config_file(self, dirty_api, tmp_path, capsys) -> None:
        config = tmp_path / "apilint.yaml"
        config.write_text(
            "rules:\n"
            "  core::0127::http-annotation:\n"
            "    enabled: false\n"
            "    path_scope: library.v1.Library\n"
        )
        main(["lint", str(dirty_api), "--config", str(config)])
        assert "http-annotation" not in capsys.readouterr().out

    def test_workers_flag(self, clean_api) -> None:
        assert main(["lint", str(clean_api), "--workers", "3"]) == EXIT_CLEAN


class TestFatal:
    def test_parse_error(self, tmp_path, capsys) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{")
        assert main(["lint", str(path)]) == EXIT_FATAL
        captured = capsys.readouterr()
        assert captured.err.startswith("error: Malformed descriptor")
        assert captured.out == ""

    def test_missing_descriptor(self, tmp_path, capsys) -> None:
        assert main(["lint", str(tmp_path / "nope.json")]) == EXIT_FATAL
        assert "Cannot read descriptor" in capsys.readouterr().err

    def test_unknown_disable_id(self, clean_api, capsys) -> None:
        assert main(["lint", str(clean_api), "--disable", "core::0000::nope"]) == EXIT_FATAL
        assert "core::0000::nope" in capsys.readouterr().err

    def test_bad_config(self, clean_api, tmp_path, capsys) -> None:
        config = tmp_path / "apilint.yaml"
        config.write_text("rules: 7\n")
        assert main(["lint", str(clean_api), "--config", str(config)]) == EXIT_FATAL
        assert "Invalid config" in capsys.readouterr().err

    def test_bad_env_workers(self, clean_api, monkeypatch, capsys) -> None:
        monkeypatch.setenv("APILINT_WORKERS", "0")
        assert main(["lint", str(clean_api)]) == EXIT_FATAL
        assert "Worker count" in capsys.readouterr().err

    def test_bad_workers_flag_is_usage_error(self, clean_api) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["lint", str(clean_api), "--workers", "0"])
        assert exc_info.value.code == 2


class TestIncomplete:
    def test_deadline_exit_code(self, clean_api, monkeypatch, capsys) -> None:
        from apilint.rules import engine

        # Batches idle until the engine stops them.
        monkeypatch.setattr(
            engine.RuleEngine, "_run_batch", lambda self, batch, ctx, stop: stop.wait(timeout=5)
        )
        assert main(["lint", str(clean_api), "--deadline", "10ms"]) == EXIT_INCOMPLETE
        assert "INCOMPLETE" in capsys.readouterr().out


class TestRulesCommand:
    def test_text(self, capsys) -> None:
        assert main(["rules"]) == EXIT_CLEAN
        out = capsys.readouterr().out
        assert "core::0131::http-method" in out

    def test_json(self, capsys) -> None:
        main(["rules", "--format", "json"])
        records = json.loads(capsys.readouterr().out)
        assert records[0]["id"] == "core::0127::http-annotation"


class TestUsage:
    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            main([])
