# SPDX-License-Identifier: MIT
"""Tests for AIP-151 operation_info checks."""

from __future__ import annotations

from descriptors import http, message, method, rule_findings, service, single_file

RULE = "core::0151::operation-info"


def _api(operation_info: dict | None, output_type: str = "google.longrunning.Operation") -> bytes:
    extra = {"operation_info": operation_info} if operation_info is not None else {}
    return single_file(
        services=[
            service(
                "Library",
                [
                    method(
                        "ExportBooks",
                        "ExportBooksRequest",
                        output_type,
                        http=http("post", "/v1/books:export", "*"),
                        **extra,
                    )
                ],
            )
        ],
        messages=[
            message("ExportBooksRequest"),
            message("ExportBooksResponse"),
            message("ExportMetadata", enums=[{"name": "Stage", "values": []}]),
        ],
    )


class TestOperationInfo:
    def test_complete_info(self) -> None:
        info = {"response_type": "ExportBooksResponse", "metadata_type": "ExportMetadata"}
        assert rule_findings(_api(info), RULE) == []

    def test_fully_qualified_types(self) -> None:
        info = {"response_type": ".google.protobuf.Empty", "metadata_type": "library.v1.ExportMetadata"}
        assert rule_findings(_api(info), RULE) == []

    def test_missing_info(self) -> None:
        [finding] = rule_findings(_api(None), RULE)
        assert "has no operation_info" in finding.message

    def test_missing_metadata_type(self) -> None:
        [finding] = rule_findings(_api({"response_type": "ExportBooksResponse"}), RULE)
        assert finding.message == "operation_info is missing metadata_type"

    def test_unresolvable_types(self) -> None:
        info = {"response_type": "Nope", "metadata_type": "ExportMetadata.Stage"}
        messages = [f.message for f in rule_findings(_api(info), RULE)]
        assert messages == [
            "operation_info metadata_type 'ExportMetadata.Stage' does not resolve to a message",
            "operation_info response_type 'Nope' does not resolve to a message",
        ]

    def test_non_lro_method_ignored(self) -> None:
        assert rule_findings(_api(None, output_type="ExportBooksResponse"), RULE) == []
