# SPDX-License-Identifier: MIT
"""Property-based fuzz tests for the loader, the engine, and the aggregator.

Uses hypothesis to generate descriptor sets and raw text, and verifies that
loading never fails with anything but ParseError, that evaluation does not
depend on the worker count, and that aggregation is idempotent.
"""

from __future__ import annotations

import json
import os
import string

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from apilint.errors import ParseError
from apilint.findings import Finding, FindingKind, aggregate
from apilint.model import SourceLocation, load
from apilint.rules.base import Severity
from apilint.rules.catalog import default_catalog
from apilint.rules.config import LintConfig
from apilint.rules.engine import RuleEngine
from apilint.runner import run_lint

# Set FUZZ_SLOW=1 for a deep local run
_MAX_EXAMPLES = 5_000 if os.environ.get("FUZZ_SLOW") else 300
_ENGINE_EXAMPLES = 500 if os.environ.get("FUZZ_SLOW") else 40

# conftest.py clears env vars with an autouse fixture; it holds no per-example state
_SUPPRESSED = [HealthCheck.function_scoped_fixture, HealthCheck.too_slow]

_PRINTABLE = st.text(alphabet=string.printable, min_size=0, max_size=200)

# Mix of compliant and non-compliant identifiers
_TYPE_NAME = st.from_regex(r"(Get|List|Create|Update|Delete)?[A-Za-z][A-Za-z0-9_]{0,12}", fullmatch=True)
_FIELD_NAME = st.from_regex(r"[A-Za-z][A-Za-z0-9_]{0,12}", fullmatch=True)
_SCALAR = st.sampled_from(["string", "int32", "int64", "bool", "bytes", "double"])
_BEHAVIORS = st.lists(
    st.sampled_from(["REQUIRED", "OPTIONAL", "OUTPUT_ONLY", "INPUT_ONLY", "IMMUTABLE"]),
    max_size=3,
    unique=True,
)
_COMMENTS = st.lists(
    st.one_of(
        st.just("apilint: disable core::0140::lower-snake"),
        st.just("apilint: disable core::0140::reserved-words"),
        st.just("apilint: enable everything"),
        st.just("A documented element."),
    ),
    max_size=2,
)


@st.composite
def _messages(draw: st.DrawFn) -> list[dict]:
    names = draw(st.lists(_TYPE_NAME.filter(lambda n: n != "Fuzz"), min_size=1, max_size=6, unique=True))
    messages = []
    for name in names:
        field_names = draw(st.lists(_FIELD_NAME, max_size=4, unique=True))
        messages.append(
            {
                "name": name,
                "comments": draw(_COMMENTS),
                "fields": [
                    {
                        "name": fname,
                        "number": i + 1,
                        "type": draw(_SCALAR),
                        "cardinality": draw(st.sampled_from(["singular", "repeated"])),
                        "behaviors": draw(_BEHAVIORS),
                        "comments": draw(_COMMENTS),
                    }
                    for i, fname in enumerate(field_names)
                ],
            }
        )
    return messages


@st.composite
def _descriptors(draw: st.DrawFn) -> bytes:
    messages = draw(_messages())
    message_names = [m["name"] for m in messages]
    method_names = draw(st.lists(_TYPE_NAME, max_size=5, unique=True))
    methods = []
    for name in method_names:
        method: dict = {
            "name": name,
            "input_type": draw(st.sampled_from(message_names)),
            "output_type": draw(st.sampled_from(message_names)),
            "comments": draw(_COMMENTS),
        }
        if draw(st.booleans()):
            method["http"] = {
                "method": draw(st.sampled_from(["get", "post", "patch", "delete"])),
                "path": draw(st.sampled_from(["/v1/{name=books/*}", "v1/books", "/v1/{parent"])),
                "body": draw(st.sampled_from(["", "*"])),
            }
        methods.append(method)
    enum_values = draw(st.lists(_TYPE_NAME, max_size=3, unique=True))
    enum_name = draw(_TYPE_NAME.filter(lambda n: n != "Fuzz" and n not in message_names))
    data = {
        "files": [
            {
                "name": "fuzz.proto",
                "package": "fuzz.v1",
                "options": {"csharp_namespace": draw(st.sampled_from(["Fuzz.V1", "fuzz.v1"]))},
                "services": [{"name": "Fuzz", "methods": methods}],
                "messages": messages,
                "enums": [
                    {
                        "name": enum_name,
                        "values": [{"name": v, "number": i} for i, v in enumerate(enum_values)],
                    }
                ],
            }
        ]
    }
    return json.dumps(data).encode()


# ---------------------------------------------------------------------------
# Fuzz: loader, only ParseError escapes
# ---------------------------------------------------------------------------


@given(text=_PRINTABLE)
@settings(max_examples=_MAX_EXAMPLES, suppress_health_check=_SUPPRESSED)
def test_fuzz_load_arbitrary_text(text: str) -> None:
    """load never raises anything but ParseError on arbitrary text."""
    try:
        load(text)
    except ParseError:
        pass


@given(raw=st.binary(max_size=200))
@settings(max_examples=_MAX_EXAMPLES, suppress_health_check=_SUPPRESSED)
def test_fuzz_load_arbitrary_bytes(raw: bytes) -> None:
    try:
        load(raw)
    except ParseError:
        pass


_JSON_VALUES = st.recursive(
    st.none() | st.booleans() | st.integers() | st.text(max_size=10),
    lambda children: st.lists(children, max_size=3) | st.dictionaries(st.text(max_size=8), children, max_size=3),
    max_leaves=10,
)


@given(files=st.lists(st.dictionaries(st.sampled_from(["name", "package", "messages", "services", "enums", "dependency"]), _JSON_VALUES), max_size=3))
@settings(max_examples=_MAX_EXAMPLES, suppress_health_check=_SUPPRESSED)
def test_fuzz_load_structured_json(files: list) -> None:
    """Schema-shaped but random JSON is either loaded or rejected with ParseError."""
    try:
        model = load(json.dumps({"files": files}))
    except ParseError:
        return
    assert len(model) >= 0


@given(data=_descriptors())
@settings(max_examples=_MAX_EXAMPLES, deadline=None, suppress_health_check=_SUPPRESSED)
def test_fuzz_generated_descriptors_load(data: bytes) -> None:
    """Generated descriptors have resolvable references and always load."""
    model = load(data)
    assert "fuzz.v1.Fuzz" in model
    paths = [n.path for n in model.walk()]
    assert len(paths) == len(set(paths))


# ---------------------------------------------------------------------------
# Fuzz: engine determinism and isolation
# ---------------------------------------------------------------------------


@given(data=_descriptors(), workers=st.integers(min_value=2, max_value=6))
@settings(max_examples=_ENGINE_EXAMPLES, deadline=None, suppress_health_check=_SUPPRESSED)
def test_fuzz_engine_deterministic_across_workers(data: bytes, workers: int) -> None:
    model = load(data)
    catalog = default_catalog()
    single = RuleEngine(catalog, workers=1).evaluate(model)
    parallel = RuleEngine(catalog, workers=workers).evaluate(model)
    assert parallel.findings == single.findings
    assert not any(f.kind is FindingKind.RULE_INTERNAL_ERROR for f in single.findings)


@given(data=_descriptors())
@settings(max_examples=_ENGINE_EXAMPLES, deadline=None, suppress_health_check=_SUPPRESSED)
def test_fuzz_findings_reference_model_nodes(data: bytes) -> None:
    """Every reported finding points at a node of the linted model."""
    model = load(data)
    enabled = LintConfig.model_validate({"rules": {"core::0192::has-comments": {"enabled": True}}})
    result = run_lint(data, config=enabled, workers=2)
    assert all(f.path in model for f in result.findings)
    assert not result.incomplete


# ---------------------------------------------------------------------------
# Fuzz: aggregation idempotence
# ---------------------------------------------------------------------------

_FINDING = st.builds(
    Finding,
    rule_id=st.sampled_from(["core::0131::http-method", "core::0140::lower-snake", "x"]),
    path=st.sampled_from(["a.B", "a.B.c", "a.C"]),
    severity=st.sampled_from(list(Severity)),
    message=st.sampled_from(["m1", "m2"]),
    location=st.builds(SourceLocation, st.sampled_from(["a.proto", "b.proto"]), st.integers(0, 20)),
    kind=st.sampled_from(list(FindingKind)),
)


@given(raw=st.lists(_FINDING, max_size=30))
@settings(max_examples=_MAX_EXAMPLES, suppress_health_check=_SUPPRESSED)
def test_fuzz_aggregate_idempotent(raw: list[Finding]) -> None:
    once = aggregate(raw)
    assert aggregate(once) == once
    assert aggregate(list(reversed(once))) == once
    assert len({f.dedupe_key for f in once}) == len(once)
