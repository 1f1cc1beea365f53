# SPDX-License-Identifier: MIT
"""Shared fixtures for the apilint test suite."""

from __future__ import annotations

import pytest
from descriptors import library_descriptor

from apilint.model import SchemaModel, load
from apilint.rules.catalog import RuleCatalog, default_catalog
from apilint.rules.context import RuleContext


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment overrides out of every test."""
    monkeypatch.delenv("APILINT_FAIL_ON", raising=False)
    monkeypatch.delenv("APILINT_WORKERS", raising=False)


@pytest.fixture
def library_model() -> SchemaModel:
    return load(library_descriptor())


@pytest.fixture
def catalog() -> RuleCatalog:
    return default_catalog()


@pytest.fixture
def ctx(library_model: SchemaModel) -> RuleContext:
    return RuleContext(model=library_model)
