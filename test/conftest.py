"""Shared pytest fixtures for headergen tests."""

import pytest

from headergen.ir import Schema
from headergen.loader import parse_schema
from headergen.naming import NamingPolicy
from test.fixtures.schemas import MINIMAL_SCHEMA


@pytest.fixture
def minimal_schema() -> Schema:
    """The small but complete schema used across writer and loader tests."""
    return parse_schema(MINIMAL_SCHEMA)


@pytest.fixture
def naming() -> NamingPolicy:
    return NamingPolicy("WGPU")


@pytest.fixture
def schema_file(tmp_path):
    """Write MINIMAL_SCHEMA to a temporary XML file and return its path."""
    path = tmp_path / "webgpu.xml"
    path.write_text(MINIMAL_SCHEMA, encoding="utf-8")
    return str(path)
