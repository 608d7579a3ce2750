"""Shared fixtures for the activity generator tests.

Most tests run against tests/fixtures/petstore.yaml, a small document
that covers the flattening, idempotency and type-mapping rules.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from activity_generator.config import GeneratorConfig
from activity_generator.loader import get_schemas, load_spec
from activity_generator.model import Operation
from activity_generator.parser import parse_operations
from activity_generator.type_mapper import TypeMapper

FIXTURES = Path(__file__).parent / "fixtures"
PETSTORE = FIXTURES / "petstore.yaml"


@pytest.fixture(scope="session")
def spec() -> dict[str, Any]:
    return load_spec(PETSTORE)


@pytest.fixture
def type_mapper(spec) -> TypeMapper:
    return TypeMapper(get_schemas(spec), "openapi_client.models")


@pytest.fixture
def operations(spec, type_mapper) -> list[Operation]:
    return parse_operations(spec, type_mapper)


@pytest.fixture
def ops_by_id(operations) -> dict[str, Operation]:
    """Parsed petstore operations keyed by operation id."""
    return {op.operation_id: op for op in operations}


@pytest.fixture
def config(tmp_path) -> GeneratorConfig:
    return GeneratorConfig(
        spec_file=PETSTORE,
        output_dir=tmp_path / "out",
        package="petstore.activities",
        activity_name="PetStoreActivity",
    )


@pytest.fixture
def write_spec(tmp_path) -> Callable[..., Path]:
    """Write an inline OpenAPI document and return its path."""

    def _write(text: str, name: str = "openapi.yaml") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
