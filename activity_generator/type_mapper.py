"""Map OpenAPI schema descriptors to Python type annotations.

Handles:
- $ref to component schemas (nominal, no inlining, no cycle detection)
- arrays -> list[...]
- maps (additionalProperties) -> dict[str, ...]
- (type, format) overrides, then a per-type primitive table
- unknown or missing descriptors -> Any

The mapper owns the component-schema registry; nothing else resolves
schema references.
"""

from __future__ import annotations

import logging
from typing import Any

from .exceptions import UnresolvedReferenceError
from .naming import to_class_name

logger = logging.getLogger(__name__)

ANY = "Any"

SCHEMA_REF_PREFIX = "#/components/schemas/"

# Format-specific mappings take precedence over the type table
_FORMAT_TYPES: dict[tuple[str, str], str] = {
    ("integer", "int32"): "int",
    ("integer", "int64"): "int",
    ("number", "float"): "float",
    ("number", "double"): "float",
    ("string", "date"): "datetime.date",
    ("string", "date-time"): "datetime.datetime",
    ("string", "byte"): "bytes",
    ("string", "binary"): "bytes",
    ("string", "uuid"): "uuid.UUID",
}

_PRIMITIVE_TYPES: dict[str, str] = {
    "string": "str",
    "integer": "int",
    "number": "float",
    "boolean": "bool",
    "object": "dict[str, Any]",
}

# Zero values backing the empty construction path of required fields
_ZERO_VALUES: dict[str, str] = {
    "str": '""',
    "int": "0",
    "float": "0.0",
    "bool": "False",
    "bytes": 'b""',
}


def declared_type(schema: dict[str, Any]) -> str | None:
    """Return the declared type, taking the first non-null entry of a 3.1 type list."""
    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        non_null = [t for t in schema_type if t != "null"]
        return non_null[0] if non_null else None
    return schema_type


class TypeMapper:
    """Resolve schema descriptors against a document's component schemas."""

    def __init__(
        self,
        schemas: dict[str, Any],
        model_package: str,
        strict_refs: bool = True,
    ) -> None:
        self.schemas = schemas
        self.model_package = model_package
        self.strict_refs = strict_refs

    def schemas_to_generate(self) -> dict[str, Any]:
        """All named component schemas, in document order."""
        return self.schemas

    @staticmethod
    def extract_schema_name(ref: str | None) -> str | None:
        """Extract the schema name from a reference (last path segment)."""
        if ref is None:
            return None
        return ref.rsplit("/", 1)[-1]

    def model_type(self, schema_name: str) -> str:
        """Fully qualified type name of a component schema."""
        return f"{self.model_package}.{to_class_name(schema_name)}"

    def resolve(self, schema: dict[str, Any] | None) -> str:
        """Resolve a schema descriptor to a Python type annotation."""
        if not schema:
            return ANY

        if "$ref" in schema:
            return self._resolve_ref(schema["$ref"])

        schema_type = declared_type(schema)

        if schema_type == "array" or "items" in schema:
            item_type = self.resolve(schema.get("items"))
            return f"list[{item_type}]"

        additional = schema.get("additionalProperties")
        if isinstance(additional, dict) or additional is True:
            value_type = self.resolve(additional) if isinstance(additional, dict) else ANY
            return f"dict[str, {value_type}]"

        if schema_type is None:
            return ANY

        fmt = schema.get("format")
        if fmt is not None and (schema_type, fmt) in _FORMAT_TYPES:
            return _FORMAT_TYPES[(schema_type, fmt)]

        if schema_type in _PRIMITIVE_TYPES:
            return _PRIMITIVE_TYPES[schema_type]

        logger.debug("Unknown schema type %r, falling back to %s", schema_type, ANY)
        return ANY

    def _resolve_ref(self, ref: str) -> str:
        name = self.extract_schema_name(ref)
        if ref.startswith(SCHEMA_REF_PREFIX) and name not in self.schemas:
            if self.strict_refs:
                raise UnresolvedReferenceError(ref)
            logger.warning("Reference %s names no component schema; using it as a type name", ref)
        elif not ref.startswith(SCHEMA_REF_PREFIX):
            logger.debug("Non-component reference %s resolved by name only", ref)
        return self.model_type(name)

    @staticmethod
    def optional(type_name: str, required: bool) -> str:
        """Nullable form of an already resolved type unless required."""
        return type_name if required else f"Optional[{type_name}]"

    def field_type(self, schema: dict[str, Any] | None, required: bool) -> str:
        """Type of a struct member: nullable unless the member is required."""
        return self.optional(self.resolve(schema), required)

    @staticmethod
    def default_value(type_name: str, required: bool) -> str:
        """Source text of a field default for the empty construction path."""
        if not required:
            return "None"
        if type_name in _ZERO_VALUES:
            return _ZERO_VALUES[type_name]
        if type_name.startswith("list["):
            return "dataclasses.field(default_factory=list)"
        if type_name.startswith("dict["):
            return "dataclasses.field(default_factory=dict)"
        return "None"
