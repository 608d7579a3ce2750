"""Identifier transforms shared by the parser and every generator.

Field names (parameters, model properties):
  pet_id        -> petId
  X-Request-ID  -> xRequestID
  "first name"  -> firstName
  class         -> class_

Operation ids without an operationId:
  GET /pets/{id}      -> getpetsid
  POST /store/order   -> poststoreorder

Client calls follow the OpenAPI Generator Python target:
  listPets      -> PetsApi(...).list_pets
  untagged      -> DefaultApi
"""

from __future__ import annotations

import keyword
import re

_DELIMITERS = frozenset("-_ ")

# Names a generated method signature already uses
_RESERVED = frozenset({"self"})


def capitalize(name: str) -> str:
    """Upper-case the first character, leaving the rest alone."""
    return name[:1].upper() + name[1:]


def _make_identifier(name: str, fallback: str) -> str:
    """Drop characters Python rejects and escape keywords."""
    name = re.sub(r"\W", "", name)
    if not name:
        return fallback
    if name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name) or name in _RESERVED:
        name = f"{name}_"
    return name


def to_field_name(name: str) -> str:
    """Convert a document name to a camelCase field-style identifier."""
    parts: list[str] = []
    capitalize_next = False
    for char in name:
        if char in _DELIMITERS:
            capitalize_next = True
        elif capitalize_next:
            parts.append(char.upper())
            capitalize_next = False
        else:
            parts.append(char)

    camel = "".join(parts)
    camel = camel[:1].lower() + camel[1:]
    return _make_identifier(camel, "field")


def to_class_name(name: str) -> str:
    """Convert a component schema name to a PascalCase class name."""
    return capitalize(to_field_name(name))


def _camel_to_snake(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case."""
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    return re.sub(r"([a-z\d])([A-Z])", r"\1_\2", s1).lower()


def to_snake_case(name: str) -> str:
    """Convert any document name to a snake_case identifier."""
    snake = _camel_to_snake(name)
    snake = re.sub(r"[.\- ]", "_", snake)
    snake = re.sub(r"[^a-z0-9_]", "", snake)
    snake = re.sub(r"_+", "_", snake).strip("_")
    return _make_identifier(snake, "operation")


def synthesize_operation_id(method: str, path: str) -> str:
    """Build an operation id from HTTP method + path when none is declared."""
    return method.lower() + re.sub(r"[^a-zA-Z0-9]", "", path)


def api_class_name(tags: list[str] | tuple[str, ...]) -> str:
    """Name of the client API class grouping an operation (first tag wins)."""
    if not tags:
        return "DefaultApi"
    return capitalize(to_field_name(tags[0])) + "Api"


def module_name(class_name: str) -> str:
    """Module file stem for a generated class, e.g. PetStoreActivity -> pet_store_activity."""
    return to_snake_case(class_name)
