"""Load and structurally check an OpenAPI document.

Reads a YAML or JSON file and extracts paths, component schemas and
local $ref targets.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from .exceptions import SpecNotFoundError, SpecParseError

logger = logging.getLogger(__name__)


def load_spec(path: Path) -> dict[str, Any]:
    """Load an OpenAPI document from disk.

    YAML is a superset of JSON, so both formats go through yaml.safe_load.
    """
    spec_file = Path(path)
    if not spec_file.is_file():
        raise SpecNotFoundError(f"OpenAPI spec file not found: {spec_file}")

    try:
        text = spec_file.read_text(encoding="utf-8")
    except OSError as e:
        raise SpecNotFoundError(f"Cannot read OpenAPI spec {spec_file}: {e}") from e

    try:
        spec = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SpecParseError(f"Failed to parse OpenAPI spec: {spec_file}: {e}") from e

    check_structure(spec, source=str(spec_file))
    return spec


def check_structure(spec: Any, source: str = "<document>") -> None:
    """Reject documents that cannot be walked as an OpenAPI v3 tree."""
    if not isinstance(spec, dict):
        raise SpecParseError(f"Failed to parse OpenAPI spec: {source}: top level is not a mapping")

    version = str(spec.get("openapi", ""))
    if not version.startswith("3."):
        logger.warning("%s does not declare OpenAPI 3.x (openapi=%r)", source, spec.get("openapi"))

    paths = spec.get("paths")
    if paths is not None and not isinstance(paths, dict):
        raise SpecParseError(f"{source}: 'paths' must be a mapping")

    components = spec.get("components")
    if components is not None and not isinstance(components, dict):
        raise SpecParseError(f"{source}: 'components' must be a mapping")

    schemas = get_schemas(spec)
    if not isinstance(schemas, dict):
        raise SpecParseError(f"{source}: 'components.schemas' must be a mapping")


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the spec."""
    return spec.get("paths") or {}


def get_schemas(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract component schemas from the spec."""
    return (spec.get("components") or {}).get("schemas") or {}


def resolve_ref(spec: dict[str, Any], ref: str) -> dict[str, Any]:
    """Resolve a local $ref pointer in the spec."""
    if not ref.startswith("#/"):
        raise SpecParseError(f"Only local references are supported: {ref}")

    node: Any = spec
    for part in ref[2:].split("/"):
        # JSON pointer escapes
        part = part.replace("~1", "/").replace("~0", "~")
        if not isinstance(node, dict) or part not in node:
            raise SpecParseError(f"Unresolvable reference: {ref}")
        node = node[part]
    if not isinstance(node, dict):
        raise SpecParseError(f"Reference does not point at an object: {ref}")
    return node


def deref(spec: dict[str, Any], node: dict[str, Any]) -> dict[str, Any]:
    """Follow $ref chains on parameter, request body and response objects."""
    seen: set[str] = set()
    while "$ref" in node:
        ref = node["$ref"]
        if ref in seen:
            raise SpecParseError(f"Circular reference: {ref}")
        seen.add(ref)
        node = resolve_ref(spec, ref)
    return node
