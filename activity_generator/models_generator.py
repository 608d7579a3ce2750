"""Generate dataclass models for component schemas and flattened requests.

One dataclass per component schema that declares properties; schemas
without properties (enums, primitive aliases, compositions) are skipped.
Every field has a default so each model can be constructed empty as well
as fully populated.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from .codegen import collect_imports, localize, one_line, package_path, render
from .model import GeneratedFile, Operation, uses_request_object
from .naming import to_class_name, to_field_name
from .type_mapper import ANY, TypeMapper

logger = logging.getLogger(__name__)

MODELS_MODULE = "models"
REQUESTS_MODULE = "request_types"


def has_properties(schema: Any) -> bool:
    return isinstance(schema, dict) and bool(schema.get("properties"))


def count_models(type_mapper: TypeMapper) -> int:
    """Number of component schemas that become dataclasses."""
    return sum(1 for schema in type_mapper.schemas_to_generate().values() if has_properties(schema))


def _field_names(prop_names: list[str]) -> list[str]:
    """Distinct identifiers for a schema's properties, in declared order."""
    names: list[str] = []
    for prop_name in prop_names:
        name = to_field_name(prop_name)
        if name in names:
            counter = 2
            while f"{name}{counter}" in names:
                counter += 1
            logger.warning("Property %r collides with %r, renaming to %r", prop_name, name, f"{name}{counter}")
            name = f"{name}{counter}"
        names.append(name)
    return names


def build_model(
    name: str,
    schema: dict[str, Any],
    type_mapper: TypeMapper,
    local_type: Callable[[str], str] | None = None,
) -> dict[str, Any] | None:
    """Template context for one schema, or None when it has no properties.

    local_type rewrites resolved types for the module the model is rendered
    into.
    """
    if not has_properties(schema):
        logger.debug("Skipping schema %s: no properties", name)
        return None

    required = set(schema.get("required") or ())
    items = list(schema["properties"].items())
    names = _field_names([str(prop_name) for prop_name, _ in items])
    fields = []
    for field_name, (prop_name, prop_schema) in zip(names, items):
        is_required = prop_name in required
        type_name = type_mapper.resolve(prop_schema)
        if local_type is not None:
            type_name = local_type(type_name)
        fields.append({
            "name": field_name,
            "wire_name": str(prop_name),
            "type": type_mapper.optional(type_name, is_required),
            "default": type_mapper.default_value(type_name, is_required),
            "description": one_line(str((prop_schema or {}).get("description") or "")) or str(prop_name),
        })

    return {
        "name": to_class_name(name),
        "description": str(schema.get("description") or "").strip() or f"{to_class_name(name)} model.",
        "fields": fields,
    }


def generate_models(
    type_mapper: TypeMapper,
    package: str,
    title: str = "the OpenAPI document",
) -> GeneratedFile | None:
    """Render models.py for every component schema with properties.

    References to emitted models are rendered unqualified. A reference to a
    schema without properties (an enum, a primitive alias) is replaced by
    that schema's own type, e.g. a string enum becomes str.
    """
    schemas = type_mapper.schemas_to_generate()
    emitted = {to_class_name(str(n)) for n, s in schemas.items() if has_properties(s)}
    aliases = {
        to_class_name(str(n)): type_mapper.resolve(s) if isinstance(s, dict) else ANY
        for n, s in schemas.items()
        if not has_properties(s)
    }

    def local_type(type_name: str) -> str:
        return localize(type_name, type_mapper.model_package, emitted, aliases)

    models = []
    for name, schema in schemas.items():
        model = build_model(str(name), schema, type_mapper, local_type)
        if model is not None:
            models.append(model)

    if not models:
        return None

    imports = collect_imports(f["type"] for m in models for f in m["fields"])
    content = render("models.py.j2", title=title, models=models, imports=imports)
    logger.info("Generated %d model classes", len(models))
    return GeneratedFile(path=f"{package_path(package)}/{MODELS_MODULE}.py", content=content)


def build_request_type(operation: Operation, type_mapper: TypeMapper) -> dict[str, Any]:
    """Template context for the synthetic request object of one operation."""
    fields = []
    for param in operation.parameters:
        fields.append({
            "name": param.field_name,
            "wire_name": param.name,
            "type": param.annotation,
            "default": type_mapper.default_value(param.type_name, param.required),
            "description": one_line(param.description) or f"{param.location} parameter {param.name}",
        })
    if operation.body_type is not None:
        fields.append({
            "name": "body",
            "wire_name": "body",
            "type": operation.body_annotation,
            "default": type_mapper.default_value(operation.body_type, operation.request_body.required),
            "description": one_line(operation.request_body.description) or "Request body",
        })
    return {
        "name": operation.request_class_name,
        "description": f"Arguments of {operation.method_name} ({operation.http_method} {operation.path}).",
        "fields": fields,
    }


def generate_request_types(
    operations: list[Operation],
    type_mapper: TypeMapper,
    package: str,
    title: str = "the OpenAPI document",
) -> GeneratedFile | None:
    """Render request_types.py for every operation whose arguments are flattened."""
    requests = [build_request_type(op, type_mapper) for op in operations if uses_request_object(op)]
    if not requests:
        return None

    module = f"{package}.{REQUESTS_MODULE}"
    imports = collect_imports((f["type"] for r in requests for f in r["fields"]), local_module=module)
    content = render("request_types.py.j2", title=title, models=requests, imports=imports)
    return GeneratedFile(path=f"{package_path(package)}/{REQUESTS_MODULE}.py", content=content)
