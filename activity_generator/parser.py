"""Walk an OpenAPI document and build the intermediate Operation model.

Paths are visited in document order; within a path the supported methods
are visited in the fixed order GET, POST, PUT, DELETE, PATCH. Every type
decision goes through the TypeMapper.
"""

from __future__ import annotations

import logging
from typing import Any

from .exceptions import SpecParseError
from .loader import deref, get_paths
from .model import (
    SUPPORTED_METHODS,
    MediaType,
    Operation,
    Parameter,
    RequestBody,
    Response,
)
from .naming import capitalize, to_field_name
from .type_mapper import TypeMapper, declared_type

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _is_array_schema(schema: dict[str, Any] | None) -> bool:
    if not schema or "$ref" in schema:
        return False
    return declared_type(schema) == "array" or "items" in schema


def parse_content(
    type_mapper: TypeMapper,
    content: dict[str, Any] | None,
) -> dict[str, MediaType]:
    """Map every declared content type, keeping document order."""
    media_types: dict[str, MediaType] = {}
    for content_type, media in (content or {}).items():
        schema = (media or {}).get("schema")
        is_array = _is_array_schema(schema)
        media_types[str(content_type)] = MediaType(
            content_type=str(content_type),
            type_name=type_mapper.resolve(schema),
            schema_ref=schema.get("$ref") if schema else None,
            is_array=is_array,
            item_type=type_mapper.resolve(schema.get("items")) if is_array else None,
        )
    return media_types


def _merge_parameters(
    spec: dict[str, Any],
    shared: list[Any],
    own: list[Any],
    where: str,
) -> list[dict[str, Any]]:
    """Path-level parameters first; an operation parameter with the same
    (name, in) replaces the path-level one in place."""
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for raw in [*shared, *own]:
        if not isinstance(raw, dict):
            raise SpecParseError(f"{where}: parameter must be a mapping", path=where)
        param = deref(spec, raw)
        name = param.get("name")
        if not name:
            raise SpecParseError(f"{where}: parameter without a name", path=where)
        merged[(str(name), param.get("in", "query"))] = param
    return list(merged.values())


def parse_parameter(type_mapper: TypeMapper, param: dict[str, Any]) -> Parameter:
    """Parse a single (already dereferenced) parameter object."""
    schema = param.get("schema")
    if schema is None and param.get("content"):
        # parameters serialized through a media type carry their schema there
        first = next(iter(param["content"].values())) or {}
        schema = first.get("schema")

    location = param.get("in", "query")
    return Parameter(
        name=str(param["name"]),
        location=location,
        schema_type=(declared_type(schema) if schema else None) or "string",
        type_name=type_mapper.resolve(schema),
        required=bool(param.get("required", False)) or location == "path",
        description=_text(param.get("description")),
        schema_ref=schema.get("$ref") if schema else None,
    )


def _deduplicate_field_names(
    params: list[Parameter],
    has_body: bool,
    where: str,
) -> list[Parameter]:
    """Give every parameter a distinct identifier.

    The same name may appear in two locations (path id and query id); the
    later one gets a location suffix, idQuery. The wire name is unchanged.
    """
    seen = {"body"} if has_body else set()
    result = []
    for param in params:
        name = param.field_name
        if name in seen:
            new_name = name + capitalize(param.location)
            counter = 2
            while new_name in seen:
                new_name = f"{name}{capitalize(param.location)}{counter}"
                counter += 1
            logger.warning(
                "%s: parameter %r (%s) collides with %r, renaming to %r",
                where, param.name, param.location, name, new_name,
            )
            param = param.model_copy(update={"python_name": new_name})
        seen.add(param.field_name)
        result.append(param)
    return result


def parse_request_body(
    spec: dict[str, Any],
    type_mapper: TypeMapper,
    request_body: dict[str, Any] | None,
) -> RequestBody | None:
    if request_body is None:
        return None
    request_body = deref(spec, request_body)
    return RequestBody(
        description=_text(request_body.get("description")),
        required=bool(request_body.get("required", False)),
        content=parse_content(type_mapper, request_body.get("content")),
    )


def parse_response(
    spec: dict[str, Any],
    type_mapper: TypeMapper,
    responses: dict[str, Any] | None,
) -> Response:
    """Pick the first 2xx response, else the first declared one."""
    if not responses:
        return Response(status_code="200", description="Success")

    status_code = next((code for code in responses if str(code).startswith("2")), None)
    if status_code is None:
        status_code = next(iter(responses))

    response = deref(spec, responses[status_code] or {})
    return Response(
        status_code=str(status_code),
        description=_text(response.get("description")),
        content=parse_content(type_mapper, response.get("content")),
    )


def parse_operation(
    spec: dict[str, Any],
    type_mapper: TypeMapper,
    method: str,
    path: str,
    operation: dict[str, Any],
    shared_parameters: list[Any] | None = None,
) -> Operation:
    """Parse one endpoint-method pair."""
    where = f"{method.upper()} {path}"
    raw_params = operation.get("parameters") or []
    if not isinstance(raw_params, list):
        raise SpecParseError(f"{where}: 'parameters' must be a list", path=where)

    params = [
        parse_parameter(type_mapper, p)
        for p in _merge_parameters(spec, shared_parameters or [], raw_params, where)
    ]
    request_body = parse_request_body(spec, type_mapper, operation.get("requestBody"))
    has_body = request_body is not None and request_body.primary_content_type is not None

    return Operation.build(
        method,
        path,
        operation_id=operation.get("operationId"),
        summary=_text(operation.get("summary")),
        description=_text(operation.get("description")),
        parameters=tuple(_deduplicate_field_names(params, has_body, where)),
        request_body=request_body,
        response=parse_response(spec, type_mapper, operation.get("responses")),
        tags=tuple(str(t) for t in operation.get("tags") or ()),
    )


def _deduplicate_method_names(operations: list[Operation]) -> list[Operation]:
    """Ensure generated method names are unique by appending a counter."""
    seen: dict[str, int] = {}
    result = []
    for op in operations:
        name = op.method_name
        if name in seen:
            seen[name] += 1
            new_id = f"{op.operation_id}{seen[name]}"
            logger.warning(
                "%s %s: method name %r already used, renaming to %r",
                op.http_method, op.path, name, to_field_name(new_id),
            )
            op = op.model_copy(update={"operation_id": new_id})
        else:
            seen[name] = 1
        result.append(op)
    return result


def parse_operations(spec: dict[str, Any], type_mapper: TypeMapper) -> list[Operation]:
    """Parse all operations from the document, path-then-method order."""
    operations: list[Operation] = []

    for path, path_item in get_paths(spec).items():
        if not isinstance(path_item, dict):
            raise SpecParseError(f"Path item for {path} must be a mapping", path=str(path))
        path_item = deref(spec, path_item)
        shared = path_item.get("parameters") or []

        for method in SUPPORTED_METHODS:
            operation = path_item.get(method.lower())
            if operation is None:
                continue
            if not isinstance(operation, dict):
                raise SpecParseError(f"{method} {path}: operation must be a mapping", path=str(path))
            op = parse_operation(spec, type_mapper, method, str(path), operation, shared)
            logger.debug("Parsed %s %s as %s", method, path, op.operation_id)
            operations.append(op)

    logger.info("Found %d operations", len(operations))
    return _deduplicate_method_names(operations)
