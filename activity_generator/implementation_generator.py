"""Generate the activity implementation that delegates to the API client.

Method signatures come from the same helper the contract uses, so the
flattening decision always matches. Every method body calls exactly one
client method and turns any failure into an ApplicationError of type
API_ERROR.
"""

from __future__ import annotations

import logging
from typing import Any

from .codegen import collect_imports, one_line, package_path, render, signature
from .contract_generator import annotation_types
from .model import GeneratedFile, NO_RETURN, Operation, uses_request_object
from .models_generator import REQUESTS_MODULE
from .naming import module_name

logger = logging.getLogger(__name__)

API_ERROR = "API_ERROR"


def call_arguments(operation: Operation) -> list[str]:
    """Arguments passed to the client method, in declared order (body last)."""
    if uses_request_object(operation):
        args = [f"request.{p.field_name}" for p in operation.parameters]
        if operation.body_type is not None:
            args.append("request.body")
        return args

    args = [p.field_name for p in operation.parameters]
    if operation.body_type is not None:
        args.append("body")
    return args


def build_method(operation: Operation) -> dict[str, Any]:
    return {
        "name": operation.method_name,
        "signature": signature(operation),
        "return_type": operation.return_type,
        "call_prefix": "return " if operation.return_type != NO_RETURN else "",
        "api_class": operation.api_class_name,
        "client_method": operation.client_method_name,
        "arguments": ", ".join(call_arguments(operation)),
        "summary": one_line(operation.summary) or f"{operation.http_method} {operation.path}",
    }


def generate_implementation(
    operations: list[Operation],
    package: str,
    activity_name: str,
    client_package: str,
    title: str = "the OpenAPI document",
) -> GeneratedFile:
    """Render the implementation module for the activity contract."""
    contract_module = module_name(activity_name)
    imports = collect_imports(annotation_types(operations), local_module=client_package)
    content = render(
        "implementation.py.j2",
        title=title,
        package=package,
        activity_name=activity_name,
        contract_module=contract_module,
        client_package=client_package,
        requests_module=REQUESTS_MODULE,
        request_types=[op.request_class_name for op in operations if uses_request_object(op)],
        api_error=API_ERROR,
        methods=[build_method(op) for op in operations],
        imports=imports,
    )
    logger.info("Generated activity implementation %sImpl", activity_name)
    return GeneratedFile(path=f"{package_path(package)}/{contract_module}_impl.py", content=content)
