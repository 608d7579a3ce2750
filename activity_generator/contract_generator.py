"""Generate the Temporal activity contract from parsed operations.

The contract is a single abstract class with one method per operation.
Each method carries its retry policy and schedule-to-close timeout as
machine-readable options, and a docstring naming the HTTP method, path and
whether the call is safe to retry.
"""

from __future__ import annotations

import logging
from typing import Any

from .codegen import collect_imports, method_parameters, package_path, render, signature
from .model import GeneratedFile, NO_RETURN, Operation, uses_request_object
from .naming import module_name
from .models_generator import REQUESTS_MODULE

logger = logging.getLogger(__name__)

SCHEDULE_TO_CLOSE_MINUTES = 5

IDEMPOTENT_NOTE = "Idempotent: safe to retry."
NON_IDEMPOTENT_NOTE = "Not idempotent: retry with caution."


def build_docstring(operation: Operation) -> str:
    """Docstring body for one activity method (without the quotes)."""
    summary = operation.summary or f"Call {operation.http_method} {operation.path}."
    lines = [summary.rstrip()]
    if operation.description and operation.description != operation.summary:
        lines += ["", operation.description]
    lines += [
        "",
        f"HTTP: {operation.http_method} {operation.path}",
        "",
        IDEMPOTENT_NOTE if operation.idempotent else NON_IDEMPOTENT_NOTE,
    ]

    arguments = method_parameters(operation)
    if arguments:
        descriptions = {p.field_name: p.description for p in operation.parameters}
        lines += ["", "Args:"]
        for name, _ in arguments:
            if name == "request":
                text = "The request parameters."
            elif name == "body":
                text = (operation.request_body.description if operation.request_body else "") or "Request body."
            else:
                text = descriptions.get(name) or ""
            lines.append(f"    {name}: {' '.join(text.split())}".rstrip())

    if operation.return_type != NO_RETURN:
        lines += ["", "Returns:", f"    {operation.response.description or 'The response.'}"]
    return "\n".join(lines)


def build_method(operation: Operation) -> dict[str, Any]:
    policy = operation.retry_policy
    return {
        "name": operation.method_name,
        "signature": signature(operation),
        "return_type": operation.return_type,
        "docstring": build_docstring(operation),
        "retry": {
            "initial_interval": policy.initial_interval,
            "maximum_interval": policy.maximum_interval,
            "backoff_coefficient": policy.backoff_coefficient,
            "maximum_attempts": policy.maximum_attempts,
        },
    }


def annotation_types(operations: list[Operation]) -> list[str]:
    """Every annotation the activity methods use."""
    types = []
    for op in operations:
        if not uses_request_object(op):
            types += [annotation for _, annotation in method_parameters(op)]
        types.append(op.return_type)
    return types


def generate_contract(
    operations: list[Operation],
    package: str,
    activity_name: str,
    title: str = "the OpenAPI document",
) -> GeneratedFile:
    """Render the activity contract module."""
    imports = collect_imports(annotation_types(operations))
    content = render(
        "contract.py.j2",
        title=title,
        package=package,
        activity_name=activity_name,
        requests_module=REQUESTS_MODULE,
        request_types=[op.request_class_name for op in operations if uses_request_object(op)],
        schedule_to_close_minutes=SCHEDULE_TO_CLOSE_MINUTES,
        methods=[build_method(op) for op in operations],
        imports=imports,
    )
    logger.info("Generated activity contract %s (%d methods)", activity_name, len(operations))
    return GeneratedFile(path=f"{package_path(package)}/{module_name(activity_name)}.py", content=content)
