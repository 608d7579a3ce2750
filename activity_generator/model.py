"""Intermediate model produced by the parser and read by every generator.

The module-level functions are the only place the derived decisions
(idempotency, retry preset, primary content type, request flattening)
are made.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from .naming import (
    api_class_name,
    capitalize,
    synthesize_operation_id,
    to_field_name,
    to_snake_case,
)

JSON_CONTENT_TYPE = "application/json"

NO_RETURN = "None"

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")

_IDEMPOTENT_METHODS = frozenset({"GET", "PUT", "DELETE"})


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class MediaType(_Frozen):
    """One content type of a request body or response."""

    content_type: str
    type_name: str
    schema_ref: Optional[str] = None
    is_array: bool = False
    item_type: Optional[str] = None


def select_primary(content: dict[str, MediaType]) -> Optional[MediaType]:
    """Prefer application/json, then the first declared content type."""
    if not content:
        return None
    if JSON_CONTENT_TYPE in content:
        return content[JSON_CONTENT_TYPE]
    return next(iter(content.values()))


class RequestBody(_Frozen):
    description: str = ""
    required: bool = False
    content: dict[str, MediaType] = {}

    @property
    def primary_content_type(self) -> Optional[MediaType]:
        return select_primary(self.content)


class Response(_Frozen):
    status_code: str
    description: str = ""
    content: dict[str, MediaType] = {}

    @property
    def primary_content_type(self) -> Optional[MediaType]:
        return select_primary(self.content)

    @property
    def return_type(self) -> str:
        """Annotation of the returned value, "None" when there is no body."""
        media = self.primary_content_type
        return media.type_name if media is not None else NO_RETURN


class Parameter(_Frozen):
    """A single operation parameter (path, query, header or cookie)."""

    name: str  # original document name, used on the wire
    location: str  # path / query / header / cookie
    schema_type: str = "string"
    type_name: str
    required: bool = False
    description: str = ""
    schema_ref: Optional[str] = None
    python_name: Optional[str] = None  # set when the derived identifier collides

    @property
    def field_name(self) -> str:
        return self.python_name or to_field_name(self.name)

    @property
    def annotation(self) -> str:
        """Argument annotation: nullable unless the parameter is required."""
        return self.type_name if self.required else f"Optional[{self.type_name}]"


class RetryPolicy(_Frozen):
    """Retry metadata attached to a generated activity method.

    Intervals are in seconds.
    """

    initial_interval: int
    maximum_interval: int
    backoff_coefficient: float
    maximum_attempts: int

    @classmethod
    def safe_idempotent(cls) -> RetryPolicy:
        return cls(initial_interval=1, maximum_interval=300, backoff_coefficient=2.0, maximum_attempts=5)

    @classmethod
    def non_idempotent(cls) -> RetryPolicy:
        return cls(initial_interval=2, maximum_interval=60, backoff_coefficient=1.5, maximum_attempts=2)


def is_idempotent(http_method: str) -> bool:
    """GET, PUT and DELETE are idempotent; POST and PATCH are not."""
    return http_method.upper() in _IDEMPOTENT_METHODS


def retry_policy_for(idempotent: bool) -> RetryPolicy:
    return RetryPolicy.safe_idempotent() if idempotent else RetryPolicy.non_idempotent()


class Operation(_Frozen):
    """One HTTP method bound to one path: the unit of generation."""

    operation_id: str
    http_method: str
    path: str
    summary: str = ""
    description: str = ""
    parameters: tuple[Parameter, ...] = ()
    request_body: Optional[RequestBody] = None
    response: Response
    tags: tuple[str, ...] = ()
    idempotent: bool
    retry_policy: RetryPolicy

    @classmethod
    def build(cls, http_method: str, path: str, operation_id: Optional[str] = None, **kwargs) -> Operation:
        """Create an Operation, deriving the id, idempotency and retry policy."""
        method = http_method.upper()
        idempotent = is_idempotent(method)
        return cls(
            operation_id=operation_id or synthesize_operation_id(method, path),
            http_method=method,
            path=path,
            idempotent=idempotent,
            retry_policy=retry_policy_for(idempotent),
            **kwargs,
        )

    @property
    def method_name(self) -> str:
        return to_field_name(self.operation_id)

    @property
    def request_class_name(self) -> str:
        return capitalize(self.method_name) + "Request"

    @property
    def client_method_name(self) -> str:
        return to_snake_case(self.operation_id)

    @property
    def api_class_name(self) -> str:
        return api_class_name(self.tags)

    @property
    def body_type(self) -> Optional[str]:
        """Annotation of the body argument.

        None without a request body, and also when the body declares no
        content: an empty content mapping means no body is sent.
        """
        if self.request_body is None:
            return None
        media = self.request_body.primary_content_type
        return None if media is None else media.type_name

    @property
    def body_annotation(self) -> Optional[str]:
        body_type = self.body_type
        if body_type is None or self.request_body.required:
            return body_type
        return f"Optional[{body_type}]"

    @property
    def return_type(self) -> str:
        return self.response.return_type


def uses_request_object(operation: Operation) -> bool:
    """Whether an operation's arguments are flattened into one request object.

    Flatten with more than three parameters, or with any parameter plus a
    request body. Both the contract and the implementation call this.
    """
    param_count = len(operation.parameters)
    has_body = operation.request_body is not None
    return param_count > 3 or (param_count > 0 and has_body)


class GeneratedFile(_Frozen):
    """A fully rendered artifact, relative to the output directory."""

    path: str  # posix-style, relative to the output directory
    content: str
