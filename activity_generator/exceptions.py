"""Errors raised while generating activity sources."""

from __future__ import annotations


class GeneratorError(Exception):
    """Base class for all generation failures."""


class SpecNotFoundError(GeneratorError):
    """The OpenAPI document is missing or unreadable."""


class SpecParseError(GeneratorError):
    """The OpenAPI document is structurally invalid."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)


class UnresolvedReferenceError(SpecParseError):
    """A $ref names a component schema the document does not define."""

    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"Reference to undefined component schema: {ref}", path=ref)


class ArtifactWriteError(GeneratorError):
    """An output directory or generated file could not be written."""
