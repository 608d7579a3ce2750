"""Generation settings supplied by the CLI or a build tool."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

_DOTTED_NAME = re.compile(r"^[A-Za-z_]\w*(\.[A-Za-z_]\w*)*$")
_CLASS_NAME = re.compile(r"^[A-Za-z_]\w*$")


class GeneratorConfig(BaseModel):
    """Inputs of one generation run."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    spec_file: Path
    output_dir: Path = Path("generated")
    package: str = "generated_activities"
    activity_name: str = "ApiActivity"
    client_package: str = "openapi_client"
    model_package: Optional[str] = None  # defaults to <client_package>.models
    generate_implementation: bool = True
    generate_models: bool = True
    strict_refs: bool = True

    @field_validator("package", "client_package", "model_package")
    @classmethod
    def _dotted_name(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not _DOTTED_NAME.match(value):
            raise ValueError(f"not a dotted Python module name: {value!r}")
        return value

    @field_validator("activity_name")
    @classmethod
    def _class_name(cls, value: str) -> str:
        if not _CLASS_NAME.match(value):
            raise ValueError(f"not a Python class name: {value!r}")
        return value

    @property
    def resolved_model_package(self) -> str:
        """Namespace that $ref types resolve into."""
        return self.model_package or f"{self.client_package}.models"
