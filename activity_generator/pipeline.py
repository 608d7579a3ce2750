"""End-to-end generation run.

load document -> parse operations -> render artifacts -> write files.
Nothing is written unless parsing and rendering succeed for the whole
document.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from .codegen import package_path, render, write_artifacts
from .config import GeneratorConfig
from .contract_generator import generate_contract
from .implementation_generator import generate_implementation
from .loader import get_schemas, load_spec
from .model import GeneratedFile, Operation, uses_request_object
from .models_generator import count_models, generate_models, generate_request_types
from .naming import module_name
from .parser import parse_operations
from .type_mapper import TypeMapper

logger = logging.getLogger(__name__)


class GenerationResult(BaseModel):
    """What a run produced, reported back to the caller."""

    files: list[Path]
    operation_count: int
    model_count: int


def _title(spec: dict[str, Any]) -> str:
    info = spec.get("info") or {}
    title = str(info.get("title") or "the OpenAPI document")
    version = info.get("version")
    return f"{title} {version}" if version else title


def build_artifacts(
    spec: dict[str, Any],
    config: GeneratorConfig,
) -> tuple[list[Operation], list[GeneratedFile], int]:
    """Parse the document and render every artifact without touching disk."""
    type_mapper = TypeMapper(get_schemas(spec), config.resolved_model_package, config.strict_refs)
    operations = parse_operations(spec, type_mapper)
    title = _title(spec)

    files: list[GeneratedFile] = []
    model_count = 0

    models = None
    if config.generate_models:
        models = generate_models(type_mapper, config.package, title)
        if models is not None:
            model_count = count_models(type_mapper)
            files.append(models)

    request_types = generate_request_types(operations, type_mapper, config.package, title)
    if request_types is not None:
        files.append(request_types)

    files.append(generate_contract(operations, config.package, config.activity_name, title))

    if config.generate_implementation:
        files.append(generate_implementation(
            operations, config.package, config.activity_name, config.client_package, title,
        ))

    init = render(
        "package_init.py.j2",
        title=title,
        activity_name=config.activity_name,
        contract_module=module_name(config.activity_name),
        client_package=config.client_package,
        implementation=config.generate_implementation,
        models=models is not None,
        request_types=any(uses_request_object(op) for op in operations),
    )
    files.insert(0, GeneratedFile(path=f"{package_path(config.package)}/__init__.py", content=init))
    return operations, files, model_count


def generate_sources(config: GeneratorConfig) -> GenerationResult:
    """Generate activity sources for one OpenAPI document."""
    logger.info("OpenAPI spec: %s", config.spec_file)
    logger.info("Output directory: %s", config.output_dir)

    spec = load_spec(config.spec_file)
    operations, files, model_count = build_artifacts(spec, config)
    written = write_artifacts(config.output_dir, files)

    logger.info(
        "Generated %d files (%d operations, %d models)",
        len(written), len(operations), model_count,
    )
    return GenerationResult(files=written, operation_count=len(operations), model_count=model_count)
