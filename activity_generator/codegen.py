"""Render templates and write generated output.

Generators call render() to turn a context into source text; the pipeline
hands the resulting GeneratedFile objects to write_artifacts().
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Iterable, NamedTuple

import jinja2

from .exceptions import ArtifactWriteError
from .model import GeneratedFile, Operation, uses_request_object
from .type_mapper import ANY

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

_STDLIB_MODULES = frozenset({"datetime", "uuid"})
_TYPING_NAMES = frozenset({"Any", "Optional"})
_TOKEN = re.compile(r"[A-Za-z_][\w.]*")


def _docstring_text(value: str) -> str:
    """Escape text so it can sit inside a triple-quoted docstring."""
    value = value.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if value.endswith('"'):
        value = value[:-1] + '\\"'
    return value


def _environment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    env.filters["pyrepr"] = repr
    env.filters["doc"] = _docstring_text
    return env


_ENV = _environment()


def render(template_name: str, **context: Any) -> str:
    """Render one template with the given context."""
    return _ENV.get_template(template_name).render(**context)


class Imports(NamedTuple):
    stdlib: list[str]
    typing: list[str]
    packages: list[str]


def collect_imports(type_names: Iterable[str], local_module: str | None = None) -> Imports:
    """Work out which imports the given annotations need."""
    stdlib: set[str] = set()
    typing_names: set[str] = set()
    packages: set[str] = set()
    for type_name in type_names:
        for token in _TOKEN.findall(type_name):
            if "." in token:
                module = token.rsplit(".", 1)[0]
                if module in _STDLIB_MODULES:
                    stdlib.add(module)
                elif module != local_module:
                    packages.add(module)
            elif token in _TYPING_NAMES:
                typing_names.add(token)
    return Imports(sorted(stdlib), sorted(typing_names), sorted(packages))


def one_line(text: str) -> str:
    """Collapse whitespace so text fits on a single docstring line."""
    return " ".join(text.split())


def localize(
    type_name: str,
    module: str,
    local_names: Iterable[str],
    aliases: dict[str, str] | None = None,
) -> str:
    """Rewrite names qualified by module for the module being rendered.

    Names the module defines lose the prefix. Any other name becomes its
    alias when one is given, else Any.
    """
    local_names = set(local_names)
    aliases = aliases or {}
    pattern = re.compile(r"(?<![\w.])" + re.escape(module + ".") + r"(\w+)")

    def local(match: re.Match) -> str:
        name = match.group(1)
        if name in local_names:
            return name
        return aliases.get(name, ANY)

    # aliases may name other models in the same module
    once = pattern.sub(local, type_name)
    return pattern.sub(lambda m: m.group(1) if m.group(1) in local_names else ANY, once)


def method_parameters(operation: Operation) -> list[tuple[str, str]]:
    """(name, annotation) pairs of an activity method, excluding self.

    Shared by the contract and the implementation so both declare the same
    surface for every operation.
    """
    if uses_request_object(operation):
        return [("request", operation.request_class_name)]

    params = [(p.field_name, p.annotation) for p in operation.parameters]
    if operation.body_type is not None:
        params.append(("body", operation.body_annotation))
    return params


def signature(operation: Operation) -> str:
    args = ["self"] + [f"{name}: {annotation}" for name, annotation in method_parameters(operation)]
    return ", ".join(args)


def package_path(package: str) -> str:
    """Relative directory of a dotted package, e.g. petstore.activities -> petstore/activities."""
    return package.replace(".", "/")


def write_artifacts(output_dir: Path, files: Iterable[GeneratedFile]) -> list[Path]:
    """Write every artifact below output_dir, stopping at the first failure."""
    output_dir = Path(output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArtifactWriteError(f"Cannot create output directory {output_dir}: {e}") from e

    written: list[Path] = []
    for generated in files:
        output_path = output_dir / generated.path
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(generated.content, encoding="utf-8")
        except OSError as e:
            raise ArtifactWriteError(f"Failed to write {output_path}: {e}") from e
        logger.info("Generated %s", output_path)
        written.append(output_path)
    return written
