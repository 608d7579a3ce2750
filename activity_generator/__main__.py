"""Entry point: python -m activity_generator SPEC_FILE

Reads an OpenAPI document and writes the activity contract, its
implementation and the data models under the output directory.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from pydantic import ValidationError

from .config import GeneratorConfig
from .exceptions import GeneratorError
from .pipeline import generate_sources


@click.command()
@click.argument("spec_file", type=click.Path(path_type=Path), envvar="ACTIVITYGEN_SPEC")
@click.option("-o", "--output", "output_dir", default="generated", show_default=True, envvar="ACTIVITYGEN_OUTPUT_DIR", type=click.Path(path_type=Path), help="Output directory for generated sources.")
@click.option("--package", default="generated_activities", show_default=True, envvar="ACTIVITYGEN_PACKAGE", help="Package for the generated modules.")
@click.option("--activity-name", default="ApiActivity", show_default=True, envvar="ACTIVITYGEN_ACTIVITY_NAME", help="Name of the generated activity class.")
@click.option("--client-package", default="openapi_client", show_default=True, envvar="ACTIVITYGEN_CLIENT_PACKAGE", help="Package of the OpenAPI Generator client.")
@click.option("--model-package", default=None, envvar="ACTIVITYGEN_MODEL_PACKAGE", help="Package that $ref types resolve into. [default: <client-package>.models]")
@click.option("--implementation/--no-implementation", default=True, show_default=True, envvar="ACTIVITYGEN_IMPLEMENTATION", help="Generate the implementation class.")
@click.option("--models/--no-models", default=True, show_default=True, envvar="ACTIVITYGEN_MODELS", help="Generate dataclass models.")
@click.option("--lenient-refs", is_flag=True, envvar="ACTIVITYGEN_LENIENT_REFS", help="Accept $refs to undefined component schemas.")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output.")
def main(
    spec_file: Path,
    output_dir: Path,
    package: str,
    activity_name: str,
    client_package: str,
    model_package: str | None,
    implementation: bool,
    models: bool,
    lenient_refs: bool,
    verbose: bool,
) -> None:
    """Generate Temporal activities from an OpenAPI document."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = GeneratorConfig(
            spec_file=spec_file,
            output_dir=output_dir,
            package=package,
            activity_name=activity_name,
            client_package=client_package,
            model_package=model_package,
            generate_implementation=implementation,
            generate_models=models,
            strict_refs=not lenient_refs,
        )
    except ValidationError as e:
        raise click.BadParameter(str(e)) from e

    click.echo(f"Parsing {spec_file}...")
    try:
        result = generate_sources(config)
    except GeneratorError as e:
        raise click.ClickException(str(e)) from e

    for path in result.files:
        click.echo(f"  Created {path}")
    click.echo(
        f"Generated {result.operation_count} operations and {result.model_count} models"
        f" in {output_dir}"
    )


if __name__ == "__main__":
    main()
