import json
from pathlib import Path

import click

from .cli_utils import load_spec_file, load_spec_url, reconstruct_command_line
from .errors import OpenApiGenError, SpecLoadError
from .log import configure_logging, get_logger
from .pipeline import AtomicWriter, GeneratorConfig, OpenApiGenerator, OutputKind, SchemaGenerator
from .pipeline.openapi import ClientTransformer
from .utils import identifier

logger = get_logger("cli")

GENERATION_COMMENT = "// This file was generated by openapigen. Do not edit it by hand.\n// {command}\n"


def _load_config(config_path: str | None) -> GeneratorConfig:
    if config_path is None:
        return GeneratorConfig()
    try:
        with open(config_path) as f:
            return GeneratorConfig.from_dict(json.load(f))
    except (OSError, json.JSONDecodeError, ValueError) as e:
        raise SpecLoadError(f"Cannot load config file {config_path}: {e}") from e


def _load_document(spec: str | None, url: str | None):
    return load_spec_file(spec) if spec is not None else load_spec_url(url)


def barrel_source(file_names: list[str], ext: str) -> str:
    """Build the index.ts barrel re-exporting every tag module as a namespace."""
    lines = [f'export * as Generated{identifier(file_name)}Api from "./{file_name}{ext}"' for file_name in file_names]
    return "\n".join(lines) + "\n"


def render_files(result, outdir: Path, ext: str, config: GeneratorConfig, header: str = "") -> dict[Path, str]:
    """Map every output path to its content (tag modules, shared module and barrel)."""
    files: dict[Path, str] = {}
    barrel: list[str] = []
    for tag, module in result.modules.items():
        files[outdir / f"{module.file_name}.ts"] = header + module.source
        if tag != config.common_module_name:
            barrel.append(module.file_name)
    files[outdir / "index.ts"] = header + barrel_source(barrel, ext)
    return files


@click.group()
@click.version_option(package_name="openapigen")
def openapigen():
    """Generate typed Effect clients from OpenAPI documents."""


@openapigen.command()
@click.option("--spec", "-s", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True), help="The OpenAPI spec file (JSON or YAML)")
@click.option("--url", "-u", default=None, type=str, help="URL of the OpenAPI spec")
@click.option("--name", "-n", default=None, type=str, help="The name of the generated client [default: Client]")
@click.option("--outdir", "-o", default=".", type=click.Path(file_okay=False, resolve_path=True), help="Output directory for generated files")
@click.option("--ext", "-e", default=None, type=str, help="Import extension for generated files (.js, .ts, or empty) [default: .js]")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True), help="JSON configuration file")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def sync(spec, url, name, outdir, ext, config, verbose):
    """Generate typed client from an OpenAPI spec."""
    configure_logging(verbose=verbose)
    if (spec is None) == (url is None):
        raise click.UsageError("Exactly one of --spec or --url must be given")

    try:
        generator_config = _load_config(config)

        # CLI flags override the config file
        if name is not None:
            generator_config.name = name
        if ext is not None:
            generator_config.ext = ext

        document = _load_document(spec, url)
        result = OpenApiGenerator(generator_config).generate(document)

        header = ""
        if generator_config.add_generation_comment:
            header = GENERATION_COMMENT.format(command=reconstruct_command_line(sync)) + "\n"

        files = render_files(result, Path(outdir), generator_config.ext, generator_config, header)
        writer = AtomicWriter(atomic=generator_config.output.atomic_write)
        writer.write_all(files, validate=generator_config.output.validate_before_write)
        logger.info("Generated %d modules for %d operations", len(result.modules), len(result.operations))
    except OpenApiGenError as e:
        raise click.ClickException(str(e)) from e

    for path in files:
        click.echo(f"[generated] {path.name}")


@openapigen.command()
@click.option("--name", "-n", default=None, type=str, help="Name of the root declaration [default: file stem]")
@click.option("--kind", "-k", default=None, type=click.Choice(["Schema", "Type"], case_sensitive=False), help="Emit Effect schemas or plain types [default: from config]")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.argument("output", default=None, required=False, type=click.Path(dir_okay=False, resolve_path=True))
def schema(name, kind, config, verbose, path, output):
    """Compile one JSON Schema file into declarations."""
    configure_logging(verbose=verbose)
    try:
        generator_config = _load_config(config)
        if kind is not None:
            generator_config.output_kind = OutputKind.parse(kind)
        document = load_spec_file(path)
        if name is None:
            name = identifier(Path(path).stem) or "Schema"

        generator = SchemaGenerator(generator_config)
        generator.add_schema(name, document, context=document)

        parts = []
        if generator_config.add_generation_comment:
            parts.append(GENERATION_COMMENT.format(command=reconstruct_command_line(schema)))
        if generator_config.output_kind == OutputKind.SCHEMA:
            parts.append(ClientTransformer().schema_imports())
        parts.append(generator.generate(generator_config.output_kind))
        source = "\n".join(parts) + "\n"

        if output is None:
            click.echo(source, nl=False)
            return
        writer = AtomicWriter(atomic=generator_config.output.atomic_write)
        writer.write(Path(output), source, validate=generator_config.output.validate_before_write)
        logger.info("Wrote %s", output)
    except OpenApiGenError as e:
        raise click.ClickException(str(e)) from e
