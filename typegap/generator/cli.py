"""Command-line interface for typegap code generation."""

from __future__ import annotations

import json
import logging
import os
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path

import click
from dataclasses_json import DataClassJsonMixin
from lark.exceptions import LarkError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from typegap.generator import TypeGap, load_config, parse
from typegap.generator.config import ConfigError, GeneratorConfig
from typegap.generator.parser import Metadata, ValidationError
from typegap.generator.translator import GenerationError, OutputModel

logger = logging.getLogger(__name__)


@dataclass
class DeclarationInfo(DataClassJsonMixin):
    """Summary of one emitted declaration."""

    name: str
    namespace: str
    kind: str
    members: int


@dataclass
class StubInfo(DataClassJsonMixin):
    """Summary of one service or hub."""

    name: str
    kind: str
    route: str | None
    methods: int


@dataclass
class GenerationInfo(DataClassJsonMixin):
    """Everything the generator would emit for a metadata file."""

    declarations: list[DeclarationInfo]
    stubs: list[StubInfo]


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _read_metadata(input_file: str) -> Metadata:
    with open(input_file, encoding="utf-8") as f:
        return parse(f.read())


def _generator(metadata: Metadata, config: GeneratorConfig) -> TypeGap:
    generator = TypeGap(config).add(*metadata.roots)
    for service in metadata.services:
        generator.add_service(service)
    for hub in metadata.hubs:
        generator.add_hub(hub)
    return generator


def _write_atomic(path: Path, content: str) -> None:
    """Write a file through a temporary sibling so it is never left half written."""
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except BaseException:
        os.unlink(tmp_path)
        raise


@click.group()
def cli() -> None:
    """TypeGap TypeScript declaration and client stub generator."""


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input metadata file")
@click.option("--output", "-o", "output_path", required=True, help="Output directory")
@click.option("--config", "-c", "config_file", default=None, help="JSON configuration file")
@click.option(
    "--const-enums/--runtime-enums",
    "const_enums",
    default=None,
    help="Emit const enums, or enums published on the global root at runtime",
)
@click.option("--namespace", "global_namespace", default=None, help="Wrap all declarations in one namespace")
@click.option("--promise-type", default=None, help="Promise type used for service results")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every registered type")
def gen(
    input_file: str,
    output_path: str,
    config_file: str | None,
    const_enums: bool | None,
    global_namespace: str | None,
    promise_type: str | None,
    verbose: bool,
) -> None:
    """Generate TypeScript declarations and stubs from a metadata file."""
    _setup_logging(verbose)

    try:
        config = load_config(config_file)
        if const_enums is not None:
            config.const_enums = const_enums
        if global_namespace is not None:
            config.global_namespace = global_namespace
        if promise_type is not None:
            config.promise_type = promise_type

        metadata = _read_metadata(input_file)
        generator = _generator(metadata, config)
        output = generator.build()
    except (ConfigError, ValidationError, GenerationError, LarkError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    out_dir = Path(output_path)
    out_dir.mkdir(parents=True, exist_ok=True)
    for filename, content in output.files(config).items():
        _write_atomic(out_dir / filename, content)
        logger.info("Wrote %s", out_dir / filename)


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input metadata file")
@click.option("--config", "-c", "config_file", default=None, help="JSON configuration file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, config_file: str | None, output_json: bool) -> None:
    """Display the declarations and stubs a metadata file produces."""
    _setup_logging(False)

    try:
        config = load_config(config_file)
        metadata = _read_metadata(input_file)
        generator = _generator(metadata, config)
        model, _stubs = generator.translate()
    except (ConfigError, ValidationError, GenerationError, LarkError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    generation_info = _collect_info(model, metadata)
    if output_json:
        print(json.dumps(generation_info.to_dict(), indent=2))
    else:
        _output_plain(generation_info)


def _collect_info(model: OutputModel, metadata: Metadata) -> GenerationInfo:
    converter = model.converter
    declarations = [
        DeclarationInfo(
            name=converter.declaration_name(t),
            namespace=converter.output_namespace(t),
            kind=t.kind.value,
            members=len(t.enum_members) if t.enum_members else len(t.members),
        )
        for t in model
    ]
    stubs = [
        StubInfo(name=s.name, kind="service", route=s.route_template, methods=len(s.methods))
        for s in metadata.services
    ] + [StubInfo(name=h.name, kind="hub", route=None, methods=len(h.methods)) for h in metadata.hubs]
    return GenerationInfo(declarations=declarations, stubs=stubs)


def _output_plain(generation_info: GenerationInfo) -> None:
    """Output generation info using rich text formatting."""
    console = Console()

    console.print("[bold cyan]Declarations[/bold cyan]")
    decl_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    decl_table.add_column("Name", style="white")
    decl_table.add_column("Namespace", style="dim")
    decl_table.add_column("Kind", style="yellow")
    decl_table.add_column("Members", style="green", justify="right")

    for decl in generation_info.declarations:
        decl_table.add_row(decl.name, decl.namespace, decl.kind, str(decl.members))

    console.print(decl_table)
    console.print()

    console.print("[bold cyan]Stubs[/bold cyan]")
    stub_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    stub_table.add_column("Name", style="white")
    stub_table.add_column("Kind", style="yellow")
    stub_table.add_column("Route", style="dim")
    stub_table.add_column("Methods", style="green", justify="right")

    for stub in generation_info.stubs:
        stub_table.add_row(stub.name, stub.kind, stub.route or "", str(stub.methods))

    console.print(stub_table)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
