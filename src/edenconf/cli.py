"""Typer-powered command line interface for ``edenconf``.

The CLI wraps the library for operators: convert exported listing field
values into Eden per-game INI files, inspect the baseline configuration and
field catalogue, and recover field values from existing INI files.
"""
from __future__ import annotations

import json
import textwrap
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import AppConfig, ConfigError, load_config
from .defaults import get_default_config
from .exit_codes import ExitCode
from .generator import ConfigGenerationError, GeneratedConfig, generate_listing_config
from .logging import OperationScope, StructuredLogger
from .mapping import FIELD_ALIASES, FIELD_MAPPINGS, INFORMATIONAL_FIELDS
from .models import Config, ConversionInput, InputError, coerce_field_values
from .parser import IniParseError, extract_custom_field_values, parse_ini
from .serializer import serialize

console = Console()

CONFIG_FILE_OPTION = typer.Option(
    None,
    "--config-file",
    dir_okay=False,
    help="Override the path to edenconf's YAML config file.",
)

app = typer.Typer(
    add_completion=False,
    help=textwrap.dedent(
        """
        Eden emulator per-game configuration converter.

        Turns listing custom field values into the INI files Eden loads for a
        single game, and reads existing files back into field values.
        """
    ).strip(),
)
config_app = typer.Typer(help="Inspect edenconf's own settings.")
app.add_typer(config_app, name="config")


@dataclass
class RuntimeContext:
    """Aggregated runtime objects shared by commands."""

    config: AppConfig
    logger: StructuredLogger


def _ensure_runtime(ctx: typer.Context, config_file: Path | None) -> RuntimeContext:
    runtime = ctx.obj
    if isinstance(runtime, RuntimeContext):
        return runtime

    try:
        config = load_config(config_file=config_file)
    except ConfigError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=int(ExitCode.VALIDATION)) from exc
    logger = StructuredLogger(
        config.logs_dir,
        enabled=config.logging.enabled,
        level=config.logging.level,
    )
    runtime = RuntimeContext(config=config, logger=logger)
    ctx.obj = runtime
    return runtime


def _get_runtime(ctx: typer.Context) -> RuntimeContext:
    runtime = ctx.obj
    if isinstance(runtime, RuntimeContext):
        return runtime
    return _ensure_runtime(ctx, None)


@app.callback(invoke_without_command=True)
def _root(  # noqa: D401 - Typer displays help for us, docstring optional.
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show the edenconf version and exit.",
    ),
    config_file: Path | None = CONFIG_FILE_OPTION,
) -> None:
    """Entry point callback invoked for every CLI execution."""
    if version:
        runtime = _ensure_runtime(ctx, config_file)
        with runtime.logger.operation(
            "root --version",
            args={"version": True},
            target={"kind": "meta", "scope": "version"},
        ) as op:
            console.print(f"edenconf {__version__}")
            op.success("Reported CLI version.", changed=0)
        raise typer.Exit(code=0)

    _ensure_runtime(ctx, config_file)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(code=0)


def _command_error(
    op: OperationScope,
    message: str,
    *,
    rc: int = int(ExitCode.VALIDATION),
    errors: Sequence[str] | None = None,
) -> NoReturn:
    """Emit a structured error and terminate the command."""
    console.print(f"[red]{message}[/red]")
    op.error(message, errors=list(errors or [message]), rc=rc)
    raise typer.Exit(code=rc)


def _count_overrides(config: Config) -> int:
    return sum(
        1 for settings in config.values() for setting in settings.values() if setting.is_override
    )


def _load_conversion_input(
    op: OperationScope,
    input_path: Path,
    *,
    listing_id: str | None,
    game_id: str | None,
) -> ConversionInput:
    try:
        payload = json.loads(input_path.read_text(encoding="utf-8"))
    except OSError as exc:
        _command_error(
            op,
            f"Unable to read {input_path}: {exc}",
            rc=int(ExitCode.ENVIRONMENT),
        )
    except ValueError as exc:
        _command_error(op, f"{input_path} is not valid JSON: {exc}")

    try:
        if isinstance(payload, Mapping):
            source = ConversionInput.from_mapping(payload)
        else:
            source = ConversionInput(
                listing_id="",
                game_id="",
                custom_field_values=coerce_field_values(payload),
            )
    except InputError as exc:
        _command_error(op, str(exc))

    return ConversionInput(
        listing_id=listing_id or source.listing_id or input_path.stem,
        game_id=game_id or source.game_id,
        custom_field_values=source.custom_field_values,
    )


@app.command("convert")
def convert_command(
    ctx: typer.Context,
    input_path: Path = typer.Argument(
        ...,
        metavar="INPUT",
        dir_okay=False,
        help="JSON file with custom field values or a {listingId, gameId, customFieldValues} object.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        dir_okay=False,
        help="Write the INI file here instead of the configured output directory.",
    ),
    to_stdout: bool = typer.Option(
        False,
        "--stdout",
        help="Print the INI content instead of writing a file.",
    ),
    listing_id: str | None = typer.Option(
        None,
        "--listing-id",
        help="Listing identifier used in the file name.",
    ),
    game_id: str | None = typer.Option(
        None,
        "--game-id",
        help="Game identifier recorded with the conversion.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit the {type, filename, content} envelope as JSON.",
    ),
) -> None:
    """Convert listing custom field values into an Eden per-game INI file."""
    runtime = _get_runtime(ctx)
    config = runtime.config
    args = {
        "input": str(input_path),
        "output": str(output) if output else None,
        "stdout": to_stdout,
        "listing_id": listing_id,
        "game_id": game_id,
        "json": json_output,
    }

    with runtime.logger.operation(
        "convert",
        args=args,
        target={"kind": "listing", "input": str(input_path)},
    ) as op:
        if to_stdout and json_output:
            _command_error(op, "Cannot combine --stdout and --json.")

        source = _load_conversion_input(
            op, input_path, listing_id=listing_id, game_id=game_id
        )
        op.add_step("input.load", detail=f"{len(source.custom_field_values)} field values")

        try:
            generated: GeneratedConfig = generate_listing_config(
                source.listing_id,
                source.game_id,
                source.custom_field_values,
                emulator_name=config.emulator_name,
                filename_template=config.filename_template,
                driver_base_path=config.driver_base_path,
            )
        except ConfigGenerationError as exc:
            _command_error(op, str(exc))

        overrides = _count_overrides(generated.config)
        op.add_step("config.convert", detail=f"{overrides} overrides")
        context = {
            "listing_id": source.listing_id,
            "filename": generated.filename,
            "overrides": overrides,
        }

        if json_output:
            console.print_json(data=generated.to_dict())
            op.success("Rendered configuration as JSON.", changed=0, context=context)
            return

        if to_stdout:
            typer.echo(generated.content)
            op.success("Printed configuration.", changed=0, context=context)
            return

        destination = output or (config.output_dir / generated.filename)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_text(generated.content + "\n", encoding="utf-8")
        except OSError as exc:
            _command_error(
                op,
                f"Unable to write {destination}: {exc}",
                rc=int(ExitCode.ENVIRONMENT),
            )
        op.add_step("config.write", detail=str(destination))

        console.print(
            f"[green]Wrote[/green] {destination} ({overrides} per-game overrides)."
        )
        op.success(
            "Wrote Eden configuration.",
            changed=1,
            context={**context, "path": str(destination)},
        )


@app.command("defaults")
def defaults_command(ctx: typer.Context) -> None:
    """Print the baseline configuration as an Eden INI document."""
    runtime = _get_runtime(ctx)
    with runtime.logger.operation("defaults", target={"kind": "defaults"}) as op:
        typer.echo(serialize(get_default_config()))
        op.success("Printed default configuration.", changed=0)


@app.command("fields")
def fields_command(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit the field catalogue as JSON instead of a table.",
    ),
) -> None:
    """List the custom fields understood by the converter."""
    runtime = _get_runtime(ctx)
    entries = [
        {
            "field": name,
            "section": mapping.section,
            "key": mapping.key,
            "kind": mapping.kind,
            "alias_of": FIELD_ALIASES.get(name),
        }
        for name, mapping in FIELD_MAPPINGS.items()
    ]
    informational = sorted(INFORMATIONAL_FIELDS)

    with runtime.logger.operation(
        "fields",
        args={"json": json_output},
        target={"kind": "catalogue"},
    ) as op:
        if json_output:
            console.print_json(data={"fields": entries, "informational": informational})
            op.success("Rendered field catalogue as JSON.", changed=0)
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Field", style="bold")
        table.add_column("Section")
        table.add_column("Key")
        table.add_column("Kind")
        for entry in entries:
            field_label = str(entry["field"])
            if entry["alias_of"]:
                field_label += f" (alias of {entry['alias_of']})"
            table.add_row(
                field_label,
                str(entry["section"]),
                str(entry["key"]),
                str(entry["kind"]),
            )
        console.print(table)
        console.print(f"Informational only: {', '.join(informational)}")
        op.success("Rendered field catalogue.", changed=0)


@app.command("import")
def import_command(
    ctx: typer.Context,
    ini_file: Path = typer.Argument(
        ...,
        metavar="INI_FILE",
        dir_okay=False,
        help="Eden per-game INI file to read.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit recovered field values as JSON instead of a table.",
    ),
) -> None:
    """Recover listing custom field values from an Eden INI file."""
    runtime = _get_runtime(ctx)

    with runtime.logger.operation(
        "import",
        args={"ini_file": str(ini_file), "json": json_output},
        target={"kind": "ini", "path": str(ini_file)},
    ) as op:
        try:
            text = ini_file.read_text(encoding="utf-8")
        except OSError as exc:
            _command_error(
                op,
                f"Unable to read {ini_file}: {exc}",
                rc=int(ExitCode.ENVIRONMENT),
            )
        try:
            config = parse_ini(text)
        except IniParseError as exc:
            _command_error(op, str(exc))

        values = extract_custom_field_values(config)
        op.add_step("ini.parse", detail=f"{len(values)} field values")

        if json_output:
            console.print_json(data={"custom_field_values": values})
            op.success("Rendered field values as JSON.", changed=0)
            return

        if not values:
            console.print("No per-game overrides found.")
            op.success("No per-game overrides found.", changed=0)
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Field", style="bold")
        table.add_column("Value")
        for name, value in values.items():
            table.add_row(name, json.dumps(value))
        console.print(table)
        op.success("Rendered field values.", changed=0)


@config_app.command("show")
def config_show(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit configuration as JSON instead of a table.",
    ),
) -> None:
    """Display the effective configuration after merges."""
    runtime = _get_runtime(ctx)
    data = runtime.config.to_dict()

    with runtime.logger.operation(
        "config show",
        args={"json": json_output},
        target={"kind": "config"},
    ) as op:
        if json_output:
            console.print_json(data=data)
            op.success("Rendered configuration as JSON.", changed=0)
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Key", style="bold")
        table.add_column("Value")

        for key, value in data.items():
            if isinstance(value, dict):
                rendered = json.dumps(value, indent=2, sort_keys=True)
            else:
                rendered = str(value)
            table.add_row(key, rendered)

        console.print(table)
        op.success("Rendered configuration table.", changed=0)


__all__ = ["app"]
