"""CLI entry point for genstatem."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import NoReturn, Optional

import click

from genstatem import __version__
from genstatem.config.settings import ORDERS, CompilerConfig, load_config
from genstatem.utils.logging import configure_logging, get_logger, get_run_id
from genstatem.utils.result import ExitCode

# Used when --in or --out is omitted
DEFAULT_INPUT = "desc.json"
DEFAULT_OUTPUT = "statemachine.py"


class Context:
    """CLI context for sharing state between commands."""

    def __init__(self, config: CompilerConfig) -> None:
        self.config = config
        self.logger = get_logger("cli")


pass_context = click.make_pass_decorator(Context)


def output_json(data: dict) -> None:
    """Output JSON to stdout."""
    click.echo(json.dumps(data, indent=2, default=str, ensure_ascii=False))


def fail(message: str, code: int, **details) -> NoReturn:
    """Report an error as JSON and exit with the given code."""
    output_json({"status": "error", "message": message, **details})
    sys.exit(code)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Path to YAML config file (default: ./genstatem.yaml if present)",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warn", "error"], case_sensitive=False),
    default=None,
    help="Logging level",
)
@click.option(
    "--log-format",
    type=click.Choice(["json", "text"], case_sensitive=False),
    default=None,
    help="Log format",
)
@click.version_option(version=__version__)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[Path],
    log_level: Optional[str],
    log_format: Optional[str],
) -> None:
    """
    genstatem - compile state machine descriptions into Python.

    Reads a declarative description of states, events and transitions and
    generates a thread-safe, callback-driven state machine module.
    """
    loaded = load_config(config_path)
    if loaded.is_err():
        fail(str(loaded.unwrap_err()), ExitCode.CONFIG_INVALID)

    config = loaded.unwrap().with_overrides(
        log_level=log_level.lower() if log_level else None,
        log_format=log_format.lower() if log_format else None,
    )
    configure_logging(level=config.logging.level, format_type=config.logging.format)
    get_run_id()

    ctx.obj = Context(config=config)


@cli.command("compile")
@click.option(
    "--in",
    "input_path",
    type=click.Path(path_type=Path),
    default=DEFAULT_INPUT,
    show_default=True,
    help="Path to the description (.json, .yaml or .yml)",
)
@click.option(
    "--out",
    "output_path",
    type=click.Path(path_type=Path),
    default=DEFAULT_OUTPUT,
    show_default=True,
    help="Path of the module to generate",
)
@click.option(
    "--package",
    default=None,
    help="Package target recorded in the module (default: from the description)",
)
@click.option(
    "--callbacks",
    default=None,
    help="Module to import free-function callbacks from",
)
@click.option(
    "--order",
    type=click.Choice(ORDERS),
    default=None,
    help="Emit states and events sorted by name or in input order",
)
@click.option(
    "--check/--no-check",
    "check_output",
    default=None,
    help="Syntax-check the generated module before writing it",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Print the generated module instead of writing it",
)
@pass_context
def compile_command(
    ctx: Context,
    input_path: Path,
    output_path: Path,
    package: Optional[str],
    callbacks: Optional[str],
    order: Optional[str],
    check_output: Optional[bool],
    dry_run: bool,
) -> None:
    """Compile a description into a state machine module."""
    from genstatem.compiler import compile_file
    from genstatem.pipeline.guards import run_guards

    config = ctx.config.with_overrides(order=order, check_output=check_output)
    destination = None if dry_run else output_path

    ctx.logger.info(
        "compile_command_started",
        input=str(input_path),
        output=str(destination) if destination else "stdout",
        order=config.generator.order,
    )

    guards = run_guards(input_path, destination)
    if guards.is_err():
        error = guards.unwrap_err()
        fail(str(error), error.code)

    result = compile_file(input_path, destination, config, package, callbacks)
    if result.is_err():
        error = result.unwrap_err()
        output_json({"status": "error", **error.to_dict()})
        sys.exit(error.code)

    output = result.unwrap()

    if dry_run:
        click.echo(output.source, nl=False)
        return

    output_json({
        "status": "success",
        "message": f"Compiled {output.validated.name} to {output_path}",
        **output.to_dict(),
    })


@cli.command()
@click.option(
    "--in",
    "input_path",
    type=click.Path(path_type=Path),
    default=DEFAULT_INPUT,
    show_default=True,
    help="Path to the description",
)
@pass_context
def check(ctx: Context, input_path: Path) -> None:
    """Validate a description without generating code."""
    from genstatem.compiler import validate
    from genstatem.loader import load_description
    from genstatem.pipeline.guards import run_guards

    guards = run_guards(input_path)
    if guards.is_err():
        error = guards.unwrap_err()
        fail(str(error), error.code)

    loaded = load_description(input_path)
    if loaded.is_err():
        fail(str(loaded.unwrap_err()), ExitCode.INPUT_INVALID)

    result = validate(loaded.unwrap())
    if result.is_err():
        diagnostics = result.unwrap_err()
        fail(
            f"Found {len(diagnostics)} problem(s) in {input_path}",
            ExitCode.VALIDATION_FAILED,
            diagnostics=[d.to_dict() for d in diagnostics],
        )

    validated = result.unwrap()
    output_json({
        "status": "success",
        "message": f"{validated.name} is valid",
        "states": len(validated.state_constants),
        "events": len(validated.event_constants),
    })


@cli.command()
@click.option(
    "--in",
    "input_path",
    type=click.Path(path_type=Path),
    default=DEFAULT_INPUT,
    show_default=True,
    help="Path to the description",
)
@pass_context
def show(ctx: Context, input_path: Path) -> None:
    """Show the normalized description and its derived constant names."""
    from genstatem.compiler import validate
    from genstatem.loader import load_description

    loaded = load_description(input_path)
    if loaded.is_err():
        fail(str(loaded.unwrap_err()), ExitCode.INPUT_INVALID)

    description = loaded.unwrap()
    result = validate(description)
    if result.is_err():
        fail(
            f"{input_path} is invalid",
            ExitCode.VALIDATION_FAILED,
            description=description.to_dict(),
            diagnostics=[d.to_dict() for d in result.unwrap_err()],
        )

    output_json(result.unwrap().to_dict())


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except Exception as e:
        logger = get_logger("cli")
        logger.error("cli_error", error=str(e))
        sys.exit(ExitCode.CLI_CRASH)


if __name__ == "__main__":
    main()
