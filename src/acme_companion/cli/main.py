"""Main CLI implementation using Typer."""

import logging
import os
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from acme_companion.config import ConfigManager
from acme_companion.dhparam.provisioner import validate_bits
from acme_companion.dhparam.worker import run_worker
from acme_companion.errors import CompanionError
from acme_companion.models.config import CompanionConfig
from acme_companion.preflight.runner import run_preflight, verify_environment
from acme_companion.utils.logging import setup_logging


logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="acme-companion",
    help="ACME Companion - TLS environment preparation for nginx-proxy",
    add_completion=False,
)

# Console for rich output
console = Console(soft_wrap=True)
stderr_console = Console(stderr=True, soft_wrap=True)


def _report_error(error: CompanionError):
    """Print a fatal diagnostic and its remediation hints."""
    stderr_console.print(f"[red]Error:[/red] {escape(error.message)}")
    for line in error.remediation:
        stderr_console.print(line, markup=False, highlight=False)


def _load_config(process_tag: str = "companion") -> CompanionConfig:
    """Load configuration and set up logging, exiting on invalid input."""
    try:
        config = ConfigManager().load()
    except (ValidationError, ValueError) as e:
        stderr_console.print(f"[red]Error:[/red] invalid configuration: {escape(str(e))}")
        raise typer.Exit(1) from e
    setup_logging(config.log_level, process_tag)
    return config


@app.command(
    "run",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def run_command(ctx: typer.Context):
    """Run the startup checks, then replace this process with COMMAND."""
    command = list(ctx.args)
    if not command:
        stderr_console.print("[red]Error:[/red] no command to run")
        raise typer.Exit(1)

    config = _load_config()

    # Checks only guard the companion service itself
    if command == config.start_command:
        try:
            run_preflight(config)
        except CompanionError as e:
            _report_error(e)
            raise typer.Exit(1) from e
    else:
        logger.debug(f"Skipping startup checks for {' '.join(command)}")

    os.execvp(command[0], command)


@app.command("verify")
def verify_command():
    """Check the runtime environment without provisioning anything."""
    config = _load_config()
    try:
        verify_environment(config)
    except CompanionError as e:
        _report_error(e)
        raise typer.Exit(1) from e
    console.print("[green]Environment verified[/green]")


@app.command("dhparam-worker", hidden=True)
def dhparam_worker_command(
    bits: Optional[str] = typer.Option(
        None, "--bits", "-b", help="Diffie-Hellman group size (defaults to DHPARAM_BITS)"
    ),
):
    """Generate a Diffie-Hellman group in the background and reload nginx."""
    config = _load_config("dhparam-worker")
    try:
        size = validate_bits(bits if bits is not None else config.dhparam.bits)
    except CompanionError as e:
        _report_error(e)
        raise typer.Exit(1) from e
    run_worker(config, size)


def main():
    """Main entry point for CLI."""
    app()
