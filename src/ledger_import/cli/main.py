#!/usr/bin/env python3
"""
Main CLI Entry Point for Ledger Import

Provides the `ledger-import` command group. Subcommands live in
``importing`` (detect, import, batches, matches) and ``review``.
"""

import logging
import os

import click

from ..core.config import Config, get_config, reload_config


def _settings(config: Config) -> list[tuple[str, object]]:
    return [
        ("Environment", config.environment.value),
        ("Data Directory", config.data_dir),
        ("Workspace Directory", config.workspace_dir),
        ("Matching Enabled", config.importing.matching_enabled),
        ("Auto-merge Threshold", config.importing.auto_merge_threshold),
        ("Chunk Size", config.importing.chunk_size),
        ("Default Currency", config.importing.default_currency),
        ("Debug Mode", config.debug),
        ("Log Level", config.log_level),
    ]


@click.group()
@click.option(
    "--config-env",
    type=click.Choice(["development", "test", "production"]),
    help="Override environment configuration",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_env: str | None, verbose: bool, debug: bool) -> None:
    """
    Ledger Import - statement CSV import and reconciliation

    Detects the export dialect of a statement file, turns its rows into
    transactions and reconciles them against what is already recorded.
    """
    if config_env:
        os.environ["LEDGER_IMPORT_ENV"] = config_env
    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"

    # Either override changes what the environment says, so the cached config is stale
    config = reload_config() if (config_env or debug) else get_config()
    if debug:
        logging.getLogger("ledger_import").setLevel(logging.DEBUG)

    ctx.obj = {"verbose": verbose, "debug": debug, "config": config}

    if verbose:
        click.echo(f"Environment: {config.environment.value}")
        click.echo(f"Data directory: {config.data_dir}")
    if debug:
        click.echo("Debug logging enabled")


@main.command()
def version() -> None:
    """Show version information."""
    from ledger_import import __version__

    click.echo(f"Ledger Import v{__version__}")


@main.command(name="config")
@click.pass_obj
def show_config(obj: dict) -> None:
    """Show current configuration."""
    click.echo("Current Configuration:")
    for label, value in _settings(obj["config"]):
        click.echo(f"  {label}: {value}")


from .importing import batches, detect, import_statement, matches  # noqa: E402
from .review import review  # noqa: E402

for command in (detect, import_statement, batches, matches, review):
    main.add_command(command)


if __name__ == "__main__":
    main()
