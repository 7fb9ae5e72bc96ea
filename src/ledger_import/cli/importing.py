#!/usr/bin/env python3
"""
Import CLI - statement detection, import and batch history commands.
"""

from pathlib import Path

import click

from ..batches import ImportOptions, MatchStatus, run_import_batch
from ..core.config import Config
from ..core.currency import format_cents
from ..formats import (
    FORMAT_INFO,
    GENERIC_FIELDS,
    ImportInputError,
    ParseContext,
    StatementFormat,
    parse_rows,
    read_statement_file,
)
from ..stores import JsonWorkspace


def parse_pairs(values: tuple[str, ...], option: str) -> dict[str, str]:
    """Turn repeated KEY=VALUE options into a dict."""
    pairs = {}
    for value in values:
        key, sep, target = value.partition("=")
        if not sep or not key.strip() or not target.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got {value!r}", param_hint=option)
        pairs[key.strip()] = target.strip()
    return pairs


def parse_column_map(values: tuple[str, ...]) -> dict[int, str]:
    mapping = {}
    for index, target in parse_pairs(values, "--map").items():
        if not index.isdigit():
            raise click.BadParameter(f"column index must be a number, got {index!r}", param_hint="--map")
        mapping[int(index)] = target
    return mapping


def open_workspace(config: Config, workspace: str | None) -> JsonWorkspace:
    return JsonWorkspace.load(Path(workspace) if workspace else config.workspace_dir)


workspace_option = click.option("--workspace", help="Override workspace directory")
user_option = click.option("--user", "user_id", required=True, help="Owner of the imported transactions")


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def detect(file: str) -> None:
    """Show the detected format of a statement file."""
    try:
        statement = read_statement_file(file)
    except ImportInputError as e:
        raise click.ClickException(str(e)) from e

    info = FORMAT_INFO[statement.format]
    click.echo(f"Format: {statement.format.value} ({info['name']})")
    click.echo(f"  {info['description']}")
    click.echo(f"Rows: {statement.row_count}")
    click.echo(f"Columns: {', '.join(statement.header)}")
    if statement.format == StatementFormat.GENERIC:
        click.echo("Map columns with --map INDEX=FIELD, fields: " + ", ".join(GENERIC_FIELDS))
        for index, column in enumerate(statement.header):
            click.echo(f"  {index}: {column}")


@click.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@user_option
@click.option("--map", "column_map", multiple=True, help="Generic column mapping INDEX=FIELD (repeatable)")
@click.option("--project", "projects", multiple=True, help="Amazon PO number to project PO=NAME (repeatable)")
@click.option("--no-matching", is_flag=True, help="Create every row as a new transaction")
@click.option("--threshold", type=click.IntRange(1, 100), help="Auto-merge confidence threshold")
@workspace_option
@click.pass_context
def import_statement(
    ctx: click.Context,
    file: str,
    user_id: str,
    column_map: tuple,
    projects: tuple,
    no_matching: bool,
    threshold: int | None,
    workspace: str | None,
) -> None:
    """
    Import a statement file and reconcile it against stored transactions.

    Examples:
      ledger-import import chase.csv --user karl
      ledger-import import bank.csv --user karl --map 0=issued_at --map 1=name --map 2=total
    """
    config: Config = ctx.obj["config"]
    verbose = ctx.obj.get("verbose", False)
    ws = open_workspace(config, workspace)

    try:
        statement = read_statement_file(file)
        mapping = parse_column_map(column_map)
        context = ParseContext(
            user_id=user_id,
            category_resolver=ws.categories,
            project_resolver=ws.projects,
            column_mapping=mapping,
            project_mappings=parse_pairs(projects, "--project"),
            currency_code=config.importing.default_currency,
        )
        candidates = parse_rows(statement.format, statement.header, statement.rows, context)
    except ImportInputError as e:
        raise click.ClickException(str(e)) from e

    overrides = {
        "filename": statement.filename,
        "content_hash": statement.content_hash,
        "format": statement.format,
        "column_mapping": mapping,
        "original_row_count": statement.row_count,
    }
    if no_matching:
        overrides["matching_enabled"] = False
    if threshold is not None:
        overrides["auto_merge_threshold"] = threshold
    options = ImportOptions.from_config(config, **overrides)

    if verbose:
        click.echo(f"Format: {statement.format.value}")
        click.echo(f"Rows: {statement.row_count} -> {len(candidates)} transactions")
        click.echo(f"Matching: {'enabled' if options.matching_enabled else 'disabled'}")

    try:
        result = run_import_batch(
            user_id,
            candidates,
            options,
            transactions=ws.transactions,
            imports=ws.imports,
            progress=ws.progress,
        )
    except Exception as e:
        ws.save()
        click.echo(f"❌ Import failed: {e}", err=True)
        raise click.ClickException(str(e)) from e

    ws.save()

    if result.duplicate_of:
        click.echo(f"⚠️  Same file content was already imported in batch {result.duplicate_of}")
    click.echo(f"✅ Batch {result.batch_id}: {result.total_rows} rows")
    click.echo(f"   Matched: {result.matched}")
    click.echo(f"   Created: {result.created}")
    click.echo(f"   Skipped: {result.skipped}")
    click.echo(f"   Errors:  {result.errors}")


@click.command()
@user_option
@workspace_option
@click.pass_context
def batches(ctx: click.Context, user_id: str, workspace: str | None) -> None:
    """List import batches."""
    ws = open_workspace(ctx.obj["config"], workspace)
    found = ws.imports.list_batches(user_id)
    if not found:
        click.echo("No import batches")
        return

    for batch in found:
        summary = batch.summary()
        click.echo(
            f"{batch.id}  {batch.created_at:%Y-%m-%d %H:%M}  {batch.status.value:<22} {batch.filename}  "
            f"matched={summary['matched_count']} created={summary['created_count']} "
            f"skipped={summary['skipped_count']} errors={summary['error_count']}"
        )
        if batch.metadata.get("duplicate_warning"):
            click.echo(f"    duplicate of {batch.metadata.get('previous_batch_id')}")


@click.command()
@click.argument("batch_id")
@user_option
@click.option("--flagged", is_flag=True, help="Only matches awaiting review")
@workspace_option
@click.pass_context
def matches(ctx: click.Context, batch_id: str, user_id: str, flagged: bool, workspace: str | None) -> None:
    """List the matches recorded for a batch."""
    ws = open_workspace(ctx.obj["config"], workspace)
    if ws.imports.get_batch(batch_id, user_id) is None:
        raise click.ClickException(f"Batch not found: {batch_id}")

    found = ws.imports.list_matches(batch_id, MatchStatus.FLAGGED if flagged else None)
    if not found:
        click.echo("No matches")
        return

    for match in found:
        amount = format_cents(match.matched_amount) if match.matched_amount is not None else "-"
        click.echo(
            f"{match.id}  {match.status.value:<17} {match.confidence:>3}%  {amount}  "
            f"transaction={match.transaction_id} days={match.days_difference}"
        )
