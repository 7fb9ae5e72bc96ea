#!/usr/bin/env python3
"""
Review CLI - approve or reject flagged matches.
"""

import click

from ..batches import ReviewOutcome, approve_matches, reject_matches
from .importing import open_workspace, user_option, workspace_option


def _report(outcomes: list[ReviewOutcome], verb: str) -> None:
    failed = 0
    for outcome in outcomes:
        if outcome.success:
            fields = ", ".join(outcome.merged_fields) if outcome.merged_fields else "no field changes"
            click.echo(f"✅ {verb} {outcome.match_id}" + (f" ({fields})" if verb == "Approved" else ""))
        else:
            failed += 1
            click.echo(f"❌ {outcome.match_id}: {outcome.error}", err=True)
    if failed:
        raise click.ClickException(f"{failed} of {len(outcomes)} matches could not be {verb.lower()}")


@click.group()
def review() -> None:
    """Review flagged matches."""
    pass


@review.command()
@click.argument("match_ids", nargs=-1, required=True)
@user_option
@workspace_option
@click.pass_context
def approve(ctx: click.Context, match_ids: tuple, user_id: str, workspace: str | None) -> None:
    """Approve flagged matches and merge their statement data."""
    ws = open_workspace(ctx.obj["config"], workspace)
    outcomes = approve_matches(match_ids, user_id, transactions=ws.transactions, imports=ws.imports)
    ws.save()
    _report(outcomes, "Approved")


@review.command()
@click.argument("match_ids", nargs=-1, required=True)
@user_option
@workspace_option
@click.pass_context
def reject(ctx: click.Context, match_ids: tuple, user_id: str, workspace: str | None) -> None:
    """Reject flagged matches; transactions stay as they are."""
    ws = open_workspace(ctx.obj["config"], workspace)
    outcomes = reject_matches(match_ids, user_id, imports=ws.imports)
    ws.save()
    _report(outcomes, "Rejected")
