"""Sync command: refresh the local cache from the server."""

from typing import Annotated

import typer

from todoist_cli.commands.context import get_app_context
from todoist_cli.models import ENTITY_KINDS
from todoist_cli.utils.ui.console import get_console
from todoist_cli.utils.ui.formatters import format_success

from .decorators import command_wrapper


@command_wrapper
async def sync(
    ctx: typer.Context,
    full: Annotated[
        bool,
        typer.Option("--full", help="Discard the cache and fetch everything again"),
    ] = False,
) -> None:
    """Sync cache."""
    cache = get_app_context(ctx).cache
    report = await cache.sync(full=full)

    kind = "Full sync" if report.full_sync else "Sync"
    format_success(f"{kind} complete.")
    console = get_console()
    for entity_kind in ENTITY_KINDS:
        updated = report.updated.get(entity_kind, 0)
        deleted = report.deleted.get(entity_kind, 0)
        if updated or deleted:
            console.print(f"  {entity_kind}s: {updated} updated, {deleted} deleted")
