"""Read-only catalog commands: labels, projects and karma."""

import typer

from todoist_cli.commands.context import get_app_context
from todoist_cli.utils.ui.formatters import render_karma, render_labels, render_projects

from .decorators import command_wrapper


@command_wrapper
async def labels(ctx: typer.Context) -> None:
    """Show all labels."""
    app_ctx = get_app_context(ctx)
    render_labels(await app_ctx.cache.get_all("label"), app_ctx.render)


@command_wrapper
async def projects(ctx: typer.Context) -> None:
    """Show all projects."""
    app_ctx = get_app_context(ctx)
    render_projects(await app_ctx.cache.get_all("project"), app_ctx.render)


@command_wrapper
async def karma(ctx: typer.Context) -> None:
    """Show karma."""
    app_ctx = get_app_context(ctx)
    render_karma(await app_ctx.cache.karma(), app_ctx.render)
