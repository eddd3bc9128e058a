"""Main entry point for Todoist CLI."""

from typing import Annotated, Optional

import typer

from todoist_cli import __version__
from todoist_cli.commands import catalog, config, sync, tasks
from todoist_cli.commands.context import AppContext
from todoist_cli.config import ConfigManager
from todoist_cli.exceptions import TodoistCliError
from todoist_cli.utils import exit_codes
from todoist_cli.utils.logger import enable_debug_output
from todoist_cli.utils.ui.formatters import OUTPUT_FORMATS, RenderOptions, format_error

app = typer.Typer(
    name="todoist",
    help="Todoist CLI Client",
    no_args_is_help=True,
)

app.add_typer(config.app, name="config", help="Configuration management")

app.command("list", help="Show all tasks")(tasks.list_tasks)
app.command("l", hidden=True)(tasks.list_tasks)
app.command("show", help="Show task detail")(tasks.show)
app.command("completed-list", help="Show all completed tasks (only premium users)")(
    tasks.completed_list
)
app.command("cl", hidden=True)(tasks.completed_list)
app.command("add", help="Add task")(tasks.add)
app.command("a", hidden=True)(tasks.add)
app.command("quick-add", help="Add task using quick add syntax")(tasks.quick_add)
app.command("q", hidden=True)(tasks.quick_add)
app.command("modify", help="Modify task")(tasks.modify)
app.command("m", hidden=True)(tasks.modify)
app.command("close", help="Close task")(tasks.close)
app.command("c", hidden=True)(tasks.close)
app.command("delete", help="Delete task")(tasks.delete)
app.command("d", hidden=True)(tasks.delete)
app.command("labels", help="Show all labels")(catalog.labels)
app.command("projects", help="Show all projects")(catalog.projects)
app.command("karma", help="Show karma")(catalog.karma)
app.command("sync", help="Sync cache")(sync.sync)
app.command("s", hidden=True)(sync.sync)


def _version_callback(value: bool) -> None:
    if value:
        print(f"todoist version {__version__}")
        raise typer.Exit()


@app.callback()
def root(
    ctx: typer.Context,
    header: Annotated[Optional[bool], typer.Option("--header/--no-header", help="output with header")] = None,
    color: Annotated[Optional[bool], typer.Option("--color/--no-color", help="colorize output")] = None,
    csv: Annotated[bool, typer.Option("--csv", help="output in CSV format")] = False,
    output: Annotated[
        Optional[str],
        typer.Option("--output", "-o", help=f"output format ({', '.join(OUTPUT_FORMATS)})"),
    ] = None,
    debug: Annotated[bool, typer.Option("--debug", help="output logs")] = False,
    namespace: Annotated[
        bool, typer.Option("--namespace", help="display parent task like namespace")
    ] = False,
    indent: Annotated[
        bool, typer.Option("--indent", help="display children task with indent")
    ] = False,
    project_namespace: Annotated[
        bool,
        typer.Option("--project-namespace", help="display parent project like namespace"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = False,
) -> None:
    """Build the per-invocation context shared by every command."""
    if debug:
        enable_debug_output()

    app_ctx = ctx.obj if isinstance(ctx.obj, AppContext) else AppContext(ConfigManager())
    try:
        defaults = app_ctx.config_manager.config.output
    except TodoistCliError as e:
        format_error(str(e))
        raise typer.Exit(code=e.exit_code) from e

    fmt = "csv" if csv else (output or defaults.format)
    if fmt not in OUTPUT_FORMATS:
        format_error(f"unknown output format: {fmt}")
        raise typer.Exit(code=exit_codes.ERROR_INVALID_ARGS)

    app_ctx.render = RenderOptions(
        output=fmt,
        header=defaults.header if header is None else header,
        color=defaults.color if color is None else color,
        namespace=namespace,
        indent=indent,
        project_namespace=project_namespace,
    )
    ctx.obj = app_ctx


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
