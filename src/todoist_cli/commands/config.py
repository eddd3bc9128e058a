"""Configuration management commands."""

import json
from typing import Annotated, Optional

import typer

from todoist_cli.commands.context import get_app_context
from todoist_cli.exceptions import ConfigError
from todoist_cli.utils.ui.console import get_console
from todoist_cli.utils.ui.formatters import format_success

from .decorators import command_wrapper

app = typer.Typer(help="Configuration management commands", no_args_is_help=True)


@app.command("view")
@command_wrapper
def view_config(ctx: typer.Context) -> None:
    """View current configuration."""
    config_manager = get_app_context(ctx).config_manager
    print(json.dumps(config_manager.config.model_dump(), indent=2))


@app.command("get")
@command_wrapper
def get_config(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Configuration key (e.g., api.timeout)")],
) -> None:
    """Get a configuration value."""
    config_manager = get_app_context(ctx).config_manager
    value = config_manager.get(key)
    if value is None:
        raise ConfigError(f"Configuration key '{key}' not found")
    get_console().print(value)


@app.command("set")
@command_wrapper
def set_config(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Configuration key (e.g., api.timeout)")],
    value: Annotated[str, typer.Argument(help="Configuration value")],
) -> None:
    """Set a configuration value."""
    config_manager = get_app_context(ctx).config_manager
    config_manager.set(key, value)
    format_success(f"Configuration '{key}' set to '{config_manager.get(key)}'")


@app.command("reset")
@command_wrapper
def reset_config(
    ctx: typer.Context,
    key: Annotated[Optional[str], typer.Argument(help="Configuration key to reset")] = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Reset configuration to defaults."""
    if not yes:
        msg = "entire configuration" if not key else f"'{key}'"
        if not typer.confirm(f"Are you sure you want to reset {msg}?"):
            get_console().print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    get_app_context(ctx).config_manager.reset(key)
    if key:
        format_success(f"Configuration '{key}' reset to default")
    else:
        format_success("Configuration reset to defaults")


@app.command("clear-token")
@command_wrapper
def clear_token(
    ctx: typer.Context,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Remove the stored API token."""
    if not yes and not typer.confirm("Remove the stored API token?"):
        get_console().print("[yellow]Cancelled[/yellow]")
        raise typer.Exit(0)

    get_app_context(ctx).config_manager.clear_token()
    format_success("API token removed")


@app.command("path")
@command_wrapper
def show_paths(ctx: typer.Context) -> None:
    """Show where configuration, credentials and cache live."""
    config_manager = get_app_context(ctx).config_manager
    print(f"config\t{config_manager.config_file}")
    print(f"credentials\t{config_manager.credentials_file}")
    print(f"cache\t{config_manager.cache_path}")
