"""Per-invocation application context.

Built once by the root callback and handed to every command through
``typer.Context.obj``; commands never reach for module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import typer

from todoist_cli.config import ConfigManager
from todoist_cli.exceptions import ConfigError
from todoist_cli.services.cache_service import CacheManager
from todoist_cli.services.sync_client import SyncClient
from todoist_cli.utils.ui.formatters import RenderOptions, format_warning


def prompt_for_token(config_manager: ConfigManager) -> str:
    """Ask for the API token once and store it with owner-only permissions."""
    token = typer.prompt("Input API Token", hide_input=True).strip()
    if not token:
        raise ConfigError("An API token is required.")
    config_manager.save_token(token)
    return token


@dataclass
class AppContext:
    """Everything a command needs for one invocation."""

    config_manager: ConfigManager
    render: RenderOptions = field(default_factory=RenderOptions)
    _cache: CacheManager | None = None

    @property
    def cache(self) -> CacheManager:
        """The cache manager, created on first use.

        Resolves the API token (prompting when none is stored) and loads
        the local store, surfacing a warning if the cache was discarded.
        """
        if self._cache is None:
            token = self.config_manager.load_token() or prompt_for_token(self.config_manager)
            api = self.config_manager.config.api
            client = SyncClient(
                token,
                base_url=api.endpoint,
                timeout=api.timeout,
                retry=api.retry,
            )
            self._cache = CacheManager(self.config_manager.cache_path, client)
            self._cache.load()
        if self._cache.warning:
            format_warning(self._cache.warning)
            self._cache.warning = None
        return self._cache


def get_app_context(ctx: typer.Context) -> AppContext:
    """Return the AppContext stored on the root Typer context."""
    obj = ctx.find_root().obj
    if not isinstance(obj, AppContext):
        raise RuntimeError("application context was not initialised")
    return obj
