"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem/API state.
"""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from todoist_cli.commands.context import AppContext
from todoist_cli.config import ConfigManager
from todoist_cli.exceptions import NetworkError
from todoist_cli.models import CompletedTask, Delta, KarmaStats, Task
from todoist_cli.services.cache_service import CacheManager
from todoist_cli.services.sync_client import SyncCommand


class FakeSyncClient:
    """In-memory stand-in for the Sync API.

    ``deltas`` are returned (or raised, for exceptions) one per
    ``fetch_delta`` call. Every executed batch is recorded.
    """

    def __init__(self, deltas=None):
        self.deltas = list(deltas or [])
        self.fetch_calls: list[str | None] = []
        self.executed: list[list[SyncCommand]] = []
        self.execute_error: Exception | None = None
        self.next_id = 1000
        self.quick_add_result: Task | None = None
        self.completed: list[CompletedTask] = []
        self.quick_add_calls: list[tuple[str, bool]] = []
        self.karma_stats = KarmaStats(karma=1500.0, karma_trend="up", completed_count=42)

    async def fetch_delta(self, cursor):
        self.fetch_calls.append(cursor)
        if not self.deltas:
            raise NetworkError("no delta queued")
        delta = self.deltas.pop(0)
        if isinstance(delta, Exception):
            raise delta
        return delta

    async def execute(self, commands):
        self.executed.append(commands)
        if self.execute_error is not None:
            raise self.execute_error
        mapping = {}
        for command in commands:
            if command.temp_id:
                mapping[command.temp_id] = self.next_id
                self.next_id += 1
        return mapping

    async def quick_add(self, text, *, auto_reminder=False):
        self.quick_add_calls.append((text, auto_reminder))
        if self.quick_add_result is None:
            raise NetworkError("quick add unavailable")
        return self.quick_add_result

    async def completed_tasks(self):
        return self.completed

    async def karma(self):
        return self.karma_stats


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolate_logger(tmp_path):
    """Send the application log file to a temp dir and reset the singleton."""
    import todoist_cli.utils.logger as logger_mod

    logger_mod._logger = None
    logger_mod._debug_handler = None
    logging.getLogger("todoist_cli").handlers.clear()
    with patch("todoist_cli.utils.logger.user_log_dir", return_value=str(tmp_path / "logs")):
        yield
    for handler in logging.getLogger("todoist_cli").handlers:
        handler.close()
    logging.getLogger("todoist_cli").handlers.clear()
    logger_mod._logger = None
    logger_mod._debug_handler = None


# ---------------------------------------------------------------------------
# Cache and client
# ---------------------------------------------------------------------------


@pytest.fixture()
def cache_path(tmp_path):
    return tmp_path / "cache" / "cache.json"


@pytest.fixture()
def fake_client():
    return FakeSyncClient()


@pytest.fixture()
def bootstrap_delta():
    """A full-sync delta with one project, one label and two tasks."""
    from todoist_cli.models import Label, Note, Project

    return Delta(
        new_cursor="cursor-1",
        full_sync=True,
        updated={
            "project": [Project(id=10, name="Inbox"), Project(id=11, name="Work")],
            "label": [Label(id=20, name="urgent")],
            "task": [
                Task(id=1, content="Buy milk", project_id=10, priority=4, labels=[20]),
                Task(id=2, content="Write report", project_id=11),
            ],
            "note": [Note(id=30, item_id=2, content="draft in docs")],
        },
    )


@pytest.fixture()
def cache_manager(cache_path, fake_client):
    return CacheManager(cache_path, fake_client)


# ---------------------------------------------------------------------------
# CLI context injection
# ---------------------------------------------------------------------------


@pytest.fixture()
def config_manager(tmp_path):
    return ConfigManager(config_dir=tmp_path / "config", data_dir=tmp_path / "data")


@pytest.fixture()
def app_context(config_manager, cache_manager):
    """AppContext with a pre-built cache so no token or network is needed."""
    return AppContext(config_manager, _cache=cache_manager)
