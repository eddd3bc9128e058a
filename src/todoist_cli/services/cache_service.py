"""Cache lifecycle manager.

Owns the local store for one CLI invocation: loads it on start, drives
sync (fetch, merge, save) and applies optimistic updates after successful
remote writes. Command handlers receive a ``CacheManager`` explicitly and
use only :meth:`sync`, :meth:`get_all`, :meth:`get` and :meth:`mutate`.

Read policy: when no usable cache exists (missing or corrupted file), the
first read performs a full sync transparently. Every read goes through
:meth:`get_all`/:meth:`get`, so the policy is the same for all commands.

There is no locking between processes. Saves are atomic, so the file is
never corrupted, but two invocations running at once may overwrite each
other's updates; the next ``sync`` restores server truth.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from todoist_cli.adapters import cache_file
from todoist_cli.exceptions import (
    CacheCorruptedError,
    CacheNotFoundError,
    IdNotFoundError,
    UnsupportedChangeError,
)
from todoist_cli.models import (
    ENTITY_KINDS,
    ENTITY_MODELS,
    Change,
    ChangeAction,
    CompletedTask,
    Due,
    EntityBase,
    KarmaStats,
    LocalStore,
    SyncReport,
    Task,
)
from todoist_cli.services.merge import apply_delta
from todoist_cli.services.sync_client import SyncClientProtocol, build_commands

logger = logging.getLogger(__name__)


class CacheManager:
    """Sequences load, merge and save around command execution.

    Args:
        cache_path: Location of the cache file.
        client: Sync API client used for sync and remote writes.
    """

    def __init__(self, cache_path: Path, client: SyncClientProtocol):
        self.cache_path = Path(cache_path)
        self.client = client
        self.needs_bootstrap = False
        self.warning: str | None = None
        self._store: LocalStore | None = None

    @property
    def store(self) -> LocalStore:
        if self._store is None:
            self._store = self.load()
        return self._store

    def load(self) -> LocalStore:
        """Load the cache, falling back to an empty store.

        A missing file is the normal first-run case. A corrupted file is
        discarded with a warning; both flag the store for a full sync.
        """
        try:
            store = cache_file.load(self.cache_path)
            self.needs_bootstrap = store.sync_cursor is None
        except CacheNotFoundError:
            logger.info("no cache at %s, a full sync is required", self.cache_path)
            store = LocalStore()
            self.needs_bootstrap = True
        except CacheCorruptedError as e:
            logger.warning("discarding corrupted cache %s: %s", self.cache_path, e)
            self.warning = f"Local cache was corrupted and has been discarded ({e})."
            store = LocalStore()
            self.needs_bootstrap = True
        self._store = store
        return store

    def save(self) -> None:
        cache_file.save(self.store, self.cache_path)

    async def sync(self, *, full: bool = False) -> SyncReport:
        """Fetch changes since the stored cursor, merge them and persist.

        With *full* (or when there is no cursor yet) the store is rebuilt
        from the server's full state. Any failure leaves both the in-memory
        store and the file on disk as they were.
        """
        current = self.store
        base = LocalStore() if full else current
        delta = await self.client.fetch_delta(base.sync_cursor)
        merged = apply_delta(base, delta)
        cache_file.save(merged, self.cache_path)

        self._store = merged
        self.needs_bootstrap = False
        report = SyncReport(
            full_sync=delta.full_sync or base.sync_cursor is None,
            updated={k: len(v) for k, v in delta.updated.items()},
            deleted={k: len(v) for k, v in delta.deleted.items()},
            sync_cursor=merged.sync_cursor,
        )
        logger.info("sync complete: cursor=%s counts=%s", merged.sync_cursor, merged.counts())
        return report

    async def _ensure_synced(self) -> None:
        if self._store is None:
            self.load()
        if self.needs_bootstrap:
            logger.info("bootstrapping cache with a full sync before first read")
            await self.sync(full=True)

    async def get_all(self, kind: str) -> list[EntityBase]:
        """Return every cached entity of *kind* in display order."""
        if kind not in ENTITY_KINDS:
            raise UnsupportedChangeError(f"unknown entity kind: {kind}")
        await self._ensure_synced()
        return self.store.all(kind)

    async def get(self, kind: str, entity_id: int) -> EntityBase:
        """Return one cached entity.

        Raises:
            IdNotFoundError: If the entity is not in the cache
        """
        await self._ensure_synced()
        entity = self.store.get(kind, entity_id)
        if entity is None:
            raise IdNotFoundError(kind, entity_id)
        return entity

    async def mutate(
        self, kind: str, entity_id: int | None, change: Change
    ) -> EntityBase | None:
        """Apply *change* remotely, then mirror it in the local store.

        The resulting entity is validated before anything is sent, so a
        change the cache could not store never reaches the server. Nothing
        is changed or saved locally unless the remote write succeeds.
        Returns the resulting entity, or None for deletions.

        Raises:
            UnsupportedChangeError: If the change produces an invalid entity
            IdNotFoundError: If a non-add change names an id not in the cache
        """
        if kind not in ENTITY_KINDS:
            raise UnsupportedChangeError(f"unknown entity kind: {kind}")
        await self._ensure_synced()
        existing = None
        if change.action is not ChangeAction.ADD:
            existing = await self.get(kind, entity_id)
        candidate = _candidate(kind, existing, change)

        commands, temp_id = build_commands(kind, entity_id, change)
        mapping = await self.client.execute(commands)
        logger.info("remote %s %s %s succeeded", change.action.value, kind, entity_id or "")

        new_id = mapping.get(temp_id) if temp_id else None
        result = self._apply_locally(kind, existing, candidate, change, new_id)
        self.save()
        return result

    async def quick_add(self, text: str, *, auto_reminder: bool = False) -> Task:
        await self._ensure_synced()
        task = await self.client.quick_add(text, auto_reminder=auto_reminder)
        self.store.put(task)
        self.save()
        return task

    async def completed_tasks(self) -> list[CompletedTask]:
        return await self.client.completed_tasks()

    async def karma(self) -> KarmaStats:
        return await self.client.karma()

    def _apply_locally(
        self,
        kind: str,
        existing: EntityBase | None,
        candidate: EntityBase | None,
        change: Change,
        new_id: int | None,
    ) -> EntityBase | None:
        store = self.store

        if change.action is ChangeAction.ADD:
            if new_id is None:
                # Server did not report the new id; the next sync picks it up.
                logger.warning("no id mapping for new %s, skipping local insert", kind)
                return None
            entity = candidate.model_copy(update={"id": new_id})
            store.put(entity)
            return entity

        assert existing is not None
        if change.action is ChangeAction.MODIFY:
            store.put(candidate)
            return candidate

        if change.action is ChangeAction.CLOSE:
            if kind != "task":
                entity = existing.model_copy(update={"is_archived": True})
                store.put(entity)
                return entity
            if existing.due is not None and existing.due.is_recurring:
                # The server moves the due date forward and keeps the task
                # open; the new date arrives with the next sync.
                logger.info("task %s is recurring, left open until next sync", existing.id)
                return existing
            entity = existing.model_copy(update={"checked": True})
            store.put(entity)
            for task_id in _descendants(store, existing.id):
                store.put(store.get("task", task_id).model_copy(update={"checked": True}))
            return entity

        store.remove(kind, existing.id)
        if kind == "task":
            _remove_subtasks(store, existing.id)
        return None


def _local_updates(kind: str, updates: dict) -> dict:
    updates = dict(updates)
    updates.pop("auto_reminder", None)
    if kind == "task" and "due_string" in updates:
        due_string = updates.pop("due_string")
        updates["due"] = Due(string=due_string) if due_string else None
    return updates


def _candidate(kind: str, existing: EntityBase | None, change: Change) -> EntityBase | None:
    """Build the entity an add or modify will produce, validated.

    Adds get a placeholder id that is replaced by the server's id.
    """
    if change.action is ChangeAction.ADD:
        data = {**_local_updates(kind, change.updates), "kind": kind, "id": 0}
    elif change.action is ChangeAction.MODIFY:
        data = {**existing.model_dump(), **_local_updates(kind, change.updates)}
    else:
        return None
    try:
        return ENTITY_MODELS[kind].model_validate(data)
    except ValidationError as e:
        raise UnsupportedChangeError(f"invalid {kind} {change.action.value}: {e}") from e


def _descendants(store: LocalStore, task_id: int) -> list[int]:
    """Ids of every subtask below *task_id*, at any depth."""
    found: list[int] = []
    pending = [task_id]
    while pending:
        parent = pending.pop()
        for child in store.all("task"):
            if child.parent_id == parent and child.id not in found and child.id != task_id:
                found.append(child.id)
                pending.append(child.id)
    return found


def _remove_subtasks(store: LocalStore, task_id: int) -> None:
    """Remove a deleted task's descendants and every note on them."""
    removed = {task_id, *_descendants(store, task_id)}
    for child_id in removed - {task_id}:
        store.remove("task", child_id)
    for note in store.all("note"):
        if note.item_id in removed:
            store.remove("note", note.id)
