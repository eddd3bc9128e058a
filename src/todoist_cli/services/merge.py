"""Merge engine: applies a server delta to the local store.

``apply_delta`` never mutates the store it is given. It builds a new store
and only sets the new cursor once every update and deletion has been
applied, so an interrupted or rejected merge leaves the caller holding the
previous store and cursor, and re-fetching from that cursor is safe.
"""

from __future__ import annotations

import logging

from todoist_cli.exceptions import MergeError
from todoist_cli.models import ENTITY_KINDS, Delta, LocalStore

logger = logging.getLogger(__name__)


def apply_delta(store: LocalStore, delta: Delta) -> LocalStore:
    """Return a new store with *delta* applied on top of *store*.

    Updates overwrite by ``(kind, id)``; deletions of absent keys are
    no-ops. Kinds are independent, so the order in which they are merged
    does not affect the result. Kinds missing from the delta are left
    untouched.

    Raises:
        MergeError: If the delta is malformed. *store* is left unchanged.
    """
    if not delta.new_cursor:
        raise MergeError("delta has no sync cursor")

    unknown = (set(delta.updated) | set(delta.deleted)) - set(ENTITY_KINDS)
    if unknown:
        raise MergeError(f"delta contains unknown entity kinds: {sorted(unknown)}")

    merged = store.copy()

    for kind, entities in delta.updated.items():
        for entity in entities:
            if entity.kind != kind:
                raise MergeError(
                    f"{entity.kind} {entity.id} reported under '{kind}' updates"
                )
            merged.put(entity)

    for kind, ids in delta.deleted.items():
        for entity_id in ids:
            merged.remove(kind, entity_id)

    tombstones = [key for key, entity in merged.entities.items() if entity.is_deleted]
    for kind, entity_id in tombstones:
        merged.remove(kind, entity_id)

    merged.sync_cursor = delta.new_cursor
    logger.debug(
        "merged delta: %d updated, %d deleted, %d tombstones purged, cursor %s -> %s",
        sum(len(v) for v in delta.updated.values()),
        sum(len(v) for v in delta.deleted.values()),
        len(tombstones),
        store.sync_cursor,
        merged.sync_cursor,
    )
    return merged
