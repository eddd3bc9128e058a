"""JSON file codec for the local sync cache.

The cache is one JSON object::

    {"version": 1, "sync_cursor": "...", "tasks": [...], "projects": [...],
     "labels": [...], "notes": [...]}

A missing file means "no cache yet"; a file that exists but does not decode
into that shape is reported as corrupted so callers can warn before
rebuilding it.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from todoist_cli.exceptions import (
    CacheCorruptedError,
    CacheError,
    CacheNotFoundError,
    CacheWriteError,
)
from todoist_cli.models import ENTITY_KINDS, ENTITY_MODELS, LocalStore

logger = logging.getLogger(__name__)

CACHE_VERSION = 1
SECTIONS: dict[str, str] = {
    "task": "tasks",
    "project": "projects",
    "label": "labels",
    "note": "notes",
}


def encode(store: LocalStore) -> dict[str, Any]:
    """Convert a store into the JSON-compatible cache document."""
    data: dict[str, Any] = {"version": CACHE_VERSION, "sync_cursor": store.sync_cursor}
    for kind in ENTITY_KINDS:
        data[SECTIONS[kind]] = [e.model_dump(mode="json") for e in store.all(kind)]
    return data


def decode(data: Any) -> LocalStore:
    """Build a store from a cache document.

    Raises:
        CacheCorruptedError: If the document does not have the cache shape
    """
    if not isinstance(data, dict):
        raise CacheCorruptedError("cache root is not a JSON object")

    version = data.get("version", CACHE_VERSION)
    if version != CACHE_VERSION:
        raise CacheCorruptedError(f"unsupported cache version: {version!r}")

    cursor = data.get("sync_cursor")
    if cursor is not None and not isinstance(cursor, str):
        raise CacheCorruptedError("sync_cursor must be a string or null")

    store = LocalStore(sync_cursor=cursor)
    for kind in ENTITY_KINDS:
        section = SECTIONS[kind]
        records = data.get(section, [])
        if not isinstance(records, list):
            raise CacheCorruptedError(f"'{section}' is not a list")
        model = ENTITY_MODELS[kind]
        for record in records:
            try:
                entity = model.model_validate(record)
            except ValidationError as e:
                raise CacheCorruptedError(f"invalid record in '{section}': {e}") from e
            store.put(entity)
    return store


def load(path: Path) -> LocalStore:
    """Load the cache file at *path*.

    Raises:
        CacheNotFoundError: No file exists at *path*
        CacheCorruptedError: The file exists but cannot be decoded
        CacheError: The file exists but could not be read
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise CacheNotFoundError(f"no cache at {path}") from e
    except UnicodeDecodeError as e:
        raise CacheCorruptedError(f"cache at {path} is not valid UTF-8") from e
    except OSError as e:
        raise CacheError(f"could not read cache at {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CacheCorruptedError(f"cache at {path} is not valid JSON: {e}") from e

    store = decode(data)
    logger.debug("loaded cache %s (%d entities)", path, len(store))
    return store


def save(store: LocalStore, path: Path) -> None:
    """Write *store* to *path* atomically.

    The document is written to a temporary file in the same directory and
    renamed over the target, so the file on disk is always either the old
    or the new content.

    Raises:
        CacheWriteError: If the file could not be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
    except OSError as e:
        raise CacheWriteError(f"could not write cache at {path}: {e}") from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(encode(store), f, ensure_ascii=False, separators=(",", ":"))
            f.flush()
            os.fsync(f.fileno())
        os.chmod(temp_path, 0o600)
        os.replace(temp_path, path)
    except (OSError, TypeError, ValueError) as e:
        with suppress(OSError):
            os.unlink(temp_path)
        raise CacheWriteError(f"could not write cache at {path}: {e}") from e

    logger.debug("saved cache %s (cursor=%s)", path, store.sync_cursor)
