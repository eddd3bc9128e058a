"""Local store, sync delta and change models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from .entities import ENTITY_KINDS, Entity, EntityBase

EntityKey = tuple[str, int]


class LocalStore:
    """In-memory mirror of the last synchronized remote state.

    Entities are keyed by ``(kind, id)``. Insertion order is preserved so
    listings stay stable between invocations.

    Attributes:
        sync_cursor: Opaque token of the last merged delta, ``None`` before
            the first sync
        entities: Mapping from ``(kind, id)`` to entity
    """

    def __init__(
        self,
        sync_cursor: str | None = None,
        entities: dict[EntityKey, EntityBase] | None = None,
    ):
        self.sync_cursor = sync_cursor
        self.entities: dict[EntityKey, EntityBase] = dict(entities or {})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LocalStore):
            return NotImplemented
        return self.sync_cursor == other.sync_cursor and self.entities == other.entities

    def __repr__(self) -> str:
        return f"LocalStore(sync_cursor={self.sync_cursor!r}, entities={len(self.entities)})"

    def __len__(self) -> int:
        return len(self.entities)

    @property
    def is_empty(self) -> bool:
        return self.sync_cursor is None and not self.entities

    def copy(self) -> LocalStore:
        """Shallow copy; entities are replaced, never mutated in place."""
        return LocalStore(self.sync_cursor, self.entities)

    def get(self, kind: str, entity_id: int) -> EntityBase | None:
        return self.entities.get((kind, entity_id))

    def put(self, entity: EntityBase) -> None:
        self.entities[entity.key] = entity

    def remove(self, kind: str, entity_id: int) -> EntityBase | None:
        return self.entities.pop((kind, entity_id), None)

    def all(self, kind: str) -> list[EntityBase]:
        """Return every entity of a kind in insertion order."""
        return [entity for (k, _), entity in self.entities.items() if k == kind]

    def counts(self) -> dict[str, int]:
        return {kind: len(self.all(kind)) for kind in ENTITY_KINDS}


class Delta(BaseModel):
    """Changes reported by the server since a cursor.

    Attributes:
        new_cursor: Cursor to store once the delta is merged
        full_sync: Whether the server sent its full state
        updated: Full representations of added/changed entities, per kind
        deleted: Ids removed on the server, per kind
    """

    new_cursor: str
    full_sync: bool = False
    updated: dict[str, list[Entity]] = Field(default_factory=dict)
    deleted: dict[str, list[int]] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not any(self.updated.values()) and not any(self.deleted.values())


class ChangeAction(str, Enum):
    """What a mutating command does to an entity."""

    ADD = "add"
    MODIFY = "modify"
    CLOSE = "close"
    DELETE = "delete"


class Change(BaseModel):
    """A single mutation requested by a command.

    ``updates`` carries attribute values for ``add`` and ``modify``; it is
    empty for ``close`` and ``delete``.
    """

    action: ChangeAction
    updates: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def add(cls, **updates: Any) -> Change:
        return cls(action=ChangeAction.ADD, updates=updates)

    @classmethod
    def modify(cls, **updates: Any) -> Change:
        return cls(action=ChangeAction.MODIFY, updates=updates)

    @classmethod
    def close(cls) -> Change:
        return cls(action=ChangeAction.CLOSE)

    @classmethod
    def delete(cls) -> Change:
        return cls(action=ChangeAction.DELETE)


class SyncReport(BaseModel):
    """Summary of a completed sync, for display."""

    full_sync: bool = False
    updated: dict[str, int] = Field(default_factory=dict)
    deleted: dict[str, int] = Field(default_factory=dict)
    sync_cursor: str | None = None
