"""Todoist CLI domain models.

Pydantic models for the entities mirrored from the service, plus the
local store and the delta/change types that flow through the sync cache.
"""

from .entities import (
    ENTITY_KINDS,
    ENTITY_MODELS,
    CompletedTask,
    Due,
    Entity,
    EntityBase,
    EntityKind,
    KarmaStats,
    Label,
    Note,
    Project,
    Task,
)
from .store import Change, ChangeAction, Delta, LocalStore, SyncReport

__all__ = [
    "ENTITY_KINDS",
    "ENTITY_MODELS",
    "Change",
    "ChangeAction",
    "CompletedTask",
    "Delta",
    "Due",
    "Entity",
    "EntityBase",
    "EntityKind",
    "KarmaStats",
    "Label",
    "LocalStore",
    "Note",
    "Project",
    "SyncReport",
    "Task",
]
