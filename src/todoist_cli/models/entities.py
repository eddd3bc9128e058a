"""Entity models mirrored from the Todoist Sync API.

Each entity kind is its own pydantic model with a literal ``kind`` tag so
the four kinds can travel through the cache and the merge engine as one
discriminated union.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

EntityKind = Literal["task", "project", "label", "note"]

ENTITY_KINDS: tuple[str, ...] = ("task", "project", "label", "note")


class EntityBase(BaseModel):
    """Fields shared by every entity kind.

    Attributes:
        id: Server-assigned identifier, stable across sync cycles
        is_deleted: Tombstone flag; deleted entities never stay in the store
    """

    model_config = ConfigDict(extra="ignore")

    kind: str
    id: int
    is_deleted: bool = False

    @property
    def key(self) -> tuple[str, int]:
        return (self.kind, self.id)


class Due(BaseModel):
    """Due date object attached to a task."""

    model_config = ConfigDict(extra="ignore")

    date: str | None = None
    string: str = ""
    is_recurring: bool = False
    timezone: str | None = None


class Task(EntityBase):
    """A task ("item" in Sync API terms).

    Attributes:
        content: Task title
        description: Optional longer description
        due: Optional due date
        priority: 1 (normal) to 4 (urgent), as the service defines it
        project_id: Owning project id
        labels: Label references (ids, or names on newer API versions)
        checked: Completion flag
        parent_id: Parent task id for subtasks
        child_order: Position among siblings
        date_added: Creation timestamp as sent by the service
        date_completed: Completion timestamp as sent by the service
    """

    kind: Literal["task"] = "task"
    content: str = ""
    description: str = ""
    due: Due | None = None
    priority: int = Field(default=1, ge=1, le=4)
    project_id: int | None = None
    labels: list[int | str] = Field(default_factory=list)
    checked: bool = False
    parent_id: int | None = None
    child_order: int = 0
    date_added: str | None = None
    date_completed: str | None = None


class Project(EntityBase):
    """A project, optionally nested under a parent project."""

    kind: Literal["project"] = "project"
    name: str = ""
    parent_id: int | None = None
    color: int | str | None = None
    child_order: int = 0
    is_archived: bool = False


class Label(EntityBase):
    """A personal label."""

    kind: Literal["label"] = "label"
    name: str = ""
    color: int | str | None = None
    item_order: int = 0


class Note(EntityBase):
    """A comment attached to a task."""

    kind: Literal["note"] = "note"
    item_id: int | None = None
    content: str = ""
    posted: str | None = None


Entity = Annotated[Union[Task, Project, Label, Note], Field(discriminator="kind")]

ENTITY_MODELS: dict[str, type[EntityBase]] = {
    "task": Task,
    "project": Project,
    "label": Label,
    "note": Note,
}


class CompletedTask(BaseModel):
    """A record from the completed-task history (not cached locally)."""

    model_config = ConfigDict(extra="ignore")

    task_id: int
    content: str = ""
    project_id: int | None = None
    completed_at: str | None = None


class KarmaStats(BaseModel):
    """Productivity stats from the completed-task history."""

    model_config = ConfigDict(extra="ignore")

    karma: float = 0
    karma_trend: str = ""
    completed_count: int = 0
    days_items: list[dict] = Field(default_factory=list)
    week_items: list[dict] = Field(default_factory=list)
