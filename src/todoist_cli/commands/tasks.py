"""Task commands: list, show, completed-list, add, quick-add, modify, close, delete."""

import re
from typing import Annotated, Optional

import typer

from todoist_cli.commands.context import get_app_context
from todoist_cli.exceptions import IdNotFoundError, UnsupportedChangeError
from todoist_cli.models import Change
from todoist_cli.services.cache_service import CacheManager
from todoist_cli.utils.ui.formatters import (
    format_success,
    render_completed,
    render_task_detail,
    render_tasks,
)

from .decorators import command_wrapper

_URL_PATTERN = re.compile(r"https?://\S+")

PriorityOption = Annotated[
    Optional[int],
    typer.Option("--priority", "-p", min=1, max=4, help="priority (1-4, 1 is highest)"),
]
LabelIdsOption = Annotated[
    Optional[str], typer.Option("--label-ids", "-L", help="label ids (separated by ,)")
]
ProjectIdOption = Annotated[
    Optional[int], typer.Option("--project-id", "-P", help="project id")
]
ProjectNameOption = Annotated[
    Optional[str], typer.Option("--project-name", "-N", help="project name")
]
DateOption = Annotated[
    Optional[str],
    typer.Option("--date", "-d", help="date string (today, 2016/10/02, 2016/09/02 18:00)"),
]
ReminderOption = Annotated[
    bool, typer.Option("--reminder", "-r", help="set reminder (only premium users)")
]


def to_api_priority(priority: int) -> int:
    """Convert displayed priority (1 is highest) to the service's scale."""
    return 5 - priority


def parse_label_ids(raw: str) -> list[int]:
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError as e:
        raise UnsupportedChangeError(f"invalid label ids: {raw!r}") from e


async def resolve_label_names(cache: CacheManager, label_ids: list[int]) -> list[str]:
    """Map label ids to the names the service expects on tasks."""
    names = {label.id: label.name for label in await cache.get_all("label")}
    missing = [label_id for label_id in label_ids if label_id not in names]
    if missing:
        raise IdNotFoundError("label", missing[0])
    return [names[label_id] for label_id in label_ids]


async def resolve_project_id(
    cache: CacheManager, project_id: int | None, project_name: str | None
) -> int | None:
    """Pick the project id from --project-id or look up --project-name."""
    if project_id is not None:
        return project_id
    if project_name is None:
        return None
    for project in await cache.get_all("project"):
        if project.name == project_name:
            return project.id
    raise UnsupportedChangeError(f"no project named {project_name!r}")


async def _task_updates(
    cache: CacheManager,
    *,
    priority: int | None,
    label_ids: str | None,
    project_id: int | None,
    project_name: str | None,
    date: str | None,
) -> dict:
    updates: dict = {}
    if priority is not None:
        updates["priority"] = to_api_priority(priority)
    if label_ids is not None:
        updates["labels"] = await resolve_label_names(cache, parse_label_ids(label_ids))
    resolved = await resolve_project_id(cache, project_id, project_name)
    if resolved is not None:
        updates["project_id"] = resolved
    if date is not None:
        updates["due_string"] = date
    return updates


@command_wrapper
async def list_tasks(
    ctx: typer.Context,
    project: Annotated[Optional[str], typer.Option("--project", help="Only tasks in this project (name)")] = None,
    priority: PriorityOption = None,
    label: Annotated[Optional[str], typer.Option("--label", help="Only tasks with this label (name)")] = None,
) -> None:
    """Show all tasks."""
    app_ctx = get_app_context(ctx)
    cache = app_ctx.cache

    tasks = await cache.get_all("task")
    projects = await cache.get_all("project")
    labels = await cache.get_all("label")

    shown = [t for t in tasks if not t.checked]
    if project is not None:
        wanted = {p.id for p in projects if p.name == project}
        shown = [t for t in shown if t.project_id in wanted]
    if priority is not None:
        shown = [t for t in shown if t.priority == to_api_priority(priority)]
    if label is not None:
        wanted_labels = {lbl.id for lbl in labels if lbl.name == label} | {label}
        shown = [t for t in shown if wanted_labels.intersection(t.labels)]

    render_tasks(shown, tasks, projects, labels, app_ctx.render)


@command_wrapper
async def show(
    ctx: typer.Context,
    task_id: Annotated[int, typer.Argument(help="Task ID")],
    browse: Annotated[bool, typer.Option("--browse", "-o", help="when contain URL, open it")] = False,
) -> None:
    """Show task detail."""
    app_ctx = get_app_context(ctx)
    cache = app_ctx.cache

    task = await cache.get("task", task_id)
    notes = [n for n in await cache.get_all("note") if n.item_id == task.id]
    render_task_detail(
        task,
        await cache.get_all("task"),
        await cache.get_all("project"),
        await cache.get_all("label"),
        notes,
        app_ctx.render,
    )

    if browse:
        match = _URL_PATTERN.search(task.content)
        if match:
            typer.launch(match.group(0))


@command_wrapper
async def completed_list(ctx: typer.Context) -> None:
    """Show all completed tasks (only premium users)."""
    app_ctx = get_app_context(ctx)
    cache = app_ctx.cache
    completed = await cache.completed_tasks()
    render_completed(completed, await cache.get_all("project"), app_ctx.render)


@command_wrapper
async def add(
    ctx: typer.Context,
    content: Annotated[str, typer.Argument(help="Task content")],
    priority: PriorityOption = 4,
    label_ids: LabelIdsOption = None,
    project_id: ProjectIdOption = None,
    project_name: ProjectNameOption = None,
    date: DateOption = None,
    reminder: ReminderOption = False,
) -> None:
    """Add task."""
    cache = get_app_context(ctx).cache
    updates = await _task_updates(
        cache,
        priority=priority,
        label_ids=label_ids,
        project_id=project_id,
        project_name=project_name,
        date=date,
    )
    if reminder:
        updates["auto_reminder"] = True
    task = await cache.mutate("task", None, Change.add(content=content, **updates))
    if task is not None:
        format_success(f"Added task {task.id}: {task.content}")
    else:
        format_success("Added task (run 'todoist sync' to see it)")


@command_wrapper
async def quick_add(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="Task in quick add syntax")],
    reminder: ReminderOption = False,
) -> None:
    """Add task using quick add syntax."""
    cache = get_app_context(ctx).cache
    task = await cache.quick_add(text, auto_reminder=reminder)
    format_success(f"Added task {task.id}: {task.content}")


@command_wrapper
async def modify(
    ctx: typer.Context,
    task_id: Annotated[int, typer.Argument(help="Task ID")],
    content: Annotated[Optional[str], typer.Option("--content", "-c", help="content")] = None,
    priority: PriorityOption = None,
    label_ids: LabelIdsOption = None,
    project_id: ProjectIdOption = None,
    project_name: ProjectNameOption = None,
    date: DateOption = None,
) -> None:
    """Modify task."""
    cache = get_app_context(ctx).cache
    updates = await _task_updates(
        cache,
        priority=priority,
        label_ids=label_ids,
        project_id=project_id,
        project_name=project_name,
        date=date,
    )
    if content is not None:
        updates["content"] = content
    if not updates:
        raise UnsupportedChangeError("nothing to modify; pass at least one option")

    task = await cache.mutate("task", task_id, Change.modify(**updates))
    format_success(f"Modified task {task_id}: {task.content}")


@command_wrapper
async def close(
    ctx: typer.Context,
    task_ids: Annotated[list[int], typer.Argument(help="Task ID(s)")],
) -> None:
    """Close task."""
    cache = get_app_context(ctx).cache
    for task_id in task_ids:
        task = await cache.mutate("task", task_id, Change.close())
        format_success(f"Closed task {task_id}: {task.content}")


@command_wrapper
async def delete(
    ctx: typer.Context,
    task_ids: Annotated[list[int], typer.Argument(help="Task ID(s)")],
) -> None:
    """Delete task."""
    cache = get_app_context(ctx).cache
    for task_id in task_ids:
        await cache.mutate("task", task_id, Change.delete())
        format_success(f"Deleted task {task_id}")
