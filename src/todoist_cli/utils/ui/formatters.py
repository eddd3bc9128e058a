"""Output formatters for different formats."""

import csv
import json
import sys
from dataclasses import dataclass
from typing import Any, Sequence

import yaml
from rich.table import Table
from rich.text import Text

from todoist_cli.models import CompletedTask, EntityBase, KarmaStats, Label, Note, Project, Task

from .console import get_console

OUTPUT_FORMATS = ("tsv", "csv", "table", "json", "yaml")

PRIORITY_STYLES = {1: "", 2: "blue", 3: "yellow", 4: "bold red"}


@dataclass
class RenderOptions:
    """How listings are rendered (global CLI flags)."""

    output: str = "tsv"
    header: bool = False
    color: bool = False
    namespace: bool = False
    indent: bool = False
    project_namespace: bool = False


@dataclass
class Column:
    name: str
    style: str = ""


def format_error(message: str) -> None:
    """Format and display an error message."""
    get_console(stderr=True).print(f"[bold red]Error:[/bold red] {message}", highlight=False)


def format_success(message: str) -> None:
    """Format and display a success message."""
    get_console().print(f"[bold green]{message}[/bold green]", highlight=False)


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    get_console(stderr=True).print(f"[bold yellow]Warning:[/bold yellow] {message}", highlight=False)


def format_rows(
    columns: Sequence[Column],
    rows: Sequence[Sequence[Any]],
    options: RenderOptions,
    row_styles: Sequence[str] | None = None,
) -> None:
    """Render rows in the configured output format."""
    names = [c.name for c in columns]
    cells = [["" if v is None else str(v) for v in row] for row in rows]

    if options.output == "json":
        print(json.dumps([dict(zip(names, row)) for row in cells], indent=2, ensure_ascii=False))
    elif options.output == "yaml":
        print(
            yaml.dump(
                [dict(zip(names, row)) for row in cells],
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            ),
            end="",
        )
    elif options.output == "csv":
        writer = csv.writer(sys.stdout)
        if options.header:
            writer.writerow(names)
        writer.writerows(cells)
    elif options.output == "table":
        _format_table(columns, cells, options, row_styles)
    else:
        _format_tsv(columns, cells, options, row_styles)


def _format_table(columns, cells, options: RenderOptions, row_styles) -> None:
    table = Table(show_header=options.header, header_style="bold magenta", box=None)
    for column in columns:
        table.add_column(column.name, style=column.style if options.color else "")
    for i, row in enumerate(cells):
        style = row_styles[i] if (options.color and row_styles) else None
        table.add_row(*row, style=style or None)
    get_console().print(table)


def _format_tsv(columns, cells, options: RenderOptions, row_styles) -> None:
    if not options.color:
        if options.header:
            print("\t".join(c.name for c in columns))
        for row in cells:
            print("\t".join(row))
        return

    console = get_console()
    if options.header:
        console.print(Text("\t".join(c.name for c in columns), style="bold"), soft_wrap=True)
    for i, row in enumerate(cells):
        line = Text(style=row_styles[i] if row_styles else "")
        for j, (column, value) in enumerate(zip(columns, row)):
            if j:
                line.append("\t")
            line.append(value, style=column.style)
        console.print(line, soft_wrap=True)


# ============================================================================
# Entity rendering
# ============================================================================


def priority_text(priority: int) -> str:
    """Display priority the way the service's apps do (4 is shown as p1)."""
    return f"p{5 - priority}"


def project_path(project_id: int | None, projects: dict[int, Project], namespace: bool) -> str:
    """Return ``#Name`` or ``#Parent:Child`` for a project id."""
    if project_id is None or project_id not in projects:
        return "#?"
    project = projects[project_id]
    if not namespace:
        return f"#{project.name}"

    names = [project.name]
    seen = {project.id}
    while project.parent_id in projects and project.parent_id not in seen:
        project = projects[project.parent_id]
        seen.add(project.id)
        names.append(project.name)
    return "#" + ":".join(reversed(names))


def label_text(label_refs: list, labels: dict[int, Label]) -> str:
    names = []
    for ref in label_refs:
        if isinstance(ref, int):
            names.append(f"@{labels[ref].name}" if ref in labels else "@?")
        else:
            names.append(f"@{ref}")
    return ",".join(names)


def due_text(task: Task) -> str:
    if task.due is None:
        return ""
    return task.due.date or task.due.string


def _ancestors(task: Task, tasks: dict[int, Task]) -> list[Task]:
    chain = []
    seen = {task.id}
    while task.parent_id in tasks and task.parent_id not in seen:
        task = tasks[task.parent_id]
        seen.add(task.id)
        chain.append(task)
    return chain


def content_text(task: Task, tasks: dict[int, Task], options: RenderOptions) -> str:
    ancestors = _ancestors(task, tasks)
    if options.namespace and ancestors:
        return ":".join(t.content for t in reversed(ancestors)) + ":" + task.content
    if options.indent:
        return "  " * len(ancestors) + task.content
    return task.content


def _by_id(entities: Sequence[EntityBase]) -> dict:
    return {e.id: e for e in entities}


def render_tasks(
    tasks: Sequence[Task],
    all_tasks: Sequence[Task],
    projects: Sequence[Project],
    labels: Sequence[Label],
    options: RenderOptions,
) -> None:
    task_map = _by_id(all_tasks)
    project_map = _by_id(projects)
    label_map = _by_id(labels)
    columns = [
        Column("ID", "dim"),
        Column("Priority"),
        Column("DueDate", "cyan"),
        Column("Project", "magenta"),
        Column("Labels", "green"),
        Column("Content"),
    ]
    rows = [
        [
            t.id,
            priority_text(t.priority),
            due_text(t),
            project_path(t.project_id, project_map, options.project_namespace),
            label_text(t.labels, label_map),
            content_text(t, task_map, options),
        ]
        for t in tasks
    ]
    format_rows(columns, rows, options, [PRIORITY_STYLES.get(t.priority, "") for t in tasks])


def render_task_detail(
    task: Task,
    all_tasks: Sequence[Task],
    projects: Sequence[Project],
    labels: Sequence[Label],
    notes: Sequence[Note],
    options: RenderOptions,
) -> None:
    rows = [
        ["ID", task.id],
        ["Content", content_text(task, _by_id(all_tasks), options)],
        ["Project", project_path(task.project_id, _by_id(projects), options.project_namespace)],
        ["Labels", label_text(task.labels, _by_id(labels))],
        ["Priority", priority_text(task.priority)],
        ["DueDate", due_text(task)],
        ["Completed", "yes" if task.checked else "no"],
    ]
    if task.description:
        rows.append(["Description", task.description])
    for note in notes:
        rows.append(["Note", note.content])
    format_rows([Column("Field", "bold"), Column("Value")], rows, options)


def render_projects(projects: Sequence[Project], options: RenderOptions) -> None:
    project_map = _by_id(projects)
    rows = [
        [p.id, project_path(p.id, project_map, options.project_namespace)]
        for p in projects
        if not p.is_archived
    ]
    format_rows([Column("ID", "dim"), Column("Name", "magenta")], rows, options)


def render_labels(labels: Sequence[Label], options: RenderOptions) -> None:
    rows = [[lbl.id, f"@{lbl.name}"] for lbl in labels]
    format_rows([Column("ID", "dim"), Column("Name", "green")], rows, options)


def render_completed(
    completed: Sequence[CompletedTask], projects: Sequence[Project], options: RenderOptions
) -> None:
    project_map = _by_id(projects)
    rows = [
        [
            c.task_id,
            c.completed_at or "",
            project_path(c.project_id, project_map, options.project_namespace),
            c.content,
        ]
        for c in completed
    ]
    format_rows(
        [Column("ID", "dim"), Column("CompletedDate", "cyan"), Column("Project", "magenta"), Column("Content")],
        rows,
        options,
    )


def render_karma(stats: KarmaStats, options: RenderOptions) -> None:
    rows = [
        ["Karma", f"{stats.karma:g}"],
        ["Trend", stats.karma_trend],
        ["Completed", stats.completed_count],
    ]
    format_rows([Column("Name", "cyan"), Column("Value")], rows, options)
