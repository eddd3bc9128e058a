"""Tests for output formatters."""

import json

import pytest
import yaml

from todoist_cli.models import Due, KarmaStats, Label, Project, Task
from todoist_cli.utils.ui.formatters import (
    Column,
    RenderOptions,
    content_text,
    due_text,
    format_rows,
    label_text,
    priority_text,
    project_path,
    render_karma,
    render_projects,
)

COLUMNS = [Column("ID"), Column("Name")]
ROWS = [[1, "alpha"], [2, None]]


class TestFormatRows:
    def test_tsv(self, capsys):
        format_rows(COLUMNS, ROWS, RenderOptions())
        assert capsys.readouterr().out == "1\talpha\n2\t\n"

    def test_tsv_header(self, capsys):
        format_rows(COLUMNS, ROWS, RenderOptions(header=True))
        assert capsys.readouterr().out.splitlines()[0] == "ID\tName"

    def test_csv_quotes_commas(self, capsys):
        format_rows(COLUMNS, [[1, "a, b"]], RenderOptions(output="csv", header=True))
        assert capsys.readouterr().out.splitlines() == ["ID,Name", '1,"a, b"']

    def test_json(self, capsys):
        format_rows(COLUMNS, ROWS, RenderOptions(output="json"))
        assert json.loads(capsys.readouterr().out) == [
            {"ID": "1", "Name": "alpha"},
            {"ID": "2", "Name": ""},
        ]

    def test_yaml(self, capsys):
        format_rows(COLUMNS, ROWS, RenderOptions(output="yaml"))
        assert yaml.safe_load(capsys.readouterr().out)[0] == {"ID": "1", "Name": "alpha"}


@pytest.mark.parametrize("priority, shown", [(4, "p1"), (3, "p2"), (2, "p3"), (1, "p4")])
def test_priority_text(priority, shown):
    assert priority_text(priority) == shown


class TestProjectPath:
    projects = {
        1: Project(id=1, name="Work"),
        2: Project(id=2, name="Clients", parent_id=1),
        3: Project(id=3, name="Acme", parent_id=2),
    }

    def test_plain(self):
        assert project_path(3, self.projects, namespace=False) == "#Acme"

    def test_namespace(self):
        assert project_path(3, self.projects, namespace=True) == "#Work:Clients:Acme"

    def test_unknown(self):
        assert project_path(99, self.projects, namespace=False) == "#?"
        assert project_path(None, self.projects, namespace=True) == "#?"

    def test_cycle_terminates(self):
        looped = {1: Project(id=1, name="A", parent_id=2), 2: Project(id=2, name="B", parent_id=1)}
        assert project_path(1, looped, namespace=True) == "#B:A"


def test_label_text():
    labels = {5: Label(id=5, name="home")}
    assert label_text([5, "errand", 9], labels) == "@home,@errand,@?"


def test_due_text():
    assert due_text(Task(id=1)) == ""
    assert due_text(Task(id=1, due=Due(date="2024-05-01", string="May 1"))) == "2024-05-01"
    assert due_text(Task(id=1, due=Due(string="every day"))) == "every day"


class TestContentText:
    tasks = {
        1: Task(id=1, content="root"),
        2: Task(id=2, content="mid", parent_id=1),
        3: Task(id=3, content="leaf", parent_id=2),
    }

    def test_plain(self):
        assert content_text(self.tasks[3], self.tasks, RenderOptions()) == "leaf"

    def test_namespace(self):
        assert content_text(self.tasks[3], self.tasks, RenderOptions(namespace=True)) == "root:mid:leaf"

    def test_indent(self):
        assert content_text(self.tasks[3], self.tasks, RenderOptions(indent=True)) == "    leaf"


def test_render_projects_skips_archived(capsys):
    projects = [Project(id=1, name="Live"), Project(id=2, name="Old", is_archived=True)]
    render_projects(projects, RenderOptions())
    assert capsys.readouterr().out == "1\t#Live\n"


def test_render_karma_json(capsys):
    render_karma(KarmaStats(karma=812.5, karma_trend="down", completed_count=3), RenderOptions(output="json"))
    assert json.loads(capsys.readouterr().out) == [
        {"Name": "Karma", "Value": "812.5"},
        {"Name": "Trend", "Value": "down"},
        {"Name": "Completed", "Value": "3"},
    ]
