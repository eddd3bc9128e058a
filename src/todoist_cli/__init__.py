"""Todoist CLI - a command-line client backed by a local sync cache."""

__version__ = "0.15.0"
