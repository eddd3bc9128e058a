"""Tests for exit codes and their mapping from exceptions."""

import pytest

from todoist_cli import exceptions
from todoist_cli.utils import exit_codes
from todoist_cli.utils.exit_codes import get_exit_code_description, get_exit_code_name

ALL_CODES = [
    exit_codes.SUCCESS,
    exit_codes.ERROR_GENERAL,
    exit_codes.ERROR_INVALID_ARGS,
    exit_codes.ERROR_AUTH_FAILURE,
    exit_codes.ERROR_NETWORK,
    exit_codes.ERROR_NOT_FOUND,
    exit_codes.ERROR_PERMISSION_DENIED,
    exit_codes.ERROR_CACHE,
    exit_codes.ERROR_SYNC,
    exit_codes.ERROR_COMMAND_FAILED,
    exit_codes.ERROR_CONFIG,
]


def test_codes_are_unique():
    assert len(ALL_CODES) == len(set(ALL_CODES))


def test_success_is_falsy():
    assert not exit_codes.SUCCESS


@pytest.mark.parametrize("code", ALL_CODES)
def test_every_code_has_name_and_description(code):
    assert not get_exit_code_name(code).startswith("UNKNOWN")
    assert get_exit_code_description(code) != "Unknown error"


def test_unknown_code():
    assert get_exit_code_name(99) == "UNKNOWN(99)"
    assert get_exit_code_description(99) == "Unknown error"


@pytest.mark.parametrize(
    "error, code",
    [
        (exceptions.TodoistCliError("x"), exit_codes.ERROR_GENERAL),
        (exceptions.CacheNotFoundError("x"), exit_codes.ERROR_CACHE),
        (exceptions.CacheCorruptedError("x"), exit_codes.ERROR_CACHE),
        (exceptions.CacheWriteError("x"), exit_codes.ERROR_CACHE),
        (exceptions.NetworkError("x"), exit_codes.ERROR_NETWORK),
        (exceptions.AuthError("x"), exit_codes.ERROR_AUTH_FAILURE),
        (exceptions.PermissionDeniedError("x"), exit_codes.ERROR_PERMISSION_DENIED),
        (exceptions.MergeError("x"), exit_codes.ERROR_SYNC),
        (exceptions.CommandFailedError("x"), exit_codes.ERROR_COMMAND_FAILED),
        (exceptions.IdNotFoundError("task", 1), exit_codes.ERROR_NOT_FOUND),
        (exceptions.UnsupportedChangeError("x"), exit_codes.ERROR_INVALID_ARGS),
        (exceptions.ConfigError("x"), exit_codes.ERROR_CONFIG),
    ],
)
def test_exception_exit_codes(error, code):
    assert error.exit_code == code


def test_id_not_found_message():
    error = exceptions.IdNotFoundError("project", 42)
    assert str(error) == "specified id not found: project 42"
    assert (error.kind, error.entity_id) == ("project", 42)
