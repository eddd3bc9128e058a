"""Exceptions raised by the Todoist CLI core.

Every error carries the process exit code the CLI boundary should use when
the error reaches it. The core itself never prints or exits.
"""

from todoist_cli.utils import exit_codes


class TodoistCliError(Exception):
    """Base exception for all Todoist CLI errors."""

    exit_code = exit_codes.ERROR_GENERAL


class CacheError(TodoistCliError):
    """Base exception for local cache failures."""

    exit_code = exit_codes.ERROR_CACHE


class CacheNotFoundError(CacheError):
    """Raised when no cache file exists yet. Recoverable by a full sync."""


class CacheCorruptedError(CacheError):
    """Raised when the cache file exists but cannot be decoded."""


class CacheWriteError(CacheError):
    """Raised when the cache file could not be written."""


class NetworkError(TodoistCliError):
    """Raised on transport failure, timeout, or persistent server errors."""

    exit_code = exit_codes.ERROR_NETWORK


class AuthError(TodoistCliError):
    """Raised when the service rejects the API token."""

    exit_code = exit_codes.ERROR_AUTH_FAILURE


class PermissionDeniedError(TodoistCliError):
    """Raised when the account is not allowed to use a feature (premium only)."""

    exit_code = exit_codes.ERROR_PERMISSION_DENIED


class MergeError(TodoistCliError):
    """Raised when a delta cannot be applied to the local store."""

    exit_code = exit_codes.ERROR_SYNC


class CommandFailedError(TodoistCliError):
    """Raised when the service rejects a write command."""

    exit_code = exit_codes.ERROR_COMMAND_FAILED


class IdNotFoundError(TodoistCliError):
    """Raised when an id is not present in the local store."""

    exit_code = exit_codes.ERROR_NOT_FOUND

    def __init__(self, kind: str, entity_id: int):
        super().__init__(f"specified id not found: {kind} {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class UnsupportedChangeError(TodoistCliError):
    """Raised when a change action does not apply to an entity kind."""

    exit_code = exit_codes.ERROR_INVALID_ARGS


class ConfigError(TodoistCliError):
    """Raised for missing or unsafe configuration."""

    exit_code = exit_codes.ERROR_CONFIG
