"""
Exit codes for Todoist CLI.

Semantic exit codes so scripts wrapping the CLI can tell what happened
without parsing error messages.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# API token missing or rejected
ERROR_AUTH_FAILURE = 3

# Network or API error (server unreachable, timeout, etc.)
ERROR_NETWORK = 4

# Id not present in the local cache
ERROR_NOT_FOUND = 5

# Feature not available for this account
ERROR_PERMISSION_DENIED = 6

# Local cache could not be read or written
ERROR_CACHE = 7

# Server delta could not be merged
ERROR_SYNC = 8

# Server rejected a write command
ERROR_COMMAND_FAILED = 9

# Configuration missing or unsafe
ERROR_CONFIG = 10


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_AUTH_FAILURE: "ERROR_AUTH_FAILURE",
        ERROR_NETWORK: "ERROR_NETWORK",
        ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
        ERROR_PERMISSION_DENIED: "ERROR_PERMISSION_DENIED",
        ERROR_CACHE: "ERROR_CACHE",
        ERROR_SYNC: "ERROR_SYNC",
        ERROR_COMMAND_FAILED: "ERROR_COMMAND_FAILED",
        ERROR_CONFIG: "ERROR_CONFIG",
    }
    return code_names.get(code, f"UNKNOWN({code})")


def get_exit_code_description(code: int) -> str:
    """Get a human-readable description of an exit code."""
    descriptions = {
        SUCCESS: "Command executed successfully",
        ERROR_GENERAL: "A general error occurred",
        ERROR_INVALID_ARGS: "Invalid arguments or validation error",
        ERROR_AUTH_FAILURE: "API token rejected - check your credentials",
        ERROR_NETWORK: "Network or API error - check connection and retry",
        ERROR_NOT_FOUND: "Id not found in local cache - try 'todoist sync'",
        ERROR_PERMISSION_DENIED: "Not available for this account",
        ERROR_CACHE: "Local cache could not be read or written",
        ERROR_SYNC: "Server response could not be applied; cache left unchanged",
        ERROR_COMMAND_FAILED: "The server rejected the command",
        ERROR_CONFIG: "Configuration missing or unsafe",
    }
    return descriptions.get(code, "Unknown error")
