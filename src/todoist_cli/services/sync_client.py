"""Todoist Sync API client.

Defines a Protocol for testability and a concrete implementation backed by
httpx. The client only speaks the wire format: it turns responses into
:class:`Delta` objects and changes into Sync API commands, and never
touches the local store.
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Any, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, Field, ValidationError

from todoist_cli.exceptions import (
    AuthError,
    CommandFailedError,
    MergeError,
    NetworkError,
    PermissionDeniedError,
    UnsupportedChangeError,
)
from todoist_cli.models import (
    ENTITY_KINDS,
    ENTITY_MODELS,
    Change,
    ChangeAction,
    CompletedTask,
    Delta,
    KarmaStats,
    Task,
)

logger = logging.getLogger(__name__)

_BASE_URL = "https://api.todoist.com/sync/v9"
_DEFAULT_TIMEOUT = 30.0
_DEFAULT_RETRY = 3

# Sync token that asks the server for its full state.
FULL_SYNC_TOKEN = "*"

# Response keys and command prefixes per entity kind.
RESOURCE_KEYS: dict[str, str] = {
    "task": "items",
    "project": "projects",
    "label": "labels",
    "note": "notes",
}
COMMAND_PREFIXES: dict[str, str] = {
    "task": "item",
    "project": "project",
    "label": "label",
    "note": "note",
}


class SyncCommand(BaseModel):
    """A single write command in the Sync API batch format."""

    type: str
    args: dict[str, Any] = Field(default_factory=dict)
    uuid: str = Field(default_factory=lambda: str(uuid.uuid4()))
    temp_id: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


@runtime_checkable
class SyncClientProtocol(Protocol):
    """Abstract interface to the remote Sync API.

    A Protocol (not an ABC) so tests can pass any object with these
    methods without subclassing.
    """

    async def fetch_delta(self, cursor: str | None) -> Delta:
        """Return the changes since *cursor*, or full state when None."""
        ...

    async def execute(self, commands: list[SyncCommand]) -> dict[str, int]:
        """Run write commands and return the temp id mapping."""
        ...

    async def quick_add(self, text: str, *, auto_reminder: bool = False) -> Task:
        """Add a task from quick-add syntax and return it."""
        ...

    async def completed_tasks(self) -> list[CompletedTask]:
        """Return the completed-task history."""
        ...

    async def karma(self) -> KarmaStats:
        """Return karma and completion stats."""
        ...


def parse_delta(data: Any) -> Delta:
    """Split a sync response into per-kind updates and deletions.

    Records flagged ``is_deleted`` become deletion ids. Kinds the response
    does not mention are left out of the delta entirely, so they are
    neither updated nor deleted locally.

    Raises:
        MergeError: If the response is not a well-formed sync payload
    """
    if not isinstance(data, dict):
        raise MergeError("sync response is not a JSON object")
    cursor = data.get("sync_token")
    if not isinstance(cursor, str) or not cursor:
        raise MergeError("sync response has no sync_token")

    updated: dict[str, list] = {}
    deleted: dict[str, list[int]] = {}
    for kind in ENTITY_KINDS:
        key = RESOURCE_KEYS[kind]
        if key not in data:
            continue
        records = data[key]
        if not isinstance(records, list):
            raise MergeError(f"sync response field '{key}' is not a list")

        model = ENTITY_MODELS[kind]
        updated[kind] = []
        deleted[kind] = []
        for record in records:
            if not isinstance(record, dict):
                raise MergeError(f"malformed record in '{key}': {record!r}")
            try:
                if record.get("is_deleted"):
                    deleted[kind].append(int(record["id"]))
                else:
                    updated[kind].append(model.model_validate({**record, "kind": kind}))
            except (KeyError, TypeError, ValueError, ValidationError) as e:
                raise MergeError(f"malformed record in '{key}': {e}") from e

    return Delta(
        new_cursor=cursor,
        full_sync=bool(data.get("full_sync", False)),
        updated=updated,
        deleted=deleted,
    )


def _wire_args(kind: str, updates: dict[str, Any]) -> dict[str, Any]:
    """Translate entity field updates into command arguments."""
    args = dict(updates)
    if kind == "task" and "due_string" in args:
        due_string = args.pop("due_string")
        args["due"] = {"string": due_string} if due_string else None
    return args


def build_commands(
    kind: str, entity_id: int | None, change: Change
) -> tuple[list[SyncCommand], str | None]:
    """Translate a change into Sync API commands.

    Returns the commands and, for ``add``, the temp id the server will map
    to the new entity's real id.

    Raises:
        UnsupportedChangeError: If the action does not apply to *kind*
    """
    if kind not in COMMAND_PREFIXES:
        raise UnsupportedChangeError(f"unknown entity kind: {kind}")
    prefix = COMMAND_PREFIXES[kind]
    args = _wire_args(kind, change.updates)

    if change.action is ChangeAction.ADD:
        temp_id = str(uuid.uuid4())
        return [SyncCommand(type=f"{prefix}_add", args=args, temp_id=temp_id)], temp_id

    if entity_id is None:
        raise UnsupportedChangeError(f"{change.action.value} needs an id")

    if change.action is ChangeAction.MODIFY:
        commands = []
        if kind == "task" and "project_id" in args:
            commands.append(
                SyncCommand(
                    type="item_move",
                    args={"id": entity_id, "project_id": args.pop("project_id")},
                )
            )
        if args or not commands:
            commands.insert(0, SyncCommand(type=f"{prefix}_update", args={"id": entity_id, **args}))
        return commands, None

    if change.action is ChangeAction.CLOSE:
        if kind == "task":
            return [SyncCommand(type="item_close", args={"id": entity_id})], None
        if kind == "project":
            return [SyncCommand(type="project_archive", args={"id": entity_id})], None
        raise UnsupportedChangeError(f"a {kind} cannot be closed")

    return [SyncCommand(type=f"{prefix}_delete", args={"id": entity_id})], None


class SyncClient:
    """Concrete Sync API client using httpx.

    Args:
        token: Todoist API token, already resolved by the caller.
        base_url: Override API base URL (useful for testing).
        timeout: HTTP request timeout in seconds.
        retry: How many times to retry transport failures and 5xx/429.
        backoff: Base delay in seconds for exponential backoff.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = _BASE_URL,
        timeout: float = _DEFAULT_TIMEOUT,
        retry: int = _DEFAULT_RETRY,
        backoff: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._headers = {"Authorization": f"Bearer {token}"}
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retry = retry
        self._backoff = backoff
        self._transport = transport

    async def fetch_delta(self, cursor: str | None) -> Delta:
        """Fetch every entity kind changed since *cursor*."""
        token = cursor or FULL_SYNC_TOKEN
        data = await self._request(
            "POST",
            "/sync",
            data={
                "sync_token": token,
                "resource_types": json.dumps(list(RESOURCE_KEYS.values())),
            },
        )
        delta = parse_delta(data)
        logger.info(
            "fetched delta from cursor %s (full_sync=%s)", token, delta.full_sync
        )
        return delta

    async def execute(self, commands: list[SyncCommand]) -> dict[str, int]:
        """Send write commands; every command must report ``ok``."""
        data = await self._request(
            "POST",
            "/sync",
            data={"commands": json.dumps([c.to_wire() for c in commands])},
        )
        if not isinstance(data, dict):
            raise MergeError("command response is not a JSON object")

        statuses = data.get("sync_status") or {}
        for command in commands:
            status = statuses.get(command.uuid)
            if status != "ok":
                message = status.get("error") if isinstance(status, dict) else status
                raise CommandFailedError(
                    f"{command.type} failed: {message or 'no status returned'}"
                )

        mapping = data.get("temp_id_mapping") or {}
        try:
            return {temp_id: int(real_id) for temp_id, real_id in mapping.items()}
        except (AttributeError, TypeError, ValueError) as e:
            raise MergeError(f"malformed temp_id_mapping: {mapping!r}") from e

    async def quick_add(self, text: str, *, auto_reminder: bool = False) -> Task:
        form = {"text": text}
        if auto_reminder:
            form["auto_reminder"] = "true"
        data = await self._request("POST", "/quick/add", data=form)
        if not isinstance(data, dict):
            raise MergeError("quick add response is not a JSON object")
        try:
            return Task.model_validate({**data, "kind": "task"})
        except ValidationError as e:
            raise MergeError(f"malformed quick add response: {e}") from e

    async def completed_tasks(self) -> list[CompletedTask]:
        """Return completed tasks (premium accounts only)."""
        data = await self._request("GET", "/completed/get_all")
        items = data.get("items", []) if isinstance(data, dict) else []
        try:
            return [CompletedTask.model_validate(item) for item in items]
        except ValidationError as e:
            raise MergeError(f"malformed completed tasks response: {e}") from e

    async def karma(self) -> KarmaStats:
        data = await self._request("GET", "/completed/get_stats")
        if not isinstance(data, dict):
            raise MergeError("stats response is not a JSON object")
        try:
            return KarmaStats.model_validate(data)
        except ValidationError as e:
            raise MergeError(f"malformed stats response: {e}") from e

    async def _request(
        self,
        method: str,
        path: str,
        *,
        data: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Execute a request, retrying transport failures and server errors."""
        url = f"{self._base_url}{path}"
        last_error: NetworkError | None = None

        for attempt in range(self._retry + 1):
            try:
                async with httpx.AsyncClient(
                    timeout=self._timeout, transport=self._transport
                ) as client:
                    response = await client.request(
                        method, url, headers=self._headers, data=data, params=params
                    )
            except httpx.TimeoutException as e:
                last_error = NetworkError(
                    f"request to {path} timed out after {self._timeout}s"
                )
                last_error.__cause__ = e
            except httpx.RequestError as e:
                last_error = NetworkError(f"request to {path} failed: {e}")
                last_error.__cause__ = e
            else:
                if response.status_code == 401:
                    raise AuthError("Invalid Todoist API token - check your credentials.")
                if response.status_code == 403:
                    raise PermissionDeniedError(
                        "Insufficient permissions (this feature may be premium only)."
                    )
                if response.status_code == 429 or response.status_code >= 500:
                    last_error = NetworkError(
                        f"server returned {response.status_code} for {path}"
                    )
                elif response.status_code >= 400:
                    raise CommandFailedError(
                        f"server rejected request ({response.status_code}): {response.text}"
                    )
                else:
                    try:
                        return response.json()
                    except ValueError as e:
                        raise MergeError(f"response from {path} is not JSON") from e

            logger.warning(
                "attempt %d/%d for %s failed: %s",
                attempt + 1,
                self._retry + 1,
                path,
                last_error,
            )
            if attempt < self._retry:
                await asyncio.sleep(self._backoff * 2**attempt)

        assert last_error is not None
        raise last_error
