"""Decoders turning kubectl JSON output into view records.

All functions here are pure: they take the raw stdout text and return
records, raising ``ParseError`` when the text is not the expected JSON.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any

from kubedesk.storage.models import Context, Namespace, Pod

PLACEHOLDER = "-"

_MINUTE = 60
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR
_WEEK = 7 * _DAY
_MONTH = 30 * _DAY


class ParseError(ValueError):
    """Raised when kubectl output cannot be decoded."""


def _load(stdout: str) -> dict[str, Any]:
    try:
        data = json.loads(stdout)
    except json.JSONDecodeError as e:
        raise ParseError(str(e)) from e
    if not isinstance(data, dict):
        raise ParseError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _list_field(obj: dict[str, Any], key: str) -> list[Any]:
    value = obj.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ParseError(f"field '{key}' must be a list")
    return value


def _object_field(obj: Any, key: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        raise ParseError(f"expected an object containing '{key}'")
    value = obj.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ParseError(f"field '{key}' must be an object")
    return value


def _str_field(obj: dict[str, Any], key: str) -> str:
    value = obj.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ParseError(f"field '{key}' must be a string")
    return value


def parse_namespaces(stdout: str) -> list[Namespace]:
    """Parse ``kubectl get ns -o json``, keeping API order."""
    data = _load(stdout)
    namespaces: list[Namespace] = []
    for item in _list_field(data, "items"):
        name = _str_field(_object_field(item, "metadata"), "name")
        if name:
            namespaces.append(Namespace(name=name))
    return namespaces


def parse_contexts(stdout: str) -> list[Context]:
    """Parse ``kubectl config view -o json``."""
    data = _load(stdout)
    contexts: list[Context] = []
    for entry in _list_field(data, "contexts"):
        if not isinstance(entry, dict):
            raise ParseError("context entries must be objects")
        name = _str_field(entry, "name")
        if name:
            contexts.append(Context(name=name))
    return contexts


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp as emitted by the API server."""
    if not isinstance(value, str):
        raise ParseError(f"invalid timestamp: {value!r}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ParseError(f"invalid timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_age(age: timedelta) -> str:
    """Format an age using the largest unit that fits, truncating."""
    seconds = age.total_seconds()
    if seconds < _MINUTE:
        return f"{int(seconds)}s"
    if seconds < _HOUR:
        return f"{int(seconds / _MINUTE)}m"
    if seconds < _DAY:
        return f"{int(seconds / _HOUR)}h"
    if seconds < _WEEK:
        return f"{int(seconds / _DAY)}d"
    if seconds < _MONTH:
        return f"{int(seconds / _WEEK)}w"
    return f"{int(seconds / _MONTH)}mo"


def _pod_status(status: dict[str, Any], containers: list[Any]) -> str:
    # Later containers override earlier ones; terminated beats waiting.
    result = _str_field(status, "phase")
    if _str_field(status, "reason"):
        result = status["reason"]
    for cs in containers:
        state = _object_field(cs, "state")
        waiting = _object_field(state, "waiting")
        if _str_field(waiting, "reason"):
            result = waiting["reason"]
        terminated = _object_field(state, "terminated")
        if _str_field(terminated, "reason"):
            result = terminated["reason"]
    return result


def _parse_pod(item: Any, now: datetime) -> Pod:
    metadata = _object_field(item, "metadata")
    status = _object_field(item, "status")
    containers = _list_field(status, "containerStatuses")

    ready_count = 0
    restarts = 0
    for cs in containers:
        if not isinstance(cs, dict):
            raise ParseError("container statuses must be objects")
        ready = cs.get("ready")
        if ready is None:
            ready = False
        if not isinstance(ready, bool):
            raise ParseError("ready must be a boolean")
        if ready:
            ready_count += 1
        count = cs.get("restartCount") or 0
        if not isinstance(count, int) or isinstance(count, bool):
            raise ParseError("restartCount must be an integer")
        restarts += count

    age = PLACEHOLDER
    created = _str_field(metadata, "creationTimestamp")
    if created:
        age = format_age(now - parse_timestamp(created))

    return Pod(
        name=_str_field(metadata, "name"),
        status=_pod_status(status, containers),
        ready=f"{ready_count}/{len(containers)}",
        restarts=restarts,
        age=age,
        node=_str_field(status, "nodeName") or PLACEHOLDER,
        has_owner=bool(_list_field(metadata, "ownerReferences")),
    )


def parse_pods(stdout: str, now: datetime | None = None) -> list[Pod]:
    """Parse ``kubectl get pods -o json`` into table rows.

    ``now`` is the reference time for ages and defaults to the current UTC time.
    """
    data = _load(stdout)
    if now is None:
        now = datetime.now(timezone.utc)
    return [_parse_pod(item, now) for item in _list_field(data, "items")]
