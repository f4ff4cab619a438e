"""Typed Flux CD events consumed by the notifiers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from fluxtalk.errors import EventDecodeError


# ---------------------------------------------------------------------------
# Event kinds
# ---------------------------------------------------------------------------

class EventKind(str, Enum):
    COMMIT = "commit"
    SYNC = "sync"
    RELEASE = "release"
    AUTO_RELEASE = "autorelease"
    AUTOMATE = "automate"
    DEAUTOMATE = "deautomate"
    LOCK = "lock"
    UNLOCK = "unlock"
    UPDATE_POLICY = "update_policy"


# ---------------------------------------------------------------------------
# Metadata records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ImageChange:
    workload_id: str
    container: str
    old_image: str
    new_image: str


@dataclass(frozen=True)
class SyncError:
    error: str
    workload_id: str = ""
    path: str = ""


@dataclass(frozen=True)
class Commit:
    revision: str
    message: str = ""


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Event:
    kind: EventKind | str
    started_at: datetime = field(default_factory=_utcnow)
    ended_at: datetime = field(default_factory=_utcnow)
    workload_ids: tuple[str, ...] = ()
    id: int = 0
    message: str = ""


@dataclass(frozen=True)
class AutoReleaseEvent(Event):
    kind: EventKind = field(default=EventKind.AUTO_RELEASE, init=False)
    changes: tuple[ImageChange, ...] = ()


@dataclass(frozen=True)
class SyncEvent(Event):
    kind: EventKind = field(default=EventKind.SYNC, init=False)
    errors: tuple[SyncError, ...] = ()
    commits: tuple[Commit, ...] = ()


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _get(data: Any, *keys: str, default: Any = None) -> Any:
    """Return the first present key; Flux mixes tagged and untagged field names."""
    if not isinstance(data, dict):
        raise EventDecodeError(f"expected an object, got {type(data).__name__}")
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return default


def _items(data: Any, *keys: str) -> list[Any]:
    value = _get(data, *keys, default=[])
    if not isinstance(value, list):
        raise EventDecodeError(f"{keys[0]} must be a list, got {type(value).__name__}")
    return value


# Go emits RFC 3339 with nanoseconds; datetime keeps microseconds
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def _parse_time(value: Any, name: str) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        text = _FRACTION_RE.sub(r"\1", value)
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise EventDecodeError(f"invalid {name}: {value!r}") from exc
    else:
        raise EventDecodeError(f"missing {name}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _kind(raw: str) -> EventKind | str:
    try:
        return EventKind(raw)
    except ValueError:
        return raw


def _image_changes(metadata: dict[str, Any]) -> tuple[ImageChange, ...]:
    spec = _get(metadata, "spec", "Spec", default={})
    changes = []
    for change in _items(spec, "Changes", "changes"):
        container = _get(change, "Container", "container", default={})
        changes.append(
            ImageChange(
                workload_id=str(_get(change, "WorkloadID", "workloadID", default="")),
                container=str(_get(container, "Name", "name", default="")),
                old_image=str(_get(container, "Image", "image", default="")),
                new_image=str(_get(change, "ImageID", "imageID", default="")),
            )
        )
    return tuple(changes)


def _sync_errors(metadata: dict[str, Any]) -> tuple[SyncError, ...]:
    return tuple(
        SyncError(
            error=str(_get(err, "Error", "error", default="")),
            workload_id=str(_get(err, "ID", "id", default="")),
            path=str(_get(err, "Path", "path", default="")),
        )
        for err in _items(metadata, "errors", "Errors")
    )


def _commits(metadata: dict[str, Any]) -> tuple[Commit, ...]:
    return tuple(
        Commit(
            revision=str(_get(c, "revision", "Revision", default="")),
            message=str(_get(c, "message", "Message", default="")),
        )
        for c in _items(metadata, "commits", "Commits")
    )


def _event_id(value: Any) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise EventDecodeError(f"invalid id: {value!r}") from exc


def parse_event(payload: dict[str, Any]) -> Event:
    """Decode a Flux JSON event into the matching typed event."""
    if not isinstance(payload, dict):
        raise EventDecodeError(f"expected an event object, got {type(payload).__name__}")
    raw_type = payload.get("type")
    if not raw_type or not isinstance(raw_type, str):
        raise EventDecodeError("event has no type")

    common: dict[str, Any] = {
        "started_at": _parse_time(payload.get("startedAt"), "startedAt"),
        "ended_at": _parse_time(payload.get("endedAt"), "endedAt"),
        "workload_ids": tuple(str(w) for w in _items(payload, "serviceIDs")),
        "id": _event_id(payload.get("id")),
        "message": payload.get("message") or "",
    }
    metadata = payload.get("metadata") or {}
    kind = _kind(raw_type)

    if kind == EventKind.AUTO_RELEASE:
        return AutoReleaseEvent(changes=_image_changes(metadata), **common)
    if kind == EventKind.SYNC:
        return SyncEvent(
            errors=_sync_errors(metadata), commits=_commits(metadata), **common
        )
    return Event(kind=kind, **common)
