"""Conversion of Flux events into DingTalk markdown messages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any
from zoneinfo import ZoneInfo

from fluxtalk.config import DEFAULT_DISPLAY_TIMEZONE
from fluxtalk.dingtalk.mention import MentionTarget, resolve_mention
from fluxtalk.events import AutoReleaseEvent, Event, SyncEvent
from fluxtalk.utils.logging import get_logger

log = get_logger(__name__)

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
PARAGRAPH = "\n\n"

AUTO_RELEASE_TITLE = "EventAutoRelease"
SYNC_ERRORS_TITLE = "Sync errors"

_AUTO_RELEASE_HEADER = "<font color=#008000 size=5 >上线通知 </font>"
_SYNC_ERRORS_HEADER = "<font color=#FF0000 size=5 >同步错误，开发忽略！！！ </font>"


@dataclass
class DingTalkMessage:
    title: str
    text: str
    mention: MentionTarget = field(default_factory=MentionTarget.none)
    msgtype: str = "markdown"

    def to_payload(self) -> dict[str, Any]:
        return {
            "msgtype": self.msgtype,
            "markdown": {"title": self.title, "text": self.text},
            "at": self.mention.to_payload(),
        }


def format_timestamp(value: datetime, tz: tzinfo) -> str:
    return value.astimezone(tz).strftime(TIME_FORMAT)


def format_event(
    event: Event,
    at_directive: str = "",
    display_tz: tzinfo | None = None,
) -> DingTalkMessage | None:
    """Build the robot message for an event, or None if the event is not worth sending.

    Only auto-release events and sync events carrying errors produce a
    message. For auto-releases only the first image change is reported.
    """
    tz = display_tz or ZoneInfo(DEFAULT_DISPLAY_TIMEZONE)

    if isinstance(event, AutoReleaseEvent):
        return _auto_release_message(event, tz)
    if isinstance(event, SyncEvent):
        return _sync_errors_message(event, at_directive)

    log.debug("event_not_notifiable", kind=getattr(event.kind, "value", event.kind))
    return None


def _auto_release_message(event: AutoReleaseEvent, tz: tzinfo) -> DingTalkMessage | None:
    if not event.changes:
        log.warning("autorelease_without_changes", event_id=event.id)
        return None

    # First change only, even when several workloads changed
    change = event.changes[0]
    workloads = PARAGRAPH.join(event.workload_ids)

    text = (
        f"{_AUTO_RELEASE_HEADER}{PARAGRAPH}"
        f"**开始时间**：{format_timestamp(event.started_at, tz)}{PARAGRAPH}"
        f"**结束时间**：{format_timestamp(event.ended_at, tz)}{PARAGRAPH}"
        f"**上线应用**：{PARAGRAPH}{workloads}{PARAGRAPH}"
        f"**新镜像**：{change.new_image}{PARAGRAPH}"
        f"**旧镜像**：{change.old_image}"
    )
    return DingTalkMessage(title=AUTO_RELEASE_TITLE, text=text)


def _sync_errors_message(event: SyncEvent, at_directive: str) -> DingTalkMessage | None:
    if not event.errors:
        return None

    mention = resolve_mention(at_directive)
    errors = PARAGRAPH.join(err.error for err in event.errors)
    text = f"{_SYNC_ERRORS_HEADER}{PARAGRAPH}**错误信息**：{errors}"
    suffix = mention.text_suffix()
    if suffix:
        text += f"{PARAGRAPH}{suffix}"
    return DingTalkMessage(title=SYNC_ERRORS_TITLE, text=text, mention=mention)
