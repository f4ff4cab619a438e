"""DingTalk robot webhook notifier."""

from .formatter import DingTalkMessage, format_event
from .mention import MentionKind, MentionTarget, resolve_mention
from .notifier import DeliveryResult, DingTalkNotifier
from .signing import build_query, sign

__all__ = [
    "DeliveryResult",
    "DingTalkMessage",
    "DingTalkNotifier",
    "MentionKind",
    "MentionTarget",
    "build_query",
    "format_event",
    "resolve_mention",
    "sign",
]
