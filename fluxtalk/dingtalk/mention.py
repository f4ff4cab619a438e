"""Resolution of the "at" directive into a DingTalk mention target.

The directive is one of:

* empty / whitespace: mention nobody
* ``all`` (any case): mention the whole group
* mobile numbers separated by single spaces: mention those numbers

A malformed directive never blocks the alert it is attached to; it is
logged and degrades to mentioning nobody.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from fluxtalk.utils.logging import get_logger

log = get_logger(__name__)

_ALL = "ALL"


class MentionKind(str, Enum):
    NONE = "none"
    ALL = "all"
    SPECIFIC = "specific"


@dataclass(frozen=True)
class MentionTarget:
    kind: MentionKind = MentionKind.NONE
    mobiles: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.kind == MentionKind.SPECIFIC and not self.mobiles:
            raise ValueError("a specific mention needs at least one identifier")
        if self.kind != MentionKind.SPECIFIC and self.mobiles:
            raise ValueError(f"{self.kind.value} mention cannot carry identifiers")

    @classmethod
    def none(cls) -> MentionTarget:
        return cls(MentionKind.NONE)

    @classmethod
    def all(cls) -> MentionTarget:
        return cls(MentionKind.ALL)

    @classmethod
    def specific(cls, mobiles: Iterable[str]) -> MentionTarget:
        return cls(MentionKind.SPECIFIC, tuple(mobiles))

    def to_payload(self) -> dict[str, Any]:
        """Render the ``at`` object of a robot message."""
        return {
            "atMobiles": list(self.mobiles),
            "atUserIds": [],
            "isAtAll": self.kind == MentionKind.ALL,
        }

    def text_suffix(self) -> str:
        """``@138... @139...``; DingTalk only pings numbers that also appear in the text."""
        if not self.mobiles:
            return ""
        return "@" + " @".join(self.mobiles)


def resolve_mention(raw: str | None) -> MentionTarget:
    directive = (raw or "").strip()
    if not directive:
        return MentionTarget.none()

    upper = directive.upper()
    if upper == _ALL:
        return MentionTarget.all()

    if _ALL in upper:
        log.warning(
            "mention_directive_mixed_all",
            directive=directive,
            msg="'all' must be used on its own, not combined with numbers; mentioning nobody",
        )
        return MentionTarget.none()

    if "  " in directive:
        log.warning(
            "mention_directive_double_space",
            directive=directive,
            msg="numbers must be separated by a single space; mentioning nobody",
        )
        return MentionTarget.none()

    return MentionTarget.specific(directive.split(" "))
