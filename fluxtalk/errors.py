"""Exception hierarchy."""

from __future__ import annotations


class FluxtalkError(Exception):
    """Base class for errors raised by fluxtalk."""


class ConfigError(FluxtalkError):
    """A required setting is missing or invalid."""


class EventDecodeError(FluxtalkError):
    """An upstream event payload could not be decoded."""
