"""Configuration management with Pydantic Settings + optional YAML."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fluxtalk.errors import ConfigError

DEFAULT_ENDPOINT = "https://oapi.dingtalk.com/robot/send"
DEFAULT_DISPLAY_TIMEZONE = "Asia/Shanghai"


class DingTalkConfig(BaseModel):
    access_token: str = ""
    secret: str = ""
    # Raw "at" directive: "", "all", or space separated mobile numbers
    at_num: str = ""
    endpoint: str = DEFAULT_ENDPOINT
    display_timezone: str = DEFAULT_DISPLAY_TIMEZONE

    model_config = {"frozen": True}

    @field_validator("display_timezone")
    @classmethod
    def _known_zone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {value!r}") from exc
        return value

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.display_timezone)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FLUXTALK_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    dingtalk: DingTalkConfig = Field(default_factory=DingTalkConfig)
    log_level: str = "INFO"
    log_json: bool = False

    def require_dingtalk(self) -> DingTalkConfig:
        """Return the DingTalk config, failing fast if the access token is unset."""
        if not self.dingtalk.access_token.strip():
            raise ConfigError(
                "dingtalk.access_token is required "
                "(set FLUXTALK_DINGTALK__ACCESS_TOKEN or the YAML key)"
            )
        return self.dingtalk


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Build settings from ``FLUXTALK_*`` env vars and an optional YAML file.

    The file comes from ``config_path`` or ``FLUXTALK_CONFIG``; without
    either, only the environment is used. A named file that cannot be read
    or parsed is a ``ConfigError``. Keys set in the file are passed as init
    kwargs, so they win over the environment.
    """
    config_path = config_path or os.environ.get("FLUXTALK_CONFIG")
    if not config_path:
        return Settings()
    return Settings(**_read_yaml(Path(config_path)))
