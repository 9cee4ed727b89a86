"""Configuration models for the mock LLM server."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import MatchMode

DEFAULT_LISTEN_ADDR = "127.0.0.1:0"


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or validated."""


class MessageMatch(BaseModel):
    """Match section for vendors whose turns are called messages."""

    match_type: MatchMode
    message: Any = None


class ContentMatch(BaseModel):
    """Match section for Google, whose turns are called contents."""

    match_type: MatchMode
    content: Any = None


class OpenAIMockConfig(BaseModel):
    name: str
    match: MessageMatch
    response: Any = Field(default_factory=dict)


class AnthropicMockConfig(BaseModel):
    name: str
    match: MessageMatch
    response: Any = Field(default_factory=dict)


class GoogleMockConfig(BaseModel):
    name: str
    match: ContentMatch
    response: Any = Field(default_factory=dict)


class MockServerConfig(BaseSettings):
    """Top-level configuration: canned responses per vendor plus the listen address."""

    model_config = SettingsConfigDict(
        env_prefix="MOCK_LLM_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    openai: list[OpenAIMockConfig] = Field(default_factory=list)
    anthropic: list[AnthropicMockConfig] = Field(default_factory=list)
    google: list[GoogleMockConfig] = Field(default_factory=list)
    listen_addr: Optional[str] = Field(
        default=None,
        description="host:port to bind; an empty value means 127.0.0.1 on an ephemeral port.",
    )

    def resolved_listen_addr(self) -> str:
        return self.listen_addr or DEFAULT_LISTEN_ADDR


def load_config(
    path: Path | None = None,
    *,
    env_file: Path | None = None,
    **overrides: object,
) -> MockServerConfig:
    """Load configuration from an optional YAML or JSON file and overrides."""

    data: dict[str, Any] = {}
    if path:
        data = _read_config_file(path)
    if overrides:
        _deep_update(data, overrides)
    settings_kwargs: dict[str, object] = {}
    if env_file is not None:
        settings_kwargs["_env_file"] = env_file
    try:
        return MockServerConfig(**data, **settings_kwargs)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {path}: {exc}") from exc
    try:
        # JSON is a subset of YAML, so one parser covers both formats.
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse config file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")
    return data


def _deep_update(target: dict[str, Any], updates: Mapping[str, Any]) -> None:
    """Recursively merge ``updates`` into ``target`` in-place."""

    for key, value in updates.items():
        if (
            isinstance(value, Mapping)
            and isinstance(existing := target.get(key), Mapping)
        ):
            nested: dict[str, Any]
            if isinstance(existing, dict):
                nested = existing
            else:
                nested = dict(existing)
            _deep_update(nested, value)
            target[key] = nested
        else:
            target[key] = value
