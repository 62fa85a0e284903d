"""Configuration models for webchat bridge."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .browser.base import SelectorRole

LOGGER = logging.getLogger(__name__)

CHAT_ENDPOINT_URL = "https://chat.openai.com"
DEFAULT_PROMPT_INPUT_SELECTOR = '[data-testid="prompt-textarea"]'
DEFAULT_COMPLETION_INDICATOR_SELECTOR = '[data-testid="regenerate-response-button"]'
DEFAULT_RESPONSE_CONTAINER_SELECTOR = "div.markdown"


class SessionConfig(BaseModel):
    """Settings for one browser session. Timeouts and delays are in seconds."""

    model_config = ConfigDict(frozen=True)

    executable_path: Optional[Path] = None
    headless: bool = True
    launch_args: list[str] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-dev-shm-usage"]
    )
    max_retries: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=1.0, ge=0)
    prompt_input_selector: str = DEFAULT_PROMPT_INPUT_SELECTOR
    completion_indicator_selector: str = DEFAULT_COMPLETION_INDICATOR_SELECTOR
    response_container_selector: str = DEFAULT_RESPONSE_CONTAINER_SELECTOR
    initial_load_timeout: float = Field(default=30.0, gt=0)
    response_timeout: float = Field(default=60.0, gt=0)
    content_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Wait for the response container to render non-empty content.",
    )
    typing_delay: float = Field(default=0.02, ge=0)
    endpoint_url: str = CHAT_ENDPOINT_URL

    @field_validator("executable_path", mode="before")
    @classmethod
    def _blank_path_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("response_container_selector", mode="before")
    @classmethod
    def _default_response_container(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            LOGGER.warning(
                "response_container_selector is empty, using default %r",
                DEFAULT_RESPONSE_CONTAINER_SELECTOR,
            )
            return DEFAULT_RESPONSE_CONTAINER_SELECTOR
        return value

    def selector_for(self, role: SelectorRole) -> str:
        if role == SelectorRole.PROMPT_INPUT:
            return self.prompt_input_selector
        if role == SelectorRole.COMPLETION_INDICATOR:
            return self.completion_indicator_selector
        if role == SelectorRole.RESPONSE_CONTAINER:
            return self.response_container_selector
        raise ValueError(f"Unknown selector role: {role}")


class WorkspaceConfig(BaseModel):
    """Settings for the local workspace commands act on."""

    root: Optional[Path] = None
    max_files: int = Field(default=100, ge=1)
    terminal_name: str = "webchat-bridge"


class UIConfig(BaseModel):
    """Presentation settings for the console host."""

    webview_title: str = "Chat Response"
    status_duration: float = 3.0
    insert_output: Optional[Path] = Field(
        default=None,
        description="File that receives inserted text; printed to the console when unset.",
    )


class NotificationConfig(BaseModel):
    """Notification channel settings."""

    channel: str = Field(default="console")


class BridgeConfig(BaseSettings):
    """Top-level configuration for the bridge."""

    model_config = SettingsConfigDict(
        env_prefix="WEBCHAT_BRIDGE_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    session: SessionConfig = Field(default_factory=SessionConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)


def load_config(
    path: Path | None = None,
    *,
    env_file: Path | None = None,
    **overrides: object,
) -> BridgeConfig:
    """Load configuration from an optional YAML file, the environment and overrides."""

    data: dict[str, Any] = {}
    if path:
        import yaml

        data = yaml.safe_load(path.read_text()) or {}
    if overrides:
        _deep_update(data, overrides)
    settings_kwargs: dict[str, object] = {}
    if env_file is not None:
        settings_kwargs["_env_file"] = env_file
    config = BridgeConfig(**data, **settings_kwargs)
    if not data:
        return config

    merged = config.model_dump(mode="python")
    _deep_update(merged, data)
    return BridgeConfig.model_validate(merged)


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
