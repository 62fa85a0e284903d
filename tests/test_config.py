import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from webchat_bridge.browser.base import SelectorRole
from webchat_bridge.config import (
    DEFAULT_RESPONSE_CONTAINER_SELECTOR,
    NotificationConfig,
    SessionConfig,
    load_config,
)
from webchat_bridge.factory import build_notifier
from webchat_bridge.notifications.base import ConsoleNotifier, NullNotifier


def test_load_config_reads_env_file(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "WEBCHAT_BRIDGE_SESSION__HEADLESS=false",
                "WEBCHAT_BRIDGE_SESSION__MAX_RETRIES=5",
                "WEBCHAT_BRIDGE_WORKSPACE__MAX_FILES=10",
            ]
        )
    )

    config = load_config(env_file=env_path)

    assert config.session.headless is False
    assert config.session.max_retries == 5
    assert config.workspace.max_files == 10


def test_load_config_prioritises_overrides(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text("WEBCHAT_BRIDGE_SESSION__RETRY_DELAY=4\n")

    config_path = tmp_path / "bridge.yaml"
    config_path.write_text(
        "\n".join(
            [
                "session:",
                "  response_timeout: 90",
                "  prompt_input_selector: '#prompt'",
            ]
        )
    )

    config = load_config(config_path, env_file=env_path, session={"response_timeout": 15})

    assert config.session.response_timeout == 15
    assert config.session.prompt_input_selector == "#prompt"
    assert config.session.retry_delay == 4


def test_empty_response_selector_falls_back_to_default(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        config = SessionConfig(response_container_selector="")
    assert config.response_container_selector == DEFAULT_RESPONSE_CONTAINER_SELECTOR
    assert "response_container_selector" in caplog.text


def test_selectors_are_resolved_by_role() -> None:
    config = SessionConfig(prompt_input_selector="#in", completion_indicator_selector="#done")
    assert config.selector_for(SelectorRole.PROMPT_INPUT) == "#in"
    assert config.selector_for(SelectorRole.COMPLETION_INDICATOR) == "#done"
    assert config.selector_for(SelectorRole.RESPONSE_CONTAINER) == "div.markdown"


def test_session_config_is_immutable_and_validated() -> None:
    config = SessionConfig()
    with pytest.raises(ValidationError):
        config.headless = False  # type: ignore[misc]
    with pytest.raises(ValidationError):
        SessionConfig(max_retries=0)


def test_notification_channel_from_env_file(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text("WEBCHAT_BRIDGE_NOTIFICATIONS__CHANNEL=none\n")

    config = load_config(env_file=env_path)

    assert config.notifications.model_dump() == {"channel": "none"}
    assert isinstance(build_notifier(config.notifications), NullNotifier)


def test_unknown_notification_channel_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported notification channel"):
        build_notifier(NotificationConfig(channel="pager"))
    assert isinstance(build_notifier(NotificationConfig()), ConsoleNotifier)
