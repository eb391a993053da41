"""Unit tests for service configuration loading."""

from __future__ import annotations

import pytest

from clusternotify.config import ServiceConfig, parse_event_type_aliases
from clusternotify.errors import ConfigError
from clusternotify.events import UpgradeEvent


def test_defaults_from_empty_environment() -> None:
    """An empty environment yields a logging-only configuration."""
    config = ServiceConfig.from_env({})

    assert config.project_id == ""
    assert config.webhook.url is None
    assert config.webhook.configured is False
    assert config.webhook.timeout_s == 5.0
    assert config.webhook.retry.max_attempts == 4
    assert config.notify_node_pool_upgrades is False
    assert config.event_type_aliases == ()
    assert config.log_level == "INFO"
    assert (config.host, config.port) == ("0.0.0.0", 8080)  # noqa: S104


def test_reads_all_variables() -> None:
    """Every supported variable is applied."""
    config = ServiceConfig.from_env(
        {
            "GCP_PROJECT": " my-project ",
            "SLACK_WEBHOOK": "https://hooks.slack.com/services/T/B/X",
            "SLACK_TIMEOUT_S": "2.5",
            "SLACK_MAX_ATTEMPTS": "6",
            "SLACK_BACKOFF_S": "0",
            "NOTIFY_NODE_POOL_UPGRADES": "yes",
            "EVENT_TYPE_ALIASES": (
                "ClusterUpgrade=UpgradeEvent, Bulletin=SecurityBulletinEvent"
            ),
            "LOG_LEVEL": "debug",
            "HOST": "127.0.0.1",
            "PORT": "9000",
        }
    )

    assert config.project_id == "my-project"
    assert config.webhook.url == "https://hooks.slack.com/services/T/B/X"
    assert config.webhook.timeout_s == 2.5
    assert config.webhook.retry.max_attempts == 6
    assert config.webhook.retry.backoff_s == 0.0
    assert config.notify_node_pool_upgrades is True
    assert config.event_type_aliases == (
        ("ClusterUpgrade", "UpgradeEvent"),
        ("Bulletin", "SecurityBulletinEvent"),
    )
    assert config.log_level == "debug"
    assert (config.host, config.port) == ("127.0.0.1", 9000)


@pytest.mark.parametrize(
    ("env_var", "value"),
    [
        ("SLACK_WEBHOOK", "hooks.slack.com/services/T/B/X"),
        ("SLACK_WEBHOOK", "ftp://hooks.slack.com/x"),
        ("SLACK_TIMEOUT_S", "soon"),
        ("SLACK_TIMEOUT_S", "0"),
        ("SLACK_MAX_ATTEMPTS", "0"),
        ("SLACK_MAX_ATTEMPTS", "2.5"),
        ("SLACK_BACKOFF_S", "-1"),
        ("NOTIFY_NODE_POOL_UPGRADES", "maybe"),
        ("EVENT_TYPE_ALIASES", "NoEquals"),
        ("EVENT_TYPE_ALIASES", "Alias=NoSuchEvent"),
        ("PORT", "http"),
        ("PORT", "0"),
        ("PORT", "70000"),
    ],
)
def test_rejects_invalid_values(env_var: str, value: str) -> None:
    """Invalid values fail at start-up and name the variable."""
    with pytest.raises(ConfigError, match=env_var):
        ServiceConfig.from_env({env_var: value})


def test_blank_numbers_use_defaults() -> None:
    """Blank numeric variables fall back to their defaults."""
    config = ServiceConfig.from_env({"SLACK_TIMEOUT_S": " ", "SLACK_MAX_ATTEMPTS": ""})

    assert config.webhook.timeout_s == 5.0
    assert config.webhook.retry.max_attempts == 4


def test_build_registry_includes_aliases_and_type_urls() -> None:
    """The registry knows type URLs plus configured aliases."""
    config = ServiceConfig(event_type_aliases=(("ClusterUpgrade", "UpgradeEvent"),))

    registry = config.build_registry()

    assert registry.lookup("ClusterUpgrade") is UpgradeEvent
    assert (
        registry.lookup("type.googleapis.com/google.container.v1beta1.UpgradeEvent")
        is UpgradeEvent
    )


def test_parse_event_type_aliases_skips_empty_entries() -> None:
    """Trailing commas and blanks are ignored."""
    assert parse_event_type_aliases(" A = UpgradeEvent ,, ") == (("A", "UpgradeEvent"),)
