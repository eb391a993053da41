"""Service configuration read once at start-up.

This module provides the ``ServiceConfig`` dataclass which carries the
project identifier, chat delivery target and HTTP listener settings into the
pipeline as immutable values.

Usage
-----
Create a configuration with defaults:

>>> config = ServiceConfig()
>>> config.webhook.configured
False

Or load from environment variables:

>>> import os
>>> os.environ["GCP_PROJECT"] = "my-project"
>>> ServiceConfig.from_env().project_id
'my-project'

"""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ
import urllib.parse

from clusternotify.errors import ConfigError
from clusternotify.events import EventRegistry
from clusternotify.notify.config import (
    DEFAULT_BACKOFF_S,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_TIMEOUT_S,
    RetryPolicy,
    WebhookConfig,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"", "0", "false", "no", "off"})
_WEBHOOK_SCHEMES = frozenset({"http", "https"})


def _parse_bool(environ: cabc.Mapping[str, str], env_var: str) -> bool:
    raw = environ.get(env_var, "")
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigError.invalid_value(env_var, raw, "Must be true or false")


def _parse_number[T: (int, float)](
    environ: cabc.Mapping[str, str],
    env_var: str,
    default: T,
    convert: cabc.Callable[[str], T],
    *,
    minimum: T,
) -> T:
    raw = environ.get(env_var, "")
    if not raw.strip():
        return default
    try:
        value = convert(raw.strip())
    except ValueError as exc:
        raise ConfigError.invalid_value(
            env_var, raw, f"Must be a number >= {minimum}"
        ) from exc
    if value < minimum:
        raise ConfigError.invalid_value(env_var, raw, f"Must be >= {minimum}")
    return value


def _parse_port(environ: cabc.Mapping[str, str]) -> int:
    raw = environ.get("PORT", "8080")
    try:
        port = int(raw)
    except ValueError as exc:
        raise ConfigError.invalid_value(
            "PORT", raw, f"Must be an integer {_MIN_PORT}-{_MAX_PORT}"
        ) from exc
    if not _MIN_PORT <= port <= _MAX_PORT:
        raise ConfigError.invalid_value(
            "PORT", raw, f"Must be an integer {_MIN_PORT}-{_MAX_PORT}"
        )
    return port


def _parse_webhook_url(environ: cabc.Mapping[str, str]) -> str | None:
    raw = environ.get("SLACK_WEBHOOK", "").strip()
    if not raw:
        return None
    parts = urllib.parse.urlsplit(raw)
    if parts.scheme not in _WEBHOOK_SCHEMES or not parts.netloc:
        raise ConfigError.invalid_webhook_url(raw)
    return raw


def parse_event_type_aliases(raw: str) -> tuple[tuple[str, str], ...]:
    """Parse ``alias=KnownType`` pairs separated by commas."""
    aliases: list[tuple[str, str]] = []
    for entry in raw.split(","):
        if not entry.strip():
            continue
        alias, sep, target = entry.partition("=")
        if not sep or not alias.strip() or not target.strip():
            raise ConfigError.invalid_alias(entry.strip())
        aliases.append((alias.strip(), target.strip()))
    return tuple(aliases)


@dc.dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Configuration for the notification service.

    Attributes
    ----------
    project_id
        Project used in console deep-links. When empty, the ``project_id``
        envelope attribute is used.
    webhook
        Chat delivery target and retry policy.
    notify_node_pool_upgrades
        Whether per-node-pool ``UpgradeAvailableEvent`` notices are sent to
        chat. They are always logged.
    event_type_aliases
        Extra discriminators mapped onto known event types.
    log_level
        Raw log level string.
    host
        Bind address for the HTTP server.
    port
        Listen port for the HTTP server.

    """

    project_id: str = ""
    webhook: WebhookConfig = dc.field(default_factory=WebhookConfig)
    notify_node_pool_upgrades: bool = False
    event_type_aliases: tuple[tuple[str, str], ...] = ()
    log_level: str = "INFO"
    host: str = "0.0.0.0"  # noqa: S104 - bind all interfaces for container
    port: int = 8080

    @classmethod
    def from_env(cls, environ: cabc.Mapping[str, str] | None = None) -> ServiceConfig:
        """Create configuration from environment variables.

        Reads the following environment variables:

        - ``GCP_PROJECT``: Project identifier for console links.
        - ``SLACK_WEBHOOK``: Optional incoming webhook URL.
        - ``SLACK_TIMEOUT_S``: Per-attempt timeout in seconds.
        - ``SLACK_MAX_ATTEMPTS``: Total delivery attempts (positive integer).
        - ``SLACK_BACKOFF_S``: Delay before the first retry in seconds.
        - ``NOTIFY_NODE_POOL_UPGRADES``: Send node-pool upgrade notices.
        - ``EVENT_TYPE_ALIASES``: ``alias=KnownType`` pairs, comma separated.
        - ``LOG_LEVEL``: Log level (default ``INFO``).
        - ``HOST`` / ``PORT``: HTTP listener (default ``0.0.0.0:8080``).

        Raises
        ------
        ConfigError
            If any value is present but invalid.

        """
        env = os.environ if environ is None else environ
        retry = RetryPolicy(
            max_attempts=_parse_number(
                env, "SLACK_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS, int, minimum=1
            ),
            backoff_s=_parse_number(
                env, "SLACK_BACKOFF_S", DEFAULT_BACKOFF_S, float, minimum=0.0
            ),
        )
        webhook = WebhookConfig(
            url=_parse_webhook_url(env),
            timeout_s=_parse_number(
                env, "SLACK_TIMEOUT_S", DEFAULT_TIMEOUT_S, float, minimum=0.1
            ),
            retry=retry,
        )
        config = cls(
            project_id=env.get("GCP_PROJECT", "").strip(),
            webhook=webhook,
            notify_node_pool_upgrades=_parse_bool(env, "NOTIFY_NODE_POOL_UPGRADES"),
            event_type_aliases=parse_event_type_aliases(
                env.get("EVENT_TYPE_ALIASES", "")
            ),
            log_level=env.get("LOG_LEVEL", "INFO"),
            host=env.get("HOST", "0.0.0.0"),  # noqa: S104 - bind all interfaces
            port=_parse_port(env),
        )
        config.build_registry()
        return config

    def build_registry(self) -> EventRegistry:
        """Return the event registry with GKE type URLs and configured aliases.

        Raises
        ------
        ConfigError
            If an alias targets a discriminator that is not registered.

        """
        registry = EventRegistry.with_type_urls()
        for alias, target in self.event_type_aliases:
            if target not in registry:
                raise ConfigError.invalid_value(
                    "EVENT_TYPE_ALIASES",
                    f"{alias}={target}",
                    f"Known types are: {', '.join(registry.discriminators)}",
                )
            registry.alias(alias, target)
        return registry
