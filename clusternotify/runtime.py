"""clusternotify runtime entrypoint for container deployments.

This module provides the ASGI application factory used by Granian. It
delegates to :func:`clusternotify.api.app.create_app` for application
construction while keeping the ``clusternotify.runtime:create_app``
entrypoint stable.

Configuration is read once from the environment through
:meth:`clusternotify.config.ServiceConfig.from_env`; invalid values stop
the process before it starts listening.

Run the service directly with ``python -m clusternotify.runtime``.
"""

from __future__ import annotations

import typing as typ

from clusternotify.api.app import AppDependencies
from clusternotify.api.app import create_app as _create_api_app
from clusternotify.config import ServiceConfig
from clusternotify.errors import ConfigError
from clusternotify.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)
from clusternotify.pipeline import NotificationPipeline

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    import falcon.asgi

__all__ = ["create_app", "load_config", "main"]

logger = get_logger(__name__)


def load_config(environ: cabc.Mapping[str, str] | None = None) -> ServiceConfig:
    """Load service configuration or exit when it is invalid.

    Raises
    ------
    SystemExit
        If any configured value fails validation.

    """
    try:
        return ServiceConfig.from_env(environ)
    except ConfigError as exc:
        # Use error() not exception() - validation failures need no traceback
        log_error(logger, "Invalid configuration: %s", exc)
        raise SystemExit(1) from exc


def create_app(environ: cabc.Mapping[str, str] | None = None) -> falcon.asgi.App:
    """Create the Falcon ASGI application from environment configuration.

    Returns
    -------
    falcon.asgi.App
        Application serving ``POST /`` plus the health probes.

    """
    config = load_config(environ)
    if not config.webhook.configured:
        log_info(logger, "SLACK_WEBHOOK not set; notifications are only logged")
    deps = AppDependencies(
        pipeline=NotificationPipeline.from_config(config),
        chat_enabled=config.webhook.configured,
    )
    return _create_api_app(deps)


def main() -> None:
    """Start the clusternotify server using Granian.

    Reads ``HOST``, ``PORT`` and ``LOG_LEVEL`` (along with the pipeline
    settings) from the environment and starts the ASGI server.
    """
    from granian import Granian
    from granian.constants import Interfaces

    config = load_config()

    # Configure logging - validate log level and warn on invalid values
    normalized_level, invalid_level = configure_logging(config.log_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid LOG_LEVEL %r, falling back to %s",
            config.log_level,
            normalized_level,
        )

    log_info(
        logger,
        "Starting clusternotify on %s:%d (log_level=%s)",
        config.host,
        config.port,
        normalized_level,
    )

    server = Granian(
        "clusternotify.runtime:create_app",
        address=config.host,
        port=config.port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
