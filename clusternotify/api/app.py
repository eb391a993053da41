"""Application factory for the clusternotify Falcon ASGI application.

This module provides ``create_app()`` which builds the Falcon ASGI
application with health endpoints and, when a notification pipeline is
available, the Pub/Sub push endpoint.

Usage
-----
Create a probes-only app::

    app = create_app()

Create a full app with the push endpoint::

    from clusternotify.api.app import AppDependencies, create_app

    deps = AppDependencies(pipeline=NotificationPipeline.from_config(config))
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from clusternotify.api.errors import handle_unexpected_error
from clusternotify.api.health.resources import HealthResource, ReadyResource
from clusternotify.api.push.resources import PushResource

if typ.TYPE_CHECKING:
    from clusternotify.pipeline import NotificationPipeline

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    pipeline
        Notification pipeline backing ``POST /``. Without it only the
        probes are registered.
    chat_enabled
        Whether a chat webhook is configured; reported by ``/ready``.

    """

    pipeline: NotificationPipeline | None = None
    chat_enabled: bool = False


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies. When ``None`` or without a
        pipeline, only ``/health`` and ``/ready`` are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    deps = dependencies if dependencies is not None else AppDependencies()
    app = falcon.asgi.App()

    app.add_route("/health", HealthResource())
    app.add_route(
        "/ready",
        ReadyResource(
            push_enabled=deps.pipeline is not None,
            chat_enabled=deps.chat_enabled,
        ),
    )

    if deps.pipeline is not None:
        app.add_route("/", PushResource(deps.pipeline))

    app.add_error_handler(Exception, handle_unexpected_error)

    return app
