"""Health probe resources for liveness and readiness checks.

The service holds no connections, so both probes answer as soon as the
process can serve requests.
"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe resource.

    Reports whether the push endpoint is wired and whether chat delivery
    is configured, so a deployment without a webhook is still visibly
    ready to log notifications.

    """

    def __init__(
        self, *, push_enabled: bool = False, chat_enabled: bool = False
    ) -> None:
        """Record which optional capabilities the app was built with."""
        self._push_enabled = push_enabled
        self._chat_enabled = chat_enabled

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with readiness status.

        """
        resp.media = {
            "status": "ready",
            "push": self._push_enabled,
            "chat": self._chat_enabled,
        }
        resp.status = HTTPStatus.OK
