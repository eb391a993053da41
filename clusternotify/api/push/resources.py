"""Push endpoint resource for Pub/Sub push subscriptions.

This module provides ``PushResource`` which handles ``POST /`` requests
carrying one push envelope each. Every request that reaches the pipeline
is answered with HTTP 200 so Pub/Sub acknowledges the message; only
unexpected failures surface as 500 and trigger redelivery.

Usage
-----
Register the resource on the Falcon app::

    app.add_route("/", PushResource(pipeline))

"""

from __future__ import annotations

import typing as typ

import falcon

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from clusternotify.pipeline import NotificationPipeline, PipelineResult

__all__ = ["PushResource"]


def _serialize_result(result: PipelineResult) -> dict[str, typ.Any]:
    """Serialize a ``PipelineResult`` to a JSON-compatible dict."""
    media: dict[str, typ.Any] = {
        "status": str(result.status),
        "reason": result.reason,
    }
    if result.event is not None:
        media["event_type"] = result.event.event_type
        media["kind"] = str(result.event.kind)
    if result.delivery is not None:
        media["delivery"] = str(result.delivery.status)
        media["attempts"] = result.delivery.attempts
    return media


class PushResource:
    """Resource receiving Pub/Sub push requests on ``POST /``."""

    def __init__(self, pipeline: NotificationPipeline) -> None:
        """Configure the resource with the notification pipeline.

        Parameters
        ----------
        pipeline
            Pipeline that decodes, formats and dispatches each request.

        """
        self._pipeline = pipeline

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle one push request.

        Parameters
        ----------
        req
            Falcon request whose raw body is the push envelope.
        resp
            Falcon response object.

        """
        body = await req.stream.read()
        result = await self._pipeline.handle_request(body)
        resp.media = _serialize_result(result)
        resp.status = falcon.HTTP_200 if result.acknowledge else falcon.HTTP_500
