"""Falcon error handlers for the API layer.

Decode and parse problems are handled inside the pipeline and never reach
these handlers. Anything else is an unexpected failure: it is logged with
its traceback and answered with HTTP 500 so Pub/Sub redelivers the message.

Usage
-----
Register the handler on the Falcon app::

    app.add_error_handler(Exception, handle_unexpected_error)

"""

from __future__ import annotations

import typing as typ

import falcon

from clusternotify.logging import get_logger, log_error

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["handle_unexpected_error"]

logger = get_logger(__name__)


async def handle_unexpected_error(
    req: Request,
    resp: Response,
    ex: Exception,
    _params: dict[str, typ.Any],
) -> None:
    """Map an unhandled exception to an HTTP 500 JSON response.

    Falcon resolves handlers by the exception's MRO, so ``falcon.HTTPError``
    subclasses such as route-not-found keep their default handling.

    Parameters
    ----------
    req
        Falcon request that failed.
    resp
        Falcon response whose status and media are set.
    ex
        The unexpected exception.
    _params
        URI template parameters (unused).

    """
    log_error(
        logger,
        "Unhandled %s on %s %s: %s",
        type(ex).__name__,
        req.method,
        req.path,
        ex,
        exc_info=ex,
    )
    resp.status = falcon.HTTP_500
    resp.media = {
        "title": "Internal error",
        "description": "The notification will be redelivered.",
    }
