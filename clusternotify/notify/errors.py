"""Errors raised while posting to the chat webhook."""

from __future__ import annotations

from clusternotify.errors import ClusterNotifyError

# Response body preview length for error messages
_BODY_PREVIEW_LIMIT = 100


class DeliveryError(ClusterNotifyError):
    """Raised when a webhook POST does not succeed.

    Delivery errors never fail the inbound request; the notifier turns them
    into a ``DeliveryOutcome``.

    Attributes
    ----------
    status_code
        HTTP status code from the webhook, if a response was received.
    retryable
        Whether another attempt may succeed.
    retry_after
        Seconds the webhook asked the caller to wait, if given.

    """

    def __init__(
        self,
        message: str,
        *,
        retryable: bool,
        status_code: int | None = None,
        retry_after: float | None = None,
    ) -> None:
        """Initialise the error with its classification."""
        self.retryable = retryable
        self.status_code = status_code
        self.retry_after = retry_after
        super().__init__(message)

    @classmethod
    def http_error(
        cls, status_code: int, body: str, *, retryable: bool
    ) -> DeliveryError:
        """Create error for a non-2xx webhook response.

        Parameters
        ----------
        status_code
            HTTP status code from the response.
        body
            Response body; truncated in the message.
        retryable
            Whether the retry policy treats this status as transient.

        Returns
        -------
        DeliveryError
            Error with status code context.

        """
        if len(body) > _BODY_PREVIEW_LIMIT:
            body = body[:_BODY_PREVIEW_LIMIT] + "..."
        msg = f"Webhook HTTP error {status_code}"
        if body:
            msg = f"{msg}: {body}"
        return cls(msg, retryable=retryable, status_code=status_code)

    @classmethod
    def rate_limited(cls, retry_after: float | None = None) -> DeliveryError:
        """Create error for rate limit (429) responses."""
        msg = "Webhook rate limited"
        if retry_after is not None:
            msg = f"{msg}, retry after {retry_after:g}s"
        return cls(msg, retryable=True, status_code=429, retry_after=retry_after)

    @classmethod
    def timeout(cls, timeout_s: float) -> DeliveryError:
        """Create error for a request that exceeded the timeout."""
        return cls(f"Webhook request timed out after {timeout_s:g}s", retryable=True)

    @classmethod
    def network_error(cls, detail: str) -> DeliveryError:
        """Create error for network failures (DNS, connection, TLS, etc.)."""
        return cls(f"Webhook network error: {detail}", retryable=True)
