"""Slack incoming-webhook delivery with bounded retries.

The retry loop is explicit: each attempt either succeeds, fails terminally
(a 4xx other than rate limiting) or fails transiently (5xx, 429, timeout,
connection error) and waits according to the ``RetryPolicy`` before trying
again. Delivery errors are reported as a ``DeliveryOutcome`` and never
raised to the caller.

Usage
-----
>>> notifier = SlackWebhookNotifier(WebhookConfig(url="https://hooks.slack.com/..."))
>>> outcome = await notifier.deliver(message)
>>> outcome.status
<DeliveryStatus.DELIVERED: 'delivered'>

"""

from __future__ import annotations

import asyncio
import typing as typ

import httpx

from clusternotify.logging import get_logger, log_warning

from .errors import DeliveryError
from .models import DeliveryOutcome

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from clusternotify.formatting import FormattedMessage

    from .config import WebhookConfig

logger = get_logger(__name__)

_HTTP_SUCCESS_MIN = 200
_HTTP_SUCCESS_MAX = 299
_HTTP_RATE_LIMITED = 429


def _get_retry_after(response: httpx.Response) -> float | None:
    """Extract Retry-After header value if present and numeric."""
    retry_after = response.headers.get("Retry-After")
    if retry_after and retry_after.isdigit():
        return float(retry_after)
    return None


class SlackWebhookNotifier:
    """Deliver formatted messages to a Slack incoming webhook.

    Parameters
    ----------
    config
        Delivery target, timeout and retry policy.
    http_client
        Optional ``httpx.AsyncClient`` for testing. If not provided, a
        client is created for each delivery and closed afterwards.
    sleep
        Awaitable used between attempts; injectable for tests.

    """

    def __init__(
        self,
        config: WebhookConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: cabc.Callable[[float], cabc.Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialise the notifier with configuration."""
        self._config = config
        self._http_client = http_client
        self._sleep = sleep

    @property
    def config(self) -> WebhookConfig:
        """Read-only access to the delivery configuration."""
        return self._config

    @property
    def configured(self) -> bool:
        """Return True when a webhook URL is set."""
        return self._config.configured

    async def deliver(self, message: FormattedMessage) -> DeliveryOutcome:
        """POST ``message`` to the webhook and report the outcome.

        Parameters
        ----------
        message
            Formatted notification whose blocks are sent.

        Returns
        -------
        DeliveryOutcome
            ``skipped-not-configured`` without a webhook URL, otherwise
            ``delivered``, ``rejected`` or ``failed-after-retries``.

        """
        url = self._config.url
        if not url:
            return DeliveryOutcome.skipped_not_configured()

        body = message.webhook_body()
        if self._http_client is not None:
            return await self._deliver_with(self._http_client, url, body)

        async with httpx.AsyncClient(timeout=self._config.timeout_s) as client:
            return await self._deliver_with(client, url, body)

    async def _deliver_with(
        self,
        client: httpx.AsyncClient,
        url: str,
        body: bytes,
    ) -> DeliveryOutcome:
        """Run the retry loop against ``client``."""
        policy = self._config.retry
        attempt = 0

        while True:
            attempt += 1
            try:
                await self._post(client, url, body)
            except DeliveryError as exc:
                if not exc.retryable:
                    return DeliveryOutcome.rejected(attempt, exc)
                if attempt >= policy.max_attempts:
                    return DeliveryOutcome.failed_after_retries(attempt, exc)
                delay = policy.delay_for(attempt, exc.retry_after)
                log_warning(
                    logger,
                    "Webhook attempt %d/%d failed (%s); retrying in %.2fs",
                    attempt,
                    policy.max_attempts,
                    exc,
                    delay,
                )
                await self._sleep(delay)
            else:
                return DeliveryOutcome.delivered(attempt)

    async def _post(self, client: httpx.AsyncClient, url: str, body: bytes) -> None:
        """Perform one POST and raise ``DeliveryError`` unless it succeeds."""
        try:
            response = await client.post(
                url,
                content=body,
                headers={"Content-Type": "application/json"},
                timeout=self._config.timeout_s,
            )
        except httpx.TimeoutException as exc:
            raise DeliveryError.timeout(self._config.timeout_s) from exc
        except httpx.RequestError as exc:
            raise DeliveryError.network_error(str(exc)) from exc

        self._check_response(response)

    def _check_response(self, response: httpx.Response) -> None:
        """Classify a non-2xx response as transient or terminal."""
        status = response.status_code
        if _HTTP_SUCCESS_MIN <= status <= _HTTP_SUCCESS_MAX:
            return
        if status == _HTTP_RATE_LIMITED:
            raise DeliveryError.rate_limited(_get_retry_after(response))
        raise DeliveryError.http_error(
            status,
            response.text,
            retryable=self._config.retry.is_retryable_status(status),
        )
