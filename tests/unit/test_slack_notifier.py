"""Unit tests for Slack webhook delivery."""

from __future__ import annotations

import typing as typ

import httpx
import msgspec
import pytest

from clusternotify.events import EventParser
from clusternotify.formatting import FormattedMessage, format_event
from clusternotify.notify import (
    DeliveryStatus,
    Notifier,
    RetryPolicy,
    SlackWebhookNotifier,
    WebhookConfig,
)
from tests.helpers.push_builders import UPGRADE_AVAILABLE_PAYLOAD

_WEBHOOK_URL = "https://hooks.example.test/services/T000/B000/XXXX"
_HTTP_OK = 200
_HTTP_BAD_REQUEST = 400
_HTTP_RATE_LIMITED = 429
_HTTP_SERVER_ERROR = 500

Reply = int | tuple[int, dict[str, str]] | Exception


def _message() -> FormattedMessage:
    event = EventParser().parse(msgspec.json.encode(UPGRADE_AVAILABLE_PAYLOAD))
    return format_event(event, "my-project")


class _Harness:
    """Mock webhook transport plus a recording sleep."""

    def __init__(self, replies: list[Reply]) -> None:
        self.replies = replies
        self.requests: list[httpx.Request] = []
        self.delays: list[float] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies[min(len(self.requests), len(self.replies)) - 1]
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, tuple):
            status, headers = reply
            return httpx.Response(status_code=status, headers=headers, text="")
        text = "ok" if reply == _HTTP_OK else "no"
        return httpx.Response(status_code=reply, text=text)

    async def sleep(self, delay: float) -> None:
        self.delays.append(delay)

    def notifier(
        self,
        *,
        url: str | None = _WEBHOOK_URL,
        retry: RetryPolicy | None = None,
    ) -> SlackWebhookNotifier:
        config = WebhookConfig(url=url, timeout_s=2.0, retry=retry or RetryPolicy())
        client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return SlackWebhookNotifier(config, http_client=client, sleep=self.sleep)


def test_notifier_satisfies_protocol() -> None:
    """The Slack notifier implements the Notifier protocol."""
    assert isinstance(SlackWebhookNotifier(WebhookConfig()), Notifier)


@pytest.mark.asyncio
async def test_delivers_blocks_as_json() -> None:
    """A 2xx response delivers on the first attempt."""
    harness = _Harness([_HTTP_OK])
    message = _message()

    outcome = await harness.notifier().deliver(message)

    assert outcome.status is DeliveryStatus.DELIVERED
    assert outcome.attempts == 1
    assert outcome.error is None
    request = harness.requests[0]
    assert str(request.url) == _WEBHOOK_URL
    assert request.method == "POST"
    assert request.headers["Content-Type"] == "application/json"
    body = msgspec.json.decode(request.content)
    assert body["text"] == f":gear: {message.text}"
    assert body["blocks"][0]["type"] == "header"


@pytest.mark.asyncio
async def test_skips_without_webhook_url() -> None:
    """No configured URL means no network call at all."""
    harness = _Harness([_HTTP_OK])

    outcome = await harness.notifier(url=None).deliver(_message())

    assert outcome.status is DeliveryStatus.SKIPPED_NOT_CONFIGURED
    assert outcome.attempts == 0
    assert outcome.failed is False
    assert harness.requests == []


@pytest.mark.asyncio
async def test_retries_transient_errors_until_success() -> None:
    """Three 500s followed by a 200 deliver on the fourth attempt."""
    harness = _Harness(
        [_HTTP_SERVER_ERROR, _HTTP_SERVER_ERROR, _HTTP_SERVER_ERROR, _HTTP_OK]
    )

    outcome = await harness.notifier().deliver(_message())

    assert outcome.status is DeliveryStatus.DELIVERED
    assert outcome.attempts == 4
    assert len(harness.requests) == 4
    assert harness.delays == [0.5, 1.0, 2.0]


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts() -> None:
    """Persistent 500s stop after exactly max_attempts POSTs."""
    harness = _Harness([_HTTP_SERVER_ERROR])
    retry = RetryPolicy(max_attempts=3, backoff_s=0.1)

    outcome = await harness.notifier(retry=retry).deliver(_message())

    assert outcome.status is DeliveryStatus.FAILED_AFTER_RETRIES
    assert outcome.failed is True
    assert outcome.attempts == 3
    assert len(harness.requests) == 3
    assert len(harness.delays) == 2
    assert outcome.error is not None
    assert outcome.error.status_code == _HTTP_SERVER_ERROR


@pytest.mark.asyncio
async def test_single_attempt_policy_never_sleeps() -> None:
    """With one attempt allowed the first failure is final."""
    harness = _Harness([_HTTP_SERVER_ERROR, _HTTP_OK])
    retry = RetryPolicy(max_attempts=1)

    outcome = await harness.notifier(retry=retry).deliver(_message())

    assert outcome.status is DeliveryStatus.FAILED_AFTER_RETRIES
    assert outcome.attempts == 1
    assert len(harness.requests) == 1
    assert harness.delays == []


def test_configured_follows_webhook_url() -> None:
    """The notifier reports whether it has a delivery target."""
    assert SlackWebhookNotifier(WebhookConfig(url=_WEBHOOK_URL)).configured is True
    assert SlackWebhookNotifier(WebhookConfig()).configured is False


@pytest.mark.asyncio
async def test_client_error_is_not_retried() -> None:
    """A 400 fails immediately as rejected."""
    harness = _Harness([_HTTP_BAD_REQUEST, _HTTP_OK])

    outcome = await harness.notifier().deliver(_message())

    assert outcome.status is DeliveryStatus.REJECTED
    assert outcome.attempts == 1
    assert len(harness.requests) == 1
    assert harness.delays == []
    assert outcome.error is not None
    assert outcome.error.retryable is False
    assert "400" in str(outcome.error)


@pytest.mark.asyncio
async def test_rate_limit_honours_retry_after() -> None:
    """A 429 waits for Retry-After before trying again."""
    harness = _Harness([(_HTTP_RATE_LIMITED, {"Retry-After": "3"}), _HTTP_OK])

    outcome = await harness.notifier().deliver(_message())

    assert outcome.status is DeliveryStatus.DELIVERED
    assert outcome.attempts == 2
    assert harness.delays == [3.0]


@pytest.mark.asyncio
async def test_retry_after_is_capped() -> None:
    """Retry-After hints never exceed the maximum backoff."""
    harness = _Harness([(_HTTP_RATE_LIMITED, {"Retry-After": "120"}), _HTTP_OK])

    await harness.notifier().deliver(_message())

    assert harness.delays == [5.0]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "fragment"),
    [
        (httpx.ReadTimeout("slow"), "timed out after 2s"),
        (httpx.ConnectError("refused"), "network error: refused"),
    ],
    ids=["timeout", "connect-error"],
)
async def test_transport_errors_are_retried(error: Exception, fragment: str) -> None:
    """Timeouts and connection failures are transient."""
    harness = _Harness([error])
    retry = RetryPolicy(max_attempts=2)

    outcome = await harness.notifier(retry=retry).deliver(_message())

    assert outcome.status is DeliveryStatus.FAILED_AFTER_RETRIES
    assert len(harness.requests) == 2
    assert outcome.error is not None
    assert fragment in str(outcome.error)


class TestRetryPolicy:
    """Tests for ``RetryPolicy``."""

    def test_exponential_delays(self) -> None:
        """Delays double per attempt up to the cap."""
        policy = RetryPolicy(backoff_s=1.0, max_backoff_s=3.0)

        assert [policy.delay_for(attempt) for attempt in (1, 2, 3)] == [1.0, 2.0, 3.0]

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (429, True),
            (500, True),
            (501, True),
            (503, True),
            (400, False),
            (404, False),
        ],
    )
    def test_retryable_statuses(
        self,
        status: int,
        expected: bool,  # noqa: FBT001
    ) -> None:
        """Rate limiting and server errors are transient."""
        assert RetryPolicy().is_retryable_status(status) is expected

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_attempts": 0},
            {"backoff_s": -1.0},
            {"backoff_multiplier": 0.5},
        ],
        ids=["no-attempts", "negative-backoff", "shrinking-backoff"],
    )
    def test_rejects_invalid_policy(self, kwargs: dict[str, typ.Any]) -> None:
        """Policies that cannot work are rejected."""
        with pytest.raises(ValueError, match="must be"):
            RetryPolicy(**kwargs)
