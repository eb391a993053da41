"""Delivery target and retry policy for the chat webhook."""

from __future__ import annotations

import dataclasses as dc

# Default configuration values - single source of truth
DEFAULT_TIMEOUT_S = 5.0
DEFAULT_MAX_ATTEMPTS = 4
DEFAULT_BACKOFF_S = 0.5
DEFAULT_BACKOFF_MULTIPLIER = 2.0
DEFAULT_MAX_BACKOFF_S = 5.0
DEFAULT_RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})

_HTTP_SERVER_ERROR_THRESHOLD = 500


@dc.dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Bounded retry parameters for webhook delivery.

    Attributes
    ----------
    max_attempts
        Total number of POST attempts, including the first one.
    backoff_s
        Delay before the second attempt.
    backoff_multiplier
        Factor applied to the delay after each further attempt.
    max_backoff_s
        Upper bound for any single delay, including ``Retry-After`` hints.
    retryable_statuses
        HTTP statuses treated as transient. Every 5xx is transient as well.

    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    backoff_s: float = DEFAULT_BACKOFF_S
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
    max_backoff_s: float = DEFAULT_MAX_BACKOFF_S
    retryable_statuses: frozenset[int] = DEFAULT_RETRYABLE_STATUSES

    def __post_init__(self) -> None:
        """Reject policies that could never attempt delivery."""
        if self.max_attempts < 1:
            msg = f"max_attempts must be >= 1, got {self.max_attempts}"
            raise ValueError(msg)
        if self.backoff_s < 0 or self.max_backoff_s < 0:
            msg = "backoff delays must be non-negative"
            raise ValueError(msg)
        if self.backoff_multiplier < 1:
            msg = f"backoff_multiplier must be >= 1, got {self.backoff_multiplier}"
            raise ValueError(msg)

    def is_retryable_status(self, status_code: int) -> bool:
        """Return True when ``status_code`` indicates a transient failure."""
        return (
            status_code in self.retryable_statuses
            or status_code >= _HTTP_SERVER_ERROR_THRESHOLD
        )

    def delay_for(self, attempt: int, retry_after: float | None = None) -> float:
        """Return the pause after failed ``attempt`` (1-based).

        A ``Retry-After`` hint raises the delay but never past
        ``max_backoff_s``.
        """
        delay = self.backoff_s * self.backoff_multiplier ** (attempt - 1)
        if retry_after is not None:
            delay = max(delay, retry_after)
        return min(delay, self.max_backoff_s)


@dc.dataclass(frozen=True, slots=True)
class WebhookConfig:
    """Chat delivery target.

    Attributes
    ----------
    url
        Incoming webhook URL; ``None`` disables delivery.
    timeout_s
        Timeout applied to each POST attempt.
    retry
        Retry policy for transient failures.

    """

    url: str | None = None
    timeout_s: float = DEFAULT_TIMEOUT_S
    retry: RetryPolicy = dc.field(default_factory=RetryPolicy)

    @property
    def configured(self) -> bool:
        """Return True when a delivery target is set."""
        return bool(self.url)
