"""Delivery outcome reported by the notifier."""

from __future__ import annotations

import dataclasses as dc
import enum

from .errors import DeliveryError  # noqa: TC001


class DeliveryStatus(enum.StrEnum):
    """Result of one dispatch attempt sequence."""

    DELIVERED = "delivered"
    SKIPPED_NOT_CONFIGURED = "skipped-not-configured"
    SKIPPED_FILTERED = "skipped-filtered"
    REJECTED = "rejected"
    FAILED_AFTER_RETRIES = "failed-after-retries"


_FAILURE_STATUSES = frozenset(
    {DeliveryStatus.REJECTED, DeliveryStatus.FAILED_AFTER_RETRIES}
)


@dc.dataclass(frozen=True, slots=True)
class DeliveryOutcome:
    """What happened to a formatted message on its way to the chat target.

    Attributes
    ----------
    status
        Final delivery status.
    attempts
        Number of POST attempts made.
    error
        Last delivery error for failed outcomes.

    """

    status: DeliveryStatus
    attempts: int = 0
    error: DeliveryError | None = None

    @property
    def failed(self) -> bool:
        """Return True when delivery was attempted and did not succeed."""
        return self.status in _FAILURE_STATUSES

    @classmethod
    def delivered(cls, attempts: int) -> DeliveryOutcome:
        """Return the outcome for an accepted POST."""
        return cls(DeliveryStatus.DELIVERED, attempts=attempts)

    @classmethod
    def skipped_not_configured(cls) -> DeliveryOutcome:
        """Return the outcome when no webhook is configured."""
        return cls(DeliveryStatus.SKIPPED_NOT_CONFIGURED)

    @classmethod
    def skipped_filtered(cls) -> DeliveryOutcome:
        """Return the outcome for notifications suppressed from chat."""
        return cls(DeliveryStatus.SKIPPED_FILTERED)

    @classmethod
    def rejected(cls, attempts: int, error: DeliveryError) -> DeliveryOutcome:
        """Return the outcome for a non-retryable webhook response."""
        return cls(DeliveryStatus.REJECTED, attempts=attempts, error=error)

    @classmethod
    def failed_after_retries(
        cls, attempts: int, error: DeliveryError
    ) -> DeliveryOutcome:
        """Return the outcome once the retry budget is exhausted."""
        return cls(DeliveryStatus.FAILED_AFTER_RETRIES, attempts=attempts, error=error)
