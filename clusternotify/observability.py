"""Emit structured observability events for notification processing.

This module defines event identifiers and a logger wrapper used by
``NotificationPipeline`` to record each stage of a push request.

Usage
-----
>>> event_logger = PipelineEventLogger()
>>> event_logger.log_processed(message)
>>> event_logger.log_delivery(message, outcome)

"""

from __future__ import annotations

import enum
import typing as typ

from clusternotify.logging import (
    get_logger,
    log_debug,
    log_error,
    log_info,
    log_warning,
)
from clusternotify.notify import DeliveryStatus

if typ.TYPE_CHECKING:
    from clusternotify.formatting import FormattedMessage
    from clusternotify.notify import DeliveryOutcome

logger = get_logger(__name__)


class PipelineEventType(enum.StrEnum):
    """Structured log event types for push request handling."""

    PROCESSED = "notification.processed"
    RENDERED = "notification.rendered"
    DELIVERED = "notification.delivered"
    DELIVERY_SKIPPED = "notification.delivery_skipped"
    DELIVERY_FAILED = "notification.delivery_failed"
    DROPPED = "notification.dropped"


class PipelineEventLogger:
    """Emit structured notification events via femtologging."""

    def log_processed(self, message: FormattedMessage) -> None:
        """Log the single-line summary and the chat rendering of a message.

        The summary is logged at INFO for every classified notification,
        whether or not it is later delivered. The Block Kit JSON goes to
        DEBUG.
        """
        log_info(
            logger,
            "[%s] event_type=%s kind=%s %s",
            PipelineEventType.PROCESSED,
            message.event_type,
            message.kind,
            message.text,
        )
        log_debug(
            logger,
            "[%s] event_type=%s blocks=%s",
            PipelineEventType.RENDERED,
            message.event_type,
            message.webhook_body().decode("utf-8"),
        )

    def log_delivery(self, message: FormattedMessage, outcome: DeliveryOutcome) -> None:
        """Log the delivery outcome at a level matching its status.

        Parameters
        ----------
        message
            The formatted message that was dispatched.
        outcome
            Result reported by the notifier.

        Returns
        -------
        None
            This method emits a structured log event and returns ``None``.

        """
        if outcome.status is DeliveryStatus.DELIVERED:
            log_info(
                logger,
                "[%s] event_type=%s attempts=%d",
                PipelineEventType.DELIVERED,
                message.event_type,
                outcome.attempts,
            )
            return
        if outcome.failed:
            log_error(
                logger,
                "[%s] event_type=%s status=%s attempts=%d error=%s",
                PipelineEventType.DELIVERY_FAILED,
                message.event_type,
                outcome.status,
                outcome.attempts,
                outcome.error,
            )
            return
        log_debug(
            logger,
            "[%s] event_type=%s status=%s",
            PipelineEventType.DELIVERY_SKIPPED,
            message.event_type,
            outcome.status,
        )

    def log_dropped(self, error: Exception) -> None:
        """Log a request that was acknowledged without processing.

        Parameters
        ----------
        error
            Decode or parse error that caused the drop.

        Returns
        -------
        None
            This method emits a structured log event and returns ``None``.

        """
        log_warning(
            logger,
            "[%s] error_type=%s kind=%s error_message=%s",
            PipelineEventType.DROPPED,
            type(error).__name__,
            getattr(error, "kind", "-"),
            error,
        )
