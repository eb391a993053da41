"""Decode, classify, format and dispatch one push notification.

``NotificationPipeline`` wires the envelope decoder, event parser, message
formatter and notifier together. Each call handles exactly one push request
and returns a ``PipelineResult`` describing what happened so the HTTP layer
can acknowledge the message.

Usage
-----
>>> pipeline = NotificationPipeline.from_config(ServiceConfig.from_env())
>>> result = await pipeline.handle_request(body)
>>> result.status
<PipelineStatus.PROCESSED: 'processed'>

"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

from clusternotify.events import (
    EventParser,
    ParseError,
    is_node_pool_upgrade_available,
)
from clusternotify.formatting import format_event
from clusternotify.notify import DeliveryOutcome, SlackWebhookNotifier
from clusternotify.observability import PipelineEventLogger
from clusternotify.pubsub import (
    EnvelopeError,
    decode_envelope,
    decode_push_request,
    envelope_metadata,
)

if typ.TYPE_CHECKING:
    from clusternotify.config import ServiceConfig
    from clusternotify.events import NotificationEvent
    from clusternotify.formatting import FormattedMessage
    from clusternotify.notify import Notifier
    from clusternotify.pubsub import PushEnvelope


class PipelineStatus(enum.StrEnum):
    """How a push request was handled."""

    PROCESSED = "processed"
    DROPPED = "dropped"


@dc.dataclass(frozen=True, slots=True)
class PipelineResult:
    """Outcome of handling one push request.

    Attributes
    ----------
    status
        ``processed`` once an event was classified, ``dropped`` when the
        envelope or payload could not be decoded.
    event
        The classified event, when processing got that far.
    message
        The formatted message, for processed requests.
    delivery
        Notifier outcome, for processed requests.
    error
        Decode or parse error for dropped requests.

    """

    status: PipelineStatus
    event: NotificationEvent | None = None
    message: FormattedMessage | None = None
    delivery: DeliveryOutcome | None = None
    error: EnvelopeError | ParseError | None = None

    @property
    def acknowledge(self) -> bool:
        """Return True when the push message should not be redelivered.

        Malformed input never becomes valid on redelivery and delivery
        failures are already retried inside the notifier, so every result
        is acknowledged.
        """
        return True

    @property
    def reason(self) -> str:
        """Return a short machine-readable explanation of the status."""
        if self.error is not None:
            return str(getattr(self.error, "kind", type(self.error).__name__))
        if self.delivery is not None:
            return str(self.delivery.status)
        return ""


class NotificationPipeline:
    """Run the decode → classify → format → dispatch stages.

    Parameters
    ----------
    project_id
        Project used for console deep-links; may be empty.
    parser
        Event parser holding the discriminator registry.
    notifier
        Chat delivery backend.
    notify_node_pool_upgrades
        Whether node-pool ``UpgradeAvailableEvent`` notices reach chat.
    event_logger
        Structured logger for pipeline events.

    """

    def __init__(
        self,
        *,
        project_id: str,
        parser: EventParser,
        notifier: Notifier,
        notify_node_pool_upgrades: bool = False,
        event_logger: PipelineEventLogger | None = None,
    ) -> None:
        """Store the collaborators used for every request."""
        self._project_id = project_id
        self._parser = parser
        self._notifier = notifier
        self._notify_node_pool_upgrades = notify_node_pool_upgrades
        self._event_logger = (
            event_logger if event_logger is not None else PipelineEventLogger()
        )

    @classmethod
    def from_config(
        cls,
        config: ServiceConfig,
        *,
        notifier: Notifier | None = None,
    ) -> NotificationPipeline:
        """Build a pipeline from service configuration.

        Parameters
        ----------
        config
            Configuration loaded at start-up.
        notifier
            Optional replacement for the Slack webhook notifier.

        """
        return cls(
            project_id=config.project_id,
            parser=EventParser(config.build_registry()),
            notifier=(
                notifier
                if notifier is not None
                else SlackWebhookNotifier(config.webhook)
            ),
            notify_node_pool_upgrades=config.notify_node_pool_upgrades,
        )

    async def handle_request(self, body: bytes) -> PipelineResult:
        """Decode a raw push request body and handle the envelope."""
        try:
            envelope = decode_push_request(body)
        except EnvelopeError as exc:
            return self._dropped(exc)
        return await self.handle(envelope)

    async def handle(self, envelope: PushEnvelope) -> PipelineResult:
        """Process one decoded push envelope.

        Decode and parse errors produce a ``dropped`` result. Once an event
        is classified its summary is logged before any delivery attempt, and
        delivery problems are reported in ``PipelineResult.delivery`` rather
        than raised.
        """
        try:
            raw = decode_envelope(envelope)
            event = self._parser.parse_message(
                raw, envelope.message.attributes, envelope_metadata(envelope)
            )
        except (EnvelopeError, ParseError) as exc:
            return self._dropped(exc)

        message = format_event(event, self._project_id)
        self._event_logger.log_processed(message)

        if not self._notifier.configured:
            delivery = DeliveryOutcome.skipped_not_configured()
        elif is_node_pool_upgrade_available(event) and not (
            self._notify_node_pool_upgrades
        ):
            delivery = DeliveryOutcome.skipped_filtered()
        else:
            delivery = await self._notifier.deliver(message)
        self._event_logger.log_delivery(message, delivery)

        return PipelineResult(
            status=PipelineStatus.PROCESSED,
            event=event,
            message=message,
            delivery=delivery,
        )

    def _dropped(self, error: EnvelopeError | ParseError) -> PipelineResult:
        self._event_logger.log_dropped(error)
        return PipelineResult(status=PipelineStatus.DROPPED, error=error)
