"""Notifier protocol used by the pipeline."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from clusternotify.formatting import FormattedMessage

    from .models import DeliveryOutcome


@typ.runtime_checkable
class Notifier(typ.Protocol):
    """Protocol for chat delivery backends.

    Implementations must report failures through the returned
    ``DeliveryOutcome`` instead of raising, so a delivery problem never
    turns a classified notification into a failed request.

    Examples
    --------
    >>> from clusternotify.notify import SlackWebhookNotifier, WebhookConfig
    >>> notifier: Notifier = SlackWebhookNotifier(WebhookConfig())
    >>> isinstance(notifier, Notifier)
    True

    """

    @property
    def configured(self) -> bool:
        """Return True when a delivery target is set."""
        ...

    async def deliver(self, message: FormattedMessage) -> DeliveryOutcome:
        """Send ``message`` to the chat target and report what happened."""
        ...
