"""Chat webhook delivery."""

from __future__ import annotations

from .config import RetryPolicy, WebhookConfig
from .errors import DeliveryError
from .models import DeliveryOutcome, DeliveryStatus
from .protocol import Notifier
from .slack import SlackWebhookNotifier

__all__ = [
    "DeliveryError",
    "DeliveryOutcome",
    "DeliveryStatus",
    "Notifier",
    "RetryPolicy",
    "SlackWebhookNotifier",
    "WebhookConfig",
]
