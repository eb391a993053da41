"""Log and chat formatting for notification events."""

from __future__ import annotations

from .blocks import (
    Block,
    ContextBlock,
    HeaderBlock,
    SectionBlock,
    Text,
    WebhookPayload,
    escape_mrkdwn,
)
from .formatter import (
    CLUSTER_CONSOLE_URL_TEMPLATE,
    NODE_POOL_CONSOLE_URL_TEMPLATE,
    console_url,
    format_event,
    render_blocks,
    version_transition,
)
from .models import Field, FormattedMessage, Link

__all__ = [
    "CLUSTER_CONSOLE_URL_TEMPLATE",
    "NODE_POOL_CONSOLE_URL_TEMPLATE",
    "Block",
    "ContextBlock",
    "Field",
    "FormattedMessage",
    "HeaderBlock",
    "Link",
    "SectionBlock",
    "Text",
    "WebhookPayload",
    "console_url",
    "escape_mrkdwn",
    "format_event",
    "render_blocks",
    "version_transition",
]
