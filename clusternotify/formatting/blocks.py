"""Slack Block Kit structures for chat notifications.

Blocks are tagged msgspec structs so ``msgspec.json.encode`` emits the
``{"type": "section", ...}`` objects the incoming webhook expects. The encoded
``{"blocks": [...]}`` body can be pasted into the Block Kit Builder to preview
a notification: https://app.slack.com/block-kit-builder/
"""

from __future__ import annotations

import msgspec

# Slack rejects section blocks with more than ten fields
MAX_SECTION_FIELDS = 10
# Slack rejects header text longer than this
MAX_HEADER_LENGTH = 150


class Text(msgspec.Struct, kw_only=True, frozen=True, omit_defaults=True):
    """A Block Kit text composition object."""

    type: str
    text: str
    emoji: bool | None = None

    @classmethod
    def mrkdwn(cls, text: str) -> Text:
        """Return a ``mrkdwn`` text object."""
        return cls(type="mrkdwn", text=text)

    @classmethod
    def plain(cls, text: str) -> Text:
        """Return a ``plain_text`` text object with emoji rendering."""
        return cls(type="plain_text", text=text, emoji=True)


class HeaderBlock(
    msgspec.Struct, kw_only=True, frozen=True, tag="header", tag_field="type"
):
    """Large bold title line."""

    text: Text


class SectionBlock(
    msgspec.Struct,
    kw_only=True,
    frozen=True,
    omit_defaults=True,
    tag="section",
    tag_field="type",
):
    """Section with a text body and/or a two-column field grid."""

    text: Text | None = None
    fields: tuple[Text, ...] = ()


class ContextBlock(
    msgspec.Struct, kw_only=True, frozen=True, tag="context", tag_field="type"
):
    """Small grey footer line."""

    elements: tuple[Text, ...]


Block = HeaderBlock | SectionBlock | ContextBlock


class WebhookPayload(msgspec.Struct, kw_only=True, frozen=True):
    """JSON body accepted by Slack incoming webhooks.

    ``text`` is the notification fallback shown by clients that cannot
    render blocks.
    """

    text: str
    blocks: tuple[Block, ...]


def escape_mrkdwn(value: str) -> str:
    """Escape the control characters Slack reserves in ``mrkdwn`` text."""
    return value.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
