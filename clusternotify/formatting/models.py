"""Formatted representations of a notification event."""

from __future__ import annotations

import msgspec

from clusternotify.events.models import EventKind  # noqa: TC001

from .blocks import Block, WebhookPayload


class Field(msgspec.Struct, kw_only=True, frozen=True):
    """One labelled value shown in the chat message.

    Attributes
    ----------
    label
        Field heading.
    value
        Display value.
    highlight
        Whether the value is rendered prominently (for example severity).
    url
        Optional target the value links to.

    """

    label: str
    value: str
    highlight: bool = False
    url: str = ""


class Link(msgspec.Struct, kw_only=True, frozen=True):
    """A labelled hyperlink, such as the console deep-link."""

    label: str
    url: str


class FormattedMessage(msgspec.Struct, kw_only=True, frozen=True):
    """Log and chat renderings of one notification event.

    Attributes
    ----------
    event_type
        Discriminator of the event that was formatted.
    kind
        Variant tag of the event.
    title
        Title line naming the subtype and resource.
    text
        Single-line summary written to the log.
    description
        Optional free-text body.
    fields
        Ordered display fields.
    link
        Console deep-link, when the resource is known.
    context
        Footer lines (resource path, message identifiers).
    blocks
        Slack Block Kit rendering of the above.

    """

    event_type: str
    kind: EventKind
    title: str
    text: str
    description: str = ""
    fields: tuple[Field, ...] = ()
    link: Link | None = None
    context: tuple[str, ...] = ()
    blocks: tuple[Block, ...] = ()

    def field(self, label: str) -> Field | None:
        """Return the first field with ``label``, if any."""
        return next((field for field in self.fields if field.label == label), None)

    def webhook_payload(self) -> WebhookPayload:
        """Return the Slack incoming-webhook body for this message."""
        return WebhookPayload(text=f":gear: {self.text}", blocks=self.blocks)

    def webhook_body(self) -> bytes:
        """Return the encoded Slack incoming-webhook JSON body."""
        return msgspec.json.encode(self.webhook_payload())
