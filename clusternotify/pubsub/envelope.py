"""Pub/Sub push envelope structures and payload decoding.

A push subscription POSTs one JSON envelope per message::

    {
      "message": {
        "data": "eyJ0eXBlIjogIlVwZ3JhZGVFdmVudCJ9",
        "attributes": {"cluster_name": "cluster-a", ...},
        "messageId": "2070443601311540",
        "publishTime": "2021-02-26T19:13:55.749Z"
      },
      "subscription": "projects/my-project/subscriptions/gke-notifications"
    }

``decode_push_request`` turns the request body into a ``PushEnvelope`` and
``decode_envelope`` unwraps ``message.data`` into the raw event payload.
"""

from __future__ import annotations

import base64

import msgspec

from clusternotify.events.models import EventMetadata

from .errors import EnvelopeError

RawPayload = bytes


class PushMessage(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """The ``message`` member of a push envelope.

    Attributes
    ----------
    data
        Base64-encoded payload, or ``None`` when the publisher sent none.
    attributes
        String attributes attached by the publisher.
    message_id
        Pub/Sub message identifier.
    publish_time
        RFC 3339 publish timestamp.

    """

    data: str | None = None
    attributes: dict[str, str] = msgspec.field(default_factory=dict)
    message_id: str = ""
    publish_time: str = ""


class PushEnvelope(msgspec.Struct, kw_only=True, frozen=True):
    """Outer wrapper delivered by a Pub/Sub push subscription."""

    message: PushMessage
    subscription: str = ""


def decode_push_request(body: bytes) -> PushEnvelope:
    """Decode a raw HTTP request body into a ``PushEnvelope``.

    Raises
    ------
    EnvelopeError
        If the body is not JSON or does not have the envelope shape.

    """
    try:
        return msgspec.json.decode(body, type=PushEnvelope)
    except msgspec.DecodeError as exc:
        raise EnvelopeError.malformed(str(exc)) from exc


def decode_envelope(envelope: PushEnvelope) -> RawPayload:
    """Extract the decoded payload bytes carried by ``envelope``.

    Parameters
    ----------
    envelope
        Envelope decoded from the push request.

    Returns
    -------
    RawPayload
        UTF-8 encoded event payload.

    Raises
    ------
    EnvelopeError
        ``MISSING_DATA`` when ``message.data`` is absent or empty,
        ``INVALID_ENCODING`` when it is not base64 text holding UTF-8.

    """
    data = envelope.message.data
    if not data:
        raise EnvelopeError.missing_data()

    try:
        raw = base64.b64decode(data, validate=True)
    except ValueError as exc:  # binascii.Error or non-ASCII text
        raise EnvelopeError.invalid_encoding(str(exc)) from exc

    try:
        raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise EnvelopeError.invalid_encoding(str(exc)) from exc

    return raw


def envelope_metadata(envelope: PushEnvelope) -> EventMetadata:
    """Collect the request-scoped context carried outside the payload."""
    message = envelope.message
    attributes = message.attributes
    return EventMetadata(
        message_id=message.message_id,
        publish_time=message.publish_time,
        subscription=envelope.subscription,
        cluster_name=attributes.get("cluster_name", ""),
        cluster_location=attributes.get("cluster_location", ""),
        project_id=attributes.get("project_id", ""),
        type_url=attributes.get("type_url", ""),
    )


def encode_payload(payload: bytes | str) -> str:
    """Base64-encode ``payload`` the way Pub/Sub fills ``message.data``."""
    raw = payload.encode("utf-8") if isinstance(payload, str) else payload
    return base64.b64encode(raw).decode("ascii")
