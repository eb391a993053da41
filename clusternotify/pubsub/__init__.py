"""Pub/Sub push envelope decoding."""

from __future__ import annotations

from .envelope import (
    PushEnvelope,
    PushMessage,
    RawPayload,
    decode_envelope,
    decode_push_request,
    encode_payload,
    envelope_metadata,
)
from .errors import EnvelopeError, EnvelopeErrorKind

__all__ = [
    "EnvelopeError",
    "EnvelopeErrorKind",
    "PushEnvelope",
    "PushMessage",
    "RawPayload",
    "decode_envelope",
    "decode_push_request",
    "encode_payload",
    "envelope_metadata",
]
