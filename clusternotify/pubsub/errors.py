"""Errors raised while unwrapping Pub/Sub push envelopes."""

from __future__ import annotations

import enum

from clusternotify.errors import ClusterNotifyError


class EnvelopeErrorKind(enum.StrEnum):
    """Reasons a push envelope cannot yield a payload."""

    MALFORMED = "malformed"
    MISSING_DATA = "missing_data"
    INVALID_ENCODING = "invalid_encoding"


class EnvelopeError(ClusterNotifyError):
    """Raised when a push envelope is structurally unusable.

    Envelope errors are terminal: the message is acknowledged and dropped
    because redelivering it can never succeed.

    Attributes
    ----------
    kind
        Classification of the failure.

    """

    def __init__(self, message: str, *, kind: EnvelopeErrorKind) -> None:
        """Initialise the error with a message and its kind."""
        self.kind = kind
        super().__init__(message)

    @classmethod
    def malformed(cls, detail: str) -> EnvelopeError:
        """Return an error for a request body that is not a push envelope."""
        return cls(
            f"Push request is not a valid envelope: {detail}",
            kind=EnvelopeErrorKind.MALFORMED,
        )

    @classmethod
    def missing_data(cls) -> EnvelopeError:
        """Return an error for an envelope without a ``message.data`` field."""
        return cls(
            "Push envelope has no message.data payload",
            kind=EnvelopeErrorKind.MISSING_DATA,
        )

    @classmethod
    def invalid_encoding(cls, detail: str) -> EnvelopeError:
        """Return an error for ``message.data`` that is not base64 UTF-8 text."""
        return cls(
            f"Push envelope message.data could not be decoded: {detail}",
            kind=EnvelopeErrorKind.INVALID_ENCODING,
        )
