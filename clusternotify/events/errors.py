"""Errors raised while parsing notification payloads."""

from __future__ import annotations

import enum

from clusternotify.errors import ClusterNotifyError

# Payload preview length for error messages
_PAYLOAD_PREVIEW_LIMIT = 100


class ParseErrorKind(enum.StrEnum):
    """Reasons a payload cannot be parsed into a notification event."""

    MALFORMED_JSON = "malformed_json"
    MISSING_DISCRIMINATOR = "missing_discriminator"


class ParseError(ClusterNotifyError):
    """Raised when a decoded payload is not a usable notification.

    Attributes
    ----------
    kind
        Classification of the failure.

    """

    def __init__(self, message: str, *, kind: ParseErrorKind) -> None:
        """Initialise the error with a message and kind."""
        self.kind = kind
        super().__init__(message)

    @classmethod
    def malformed_json(cls, raw: bytes, detail: str) -> ParseError:
        """Create error for payload bytes that are not a JSON object.

        Parameters
        ----------
        raw
            The payload that failed to parse.
        detail
            Decoder error description.

        Returns
        -------
        ParseError
            Error with truncated payload preview.

        """
        text = raw.decode("utf-8", errors="replace")
        if len(text) > _PAYLOAD_PREVIEW_LIMIT:
            text = text[:_PAYLOAD_PREVIEW_LIMIT] + "..."
        return cls(
            f"Notification payload is not a JSON object ({detail}): {text}",
            kind=ParseErrorKind.MALFORMED_JSON,
        )

    @classmethod
    def missing_discriminator(cls) -> ParseError:
        """Create error for a payload without a string ``type`` field."""
        return cls(
            "Notification payload has no 'type' discriminator",
            kind=ParseErrorKind.MISSING_DISCRIMINATOR,
        )
