"""Render the chat message for a notification payload without sending it."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import msgspec

from clusternotify.errors import ClusterNotifyError
from clusternotify.events import EventParser, EventRegistry
from clusternotify.formatting import format_event
from clusternotify.pubsub import (
    PushEnvelope,
    PushMessage,
    decode_envelope,
    decode_push_request,
    encode_payload,
    envelope_metadata,
)


def _read_input(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    return Path(source).read_bytes()


def _envelope_for(raw: bytes, *, as_envelope: bool) -> PushEnvelope:
    if as_envelope:
        return decode_push_request(raw)
    return PushEnvelope(message=PushMessage(data=encode_payload(raw)))


def main(argv: list[str] | None = None) -> int:
    """Print the log line and Block Kit JSON for one notification.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when the input cannot be decoded.

    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "source",
        help="JSON notification payload, or '-' to read standard input",
    )
    parser.add_argument(
        "--envelope",
        action="store_true",
        help="Treat the input as a full Pub/Sub push envelope",
    )
    parser.add_argument(
        "--project",
        default="",
        help="Project id used for console links",
    )
    args = parser.parse_args(argv)

    try:
        envelope = _envelope_for(_read_input(args.source), as_envelope=args.envelope)
        event = EventParser(EventRegistry.with_type_urls()).parse_message(
            decode_envelope(envelope),
            envelope.message.attributes,
            envelope_metadata(envelope),
        )
    except (OSError, ClusterNotifyError) as exc:
        print(f"Cannot render {args.source}: {exc}", file=sys.stderr)
        return 1

    message = format_event(event, args.project)
    print(message.text)
    print(msgspec.json.format(message.webhook_body(), indent=2).decode("utf-8"))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
