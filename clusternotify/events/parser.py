"""Discriminator dispatch from raw payload bytes to typed events.

The parser reads the payload's ``type`` field and looks it up, exactly and
case-sensitively, in an ``EventRegistry``. Registered discriminators decode to
their variant struct; anything else becomes a ``GenericEvent`` carrying the
payload verbatim.

``parse_message`` also accepts GKE messages whose event travels in the
``payload`` envelope attribute, typed by the ``type_url`` attribute.

Usage
-----
>>> parser = EventParser()
>>> event = parser.parse(b'{"type": "UpgradeEvent", "targetVersion": "1.28"}')
>>> event.kind
<EventKind.UPGRADE: 'upgrade'>

"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

import msgspec

from .errors import ParseError
from .models import (
    ClusterEvent,
    EventMetadata,
    GenericEvent,
    NotificationEvent,
    Resource,
    SecurityBulletinEvent,
    UpgradeAvailableEvent,
    UpgradeEvent,
)

DISCRIMINATOR_FIELD = "type"

# Envelope attributes GKE uses to carry the event and its protobuf type
PAYLOAD_ATTRIBUTE = "payload"
TYPE_URL_ATTRIBUTE = "type_url"

# Prefix GKE uses in the ``type_url`` envelope attribute
GKE_TYPE_URL_PREFIX = "type.googleapis.com/google.container.v1beta1."

DEFAULT_EVENT_TYPES: dict[str, type[ClusterEvent]] = {
    "UpgradeAvailableEvent": UpgradeAvailableEvent,
    "UpgradeEvent": UpgradeEvent,
    "SecurityBulletinEvent": SecurityBulletinEvent,
}

# Collection segments of a relative resource path and the type they denote
_COLLECTION_TYPES: dict[str, str] = {
    "clusters": "cluster",
    "nodePools": "nodePool",
}
_LOCATION_COLLECTIONS = frozenset({"locations", "zones"})
_METADATA_WIRE_NAME = "_envelopeMetadata"
_UNUSABLE = object()


class EventRegistry:
    """Table of known discriminators and the variant each decodes to.

    The table is configuration rather than an exhaustive list: callers may
    register new subtypes or aliases (for example full ``type_url`` values)
    without touching the parser.
    """

    def __init__(
        self,
        event_types: cabc.Mapping[str, type[ClusterEvent]] | None = None,
    ) -> None:
        """Create a registry seeded with ``event_types`` or the GKE defaults."""
        self._event_types: dict[str, type[ClusterEvent]] = {}
        source = DEFAULT_EVENT_TYPES if event_types is None else event_types
        for discriminator, event_cls in source.items():
            self.register(discriminator, event_cls)

    @classmethod
    def with_type_urls(cls) -> EventRegistry:
        """Return the default registry plus full GKE ``type_url`` aliases."""
        registry = cls()
        for discriminator in DEFAULT_EVENT_TYPES:
            registry.alias(f"{GKE_TYPE_URL_PREFIX}{discriminator}", discriminator)
        return registry

    @property
    def discriminators(self) -> tuple[str, ...]:
        """Return the registered discriminators in sorted order."""
        return tuple(sorted(self._event_types))

    def __contains__(self, discriminator: object) -> bool:
        """Return True when ``discriminator`` is registered."""
        return discriminator in self._event_types

    def register(self, discriminator: str, event_cls: type[ClusterEvent]) -> None:
        """Map ``discriminator`` to a variant struct.

        Raises
        ------
        ValueError
            If the discriminator is empty or the class is not a known variant.

        """
        if not discriminator:
            msg = "discriminator must be non-empty"
            raise ValueError(msg)
        if not issubclass(event_cls, ClusterEvent) or issubclass(
            event_cls, GenericEvent
        ):
            msg = f"{event_cls!r} is not a registrable notification variant"
            raise ValueError(msg)
        self._event_types[discriminator] = event_cls

    def alias(self, alias: str, discriminator: str) -> None:
        """Make ``alias`` decode to the same variant as ``discriminator``.

        Raises
        ------
        KeyError
            If ``discriminator`` is not registered.

        """
        self.register(alias, self._event_types[discriminator])

    def lookup(self, discriminator: str) -> type[ClusterEvent] | None:
        """Return the variant for ``discriminator`` or ``None`` if unknown."""
        return self._event_types.get(discriminator)


def resource_from_path(path: str) -> dict[str, str]:
    """Describe a relative resource path as ``Resource`` fields.

    ``projects/p/locations/us-central1/clusters/c/nodePools/np`` yields a
    ``nodePool`` named ``np`` in ``us-central1``.
    """
    segments = [segment for segment in path.split("/") if segment]
    fields = {"path": path, "name": segments[-1] if segments else ""}
    pairs = list(zip(segments[0::2], segments[1::2], strict=False))
    for collection, identifier in pairs:
        if collection in _LOCATION_COLLECTIONS:
            fields["location"] = identifier
    if pairs and len(segments) % 2 == 0:
        collection = pairs[-1][0]
        fields["type"] = _COLLECTION_TYPES.get(collection, collection.rstrip("s"))
    return fields


def _normalize(payload: dict[str, typ.Any]) -> dict[str, typ.Any]:
    """Return a copy of ``payload`` with GKE shorthand expanded."""
    normalized = {
        key: value for key, value in payload.items() if key != _METADATA_WIRE_NAME
    }
    resource = normalized.get("resource")
    if isinstance(resource, str):
        normalized["resource"] = resource_from_path(resource)
    elif resource is None:
        normalized.pop("resource", None)
    channel = normalized.get("releaseChannel")
    if isinstance(channel, str):
        normalized["releaseChannel"] = {"channel": channel}
    return normalized


def _best_effort_resource(payload: dict[str, typ.Any]) -> Resource:
    """Extract a ``Resource`` from an unknown payload, ignoring bad shapes."""
    resource = _normalize(payload).get("resource")
    if not isinstance(resource, dict):
        return Resource()
    return _convert_struct(resource, Resource)


def _coerce(value: object, target: object) -> object:
    """Convert ``value`` to ``target`` as far as its shape allows.

    Numbers and booleans become their JSON text where a string is expected.
    Nested structs and containers keep whichever members convert; anything
    else yields ``_UNUSABLE``.
    """
    try:
        return msgspec.convert(value, type=target)
    except msgspec.ValidationError:
        pass
    if target is str and isinstance(value, int | float):
        return msgspec.json.encode(value).decode("utf-8")
    if isinstance(target, type) and issubclass(target, msgspec.Struct):
        if isinstance(value, dict):
            return _convert_struct(value, target)
        return _UNUSABLE
    origin = typ.get_origin(target)
    args = typ.get_args(target)
    if origin is dict and isinstance(value, dict):
        items = {key: _coerce(item, args[1]) for key, item in value.items()}
        return {key: item for key, item in items.items() if item is not _UNUSABLE}
    if origin is tuple and isinstance(value, list):
        members = [_coerce(item, args[0]) for item in value]
        return tuple(item for item in members if item is not _UNUSABLE)
    return _UNUSABLE


def _convert_struct[S: msgspec.Struct](
    payload: dict[str, typ.Any], struct_cls: type[S]
) -> S:
    """Build ``struct_cls`` from ``payload``, leaving unusable fields at defaults."""
    try:
        return msgspec.convert(payload, type=struct_cls)
    except msgspec.ValidationError:
        pass
    usable: dict[str, typ.Any] = {}
    for field in msgspec.structs.fields(struct_cls):
        if field.encode_name not in payload:
            continue
        value = _coerce(payload[field.encode_name], field.type)
        if value is not _UNUSABLE:
            usable[field.name] = value
    return struct_cls(**usable)


def _type_name(type_url: str) -> str:
    """Return the message name at the end of a protobuf ``type_url``."""
    return type_url.rsplit("/", 1)[-1].rsplit(".", 1)[-1]


class EventParser:
    """Parse raw payload bytes into a ``NotificationEvent``."""

    def __init__(self, registry: EventRegistry | None = None) -> None:
        """Configure the parser with a discriminator registry."""
        self._registry = registry if registry is not None else EventRegistry()

    @property
    def registry(self) -> EventRegistry:
        """Read-only access to the discriminator registry."""
        return self._registry

    def parse(
        self,
        raw: bytes,
        metadata: EventMetadata | None = None,
    ) -> NotificationEvent:
        """Decode ``raw`` into exactly one notification variant.

        Parameters
        ----------
        raw
            UTF-8 JSON payload unwrapped from the push envelope.
        metadata
            Envelope context attached to the resulting event.

        Returns
        -------
        NotificationEvent
            The registered variant for the discriminator, or ``GenericEvent``
            when the discriminator is unknown. Fields of a known variant that
            have an unexpected JSON type keep their defaults.

        Raises
        ------
        ParseError
            If the payload is not a JSON object or has no string ``type``.

        """
        payload = self._decode_object(raw)
        event_type = payload.get(DISCRIMINATOR_FIELD)
        if not isinstance(event_type, str) or not event_type:
            raise ParseError.missing_discriminator()
        return self._build(
            event_type,
            self._registry.lookup(event_type),
            payload,
            metadata if metadata is not None else EventMetadata(),
        )

    def parse_message(
        self,
        raw: bytes,
        attributes: cabc.Mapping[str, str],
        metadata: EventMetadata | None = None,
    ) -> NotificationEvent:
        """Decode a push message whose event may live in its attributes.

        GKE publishes a human-readable sentence in ``data`` and the event
        itself as JSON in the ``payload`` attribute, typed by ``type_url``.
        When ``data`` is not an event object and both attributes are present,
        the attribute payload is parsed with the ``type_url`` as discriminator
        and ``data`` is kept as ``EventMetadata.message_text``. Otherwise this
        is :meth:`parse`.

        Raises
        ------
        ParseError
            If the chosen payload is not a JSON object, or ``data`` is used
            and has no string ``type``.

        """
        attribute_payload = attributes.get(PAYLOAD_ATTRIBUTE, "")
        type_url = attributes.get(TYPE_URL_ATTRIBUTE, "")
        if not (attribute_payload and type_url) or _is_event_object(raw):
            return self.parse(raw, metadata)

        metadata = metadata if metadata is not None else EventMetadata()
        metadata = msgspec.structs.replace(
            metadata, message_text=raw.decode("utf-8", errors="replace").strip()
        )
        payload = self._decode_object(attribute_payload.encode("utf-8"))
        event_type = _type_name(type_url)
        event_cls = self._registry.lookup(type_url) or self._registry.lookup(
            event_type
        )
        return self._build(event_type, event_cls, payload, metadata)

    @staticmethod
    def _build(
        event_type: str,
        event_cls: type[ClusterEvent] | None,
        payload: dict[str, typ.Any],
        metadata: EventMetadata,
    ) -> NotificationEvent:
        if event_cls is None:
            return GenericEvent(
                event_type=event_type,
                resource=_best_effort_resource(payload),
                description=_string_or_empty(payload.get("description")),
                metadata=metadata,
                attributes=payload,
            )

        normalized = _normalize(payload)
        normalized[DISCRIMINATOR_FIELD] = event_type
        event = _convert_struct(normalized, event_cls)
        return typ.cast(
            "NotificationEvent", msgspec.structs.replace(event, metadata=metadata)
        )

    @staticmethod
    def _decode_object(raw: bytes) -> dict[str, typ.Any]:
        """Decode ``raw`` as JSON and require an object at the top level."""
        try:
            decoded = msgspec.json.decode(raw)
        except msgspec.DecodeError as exc:
            raise ParseError.malformed_json(raw, str(exc)) from exc
        if not isinstance(decoded, dict):
            raise ParseError.malformed_json(raw, f"got {type(decoded).__name__}")
        return typ.cast("dict[str, typ.Any]", decoded)


def _is_event_object(raw: bytes) -> bool:
    """Return True when ``raw`` is a JSON object with a string ``type``."""
    try:
        decoded = msgspec.json.decode(raw)
    except msgspec.DecodeError:
        return False
    return isinstance(decoded, dict) and bool(
        _string_or_empty(decoded.get(DISCRIMINATOR_FIELD))
    )


def _string_or_empty(value: object) -> str:
    return value if isinstance(value, str) else ""
