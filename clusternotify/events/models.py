"""Typed GKE cluster notification events.

Each known notification subtype is a frozen msgspec ``Struct`` whose fields
follow the camelCase names GKE publishes. Payloads with a discriminator that
is not in the event registry decode to ``GenericEvent`` so new subtypes are
never rejected.
"""

from __future__ import annotations

import enum
import typing as typ

import msgspec


class EventKind(enum.StrEnum):
    """Variant tags for the closed set of notification events."""

    UPGRADE_AVAILABLE = "upgrade-available"
    UPGRADE = "upgrade"
    SECURITY_BULLETIN = "security-bulletin"
    GENERIC = "generic"


class EventMetadata(msgspec.Struct, kw_only=True, frozen=True):
    """Request-scoped context copied from the push envelope.

    Attributes
    ----------
    message_id
        Pub/Sub message identifier.
    publish_time
        RFC 3339 publish timestamp of the message.
    subscription
        Subscription that delivered the message.
    cluster_name
        ``cluster_name`` attribute set by GKE.
    cluster_location
        ``cluster_location`` attribute set by GKE.
    project_id
        ``project_id`` attribute set by GKE (numeric or named).
    type_url
        ``type_url`` attribute naming the payload protobuf type.
    message_text
        Human-readable ``data`` text GKE sends alongside an attribute payload.

    """

    message_id: str = ""
    publish_time: str = ""
    subscription: str = ""
    cluster_name: str = ""
    cluster_location: str = ""
    project_id: str = ""
    type_url: str = ""
    message_text: str = ""


class Resource(msgspec.Struct, kw_only=True, frozen=True):
    """The cluster resource a notification refers to."""

    type: str = ""
    name: str = ""
    location: str = ""
    namespace: str = ""
    path: str = ""
    labels: dict[str, str] = msgspec.field(default_factory=dict)


class ReleaseChannel(msgspec.Struct, kw_only=True, frozen=True):
    """Release channel a cluster is subscribed to."""

    channel: str = "UNSPECIFIED"


class ClusterEvent(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Fields shared by every notification variant.

    ``metadata`` is never read from the payload; the parser fills it from the
    envelope after decoding.
    """

    event_type: str = msgspec.field(name="type")
    resource: Resource = msgspec.field(default_factory=Resource)
    description: str = ""
    metadata: EventMetadata = msgspec.field(
        default_factory=EventMetadata, name="_envelopeMetadata"
    )

    @property
    def kind(self) -> EventKind:
        """Return the variant tag for this event."""
        return _KIND_BY_TYPE[type(self)]

    @property
    def resource_name(self) -> str:
        """Return the resource name, falling back to the cluster attribute."""
        return self.resource.name or self.metadata.cluster_name

    @property
    def location(self) -> str:
        """Return the resource location, falling back to the cluster attribute."""
        return self.resource.location or self.metadata.cluster_location


class UpgradeAvailableEvent(ClusterEvent, kw_only=True, frozen=True, rename="camel"):
    """A new version is available for a cluster resource."""

    current_version: str = ""
    target_version: str = ""
    version: str = ""
    release_channel: ReleaseChannel = msgspec.field(default_factory=ReleaseChannel)
    resource_type: str = ""

    @property
    def available_version(self) -> str:
        """Return the offered version from whichever field carries it."""
        return self.target_version or self.version


class UpgradeEvent(ClusterEvent, kw_only=True, frozen=True, rename="camel"):
    """A cluster resource has started upgrading."""

    current_version: str = ""
    target_version: str = ""
    operation: str = ""
    operation_start_time: str = ""
    resource_type: str = ""


class SecurityBulletinEvent(ClusterEvent, kw_only=True, frozen=True, rename="camel"):
    """A security bulletin affecting the cluster has been published."""

    bulletin_id: str = ""
    bulletin_uri: str = ""
    severity: str = ""
    brief_description: str = ""
    cve_ids: tuple[str, ...] = ()
    affected_supported_minors: tuple[str, ...] = ()
    patched_versions: tuple[str, ...] = ()
    resource_type_affected: str = ""
    suggested_upgrade_target: str = ""
    manual_steps_required: bool = False


class GenericEvent(ClusterEvent, kw_only=True, frozen=True, rename="camel"):
    """Any notification whose discriminator is not in the registry.

    ``attributes`` holds the decoded payload mapping exactly as received.
    """

    attributes: dict[str, typ.Any] = msgspec.field(default_factory=dict)


NotificationEvent = (
    UpgradeAvailableEvent | UpgradeEvent | SecurityBulletinEvent | GenericEvent
)

_KIND_BY_TYPE: dict[type[ClusterEvent], EventKind] = {
    UpgradeAvailableEvent: EventKind.UPGRADE_AVAILABLE,
    UpgradeEvent: EventKind.UPGRADE,
    SecurityBulletinEvent: EventKind.SECURITY_BULLETIN,
    GenericEvent: EventKind.GENERIC,
}

NODE_POOL_RESOURCE_TYPES = frozenset({"NODE_POOL", "nodePool", "nodepool"})


def is_node_pool_upgrade_available(event: ClusterEvent) -> bool:
    """Return True for upgrade-available notices about a node pool.

    GKE sends one ``UpgradeAvailableEvent`` per node pool in addition to
    the control plane notice, which floods chat channels.
    """
    if not isinstance(event, UpgradeAvailableEvent):
        return False
    return (
        event.resource_type in NODE_POOL_RESOURCE_TYPES
        or event.resource.type in NODE_POOL_RESOURCE_TYPES
    )
