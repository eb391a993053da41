"""Typed cluster notification events and the payload parser."""

from __future__ import annotations

from .errors import ParseError, ParseErrorKind
from .models import (
    ClusterEvent,
    EventKind,
    EventMetadata,
    GenericEvent,
    NotificationEvent,
    ReleaseChannel,
    Resource,
    SecurityBulletinEvent,
    UpgradeAvailableEvent,
    UpgradeEvent,
    is_node_pool_upgrade_available,
)
from .parser import (
    DEFAULT_EVENT_TYPES,
    GKE_TYPE_URL_PREFIX,
    EventParser,
    EventRegistry,
    resource_from_path,
)

__all__ = [
    "DEFAULT_EVENT_TYPES",
    "GKE_TYPE_URL_PREFIX",
    "ClusterEvent",
    "EventKind",
    "EventMetadata",
    "EventParser",
    "EventRegistry",
    "GenericEvent",
    "NotificationEvent",
    "ParseError",
    "ParseErrorKind",
    "ReleaseChannel",
    "Resource",
    "SecurityBulletinEvent",
    "UpgradeAvailableEvent",
    "UpgradeEvent",
    "is_node_pool_upgrade_available",
    "resource_from_path",
]
