"""Shared push request builders for pipeline tests.

Each builder returns deterministic payloads, envelopes or raw HTTP bodies
shaped like the requests GKE notifications arrive in through a Pub/Sub push
subscription.

Examples
--------
>>> from tests.helpers.push_builders import PushSpec
>>> spec = PushSpec(payload={"type": "UpgradeEvent"})
>>> body = spec.body()
>>> spec.envelope().message.message_id
'msg-1'

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import msgspec

from clusternotify.pubsub import PushEnvelope, PushMessage, encode_payload

UPGRADE_AVAILABLE_PAYLOAD: dict[str, typ.Any] = {
    "type": "UpgradeAvailableEvent",
    "resource": {"type": "master", "name": "cluster-a"},
    "currentVersion": "1.27",
    "targetVersion": "1.28",
}

UPGRADE_PAYLOAD: dict[str, typ.Any] = {
    "type": "UpgradeEvent",
    "resource": "projects/my-project/locations/us-central1/clusters/cluster-a",
    "currentVersion": "1.27.3-gke.100",
    "targetVersion": "1.28.1-gke.200",
    "operation": "operation-123",
    "operationStartTime": "2024-05-01T10:00:00Z",
    "resourceType": "MASTER",
}

SECURITY_BULLETIN_PAYLOAD: dict[str, typ.Any] = {
    "type": "SecurityBulletinEvent",
    "resource": {"type": "cluster", "name": "cluster-a", "location": "europe-west1"},
    "bulletinId": "GCP-2024-001",
    "bulletinUri": "https://cloud.google.com/anthos/clusters/docs/security-bulletins",
    "severity": "HIGH",
    "briefDescription": "Container escape in runc",
    "cveIds": ["CVE-2024-21626"],
    "patchedVersions": ["1.28.5-gke.100"],
    "manualStepsRequired": True,
}

UNKNOWN_PAYLOAD: dict[str, typ.Any] = {"type": "FutureUnknownEvent", "foo": "bar"}

NODE_POOL_UPGRADE_AVAILABLE_PAYLOAD: dict[str, typ.Any] = {
    "type": "UpgradeAvailableEvent",
    "resource": (
        "projects/my-project/locations/us-central1/clusters/cluster-a/"
        "nodePools/default-pool"
    ),
    "version": "1.28.1-gke.200",
    "resourceType": "NODE_POOL",
}


@dc.dataclass(frozen=True, slots=True)
class PushSpec:
    """Parameters for one push request."""

    payload: dict[str, typ.Any] | bytes | str
    attributes: dict[str, str] = dc.field(default_factory=dict)
    message_id: str = "msg-1"
    publish_time: str = "2024-05-01T10:00:00Z"
    subscription: str = "projects/my-project/subscriptions/gke-notifications"

    def data(self) -> str:
        """Return the base64 ``message.data`` for the payload."""
        if isinstance(self.payload, dict):
            return encode_payload(msgspec.json.encode(self.payload))
        return encode_payload(self.payload)

    def envelope(self) -> PushEnvelope:
        """Return the decoded envelope struct."""
        return PushEnvelope(
            message=PushMessage(
                data=self.data(),
                attributes=self.attributes,
                message_id=self.message_id,
                publish_time=self.publish_time,
            ),
            subscription=self.subscription,
        )

    def body(self) -> bytes:
        """Return the raw HTTP request body Pub/Sub would POST."""
        return envelope_body(
            {
                "data": self.data(),
                "attributes": self.attributes,
                "messageId": self.message_id,
                "publishTime": self.publish_time,
            },
            subscription=self.subscription,
        )


def envelope_body(message: dict[str, typ.Any], *, subscription: str = "") -> bytes:
    """Encode an arbitrary ``message`` mapping as a push request body."""
    return msgspec.json.encode({"message": message, "subscription": subscription})


def gke_push(
    type_name: str,
    payload: dict[str, typ.Any],
    *,
    text: str = "Master is upgrading to version 1.28.1-gke.200.",
) -> PushSpec:
    """Return a push request shaped like the ones GKE publishes.

    GKE puts a sentence in ``data`` and the event JSON in the ``payload``
    attribute, typed by ``type_url``.
    """
    return PushSpec(
        payload=text,
        attributes={
            "cluster_location": "us-central1",
            "cluster_name": "cluster-a",
            "payload": msgspec.json.encode(payload).decode("utf-8"),
            "project_id": "123456789012",
            "type_url": f"type.googleapis.com/google.container.v1beta1.{type_name}",
        },
    )
