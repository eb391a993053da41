"""clusternotify: GKE cluster notifications forwarded to chat.

The service receives Pub/Sub push requests carrying GKE cluster
notifications, classifies them, logs a readable summary and optionally
posts a Slack Block Kit message.
"""

from __future__ import annotations

from clusternotify.errors import ClusterNotifyError, ConfigError

__all__ = ["ClusterNotifyError", "ConfigError"]
