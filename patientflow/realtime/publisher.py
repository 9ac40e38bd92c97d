"""
Publishers for the live patient-flow channel.

The flow engine receives a publisher at construction time and calls
``publish(tenant_id, event)`` after a transition commits.  Delivery is
best effort: there is no acknowledgement and no replay.
"""
from __future__ import annotations

from typing import Any, Dict

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

FLOW_EVENT_TYPE = "flow.updated"


def tenant_group(tenant_id: str) -> str:
    return f"flow.{tenant_id}"


class ChannelLayerPublisher:
    """Broadcast flow events to the tenant's Channels group."""

    def __init__(self, alias: str = "default"):
        self.alias = alias

    def publish(self, tenant_id: str, event: Dict[str, Any]) -> None:
        channel_layer = get_channel_layer(self.alias)
        if channel_layer is None:
            raise RuntimeError("no channel layer configured")
        async_to_sync(channel_layer.group_send)(
            tenant_group(tenant_id), {"type": FLOW_EVENT_TYPE, "payload": event}
        )


class NullPublisher:
    """Drops every event."""

    def publish(self, tenant_id: str, event: Dict[str, Any]) -> None:
        return None
