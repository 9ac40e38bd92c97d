import json

from channels.generic.websocket import AsyncWebsocketConsumer

from patientflow.realtime.publisher import tenant_group


class FlowBoardConsumer(AsyncWebsocketConsumer):
    """Pushes committed flow transitions to the staff of one tenant."""

    async def connect(self):
        user = self.scope.get("user")
        tenant_id = getattr(user, "tenant_id", None)
        if not (user and user.is_authenticated and tenant_id):
            await self.close(code=4003)
            return
        self.group_name = tenant_group(tenant_id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "tenantId": tenant_id}))

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        # Read-only channel; clients only listen.
        if text_data and text_data.strip() == "ping":
            await self.send(json.dumps({"type": "pong"}))

    # event: {"type": "flow.updated", "payload": {...}}
    async def flow_updated(self, event):
        payload = event.get("payload", {})
        await self.send(json.dumps({"type": "patient-flow:updated", **payload}))
