import json

from channels.generic.websocket import AsyncWebsocketConsumer

from clinic.permissions import STAFF_ROLES
from clinic.services.notifications import CHANNEL_GROUP


class NotificationConsumer(AsyncWebsocketConsumer):
    """Pushes front-office notifications to connected staff dashboards."""
    GROUP = CHANNEL_GROUP

    async def connect(self):
        user = self.scope.get("user")
        # the feed names patients; only staff may listen
        if not (user and user.is_authenticated and getattr(user, "role", None) in STAFF_ROLES):
            await self.close()
            return
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    async def notification_created(self, event):
        # event: {"type": "notification.created", "id": ..., "title": ..., ...}
        await self.send(json.dumps(event))
