import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from socialhub.realtime import EventTypes, aemit_to_user, registry

logger = logging.getLogger(__name__)

# Close code sent when the handshake carries no valid access token
UNAUTHORIZED_CLOSE_CODE = 4401


class EventConsumer(AsyncJsonWebsocketConsumer):
    """
    One authenticated live connection per user. Server-side events reach it
    through the channel layer as ``push.event`` messages.
    """

    user_id = None

    async def connect(self):
        user = self.scope.get("user")
        if user is None or not user.is_authenticated:
            logger.info("Rejected live connection without a valid token")
            await self.close(code=UNAUTHORIZED_CLOSE_CODE)
            return

        self.user_id = user.id
        registry.register(self.user_id, self.channel_name)
        await self.accept()
        logger.info(f"User {self.user_id} connected on {self.channel_name}")

        await self.broadcast_presence(EventTypes.USER_ONLINE)

    async def disconnect(self, close_code):
        if self.user_id is None:
            return

        if registry.unregister(self.user_id, self.channel_name):
            logger.info(f"User {self.user_id} disconnected ({close_code})")
            await self.broadcast_presence(EventTypes.USER_OFFLINE)

    async def receive_json(self, content, **kwargs):
        if isinstance(content, dict) and content.get("event") == "ping":
            await self.send_json({"event": "pong"})

    async def push_event(self, message):
        """Handler for ``push.event`` messages sent by emit_to_user."""
        await self.send_json(
            {
                "event": message["event"],
                "data": message["data"],
                "invalidates": message.get("invalidates", []),
            }
        )

    async def broadcast_presence(self, event: str):
        for follower_id in await self.get_follower_ids():
            if registry.is_online(follower_id):
                await aemit_to_user(follower_id, event, {"userId": self.user_id})

    @database_sync_to_async
    def get_follower_ids(self):
        from users.models import Follow

        return list(
            Follow.objects.filter(following_id=self.user_id).values_list(
                "follower_id", flat=True
            )
        )
