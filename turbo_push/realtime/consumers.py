"""Raw WebSocket consumer for pages that use Channels instead of Socket.IO.

Fragments reach it through ``ChannelLayerPushConnection``: a ``turbo.stream``
message whose ``element`` is forwarded to the socket as one text frame.
"""

from __future__ import annotations

import logging
from typing import Any

from channels.generic.websocket import AsyncWebsocketConsumer

from turbo_push.realtime.rooms import room_for_group
from turbo_push.streams.context import RealtimeConnectionOrigin

logger = logging.getLogger(__name__)


class TurboStreamConsumer(AsyncWebsocketConsumer):
    """Joins the group named in the URL route (``group`` kwarg) on connect."""

    groups_joined: tuple[str, ...] = ()

    def get_group_rooms(self) -> tuple[str, ...]:
        kwargs = self.scope.get("url_route", {}).get("kwargs", {})
        group_name = kwargs.get("group")
        if not group_name:
            return ()
        return (room_for_group(str(group_name)),)

    @property
    def connection(self) -> RealtimeConnectionOrigin:
        """This socket as a dispatch origin (its scope is the handshake)."""

        return RealtimeConnectionOrigin(sid=self.channel_name, environ=self.scope)

    async def connect(self):
        self.groups_joined = self.get_group_rooms()
        for room in self.groups_joined:
            await self.channel_layer.group_add(room, self.channel_name)
        await self.accept()
        logger.debug("Channels connection %s joined %s", self.channel_name, self.groups_joined)

    async def disconnect(self, code):
        for room in self.groups_joined:
            await self.channel_layer.group_discard(room, self.channel_name)

    async def turbo_stream(self, event: dict[str, Any]):
        await self.send(text_data=event["element"])
