"""Push connections: hand a rendered fragment to the realtime transport.

The dispatcher only depends on ``PushConnection.deliver``. Whether anybody is
still connected to the destination is the transport's concern; delivering to
an empty room is not an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Any
from typing import Literal
from typing import Protocol

from django.core.exceptions import ImproperlyConfigured

from turbo_push.exceptions import InvalidArgument
from turbo_push.exceptions import TransportError
from turbo_push.realtime.rooms import room_for_group
from turbo_push.realtime.rooms import room_for_user
from turbo_push.streams.conf import event_name
from turbo_push.streams.conf import transport_name

if TYPE_CHECKING:  # import for type checking only
    import socketio

logger = logging.getLogger(__name__)

DestinationKind = Literal["client", "group"]


@dataclass(frozen=True)
class Destination:
    """One client (by connection id) or a named group of clients."""

    room: str
    kind: DestinationKind = "group"

    def __post_init__(self):
        if not isinstance(self.room, str) or not self.room.strip():
            msg = "Destination room must be a non-empty string."
            raise InvalidArgument(msg)

    @classmethod
    def client(cls, sid: str) -> Destination:
        return cls(room=sid, kind="client")

    @classmethod
    def group(cls, group_name: str) -> Destination:
        return cls(room=room_for_group(group_name), kind="group")

    @classmethod
    def user(cls, user_id: int) -> Destination:
        return cls(room=room_for_user(user_id), kind="group")

    @classmethod
    def room_named(cls, room: str) -> Destination:
        return cls(room=room, kind="group")


class PushConnection(Protocol):
    async def deliver(self, destination: Destination, fragment: str) -> None:
        """Hand ``fragment`` to the transport for ``destination``."""


class SocketIOPushConnection:
    """Deliver fragments as a single-string Socket.IO event."""

    def __init__(
        self,
        server: socketio.AsyncServer,
        event_name: str = "ReceiveStreamElement",
        namespace: str | None = None,
    ) -> None:
        self.server = server
        self.event_name = event_name
        self.namespace = namespace

    async def deliver(self, destination: Destination, fragment: str) -> None:
        try:
            await self.server.emit(
                self.event_name,
                str(fragment),
                to=destination.room,
                namespace=self.namespace,
            )
        except Exception as exc:
            msg = f"Socket.IO emit to {destination.room!r} failed: {exc}"
            raise TransportError(msg) from exc
        logger.debug("Emitted %s to %s", self.event_name, destination.room)


class ChannelLayerPushConnection:
    """Deliver fragments through the Channels layer.

    Group destinations go through ``group_send``; client destinations carry a
    consumer's ``channel_name`` and go through ``send``. The consumer side is
    ``turbo_push.realtime.consumers.TurboStreamConsumer``.
    """

    def __init__(self, layer: Any | None = None, message_type: str = "turbo.stream"):
        self._layer = layer
        self.message_type = message_type

    @property
    def layer(self) -> Any:
        if self._layer is None:
            from channels.layers import get_channel_layer  # noqa: PLC0415

            self._layer = get_channel_layer()
        if self._layer is None:
            msg = "No channel layer configured (CHANNEL_LAYERS is empty)."
            raise TransportError(msg)
        return self._layer

    async def deliver(self, destination: Destination, fragment: str) -> None:
        layer = self.layer
        message = {"type": self.message_type, "element": str(fragment)}
        try:
            if destination.kind == "client":
                await layer.send(destination.room, message)
            else:
                await layer.group_send(destination.room, message)
        except Exception as exc:
            msg = f"Channel layer send to {destination.room!r} failed: {exc}"
            raise TransportError(msg) from exc
        logger.debug("Sent %s to %s", self.message_type, destination.room)


def transport_from_settings() -> PushConnection:
    """Build the push connection named by ``TURBO_PUSH["TRANSPORT"]``."""

    name = transport_name()
    if name == "channels":
        return ChannelLayerPushConnection()
    if name == "socketio":
        from turbo_push.realtime.socketio import sio  # noqa: PLC0415

        return SocketIOPushConnection(sio, event_name=event_name())

    msg = f"Unknown TURBO_PUSH['TRANSPORT']: {name!r} (expected 'socketio' or 'channels')."
    raise ImproperlyConfigured(msg)
