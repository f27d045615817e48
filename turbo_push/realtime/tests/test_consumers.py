from __future__ import annotations

import pytest
from asgiref.sync import async_to_sync
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator

from turbo_push.realtime.consumers import TurboStreamConsumer
from turbo_push.realtime.routing import websocket_urlpatterns
from turbo_push.realtime.transport import ChannelLayerPushConnection
from turbo_push.realtime.transport import Destination
from turbo_push.streams.context import build_from_connection

FRAGMENT = '<turbo-stream action="remove" target="message_1"></turbo-stream>'


@pytest.mark.django_db(transaction=True)
def test_group_fragment_reaches_socket_as_text_frame():
    async def scenario():
        communicator = WebsocketCommunicator(
            URLRouter(websocket_urlpatterns), "/ws/turbo-stream/raw/consumer-a/"
        )
        connected, _ = await communicator.connect()
        assert connected

        await ChannelLayerPushConnection().deliver(Destination.group("consumer-a"), FRAGMENT)
        received = await communicator.receive_from()
        await communicator.disconnect()
        return received

    assert async_to_sync(scenario)() == FRAGMENT


def test_consumer_scope_is_a_dispatch_origin():
    path = "/ws/turbo-stream/raw/consumer-c/"

    consumer = TurboStreamConsumer()
    consumer.scope = {
        "type": "websocket",
        "path": path,
        "query_string": b"",
        "headers": [],
        "url_route": {"args": (), "kwargs": {"group": "consumer-c"}},
    }
    consumer.channel_name = "specific.inmemory!abc"

    context = build_from_connection(consumer.connection, "fragments/message.turbo_stream.html")

    assert consumer.get_group_rooms() == ("group_consumer-c",)
    assert context.request.path == path
