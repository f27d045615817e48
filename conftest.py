from __future__ import annotations

from unittest import mock

import pytest

from turbo_push.exceptions import TransportError
from turbo_push.streams.context import RealtimeConnectionOrigin
from turbo_push.streams.dispatch import FragmentDispatcher
from turbo_push.streams.dispatch import RenderingDependencies

MESSAGE_TEMPLATE = "fragments/message.turbo_stream.html"


class RecordingPushConnection:
    """Push connection that keeps every delivery in order."""

    def __init__(self):
        self.deliveries = []

    async def deliver(self, destination, fragment):
        self.deliveries.append((destination, fragment))

    def fragments_for(self, destination):
        return [f for d, f in self.deliveries if d == destination]


class FailingPushConnection:
    def __init__(self):
        self.attempts = 0

    async def deliver(self, destination, fragment):
        self.attempts += 1
        msg = "socket closed"
        raise TransportError(msg)


@pytest.fixture
def transport():
    return RecordingPushConnection()


@pytest.fixture
def failing_transport():
    return FailingPushConnection()


@pytest.fixture
def dispatcher(transport):
    return FragmentDispatcher(RenderingDependencies.from_settings(), transport)


@pytest.fixture
def installed_dispatcher(dispatcher):
    """Swap the process-wide dispatcher for one recording deliveries."""

    with mock.patch("turbo_push.streams.registry._dispatcher", dispatcher):
        yield dispatcher


@pytest.fixture
def handshake_environ():
    # Shape python-socketio hands to handlers in ASGI mode.
    return {
        "REQUEST_METHOD": "GET",
        "QUERY_STRING": "EIO=4&transport=websocket",
        "asgi.scope": {
            "type": "websocket",
            "path": "/ws/turbo-stream/",
            "query_string": b"EIO=4&transport=websocket",
            "headers": [(b"host", b"testserver")],
        },
    }


@pytest.fixture
def connection(handshake_environ):
    return RealtimeConnectionOrigin(sid="sid-1", environ=handshake_environ)
