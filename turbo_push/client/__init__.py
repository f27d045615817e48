"""Client-side bridge between a realtime connection and a DOM patcher.

``StreamObserver`` listens for ``ReceiveStreamElement`` on a connection and
re-emits each payload as a ``message`` event on a ``StreamSourceRegistry``.
The browser equivalent ships as ``static/turbo_push/stream_observer.js``.
"""

from .observer import SocketIOClientConnection
from .observer import StreamObserver
from .sources import MessageEvent
from .sources import StreamSourceRegistry

__all__ = [
    "MessageEvent",
    "SocketIOClientConnection",
    "StreamObserver",
    "StreamSourceRegistry",
]
