from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import Protocol

from .sources import MessageEvent

if TYPE_CHECKING:  # import for type checking only
    from collections.abc import Callable

    import socketio

    from .sources import MessageListener
    from .sources import StreamSourceRegistry

logger = logging.getLogger(__name__)

RECEIVE_STREAM_ELEMENT = "ReceiveStreamElement"


class Connection(Protocol):
    def on(self, event: str, handler: Callable[..., Any]) -> None: ...

    def off(self, event: str, handler: Callable[..., Any]) -> None: ...


class SocketIOClientConnection:
    """Adapt ``socketio.AsyncClient``/``socketio.Client`` to ``on``/``off``.

    python-socketio clients keep one handler per event and namespace in
    ``client.handlers``; ``off`` only removes the handler if it is still the
    one registered.
    """

    def __init__(self, client: socketio.AsyncClient | socketio.Client, namespace: str = "/"):
        self.client = client
        self.namespace = namespace

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        self.client.on(event, handler, namespace=self.namespace)

    def off(self, event: str, handler: Callable[..., Any]) -> None:
        handlers = self.client.handlers.get(self.namespace, {})
        if handlers.get(event) == handler:
            del handlers[event]


class StreamObserver:
    """Bridge one connection's ``ReceiveStreamElement`` event to a source registry.

    Starts detached. ``attach()`` registers the inbound handler, then connects
    to the registry; ``detach()`` undoes both in reverse order. Both are
    idempotent. Not safe to call concurrently with themselves.
    """

    def __init__(
        self,
        connection: Connection,
        registry: StreamSourceRegistry,
        event_name: str = RECEIVE_STREAM_ELEMENT,
    ) -> None:
        self._connection = connection
        self._registry = registry
        self._listeners: list[MessageListener] = []
        self._attached = False
        self.event_name = event_name

    @property
    def connection(self) -> Connection:
        return self._connection

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        if self._attached:
            return

        self._connection.on(self.event_name, self._receive_stream_element)
        self._registry.connect_stream_source(self)
        self._attached = True
        logger.debug("Stream observer attached to %s", self.event_name)

    def detach(self) -> None:
        if not self._attached:
            return

        self._registry.disconnect_stream_source(self)
        self._connection.off(self.event_name, self._receive_stream_element)
        self._attached = False
        logger.debug("Stream observer detached from %s", self.event_name)

    def add_listener(self, listener: MessageListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: MessageListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _receive_stream_element(self, element: str) -> None:
        event = MessageEvent(data=element)
        for listener in list(self._listeners):
            listener(event)
