from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class MessageEvent:
    """A generic "fragment received" notification; ``data`` is left unparsed."""

    data: str
    type: str = "message"


MessageListener = Callable[[MessageEvent], None]


class StreamSource(Protocol):
    def add_listener(self, listener: MessageListener) -> None: ...

    def remove_listener(self, listener: MessageListener) -> None: ...


class StreamSourceRegistry:
    """Registry of stream sources feeding a DOM-patching consumer.

    Sources are connected/disconnected as the client bridge attaches and
    detaches; every message from a connected source is handed to each
    subscriber in subscription order.
    """

    def __init__(self) -> None:
        self._sources: list[StreamSource] = []
        self._subscribers: list[MessageListener] = []

    @property
    def sources(self) -> tuple[StreamSource, ...]:
        return tuple(self._sources)

    def is_connected(self, source: StreamSource) -> bool:
        return any(s is source for s in self._sources)

    def connect_stream_source(self, source: StreamSource) -> None:
        if self.is_connected(source):
            return
        self._sources.append(source)
        source.add_listener(self.receive_message)

    def disconnect_stream_source(self, source: StreamSource) -> None:
        if not self.is_connected(source):
            return
        self._sources = [s for s in self._sources if s is not source]
        source.remove_listener(self.receive_message)

    def subscribe(self, listener: MessageListener) -> None:
        if listener not in self._subscribers:
            self._subscribers.append(listener)

    def unsubscribe(self, listener: MessageListener) -> None:
        if listener in self._subscribers:
            self._subscribers.remove(listener)

    def receive_message(self, event: MessageEvent) -> None:
        if event.type != "message":
            return
        for listener in list(self._subscribers):
            listener(event)
