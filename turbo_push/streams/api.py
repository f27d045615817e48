"""Entry points for pushing a rendered fragment to connected clients.

From a view::

    send_partial_from_request_sync(
        request, Destination.group("chat"), "message.turbo_stream.html", text
    )

From a Socket.IO event handler::

    @sio.event
    async def send_message(sid, text):
        await send_partial_from_sid(
            sid, Destination.group("chat"), "chat/message.turbo_stream.html", text
        )
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

from asgiref.sync import async_to_sync

from turbo_push.streams.context import FragmentRequest
from turbo_push.streams.context import connection_for
from turbo_push.streams.registry import get_dispatcher

if TYPE_CHECKING:  # import for type checking only
    from collections.abc import Mapping

    import socketio
    from django.http import HttpRequest

    from turbo_push.realtime.transport import Destination
    from turbo_push.streams.context import RealtimeConnectionOrigin
    from turbo_push.streams.renderer import RenderedFragment


async def send_partial_from_request(
    request: HttpRequest,
    destination: Destination,
    template_name: str | None = None,
    model: Any = None,
    *,
    view_data: Mapping[str, Any] | None = None,
) -> RenderedFragment:
    fragment_request = FragmentRequest.from_request(
        request,
        template_name,
        model,
        view_data=view_data,
    )
    return await get_dispatcher().dispatch(fragment_request, destination)


def send_partial_from_request_sync(
    request: HttpRequest,
    destination: Destination,
    template_name: str | None = None,
    model: Any = None,
    *,
    view_data: Mapping[str, Any] | None = None,
) -> RenderedFragment:
    """Same as ``send_partial_from_request``, callable from sync Django code."""

    return async_to_sync(send_partial_from_request)(
        request,
        destination,
        template_name,
        model,
        view_data=view_data,
    )


async def send_partial_to_clients(
    connection: RealtimeConnectionOrigin,
    destination: Destination,
    template_name: str,
    model: Any = None,
) -> RenderedFragment:
    """Render from an open connection's handshake and push to ``destination``."""

    fragment_request = FragmentRequest.from_connection(connection, template_name, model)
    return await get_dispatcher().dispatch(fragment_request, destination)


async def send_partial_from_sid(
    sid: str,
    destination: Destination,
    template_name: str,
    model: Any = None,
    *,
    server: socketio.AsyncServer | None = None,
    namespace: str | None = None,
) -> RenderedFragment:
    """``send_partial_to_clients`` for a Socket.IO session id."""

    if server is None:
        from turbo_push.realtime.socketio import sio as server  # noqa: PLC0415

    connection = connection_for(server, sid, namespace=namespace)
    return await send_partial_to_clients(connection, destination, template_name, model)
