"""Socket.IO handlers for the chat demo.

These render from the connection path: the template context is rebuilt from
the handshake of the socket that sent the event.
"""

from __future__ import annotations

import logging
from typing import Any

from turbo_push.chat import CHAT_GROUP
from turbo_push.chat import MESSAGE_TEMPLATE
from turbo_push.exceptions import TurboPushError
from turbo_push.realtime.socketio import sio
from turbo_push.realtime.transport import Destination
from turbo_push.streams.api import send_partial_from_sid

logger = logging.getLogger(__name__)


def _message_text(data: Any) -> str:
    if isinstance(data, dict):
        data = data.get("message", "")
    return "" if data is None else str(data)


@sio.event
async def send_message(sid: str, data: Any):
    """Broadcast a chat message to everyone in the chat group."""

    text = _message_text(data)
    if not text:
        return {"ok": False, "error": "message_required"}

    try:
        await send_partial_from_sid(
            sid,
            Destination.group(CHAT_GROUP),
            f"{CHAT_GROUP}/{MESSAGE_TEMPLATE}",
            text,
        )
    except TurboPushError as exc:
        logger.exception("send_message from %s failed", sid)
        return {"ok": False, "error": type(exc).__name__}

    return {"ok": True}
