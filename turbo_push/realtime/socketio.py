"""Global Socket.IO server for Turbo Stream clients.

This is intentionally template-agnostic: it only knows about connections and
rooms. Rendered fragments reach it through
``turbo_push.realtime.transport.SocketIOPushConnection``.

Frontend convention:
- Socket.IO path: ``TURBO_PUSH["SOCKETIO_PATH"]`` (default ``/ws/turbo-stream/``)
- Auth (optional): ``query.token`` or ``auth.token`` (JWT access token)
- Inbound event: ``ReceiveStreamElement`` with one string payload

Rooms:
- every connection is implicitly in a room named after its ``sid``
- authenticated users join ``user_<id>`` and ``group_<name>`` per Django group
- clients may join extra named groups with the ``join_group`` event
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs

import socketio
from channels.db import database_sync_to_async
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import TokenError

from turbo_push.realtime.handshake import query_string_of
from turbo_push.realtime.rooms import room_for_group
from turbo_push.realtime.rooms import room_for_user
from turbo_push.streams.conf import cors_allowed_origins
from turbo_push.streams.conf import require_auth

logger = logging.getLogger(__name__)


sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=cors_allowed_origins(),
    logger=False,
    engineio_logger=False,
)


@dataclass(frozen=True)
class UserRealtimeContext:
    user_id: int
    group_names: tuple[str, ...]


@database_sync_to_async
def _get_user_context_from_access_token(token: str) -> UserRealtimeContext:
    jwt_auth = JWTAuthentication()
    validated = jwt_auth.get_validated_token(token)
    user = jwt_auth.get_user(validated)

    groups_qs = getattr(user, "groups", None)
    if groups_qs is None:
        group_names: tuple[str, ...] = ()
    else:
        group_names = tuple(groups_qs.order_by("name").values_list("name", flat=True))

    return UserRealtimeContext(user_id=int(user.id), group_names=group_names)


def _extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Extract JWT token from Socket.IO environ/auth."""

    token = parse_qs(query_string_of(environ)).get("token", [None])[0]
    if isinstance(token, str) and token:
        return token

    # Allow `auth: { token }` as fallback.
    if isinstance(auth, dict):
        auth_token = auth.get("token")
        if isinstance(auth_token, str) and auth_token:
            return auth_token

    return None


def _group_name_from(data: Any) -> str:
    if isinstance(data, dict):
        data = data.get("group")
    if isinstance(data, str):
        return data.strip()
    return ""


def _refusal_reason(exc: Exception) -> str:
    """Reason string a client sees when its token is rejected."""

    if isinstance(exc, TokenError) and "expired" in str(exc).lower():
        return "jwt_expired"
    return "unauthorized"


async def _authenticate(
    sid: str,
    environ: dict[str, Any],
    auth: Any | None,
) -> UserRealtimeContext | None:
    """Resolve the connecting user, or ``None`` for an allowed anonymous client."""

    token = _extract_token(environ, auth)
    if not token:
        if require_auth():
            msg = "unauthorized"
            raise ConnectionRefusedError(msg)
        logger.debug("Anonymous Socket.IO connection %s", sid)
        return None

    try:
        return await _get_user_context_from_access_token(token)
    except (TokenError, AuthenticationFailed) as exc:
        raise ConnectionRefusedError(_refusal_reason(exc)) from exc
    except Exception as exc:
        logger.exception("Socket.IO connect error for %s", sid)
        msg = "server_error"
        raise ConnectionRefusedError(msg) from exc


def _rooms_for(ctx: UserRealtimeContext) -> list[str]:
    rooms = [room_for_user(ctx.user_id)]
    rooms.extend(room_for_group(name) for name in ctx.group_names)
    return rooms


@sio.event
async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
    ctx = await _authenticate(sid, environ, auth)
    if ctx is None:
        return

    await sio.save_session(
        sid,
        {"user_id": ctx.user_id, "group_names": list(ctx.group_names)},
    )
    rooms = _rooms_for(ctx)
    for room in rooms:
        await sio.enter_room(sid, room)
    logger.debug("Socket.IO connection %s joined %s", sid, rooms)


@sio.event
async def disconnect(sid: str, *args: Any):
    # Rooms/session are cleaned up automatically.
    _ = sid


@sio.event
async def join_group(sid: str, data: Any):
    """Subscribe the connection to a named group destination."""

    group_name = _group_name_from(data)
    if not group_name:
        return {"ok": False, "error": "group_required"}

    room = room_for_group(group_name)
    await sio.enter_room(sid, room)
    logger.debug("Connection %s joined %s", sid, room)
    return {"ok": True, "room": room}


@sio.event
async def leave_group(sid: str, data: Any):
    group_name = _group_name_from(data)
    if not group_name:
        return {"ok": False, "error": "group_required"}

    room = room_for_group(group_name)
    await sio.leave_room(sid, room)
    return {"ok": True, "room": room}

