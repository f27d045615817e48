"""Helpers for reading the HTTP upgrade metadata of a realtime connection.

python-socketio passes different shapes depending on async mode:
- ASGI: ``environ`` is a WSGI-style dict with the ASGI scope under ``asgi.scope``
- WSGI: ``environ`` is a WSGI environ with ``QUERY_STRING: str``
- Channels consumers hand over the raw ASGI ``scope`` itself
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_ASGI_SCOPE_TYPES = frozenset({"http", "websocket"})


def resolve_asgi_scope(environ: Any) -> dict[str, Any] | None:
    """Return the ASGI scope that established the connection, if there is one."""

    if not isinstance(environ, Mapping):
        return None

    inner = environ.get("asgi.scope")
    if isinstance(inner, Mapping) and inner.get("type") in _ASGI_SCOPE_TYPES:
        return dict(inner)

    if environ.get("type") in _ASGI_SCOPE_TYPES:
        return dict(environ)

    return None


def is_wsgi_environ(environ: Any) -> bool:
    return (
        isinstance(environ, Mapping)
        and "REQUEST_METHOD" in environ
        and "wsgi.input" in environ
    )


def query_string_of(environ: Any) -> str:
    """Raw query string of the handshake request ('' when unknown)."""

    query_string: str | bytes = ""
    scope = resolve_asgi_scope(environ)
    if scope is not None:
        query_string = scope.get("query_string", b"")
    elif isinstance(environ, Mapping):
        query_string = environ.get("QUERY_STRING", "")

    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")
    return str(query_string)
