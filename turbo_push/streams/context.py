"""Rendering contexts for Turbo Stream fragments.

Two call sites converge here: a view handling an HTTP request, and a socket
event handler running on an already-open realtime connection. Both builders
return the same ``RenderingContext`` shape so a single renderer serves both.

The realtime path has no request of its own. It rebuilds one from the HTTP
upgrade (handshake) metadata the connection was opened with; a connection
that never went through an HTTP handshake cannot render.
"""

from __future__ import annotations

import io
from collections.abc import Callable
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from types import MappingProxyType
from typing import TYPE_CHECKING
from typing import Any

from django.contrib.messages.storage.cookie import CookieStorage
from django.core.handlers.asgi import ASGIRequest
from django.core.handlers.wsgi import WSGIRequest
from django.urls import Resolver404
from django.urls import resolve

from turbo_push.exceptions import InvalidArgument
from turbo_push.exceptions import NoAssociatedRequest
from turbo_push.realtime.handshake import is_wsgi_environ
from turbo_push.realtime.handshake import resolve_asgi_scope
from turbo_push.streams.conf import template_suffix

if TYPE_CHECKING:  # import for type checking only
    import socketio
    from django.http import HttpRequest
    from django.urls import ResolverMatch

TempDataAccessor = Callable[["HttpRequest"], Any]


@dataclass(frozen=True)
class HttpRequestOrigin:
    """Dispatch triggered while handling an HTTP request."""

    request: HttpRequest
    view_data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RealtimeConnectionOrigin:
    """Dispatch triggered from a handler bound to an open realtime connection.

    ``sid`` is the Socket.IO session id (or a Channels ``channel_name``) and
    ``environ`` the handshake metadata the connection was established with.
    """

    sid: str
    environ: Mapping[str, Any] | None = None


Origin = HttpRequestOrigin | RealtimeConnectionOrigin


@dataclass(frozen=True)
class FragmentRequest:
    origin: Origin
    template_name: str | None = None
    model: Any = None

    @classmethod
    def from_request(
        cls,
        request: HttpRequest,
        template_name: str | None = None,
        model: Any = None,
        *,
        view_data: Mapping[str, Any] | None = None,
    ) -> FragmentRequest:
        origin = HttpRequestOrigin(request=request, view_data=dict(view_data or {}))
        return cls(origin=origin, template_name=template_name, model=model)

    @classmethod
    def from_connection(
        cls,
        connection: RealtimeConnectionOrigin,
        template_name: str,
        model: Any = None,
    ) -> FragmentRequest:
        return cls(origin=connection, template_name=template_name, model=model)


@dataclass(frozen=True)
class RenderingContext:
    """Everything the template engine needs to render one fragment."""

    template_names: tuple[str, ...]
    model: Any
    request: HttpRequest
    resolver_match: ResolverMatch | None
    temp_data: Any
    view_data: Mapping[str, Any] = field(default_factory=dict)

    @property
    def template_name(self) -> str:
        return self.template_names[-1]

    def template_context(self) -> dict[str, Any]:
        context = dict(self.view_data)
        context["model"] = self.model
        context["temp_data"] = self.temp_data
        return context


def default_temp_data(request: HttpRequest) -> Any:
    """Temp-data for a request: its message storage.

    Reuses the storage ``MessageMiddleware`` attached to the request. Requests
    rebuilt from a handshake never went through the middleware, so they get a
    cookie-backed storage reading the same ``messages`` cookie.
    """

    storage = getattr(request, "_messages", None)
    if storage is not None:
        return storage
    return CookieStorage(request)


def connection_for(
    server: socketio.AsyncServer,
    sid: str,
    namespace: str | None = None,
) -> RealtimeConnectionOrigin:
    """Describe a Socket.IO connection together with its handshake environ."""

    return RealtimeConnectionOrigin(
        sid=sid,
        environ=server.get_environ(sid, namespace=namespace),
    )


def scoped_template_names(
    template_name: str,
    resolver_match: ResolverMatch | None,
) -> tuple[str, ...]:
    """Lookup candidates for ``template_name``, most specific first.

    A route inside an application namespace (``app_name = "chat"``) looks in
    ``chat/`` before falling back to the bare name.
    """

    app_name = getattr(resolver_match, "app_name", "") or ""
    if app_name:
        prefix = app_name.replace(":", "/")
        if not template_name.startswith(f"{prefix}/"):
            return (f"{prefix}/{template_name}", template_name)
    return (template_name,)


def default_template_name(request: HttpRequest) -> str:
    """Convention-derived template name: ``<url_name>.turbo_stream.html``."""

    url_name = getattr(getattr(request, "resolver_match", None), "url_name", None)
    if not url_name:
        msg = (
            "No template name given and none can be derived: "
            "the request did not resolve to a named URL."
        )
        raise InvalidArgument(msg)
    return f"{url_name}{template_suffix()}"


def _require_template_name(template_name: Any) -> str:
    if not isinstance(template_name, str) or not template_name.strip():
        msg = "template_name must be a non-empty string."
        raise InvalidArgument(msg)
    return template_name


def request_from_handshake(environ: Any) -> HttpRequest | None:
    """Rebuild the HTTP request that upgraded a realtime connection.

    Returns ``None`` when ``environ`` carries no usable HTTP metadata.
    """

    scope = resolve_asgi_scope(environ)
    if scope is not None and "path" in scope:
        # websocket scopes carry no method; the upgrade request is a GET
        scope.setdefault("method", "GET")
        return ASGIRequest(scope, io.BytesIO())

    if is_wsgi_environ(environ):
        return WSGIRequest(dict(environ))

    return None


def _resolve_quietly(path: str) -> ResolverMatch | None:
    try:
        return resolve(path)
    except Resolver404:
        return None


def build_from_request(
    request: HttpRequest,
    template_name: str | None = None,
    model: Any = None,
    *,
    view_data: Mapping[str, Any] | None = None,
    temp_data_accessor: TempDataAccessor = default_temp_data,
) -> RenderingContext:
    """Context for a fragment rendered while handling ``request``.

    The request's routing state and temp-data are reused as-is; ``view_data``
    is copied and ``model`` substituted. When ``template_name`` is ``None`` a
    name is derived from the URL name; an explicit empty name is rejected.
    """

    if request is None:
        msg = "request is required."
        raise InvalidArgument(msg)

    if template_name is None:
        template_name = default_template_name(request)
    else:
        template_name = _require_template_name(template_name)

    resolver_match = getattr(request, "resolver_match", None)
    return RenderingContext(
        template_names=scoped_template_names(template_name, resolver_match),
        model=model,
        request=request,
        resolver_match=resolver_match,
        temp_data=temp_data_accessor(request),
        view_data=MappingProxyType(dict(view_data or {})),
    )


def build_from_connection(
    connection: RealtimeConnectionOrigin,
    template_name: str,
    model: Any = None,
    *,
    temp_data_accessor: TempDataAccessor = default_temp_data,
) -> RenderingContext:
    """Context for a fragment rendered from an open realtime connection.

    Raises:
        InvalidArgument: ``connection`` or ``template_name`` is missing.
        NoAssociatedRequest: the connection has no HTTP handshake metadata.
    """

    if connection is None:
        msg = "connection is required."
        raise InvalidArgument(msg)
    template_name = _require_template_name(template_name)

    request = request_from_handshake(connection.environ)
    if request is None:
        msg = f"Connection {connection.sid!r} is not associated with an HTTP request."
        raise NoAssociatedRequest(msg)

    resolver_match = _resolve_quietly(request.path_info)
    request.resolver_match = resolver_match
    return RenderingContext(
        template_names=scoped_template_names(template_name, resolver_match),
        model=model,
        request=request,
        resolver_match=resolver_match,
        temp_data=temp_data_accessor(request),
        view_data=MappingProxyType({}),
    )


def build_context(
    fragment_request: FragmentRequest,
    *,
    temp_data_accessor: TempDataAccessor = default_temp_data,
) -> RenderingContext:
    """Pick the builder matching ``fragment_request.origin``."""

    origin = fragment_request.origin
    if origin is None:
        msg = "A request or connection is required."
        raise InvalidArgument(msg)
    if isinstance(origin, HttpRequestOrigin):
        return build_from_request(
            origin.request,
            fragment_request.template_name,
            fragment_request.model,
            view_data=origin.view_data,
            temp_data_accessor=temp_data_accessor,
        )
    if isinstance(origin, RealtimeConnectionOrigin):
        return build_from_connection(
            origin,
            fragment_request.template_name,
            fragment_request.model,
            temp_data_accessor=temp_data_accessor,
        )

    msg = f"Unsupported fragment origin: {type(origin).__name__}."
    raise InvalidArgument(msg)
