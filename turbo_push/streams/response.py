"""HTTP responses carrying a Turbo Stream fragment.

The response renders through the same ``build_from_request`` path the
dispatcher uses, so a fragment returned to the requesting browser is
byte-for-byte what would be pushed to other clients.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

from django.http.response import ResponseHeaders
from django.template import TemplateDoesNotExist
from django.template.response import TemplateResponse

from turbo_push.exceptions import ViewNotFound
from turbo_push.streams.conf import template_engine_alias
from turbo_push.streams.context import build_from_request
from turbo_push.streams.registry import get_dispatcher

if TYPE_CHECKING:  # import for type checking only
    from collections.abc import Mapping

    from django.http import HttpRequest

    from turbo_push.realtime.transport import Destination
    from turbo_push.streams.renderer import RenderedFragment

TURBO_STREAM_CONTENT_TYPE = "text/html; turbo-stream; charset=utf-8"


class TurboStreamHeaders(ResponseHeaders):
    """Response headers whose Content-Type is pinned to the Turbo Stream marker."""

    def __init__(self, data: Mapping[str, str] | None = None) -> None:
        super().__init__(
            {
                key: value
                for key, value in (data or {}).items()
                if key.lower() != "content-type"
            }
        )
        super().__setitem__("Content-Type", TURBO_STREAM_CONTENT_TYPE)

    def __setitem__(self, key: str, value: str) -> None:
        if key.lower() == "content-type":
            return
        super().__setitem__(key, value)

    def __delitem__(self, key: str) -> None:
        if key.lower() == "content-type":
            return
        super().__delitem__(key)

    def pop(self, key: str, default: Any = None) -> Any:
        if key.lower() == "content-type":
            return self[key]
        return super().pop(key, default)


class TurboStreamResponse(TemplateResponse):
    """A ``TemplateResponse`` whose Content-Type is always the Turbo Stream marker.

    ``content_type``/``charset`` arguments are ignored, and so is any later
    change to the ``Content-Type`` header, whether through ``response[...]``,
    ``response.headers`` or a replacement headers mapping.
    """

    def __init__(  # noqa: PLR0913
        self,
        request: HttpRequest,
        template: str | list[str] | tuple[str, ...],
        context: Mapping[str, Any] | None = None,
        content_type: str | None = None,
        status: int | None = None,
        charset: str | None = None,
        using: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        _ = content_type, charset
        headers = {
            key: value
            for key, value in (headers or {}).items()
            if key.lower() != "content-type"
        }
        super().__init__(
            request,
            template,
            context,
            content_type=TURBO_STREAM_CONTENT_TYPE,
            status=status,
            using=using,
            headers=headers,
        )

    @property
    def content_type(self) -> str:
        return TURBO_STREAM_CONTENT_TYPE

    @property
    def headers(self) -> TurboStreamHeaders:
        return self._turbo_stream_headers

    @headers.setter
    def headers(self, value: Mapping[str, str] | None) -> None:
        if not isinstance(value, TurboStreamHeaders):
            value = TurboStreamHeaders(value)
        self._turbo_stream_headers = value

    def resolve_template(self, template):
        try:
            return super().resolve_template(template)
        except TemplateDoesNotExist as exc:
            tried = tuple(template) if isinstance(template, (list, tuple)) else (template,)
            msg = f"Fragment template not found (tried: {', '.join(map(str, tried))})."
            raise ViewNotFound(msg, tried=tried) from exc


def turbo_stream_partial(  # noqa: PLR0913
    request: HttpRequest,
    template_name: str | None = None,
    model: Any = None,
    *,
    view_data: Mapping[str, Any] | None = None,
    status: int | None = None,
    headers: Mapping[str, str] | None = None,
) -> TurboStreamResponse:
    """Render ``template_name`` (or the URL-name default) as a Turbo Stream response."""

    context = build_from_request(
        request,
        template_name,
        model,
        view_data=view_data,
        temp_data_accessor=get_dispatcher().dependencies.temp_data_accessor,
    )
    return TurboStreamResponse(
        request,
        list(context.template_names),
        context.template_context(),
        status=status,
        using=template_engine_alias(),
        headers=headers,
    )


class TurboStreamTemplateMixin:
    """Class-based view helpers for answering with, or pushing, a fragment.

    ``turbo_stream_template_name`` left as ``None`` falls back to the URL name
    convention (``<url_name>.turbo_stream.html``).
    """

    turbo_stream_template_name: str | None = None
    request: HttpRequest

    def get_turbo_stream_template_name(self) -> str | None:
        return self.turbo_stream_template_name

    def get_turbo_stream_view_data(self) -> dict[str, Any]:
        return {}

    def _turbo_stream_template(self, template_name: str | None) -> str | None:
        # only None falls back; an explicit "" is rejected by the builder
        if template_name is None:
            return self.get_turbo_stream_template_name()
        return template_name

    def render_turbo_stream(
        self,
        model: Any = None,
        template_name: str | None = None,
        **response_kwargs: Any,
    ) -> TurboStreamResponse:
        return turbo_stream_partial(
            self.request,
            self._turbo_stream_template(template_name),
            model,
            view_data=self.get_turbo_stream_view_data(),
            **response_kwargs,
        )

    def push_turbo_stream(
        self,
        destination: Destination,
        model: Any = None,
        template_name: str | None = None,
    ) -> RenderedFragment:
        from turbo_push.streams.api import send_partial_from_request_sync  # noqa: PLC0415

        return send_partial_from_request_sync(
            self.request,
            destination,
            self._turbo_stream_template(template_name),
            model,
            view_data=self.get_turbo_stream_view_data(),
        )
