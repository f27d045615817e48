from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Any

from asgiref.sync import sync_to_async
from django.template import TemplateDoesNotExist
from django.template import TemplateSyntaxError

from turbo_push.exceptions import RenderError
from turbo_push.exceptions import ViewNotFound

if TYPE_CHECKING:  # import for type checking only
    from django.template.backends.base import BaseEngine

    from turbo_push.streams.context import RenderingContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedFragment:
    """Markup produced for one dispatch.

    The template is expected to wrap its output in a ``<turbo-stream>``
    element (action + target); nothing is added or validated here.
    """

    html: str
    template_name: str

    def __str__(self) -> str:
        return self.html


class FragmentRenderer:
    """Render a ``RenderingContext`` with a Django template backend."""

    def __init__(self, engine: BaseEngine) -> None:
        self.engine = engine

    def resolve_template(self, context: RenderingContext) -> tuple[Any, str]:
        """Return ``(template, name)`` for the first candidate that exists."""

        tried: list[str] = []
        for name in context.template_names:
            try:
                return self.engine.get_template(name), name
            except TemplateDoesNotExist:
                tried.append(name)
            except TemplateSyntaxError as exc:
                msg = f"Template {name!r} failed to compile: {exc}"
                raise RenderError(msg) from exc

        msg = f"Fragment template not found (tried: {', '.join(tried)})."
        raise ViewNotFound(msg, tried=tuple(tried))

    def render_sync(self, context: RenderingContext) -> RenderedFragment:
        template, name = self.resolve_template(context)
        try:
            html = template.render(context.template_context(), context.request)
        except Exception as exc:
            msg = f"Rendering {name!r} failed: {exc}"
            raise RenderError(msg) from exc

        logger.debug("Rendered %s (%d chars)", name, len(html))
        return RenderedFragment(html=str(html), template_name=name)

    async def render(self, context: RenderingContext) -> RenderedFragment:
        """Render off the event loop; the whole fragment is buffered."""

        return await sync_to_async(self.render_sync)(context)
