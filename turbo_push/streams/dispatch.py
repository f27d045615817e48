"""Dispatch: render a fragment, then hand it to the push connection.

Both entry points (HTTP views and realtime handlers) end up in
``FragmentDispatcher.dispatch``. Render and delivery run in sequence for one
call; nothing is retried and the first failure reaches the caller unchanged.
Returning only means the transport accepted the fragment, not that a browser
applied it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.template import engines
from django.utils.module_loading import import_string

from turbo_push.exceptions import InvalidArgument
from turbo_push.exceptions import TurboPushError
from turbo_push.streams.conf import temp_data_accessor_path
from turbo_push.streams.conf import template_engine_alias
from turbo_push.streams.context import RenderingContext
from turbo_push.streams.context import TempDataAccessor
from turbo_push.streams.context import build_context
from turbo_push.streams.context import default_temp_data
from turbo_push.streams.renderer import FragmentRenderer

if TYPE_CHECKING:  # import for type checking only
    from django.template.backends.base import BaseEngine

    from turbo_push.realtime.transport import Destination
    from turbo_push.realtime.transport import PushConnection
    from turbo_push.streams.context import FragmentRequest
    from turbo_push.streams.renderer import RenderedFragment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderingDependencies:
    engine: BaseEngine
    temp_data_accessor: TempDataAccessor = default_temp_data

    @classmethod
    def from_settings(cls) -> RenderingDependencies:
        return cls(
            engine=engines[template_engine_alias()],
            temp_data_accessor=import_string(temp_data_accessor_path()),
        )


class FragmentDispatcher:
    def __init__(
        self,
        dependencies: RenderingDependencies,
        transport: PushConnection,
    ) -> None:
        self.dependencies = dependencies
        self.transport = transport
        self.renderer = FragmentRenderer(dependencies.engine)

    def build_context(self, request: FragmentRequest) -> RenderingContext:
        return build_context(
            request,
            temp_data_accessor=self.dependencies.temp_data_accessor,
        )

    async def dispatch(
        self,
        request: FragmentRequest,
        destination: Destination,
    ) -> RenderedFragment:
        """Render ``request`` and deliver it to ``destination``."""

        if request is None:
            msg = "request is required."
            raise InvalidArgument(msg)
        if destination is None:
            msg = "destination is required."
            raise InvalidArgument(msg)

        try:
            context = self.build_context(request)
            fragment = await self.renderer.render(context)
            await self.transport.deliver(destination, fragment.html)
        except TurboPushError as exc:
            logger.warning(
                "Fragment dispatch to %s failed (%s): %s",
                destination.room,
                type(exc).__name__,
                exc,
            )
            raise

        logger.debug(
            "Dispatched %s to %s (%s)",
            fragment.template_name,
            destination.room,
            type(request.origin).__name__,
        )
        return fragment
