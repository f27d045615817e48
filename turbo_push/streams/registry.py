"""Process-wide dispatcher registration.

``StreamsConfig.ready()`` configures the dispatcher exactly once at startup;
afterwards it is only read.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.core.exceptions import ImproperlyConfigured

if TYPE_CHECKING:  # import for type checking only
    from turbo_push.streams.dispatch import FragmentDispatcher

_dispatcher: FragmentDispatcher | None = None


def configure(dispatcher: FragmentDispatcher) -> None:
    global _dispatcher  # noqa: PLW0603
    if _dispatcher is not None:
        msg = "The fragment dispatcher is already configured."
        raise ImproperlyConfigured(msg)
    _dispatcher = dispatcher


def get_dispatcher() -> FragmentDispatcher:
    if _dispatcher is None:
        msg = (
            "The fragment dispatcher is not configured. "
            "Add 'turbo_push.streams' to INSTALLED_APPS."
        )
        raise ImproperlyConfigured(msg)
    return _dispatcher
