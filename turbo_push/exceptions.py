"""Errors raised while rendering and pushing Turbo Stream fragments.

Every failure surfaces to whoever called the dispatcher (a view or a socket
event handler). Nothing here is fatal to the process.
"""

from __future__ import annotations


class TurboPushError(Exception):
    """Base error for fragment dispatch."""


class InvalidArgument(TurboPushError, ValueError):  # noqa: N818
    """A required input was missing or empty."""


class NoAssociatedRequest(TurboPushError):  # noqa: N818
    """The realtime connection was not established through an HTTP upgrade."""


class ViewNotFound(TurboPushError):  # noqa: N818
    """No template matched the requested name."""

    def __init__(self, message: str, tried: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.tried = tried


class RenderError(TurboPushError):
    """The template engine failed while producing the fragment."""


class TransportError(TurboPushError):
    """The realtime transport failed to accept the fragment."""
