"""Accessors for the ``TURBO_PUSH`` settings dict.

Apps should read fragment-dispatch settings through these helpers instead
of poking at ``settings.TURBO_PUSH`` directly.
"""

from __future__ import annotations

from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    "TEMPLATE_ENGINE": "django",
    "TEMP_DATA_ACCESSOR": "turbo_push.streams.context.default_temp_data",
    "TEMPLATE_SUFFIX": ".turbo_stream.html",
    "EVENT_NAME": "ReceiveStreamElement",
    "TRANSPORT": "socketio",
    "REQUIRE_AUTH": False,
    "SOCKETIO_PATH": "ws/turbo-stream",
    "CORS_ALLOWED_ORIGINS": "*",
}


def get_setting(name: str) -> Any:
    """Return ``TURBO_PUSH[name]``, falling back to the package default."""

    overrides = getattr(settings, "TURBO_PUSH", None) or {}
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]


def template_engine_alias() -> str:
    return str(get_setting("TEMPLATE_ENGINE"))


def temp_data_accessor_path() -> str:
    return str(get_setting("TEMP_DATA_ACCESSOR"))


def template_suffix() -> str:
    """Suffix appended to a URL name to derive a default template name."""

    return str(get_setting("TEMPLATE_SUFFIX"))


def event_name() -> str:
    """Inbound event name the client bridge listens on."""

    return str(get_setting("EVENT_NAME"))


def transport_name() -> str:
    return str(get_setting("TRANSPORT")).strip().lower()


def require_auth() -> bool:
    return bool(get_setting("REQUIRE_AUTH"))


def socketio_path() -> str:
    return str(get_setting("SOCKETIO_PATH")).strip("/")


def cors_allowed_origins() -> str | list[str]:
    value = get_setting("CORS_ALLOWED_ORIGINS")
    if isinstance(value, (list, tuple)):
        origins = [str(origin) for origin in value]
        return "*" if origins == ["*"] else origins
    return str(value)
