from __future__ import annotations

from unittest import mock

import pytest
from django.core.exceptions import ImproperlyConfigured

from turbo_push.streams import conf
from turbo_push.streams import registry
from turbo_push.streams.dispatch import FragmentDispatcher


def test_app_ready_installs_dispatcher():
    assert isinstance(registry.get_dispatcher(), FragmentDispatcher)


def test_configure_only_once(dispatcher):
    with pytest.raises(ImproperlyConfigured):
        registry.configure(dispatcher)


def test_unconfigured_registry_raises():
    with (
        mock.patch.object(registry, "_dispatcher", None),
        pytest.raises(ImproperlyConfigured),
    ):
        registry.get_dispatcher()


def test_configure_sets_dispatcher_when_empty(dispatcher):
    with mock.patch.object(registry, "_dispatcher", None):
        registry.configure(dispatcher)
        assert registry.get_dispatcher() is dispatcher


class TestSettings:
    def test_defaults(self, settings):
        settings.TURBO_PUSH = {}

        assert conf.template_engine_alias() == "django"
        assert conf.template_suffix() == ".turbo_stream.html"
        assert conf.event_name() == "ReceiveStreamElement"
        assert conf.transport_name() == "socketio"
        assert conf.require_auth() is False
        assert conf.socketio_path() == "ws/turbo-stream"
        assert conf.cors_allowed_origins() == "*"

    def test_overrides(self, settings):
        settings.TURBO_PUSH = {
            "TRANSPORT": " Channels ",
            "SOCKETIO_PATH": "/realtime/",
            "CORS_ALLOWED_ORIGINS": ["https://a.example", "https://b.example"],
            "REQUIRE_AUTH": 1,
        }

        assert conf.transport_name() == "channels"
        assert conf.socketio_path() == "realtime"
        assert conf.cors_allowed_origins() == ["https://a.example", "https://b.example"]
        assert conf.require_auth() is True

    def test_wildcard_origin_list_collapses(self, settings):
        settings.TURBO_PUSH = {"CORS_ALLOWED_ORIGINS": ["*"]}

        assert conf.cors_allowed_origins() == "*"
