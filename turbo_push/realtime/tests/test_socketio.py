from __future__ import annotations

from unittest import mock

import pytest
from asgiref.sync import async_to_sync
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.exceptions import TokenError

from turbo_push.realtime import socketio as realtime
from turbo_push.realtime.rooms import room_for_group
from turbo_push.realtime.socketio import UserRealtimeContext
from turbo_push.realtime.socketio import _extract_token
from turbo_push.realtime.socketio import connect
from turbo_push.realtime.socketio import join_group
from turbo_push.realtime.socketio import leave_group
from turbo_push.realtime.socketio import sio
from turbo_push.realtime.transport import Destination

USER_CONTEXT_PATH = "turbo_push.realtime.socketio._get_user_context_from_access_token"


@pytest.fixture
def rooms():
    with (
        mock.patch.object(sio, "enter_room", new_callable=mock.AsyncMock) as enter,
        mock.patch.object(sio, "leave_room", new_callable=mock.AsyncMock) as leave,
        mock.patch.object(sio, "save_session", new_callable=mock.AsyncMock) as save,
    ):
        yield mock.Mock(enter_room=enter, leave_room=leave, save_session=save)


def _environ(query=b""):
    return {"asgi.scope": {"type": "websocket", "path": "/ws/turbo-stream/", "query_string": query}}


class TestExtractToken:
    def test_from_query_string(self):
        assert _extract_token(_environ(b"EIO=4&token=abc"), None) == "abc"

    def test_from_wsgi_query_string(self):
        assert _extract_token({"QUERY_STRING": "token=def"}, None) == "def"

    def test_auth_payload_fallback(self):
        assert _extract_token(_environ(), {"token": "ghi"}) == "ghi"

    def test_none(self):
        assert _extract_token(_environ(), {"token": ""}) is None


class TestConnect:
    def test_anonymous_allowed_by_default(self, rooms):
        assert async_to_sync(connect)("sid-1", _environ()) is None

        rooms.enter_room.assert_not_called()

    def test_anonymous_refused_when_auth_required(self, settings, rooms):
        settings.TURBO_PUSH = {"REQUIRE_AUTH": True}

        with pytest.raises(ConnectionRefusedError, match="unauthorized"):
            async_to_sync(connect)("sid-1", _environ())

    def test_authenticated_joins_user_and_group_rooms(self, rooms):
        ctx = UserRealtimeContext(user_id=5, group_names=("Payroll Team",))

        with mock.patch(USER_CONTEXT_PATH, new=mock.AsyncMock(return_value=ctx)):
            async_to_sync(connect)("sid-1", _environ(b"token=t"))

        rooms.save_session.assert_awaited_once_with(
            "sid-1", {"user_id": 5, "group_names": ["Payroll Team"]}
        )
        assert [c.args for c in rooms.enter_room.await_args_list] == [
            ("sid-1", "user_5"),
            ("sid-1", room_for_group("Payroll Team")),
        ]

    @pytest.mark.parametrize(
        ("error", "reason"),
        [
            (TokenError("Token is expired"), "jwt_expired"),
            (TokenError("Token is invalid"), "unauthorized"),
            (AuthenticationFailed("User not found"), "unauthorized"),
            (RuntimeError("db down"), "server_error"),
        ],
    )
    def test_refusals(self, rooms, error, reason):
        with (
            mock.patch(USER_CONTEXT_PATH, new=mock.AsyncMock(side_effect=error)),
            pytest.raises(ConnectionRefusedError) as excinfo,
        ):
            async_to_sync(connect)("sid-1", _environ(), {"token": "t"})

        assert excinfo.value.args == (reason,)
        rooms.enter_room.assert_not_called()


class TestGroups:
    def test_join_group(self, rooms):
        result = async_to_sync(join_group)("sid-1", {"group": "Chat"})

        assert result == {"ok": True, "room": "group_chat"}
        rooms.enter_room.assert_awaited_once_with("sid-1", "group_chat")

    def test_join_group_accepts_plain_name(self, rooms):
        assert async_to_sync(join_group)("sid-1", "chat")["ok"] is True

    @pytest.mark.parametrize("data", [None, {}, {"group": "  "}, 3])
    def test_group_required(self, rooms, data):
        assert async_to_sync(join_group)("sid-1", data) == {
            "ok": False,
            "error": "group_required",
        }
        rooms.enter_room.assert_not_called()

    def test_join_group_keeps_non_ascii_groups_apart(self, rooms):
        first = async_to_sync(join_group)("sid-1", {"group": "日本"})
        second = async_to_sync(join_group)("sid-1", {"group": "한국"})

        assert first["ok"] is second["ok"] is True
        assert first["room"] != second["room"]
        assert first["room"] == Destination.group("日本").room

    def test_leave_group(self, rooms):
        result = async_to_sync(leave_group)("sid-1", {"group": "chat"})

        assert result == {"ok": True, "room": "group_chat"}
        rooms.leave_room.assert_awaited_once_with("sid-1", "group_chat")


@pytest.mark.django_db(transaction=True)
def test_access_token_resolves_user_and_groups(django_user_model):
    from django.contrib.auth.models import Group  # noqa: PLC0415
    from rest_framework_simplejwt.tokens import AccessToken  # noqa: PLC0415

    user = django_user_model.objects.create_user(username="ada", password="pw")
    user.groups.add(Group.objects.create(name="b-team"), Group.objects.create(name="a-team"))

    ctx = async_to_sync(realtime._get_user_context_from_access_token)(  # noqa: SLF001
        str(AccessToken.for_user(user))
    )

    assert ctx == UserRealtimeContext(user_id=user.id, group_names=("a-team", "b-team"))
