"""Room naming shared by the Socket.IO server and the Channels layer.

Channels group names only allow ASCII alphanumerics, hyphens, underscores
and periods. Group names are case-insensitive and trimmed; a name already
made of ``[a-z0-9_-]`` is used as-is, anything else keeps a readable prefix
plus a digest of the name after a period. Verbatim names never contain a
period, so distinct group names never share a room.
"""

from __future__ import annotations

import hashlib
import re

from turbo_push.exceptions import InvalidArgument

_VERBATIM = re.compile(r"[a-z0-9_-]{1,64}")
_UNSAFE = re.compile(r"[^a-z0-9_-]+")
_PREFIX_LENGTH = 40


def _group_key(group_name: str) -> str:
    key = str(group_name).strip().lower() if group_name is not None else ""
    if not key:
        msg = "Group name must be a non-empty string."
        raise InvalidArgument(msg)
    return key


def _room_suffix(key: str) -> str:
    if _VERBATIM.fullmatch(key):
        return key
    digest = hashlib.sha256(key.encode()).hexdigest()[:16]
    prefix = _UNSAFE.sub("", "_".join(key.split()))[:_PREFIX_LENGTH]
    return f"{prefix}.{digest}" if prefix else digest


def room_for_user(user_id: int) -> str:
    return f"user_{int(user_id)}"


def room_for_group(group_name: str) -> str:
    return f"group_{_room_suffix(_group_key(group_name))}"
