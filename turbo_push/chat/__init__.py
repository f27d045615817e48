"""Minimal chat demo: one template pushed from a view and from a socket event."""

CHAT_GROUP = "chat"
MESSAGE_TEMPLATE = "message.turbo_stream.html"
