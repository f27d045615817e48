"""Realtime infrastructure (Socket.IO, Channels).

This package holds the transports that carry rendered fragments to connected
browsers. Rendering lives in ``turbo_push.streams``; nothing in here knows
about templates.
"""
