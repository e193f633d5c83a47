"""
Realtime Module
===============

Bounded Context for live updates over the event channel.

Responsibilities:
- Session Registry: live connections and their joined ticket rooms
- Room Broker: per-ticket fan-out, ordered within a room
- Presence Tracker: typing signals, never persisted
- WebSocket endpoint and frame validation
"""

__version__ = "1.0.0"
