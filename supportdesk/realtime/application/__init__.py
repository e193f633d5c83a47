"""
Realtime Application Layer
==========================

Contains:
- SessionRegistry: live connections and room membership
- RoomBroker: ordered per-room fan-out
- PresenceTracker: typing signals
- RealtimeGateway: connection lifecycle and frame dispatch
"""

from supportdesk.realtime.application.services import (
    SessionRegistry,
    RoomBroker,
    PresenceTracker,
    utc_now,
)
from supportdesk.realtime.application.gateway import (
    RealtimeGateway,
    error_code_for,
)

__all__ = [
    "SessionRegistry",
    "RoomBroker",
    "PresenceTracker",
    "RealtimeGateway",
    "error_code_for",
    "utc_now",
]
