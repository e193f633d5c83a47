"""
Realtime Interfaces Layer
=========================

WebSocket endpoint for the event channel.
"""

from supportdesk.realtime.interfaces.websocket import router as realtime_router

__all__ = ["realtime_router"]
