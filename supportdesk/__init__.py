"""
SupportDesk Realtime
====================

Real-time support-ticket engine for the point-of-sale back office.
"""

__version__ = "1.0.0"
