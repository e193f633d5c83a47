"""
Shared Kernel Module
====================

Shared infrastructure used across all bounded contexts (tickets, realtime,
sla, autoreply).

Architecture Pattern: Modular Monolith
- Each module is a bounded context
- Shared kernel contains only generic infrastructure

DO NOT add ticket, presence or auto-reply logic to the shared kernel.
"""

__version__ = "1.0.0"
