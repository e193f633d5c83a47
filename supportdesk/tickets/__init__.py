"""
Tickets Module
==============

Bounded Context for support tickets and their chat timelines.

Responsibilities:
- Ticket creation by merchants
- Message submission (merchant and admin replies)
- Admin status transitions (RESOLVED, CLOSED)
- Tenant-scoped list/detail reads with SLA view fields
- Transcript export
"""

__version__ = "1.0.0"
