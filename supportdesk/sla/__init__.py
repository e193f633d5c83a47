"""
SLA Module
==========

Bounded Context for service level accounting on support tickets.

Responsibilities:
- Decide whether an open ticket is overdue against a configurable threshold
- Report remaining hours for display

SLA tracking is advisory: it is evaluated on read and never blocks an
action or fires a background alert.
"""

__version__ = "1.0.0"
