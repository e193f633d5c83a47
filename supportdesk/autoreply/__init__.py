"""
Auto-Reply Module
=================

Bounded Context for canned replies and the automated acknowledgment.

Responsibilities:
- Template CRUD against the admin configuration store
- Placeholder rendering with the organisation signature
- Per-ticket cooldown gate for automated acknowledgments
- Auto-reply enablement flag
"""

__version__ = "1.0.0"
