"""
SLA Domain Layer
================

Pure SLA calculations for support tickets.

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from supportdesk.sla.domain.value_objects import (
    SLAEvaluator,
    SLASnapshot,
    REMAINING_HOURS_FLOOR,
)

__all__ = [
    "SLAEvaluator",
    "SLASnapshot",
    "REMAINING_HOURS_FLOOR",
]
