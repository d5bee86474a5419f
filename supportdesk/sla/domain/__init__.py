"""
SLA Domain Layer
================

Domain layer for SLA escalation.

Contains:
- Entities: SLABreach, SweepResult
- Value Objects: SLAConfig
- Domain Services: Stateless business logic (SLACalculator)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from supportdesk.sla.domain.entities import SLABreach, SweepResult
from supportdesk.sla.domain.value_objects import SLACalculator, SLAConfig

__all__ = [
    # Entities
    "SLABreach",
    "SweepResult",
    # Value Objects & Services
    "SLACalculator",
    "SLAConfig",
]
