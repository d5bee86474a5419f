"""
SLA Application Layer
======================

Application layer for SLA escalation.

Contains:
- Services: SLAEscalationSweeper
- DTOs: Data transfer objects for API serialization

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from supportdesk.sla.application.dto import SweepResponse, BreachResponse
from supportdesk.sla.application.services import (
    SLAEscalationSweeper,
    ISLAConfigProvider,
)

__all__ = [
    # DTOs
    "SweepResponse",
    "BreachResponse",
    # Services
    "SLAEscalationSweeper",
    # Interfaces
    "ISLAConfigProvider",
]
