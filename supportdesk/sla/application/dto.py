"""
SLA Application DTOs
====================

Response models for the SLA endpoints.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from supportdesk.config import ClientCategory, EscalationTier
from supportdesk.sla.domain import SLABreach, SweepResult


class SweepResponse(BaseModel):
    """Response model for a manual sweep."""
    scanned: int = Field(..., description="Tickets examined")
    escalated: int = Field(..., description="Tickets escalated by this sweep")
    escalated_ids: List[str] = Field(default_factory=list)
    failed: int = Field(0, description="Tickets whose escalation raised")

    @classmethod
    def from_result(cls, result: SweepResult) -> "SweepResponse":
        return cls(**result.to_dict())


class BreachResponse(BaseModel):
    """A ticket currently past its SLA window."""
    ticket_id: str
    category: ClientCategory
    elapsed_hours: float
    window_hours: float
    current_tier: EscalationTier
    next_tier: EscalationTier
    deadline: datetime

    @classmethod
    def from_domain(cls, breach: SLABreach) -> "BreachResponse":
        return cls(
            ticket_id=breach.ticket_id,
            category=breach.category,
            elapsed_hours=round(breach.elapsed_hours, 2),
            window_hours=breach.window_hours,
            current_tier=breach.current_tier,
            next_tier=breach.next_tier,
            deadline=breach.deadline,
        )
