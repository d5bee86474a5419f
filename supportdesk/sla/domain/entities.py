"""
SLA Domain Entities
===================

Results produced by the escalation sweeper.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from supportdesk.config import ClientCategory, EscalationTier


@dataclass(frozen=True)
class SLABreach:
    """A live ticket that is past its SLA window."""
    ticket_id: str
    category: ClientCategory
    elapsed_hours: float
    window_hours: float
    current_tier: EscalationTier
    next_tier: EscalationTier
    deadline: datetime


@dataclass
class SweepResult:
    """
    Outcome of one sweep.

    ``failed_ids`` holds tickets that could not be read or whose escalation
    raised; the sweep carried on past them.
    """
    scanned: int = 0
    escalated_ids: List[str] = field(default_factory=list)
    failed_ids: List[str] = field(default_factory=list)

    @property
    def escalated(self) -> int:
        return len(self.escalated_ids)

    @property
    def failed(self) -> int:
        return len(self.failed_ids)

    def to_dict(self) -> dict:
        return {
            "scanned": self.scanned,
            "escalated": self.escalated,
            "escalated_ids": list(self.escalated_ids),
            "failed": self.failed,
        }
