"""
Ticket Domain Entities
======================

Pure Python domain entities for the ticket lifecycle.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from supportdesk.config import EscalationTier, Priority, TicketStatus
from supportdesk.directory.domain import Agent, Client


@dataclass
class Ticket:
    """
    Ticket entity representing a support ticket.

    ``client`` and ``agent`` are read-side snapshots joined in by the
    repository; the ticket itself only owns the ids.
    """

    # Core attributes
    id: str
    title: str
    description: str
    status: TicketStatus
    priority: Priority
    escalation_tier: EscalationTier
    client_id: str

    # Timestamps
    created_at: datetime
    updated_at: datetime

    agent_id: Optional[str] = None

    # Resolution tracking, written once
    resolved_at: Optional[datetime] = None
    resolution_minutes: Optional[int] = None

    # Soft deletion
    deleted_at: Optional[datetime] = None

    # Snapshots
    client: Optional[Client] = None
    agent: Optional[Agent] = None

    def __post_init__(self):
        """Validate ticket on initialization."""
        if self.updated_at < self.created_at:
            raise ValueError("updated_at cannot be before created_at")

        if self.resolved_at and self.resolved_at < self.created_at:
            raise ValueError("resolved_at cannot be before created_at")

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_escalated(self) -> bool:
        return self.status == TicketStatus.ESCALATED
