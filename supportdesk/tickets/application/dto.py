"""
Ticket Application DTOs
=======================

Data Transfer Objects for the ticket API layer.

These Pydantic models handle serialization/deserialization and validation
for API requests and responses.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from supportdesk.config import (
    ClientCategory, EscalationTier, Priority, TicketStatus
)
from supportdesk.shared.pagination import Page, PaginationMeta
from supportdesk.tickets.domain import Ticket


# ========== Request DTOs ==========

class TicketCreateDTO(BaseModel):
    """
    DTO for creating a ticket.

    Priority and escalation tier are never accepted from the caller.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: str = Field(..., min_length=3, max_length=200, description="Ticket title")
    description: str = Field(..., min_length=5, max_length=5000, description="Ticket description")
    client_id: str = Field(..., min_length=1, description="Owning client")
    agent_id: Optional[str] = Field(None, description="Agent to assign on creation")


class TicketUpdateDTO(BaseModel):
    """DTO for a partial ticket update. Only the fields sent are applied."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, min_length=5, max_length=5000)
    status: Optional[TicketStatus] = None
    agent_id: Optional[str] = Field(None, min_length=1)

    @model_validator(mode="after")
    def require_one_field(self) -> "TicketUpdateDTO":
        """At least one field must be present."""
        if not self.model_dump(exclude_none=True):
            raise ValueError("At least one of title, description, status, agent_id is required")
        return self


class TicketFilters(BaseModel):
    """Optional listing filters. ``date_from`` and ``date_to`` are inclusive."""
    status: Optional[TicketStatus] = None
    priority: Optional[Priority] = None
    client_id: Optional[str] = None
    agent_id: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


# ========== Response DTOs ==========

class ClientSnapshot(BaseModel):
    id: str
    name: str
    email: str
    category: ClientCategory


class AgentSnapshot(BaseModel):
    id: str
    name: str
    email: str
    level: EscalationTier


class TicketResponse(BaseModel):
    """Response model for a ticket with its client and agent snapshots."""
    id: str
    title: str
    description: str
    status: TicketStatus
    priority: Priority
    escalation_tier: EscalationTier
    client_id: str
    agent_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None
    resolution_minutes: Optional[int] = None
    client: Optional[ClientSnapshot] = None
    agent: Optional[AgentSnapshot] = None

    @classmethod
    def from_domain(cls, ticket: Ticket) -> "TicketResponse":
        client = None
        if ticket.client is not None:
            client = ClientSnapshot(
                id=ticket.client.id,
                name=ticket.client.name,
                email=ticket.client.email,
                category=ticket.client.category,
            )

        agent = None
        if ticket.agent is not None:
            agent = AgentSnapshot(
                id=ticket.agent.id,
                name=ticket.agent.name,
                email=ticket.agent.email,
                level=ticket.agent.level,
            )

        return cls(
            id=ticket.id,
            title=ticket.title,
            description=ticket.description,
            status=ticket.status,
            priority=ticket.priority,
            escalation_tier=ticket.escalation_tier,
            client_id=ticket.client_id,
            agent_id=ticket.agent_id,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
            resolved_at=ticket.resolved_at,
            resolution_minutes=ticket.resolution_minutes,
            client=client,
            agent=agent,
        )


class TicketListResponse(BaseModel):
    """Response model for a page of tickets."""
    data: List[TicketResponse]
    pagination: PaginationMeta

    @classmethod
    def from_page(cls, page: Page[Ticket]) -> "TicketListResponse":
        return cls(
            data=[TicketResponse.from_domain(ticket) for ticket in page.items],
            pagination=PaginationMeta.from_page(page),
        )
