"""
Ticket Infrastructure Models
============================

SQLAlchemy ORM model for tickets.

This is the database representation of the Ticket entity. It belongs in the
infrastructure layer, not the domain layer.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from supportdesk.config import EscalationTier, TicketStatus
from supportdesk.directory.infrastructure.models import AgentModel, ClientModel
from supportdesk.infrastructure.database import Base


class TicketModel(Base):
    """
    Database model for Ticket entity.

    Maps to the 'tickets' table. Rows are never physically removed;
    ``deleted_at`` marks a soft delete.
    """
    __tablename__ = "tickets"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Ticket content
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Lifecycle attributes
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=TicketStatus.OPEN.value)
    priority: Mapped[str] = mapped_column(String(20), nullable=False)
    escalation_tier: Mapped[str] = mapped_column(String(20), nullable=False, default=EscalationTier.TIER_1.value)

    # Ownership
    client_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("clients.id"), nullable=False)
    agent_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("agents.id"), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    # Resolution tracking
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    resolution_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    client: Mapped[ClientModel] = relationship(lazy="raise")
    agent: Mapped[Optional[AgentModel]] = relationship(lazy="raise")

    __table_args__ = (
        Index("ix_tickets_status", "status"),
        Index("ix_tickets_priority", "priority"),
        Index("ix_tickets_client_id", "client_id"),
        Index("ix_tickets_agent_id", "agent_id"),
        Index("ix_tickets_created_at", "created_at"),
        Index("ix_tickets_deleted_at", "deleted_at"),
    )
