"""
Ticket Infrastructure Layer
===========================

Contains:
- Models: SQLAlchemy ORM model for tickets
- Repositories: SQLAlchemy implementation of the ticket repository
"""

from supportdesk.tickets.infrastructure.models import TicketModel
from supportdesk.tickets.infrastructure.repositories import (
    SQLAlchemyTicketRepository,
    to_ticket_entity,
)

__all__ = [
    "TicketModel",
    "SQLAlchemyTicketRepository",
    "to_ticket_entity",
]
