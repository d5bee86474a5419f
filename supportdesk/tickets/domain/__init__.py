"""
Ticket Domain Layer
===================

Contains:
- Entities: Ticket
- Value Objects: the status transition table and its state machine

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from supportdesk.tickets.domain.entities import Ticket
from supportdesk.tickets.domain.value_objects import (
    STATUS_TRANSITIONS,
    INITIAL_STATUS,
    TicketStateMachine,
    resolution_minutes,
)

__all__ = [
    "Ticket",
    "STATUS_TRANSITIONS",
    "INITIAL_STATUS",
    "TicketStateMachine",
    "resolution_minutes",
]
