"""
Ticket Application Layer
========================

Contains:
- Services: TicketLifecycleService
- Access policies: AdminPolicy, SupervisorPolicy, AgentPolicy
- DTOs: request/response models for the tickets API
- Repository interface: ITicketRepository
"""

from supportdesk.tickets.application.access import (
    AccessPolicy,
    AdminPolicy,
    SupervisorPolicy,
    AgentPolicy,
    VisibilityScope,
    policy_for,
    can_view_all,
)
from supportdesk.tickets.application.dto import (
    TicketCreateDTO,
    TicketUpdateDTO,
    TicketFilters,
    TicketResponse,
    TicketListResponse,
    ClientSnapshot,
    AgentSnapshot,
)
from supportdesk.tickets.application.services import (
    TicketLifecycleService,
    ITicketRepository,
)

__all__ = [
    # Access
    "AccessPolicy",
    "AdminPolicy",
    "SupervisorPolicy",
    "AgentPolicy",
    "VisibilityScope",
    "policy_for",
    "can_view_all",
    # DTOs
    "TicketCreateDTO",
    "TicketUpdateDTO",
    "TicketFilters",
    "TicketResponse",
    "TicketListResponse",
    "ClientSnapshot",
    "AgentSnapshot",
    # Services
    "TicketLifecycleService",
    # Repository Interfaces
    "ITicketRepository",
]
