"""
Ticket Controllers (API Routes)
===============================

FastAPI routes for the ticket lifecycle.

Controllers are thin - they delegate to the lifecycle service and let the
application exception handler turn domain errors into HTTP responses.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from supportdesk.config import Priority, TicketStatus, settings
from supportdesk.shared.api.auth import Actor, get_actor
from supportdesk.shared.pagination import PageRequest
from supportdesk.tickets.application import (
    TicketCreateDTO,
    TicketFilters,
    TicketLifecycleService,
    TicketListResponse,
    TicketResponse,
    TicketUpdateDTO,
)
from supportdesk.tickets.interfaces.dependencies import get_ticket_service

router = APIRouter(prefix="/tickets", tags=["Tickets"])


@router.post(
    "",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a ticket",
    description="""
    Open a ticket for a client.

    The priority is derived from the client's category (VIP -> HIGH,
    NORMAL -> MEDIUM). Every ticket starts `OPEN` at `TIER_1`.
    """,
)
async def create_ticket(
    data: TicketCreateDTO,
    actor: Actor = Depends(get_actor),
    service: TicketLifecycleService = Depends(get_ticket_service),
):
    ticket = await service.create_ticket(data)
    return TicketResponse.from_domain(ticket)


@router.get(
    "",
    response_model=TicketListResponse,
    summary="List tickets",
    description="""
    Paged list of live tickets, newest first.

    Agents only ever see tickets assigned to them; an `agent_id` filter
    cannot widen that. `date_from` and `date_to` bound the creation time
    and are both inclusive.
    """,
)
async def list_tickets(
    ticket_status: Optional[TicketStatus] = Query(None, alias="status"),
    priority: Optional[Priority] = Query(None),
    client_id: Optional[str] = Query(None),
    agent_id: Optional[str] = Query(None),
    date_from: Optional[datetime] = Query(None, description="Created at or after"),
    date_to: Optional[datetime] = Query(None, description="Created at or before"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    actor: Actor = Depends(get_actor),
    service: TicketLifecycleService = Depends(get_ticket_service),
):
    filters = TicketFilters(
        status=ticket_status,
        priority=priority,
        client_id=client_id,
        agent_id=agent_id,
        date_from=date_from,
        date_to=date_to,
    )
    result = await service.list_tickets(
        filters,
        PageRequest(page=page, page_size=page_size),
        actor.id,
        actor.role,
    )
    return TicketListResponse.from_page(result)


@router.get(
    "/{ticket_id}",
    response_model=TicketResponse,
    summary="Get a ticket",
)
async def get_ticket(
    ticket_id: str,
    actor: Actor = Depends(get_actor),
    service: TicketLifecycleService = Depends(get_ticket_service),
):
    ticket = await service.get_ticket(ticket_id, actor.id, actor.role)
    return TicketResponse.from_domain(ticket)


@router.put(
    "/{ticket_id}",
    response_model=TicketResponse,
    summary="Update a ticket",
    description="""
    Partial update of title, description, status and assigned agent.

    Status changes must follow the lifecycle:
    `OPEN -> IN_PROGRESS | ESCALATED`, `IN_PROGRESS -> RESOLVED | ESCALATED`,
    `ESCALATED -> IN_PROGRESS | RESOLVED`, `RESOLVED -> CLOSED`.
    """,
)
async def update_ticket(
    ticket_id: str,
    data: TicketUpdateDTO,
    actor: Actor = Depends(get_actor),
    service: TicketLifecycleService = Depends(get_ticket_service),
):
    ticket = await service.update_ticket(ticket_id, data, actor.id, actor.role)
    return TicketResponse.from_domain(ticket)


@router.delete(
    "/{ticket_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Soft-delete a ticket",
)
async def delete_ticket(
    ticket_id: str,
    actor: Actor = Depends(get_actor),
    service: TicketLifecycleService = Depends(get_ticket_service),
):
    await service.delete_ticket(ticket_id, actor.id, actor.role)


# Export router for inclusion in main app
tickets_router = router
