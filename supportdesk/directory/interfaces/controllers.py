"""
Directory Controllers (API Routes)
==================================

FastAPI routes for clients and agents.

Reads are open to any actor; writes need a managing role and deleting a
client is reserved to admins.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from supportdesk.config import settings
from supportdesk.directory.application import (
    AgentCreateDTO,
    AgentResponse,
    AgentService,
    AgentUpdateDTO,
    ClientCreateDTO,
    ClientListResponse,
    ClientResponse,
    ClientService,
    ClientUpdateDTO,
)
from supportdesk.directory.infrastructure import (
    SQLAlchemyAgentRepository,
    SQLAlchemyClientRepository,
)
from supportdesk.infrastructure.database import get_session
from supportdesk.shared.api.auth import Actor, get_actor
from supportdesk.shared.pagination import PageRequest, PaginationMeta
from supportdesk.tickets.interfaces import require_permission

clients_router = APIRouter(prefix="/clients", tags=["Clients"])
agents_router = APIRouter(prefix="/agents", tags=["Agents"])


# ========== Dependencies ==========

async def get_client_service(
    session: AsyncSession = Depends(get_session)
) -> ClientService:
    """Get client service instance."""
    return ClientService(SQLAlchemyClientRepository(session))


async def get_agent_service(
    session: AsyncSession = Depends(get_session)
) -> AgentService:
    """Get agent service instance."""
    return AgentService(SQLAlchemyAgentRepository(session))


# ========== Clients ==========

@clients_router.post(
    "",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a client",
)
async def create_client(
    data: ClientCreateDTO,
    actor: Actor = Depends(require_permission("can_manage")),
    service: ClientService = Depends(get_client_service),
):
    client = await service.create_client(data)
    return ClientResponse.from_domain(client, ticket_count=0)


@clients_router.get(
    "",
    response_model=ClientListResponse,
    summary="List clients",
    description="Paged list of clients, newest first, each with its ticket count.",
)
async def list_clients(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    actor: Actor = Depends(get_actor),
    service: ClientService = Depends(get_client_service),
):
    result = await service.list_clients(PageRequest(page=page, page_size=page_size))
    return ClientListResponse(
        data=[ClientResponse.from_domain(client, count) for client, count in result.items],
        pagination=PaginationMeta.from_page(result),
    )


@clients_router.get("/{client_id}", response_model=ClientResponse, summary="Get a client")
async def get_client(
    client_id: str,
    actor: Actor = Depends(get_actor),
    service: ClientService = Depends(get_client_service),
):
    return ClientResponse.from_domain(await service.get_client(client_id))


@clients_router.put("/{client_id}", response_model=ClientResponse, summary="Update a client")
async def update_client(
    client_id: str,
    data: ClientUpdateDTO,
    actor: Actor = Depends(require_permission("can_manage")),
    service: ClientService = Depends(get_client_service),
):
    return ClientResponse.from_domain(await service.update_client(client_id, data))


@clients_router.delete(
    "/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a client",
    description="Only clients without any ticket can be deleted.",
)
async def delete_client(
    client_id: str,
    actor: Actor = Depends(require_permission("can_delete_clients")),
    service: ClientService = Depends(get_client_service),
):
    await service.delete_client(client_id)


# ========== Agents ==========

@agents_router.post(
    "",
    response_model=AgentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an agent profile",
)
async def create_agent(
    data: AgentCreateDTO,
    actor: Actor = Depends(require_permission("can_manage")),
    service: AgentService = Depends(get_agent_service),
):
    return AgentResponse.from_domain(await service.create_agent(data))


@agents_router.get("", response_model=List[AgentResponse], summary="List agents")
async def list_agents(
    active_only: bool = Query(False, description="Only active agents"),
    actor: Actor = Depends(get_actor),
    service: AgentService = Depends(get_agent_service),
):
    agents = await service.list_agents(active_only=active_only)
    return [AgentResponse.from_domain(agent) for agent in agents]


@agents_router.get("/{agent_id}", response_model=AgentResponse, summary="Get an agent")
async def get_agent(
    agent_id: str,
    actor: Actor = Depends(get_actor),
    service: AgentService = Depends(get_agent_service),
):
    return AgentResponse.from_domain(await service.get_agent(agent_id))


@agents_router.put("/{agent_id}", response_model=AgentResponse, summary="Update an agent")
async def update_agent(
    agent_id: str,
    data: AgentUpdateDTO,
    actor: Actor = Depends(require_permission("can_manage")),
    service: AgentService = Depends(get_agent_service),
):
    return AgentResponse.from_domain(await service.update_agent(agent_id, data))


@agents_router.post(
    "/{agent_id}/deactivate",
    response_model=AgentResponse,
    summary="Deactivate an agent",
    description="Agents are never deleted. Deactivated agents cannot be assigned tickets.",
)
async def deactivate_agent(
    agent_id: str,
    actor: Actor = Depends(require_permission("can_manage")),
    service: AgentService = Depends(get_agent_service),
):
    return AgentResponse.from_domain(await service.deactivate_agent(agent_id))
