"""
Directory Application Services
==============================

Client and agent management.

Following SOLID principles:
- Single Responsibility: one service per aggregate
- Dependency Inversion: services depend on repository interfaces only
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from uuid import uuid4

from supportdesk.core import (
    Clock,
    ConflictException,
    ResourceNotFoundException,
    utcnow,
)
from supportdesk.directory.application.dto import (
    AgentCreateDTO,
    AgentUpdateDTO,
    ClientCreateDTO,
    ClientUpdateDTO,
)
from supportdesk.directory.domain import Agent, Client
from supportdesk.shared.infrastructure.logging import get_logger
from supportdesk.shared.pagination import Page, PageRequest

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class IClientRepository(ABC):
    """Interface for client data access."""

    @abstractmethod
    async def get_by_id(self, client_id: str) -> Optional[Client]:
        """Get client by ID."""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Client]:
        """Get client by email."""

    @abstractmethod
    async def create(self, client: Client) -> Client:
        """Persist a new client."""

    @abstractmethod
    async def update(self, client_id: str, fields: dict) -> Client:
        """Apply a partial update and return the stored client."""

    @abstractmethod
    async def delete(self, client_id: str) -> None:
        """Physically remove a client."""

    @abstractmethod
    async def list(self, limit: int, offset: int) -> Tuple[List[Tuple[Client, int]], int]:
        """List clients newest first, each with its ticket count, plus the total."""

    @abstractmethod
    async def count_tickets(self, client_id: str) -> int:
        """Count every ticket row owned by the client, soft-deleted included."""


class IAgentRepository(ABC):
    """Interface for agent data access."""

    @abstractmethod
    async def get_by_id(self, agent_id: str) -> Optional[Agent]:
        """Get agent by ID."""

    @abstractmethod
    async def get_by_user_id(self, user_id: str) -> Optional[Agent]:
        """Get the agent profile linked to a user account."""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Agent]:
        """Get agent by email."""

    @abstractmethod
    async def create(self, agent: Agent) -> Agent:
        """Persist a new agent."""

    @abstractmethod
    async def update(self, agent_id: str, fields: dict) -> Agent:
        """Apply a partial update and return the stored agent."""

    @abstractmethod
    async def list(self, active_only: bool = False) -> List[Agent]:
        """List agents ordered by name."""


# ========== Application Services ==========

class ClientService:
    """Service for client records."""

    def __init__(self, client_repository: IClientRepository, clock: Clock = utcnow):
        self._clients = client_repository
        self._clock = clock

    async def create_client(self, data: ClientCreateDTO) -> Client:
        """
        Create a client.

        Raises:
            ConflictException: If the email is already registered
        """
        if await self._clients.get_by_email(data.email):
            raise ConflictException(
                "Email is already registered",
                {"email": data.email}
            )

        now = self._clock()
        client = await self._clients.create(Client(
            id=str(uuid4()),
            name=data.name,
            email=data.email,
            category=data.category,
            organization=data.organization,
            created_at=now,
            updated_at=now,
        ))

        logger.info(
            "Client created",
            extra={"client_id": client.id, "category": client.category.value}
        )
        return client

    async def list_clients(self, pagination: PageRequest) -> Page[Tuple[Client, int]]:
        """List clients with their ticket counts."""
        rows, total = await self._clients.list(pagination.limit, pagination.offset)
        return Page.build(rows, pagination, total)

    async def get_client(self, client_id: str) -> Client:
        client = await self._clients.get_by_id(client_id)
        if client is None:
            raise ResourceNotFoundException("Client", client_id)
        return client

    async def update_client(self, client_id: str, data: ClientUpdateDTO) -> Client:
        """
        Update name, email or organization.

        Raises:
            ResourceNotFoundException: Unknown client
            ConflictException: New email belongs to another client
        """
        client = await self.get_client(client_id)
        fields = data.model_dump(exclude_none=True)

        new_email = fields.get("email")
        if new_email and new_email != client.email:
            if await self._clients.get_by_email(new_email):
                raise ConflictException("Email is already in use", {"email": new_email})

        fields["updated_at"] = self._clock()
        return await self._clients.update(client_id, fields)

    async def delete_client(self, client_id: str) -> None:
        """
        Delete a client that owns no tickets.

        Raises:
            ResourceNotFoundException: Unknown client
            ConflictException: The client still owns tickets
        """
        await self.get_client(client_id)

        ticket_count = await self._clients.count_tickets(client_id)
        if ticket_count > 0:
            raise ConflictException(
                "Cannot delete a client that has tickets",
                {"client_id": client_id, "ticket_count": ticket_count}
            )

        await self._clients.delete(client_id)
        logger.info("Client deleted", extra={"client_id": client_id})


class AgentService:
    """Service for agent profiles. Agents are deactivated, never deleted."""

    def __init__(self, agent_repository: IAgentRepository, clock: Clock = utcnow):
        self._agents = agent_repository
        self._clock = clock

    async def create_agent(self, data: AgentCreateDTO) -> Agent:
        """
        Create the agent profile of a staff account.

        Raises:
            ConflictException: Email or user account already has a profile
        """
        if await self._agents.get_by_email(data.email):
            raise ConflictException("Email is already registered", {"email": data.email})
        if await self._agents.get_by_user_id(data.user_id):
            raise ConflictException(
                "User already has an agent profile",
                {"user_id": data.user_id}
            )

        now = self._clock()
        agent = await self._agents.create(Agent(
            id=str(uuid4()),
            name=data.name,
            email=data.email,
            user_id=data.user_id,
            level=data.level,
            active=True,
            created_at=now,
            updated_at=now,
        ))

        logger.info(
            "Agent created",
            extra={"agent_id": agent.id, "level": agent.level.value}
        )
        return agent

    async def list_agents(self, active_only: bool = False) -> List[Agent]:
        return await self._agents.list(active_only=active_only)

    async def get_agent(self, agent_id: str) -> Agent:
        agent = await self._agents.get_by_id(agent_id)
        if agent is None:
            raise ResourceNotFoundException("Agent", agent_id)
        return agent

    async def update_agent(self, agent_id: str, data: AgentUpdateDTO) -> Agent:
        await self.get_agent(agent_id)
        fields = data.model_dump(exclude_none=True)
        fields["updated_at"] = self._clock()
        return await self._agents.update(agent_id, fields)

    async def deactivate_agent(self, agent_id: str) -> Agent:
        """Retire an agent. Already inactive agents are returned unchanged."""
        agent = await self.get_agent(agent_id)
        if not agent.active:
            return agent

        agent = await self._agents.update(
            agent_id,
            {"active": False, "updated_at": self._clock()}
        )
        logger.info("Agent deactivated", extra={"agent_id": agent_id})
        return agent
