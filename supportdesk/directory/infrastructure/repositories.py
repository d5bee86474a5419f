"""
Directory Infrastructure Repositories
=====================================

SQLAlchemy implementations of the client and agent repositories.
"""

from enum import Enum
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from supportdesk.config import ClientCategory, EscalationTier
from supportdesk.core import RepositoryException, ensure_utc
from supportdesk.directory.application import IAgentRepository, IClientRepository
from supportdesk.directory.domain import Agent, Client
from supportdesk.directory.infrastructure.models import AgentModel, ClientModel
from supportdesk.infrastructure.database import parse_uuid


def to_client_entity(model: ClientModel) -> Client:
    return Client(
        id=str(model.id),
        name=model.name,
        email=model.email,
        category=ClientCategory(model.category),
        organization=model.organization,
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
    )


def to_agent_entity(model: AgentModel) -> Agent:
    return Agent(
        id=str(model.id),
        name=model.name,
        email=model.email,
        user_id=model.user_id,
        level=EscalationTier(model.level),
        active=model.active,
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
    )


def column_values(fields: dict) -> dict:
    """Enums are stored by value."""
    return {
        key: value.value if isinstance(value, Enum) else value
        for key, value in fields.items()
    }


class SQLAlchemyClientRepository(IClientRepository):
    """SQLAlchemy implementation of the client repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get_model(self, client_id: str) -> Optional[ClientModel]:
        client_uuid = parse_uuid(client_id)
        if client_uuid is None:
            return None
        return await self._session.get(ClientModel, client_uuid)

    async def get_by_id(self, client_id: str) -> Optional[Client]:
        model = await self._get_model(client_id)
        return to_client_entity(model) if model else None

    async def get_by_email(self, email: str) -> Optional[Client]:
        stmt = select(ClientModel).where(ClientModel.email == email)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return to_client_entity(model) if model else None

    async def create(self, client: Client) -> Client:
        model = ClientModel(
            id=parse_uuid(client.id),
            name=client.name,
            email=client.email,
            category=client.category.value,
            organization=client.organization,
            created_at=client.created_at,
            updated_at=client.updated_at,
        )

        self._session.add(model)
        await self._session.flush()

        return to_client_entity(model)

    async def update(self, client_id: str, fields: dict) -> Client:
        model = await self._get_model(client_id)
        if model is None:
            raise RepositoryException(f"Client {client_id} not found")

        for key, value in column_values(fields).items():
            setattr(model, key, value)
        await self._session.flush()

        return to_client_entity(model)

    async def delete(self, client_id: str) -> None:
        model = await self._get_model(client_id)
        if model is None:
            raise RepositoryException(f"Client {client_id} not found")

        await self._session.delete(model)
        await self._session.flush()

    async def list(self, limit: int, offset: int) -> Tuple[List[Tuple[Client, int]], int]:
        from supportdesk.tickets.infrastructure.models import TicketModel

        ticket_count = (
            select(func.count(TicketModel.id))
            .where(TicketModel.client_id == ClientModel.id)
            .correlate(ClientModel)
            .scalar_subquery()
        )
        stmt = (
            select(ClientModel, ticket_count.label("ticket_count"))
            .order_by(ClientModel.created_at.desc(), ClientModel.id)
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        rows = [(to_client_entity(model), count or 0) for model, count in result.all()]

        total = await self._session.scalar(select(func.count()).select_from(ClientModel))
        return rows, total or 0

    async def count_tickets(self, client_id: str) -> int:
        from supportdesk.tickets.infrastructure.models import TicketModel

        client_uuid = parse_uuid(client_id)
        if client_uuid is None:
            return 0

        stmt = select(func.count(TicketModel.id)).where(TicketModel.client_id == client_uuid)
        return await self._session.scalar(stmt) or 0


class SQLAlchemyAgentRepository(IAgentRepository):
    """SQLAlchemy implementation of the agent repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get_model(self, agent_id: str) -> Optional[AgentModel]:
        agent_uuid = parse_uuid(agent_id)
        if agent_uuid is None:
            return None
        return await self._session.get(AgentModel, agent_uuid)

    async def get_by_id(self, agent_id: str) -> Optional[Agent]:
        model = await self._get_model(agent_id)
        return to_agent_entity(model) if model else None

    async def get_by_user_id(self, user_id: str) -> Optional[Agent]:
        stmt = select(AgentModel).where(AgentModel.user_id == user_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return to_agent_entity(model) if model else None

    async def get_by_email(self, email: str) -> Optional[Agent]:
        stmt = select(AgentModel).where(AgentModel.email == email)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return to_agent_entity(model) if model else None

    async def create(self, agent: Agent) -> Agent:
        model = AgentModel(
            id=parse_uuid(agent.id),
            name=agent.name,
            email=agent.email,
            user_id=agent.user_id,
            level=agent.level.value,
            active=agent.active,
            created_at=agent.created_at,
            updated_at=agent.updated_at,
        )

        self._session.add(model)
        await self._session.flush()

        return to_agent_entity(model)

    async def update(self, agent_id: str, fields: dict) -> Agent:
        model = await self._get_model(agent_id)
        if model is None:
            raise RepositoryException(f"Agent {agent_id} not found")

        for key, value in column_values(fields).items():
            setattr(model, key, value)
        await self._session.flush()

        return to_agent_entity(model)

    async def list(self, active_only: bool = False) -> List[Agent]:
        stmt = select(AgentModel)
        if active_only:
            stmt = stmt.where(AgentModel.active.is_(True))
        stmt = stmt.order_by(AgentModel.name)

        result = await self._session.execute(stmt)
        return [to_agent_entity(model) for model in result.scalars().all()]
