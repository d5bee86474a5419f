"""
Ticket Infrastructure Repositories
==================================

SQLAlchemy implementation of the ticket repository.
"""

from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from supportdesk.config import (
    SLA_TRACKED_STATUSES,
    EscalationTier,
    Priority,
    TicketStatus,
)
from supportdesk.core import RepositoryException, ensure_utc
from supportdesk.directory.infrastructure.repositories import (
    column_values,
    to_agent_entity,
    to_client_entity,
)
from supportdesk.infrastructure.database import parse_uuid
from supportdesk.shared.infrastructure.logging import get_logger
from supportdesk.tickets.application import ITicketRepository, TicketFilters
from supportdesk.tickets.domain import Ticket
from supportdesk.tickets.infrastructure.models import TicketModel

logger = get_logger(__name__)

# Foreign keys arrive as strings from the service layer
_ID_COLUMNS = ("client_id", "agent_id")


def to_ticket_entity(model: TicketModel, with_agent: bool = True) -> Ticket:
    agent = None
    if with_agent and model.agent is not None:
        agent = to_agent_entity(model.agent)

    return Ticket(
        id=str(model.id),
        title=model.title,
        description=model.description,
        status=TicketStatus(model.status),
        priority=Priority(model.priority),
        escalation_tier=EscalationTier(model.escalation_tier),
        client_id=str(model.client_id),
        agent_id=str(model.agent_id) if model.agent_id else None,
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
        resolved_at=ensure_utc(model.resolved_at),
        resolution_minutes=model.resolution_minutes,
        deleted_at=ensure_utc(model.deleted_at),
        client=to_client_entity(model.client),
        agent=agent,
    )


class SQLAlchemyTicketRepository(ITicketRepository):
    """SQLAlchemy implementation of the ticket repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    @staticmethod
    def _select():
        return select(TicketModel).options(
            selectinload(TicketModel.client),
            selectinload(TicketModel.agent),
        )

    async def _load(self, ticket_id: str) -> Optional[TicketModel]:
        ticket_uuid = parse_uuid(ticket_id)
        if ticket_uuid is None:
            return None

        stmt = (
            self._select()
            .where(TicketModel.id == ticket_uuid)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, ticket: Ticket) -> Ticket:
        model = TicketModel(
            id=parse_uuid(ticket.id),
            title=ticket.title,
            description=ticket.description,
            status=ticket.status.value,
            priority=ticket.priority.value,
            escalation_tier=ticket.escalation_tier.value,
            client_id=parse_uuid(ticket.client_id),
            agent_id=parse_uuid(ticket.agent_id),
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
            resolved_at=ticket.resolved_at,
            resolution_minutes=ticket.resolution_minutes,
            deleted_at=ticket.deleted_at,
        )

        self._session.add(model)
        await self._session.flush()

        return to_ticket_entity(await self._load(ticket.id))

    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        model = await self._load(ticket_id)
        return to_ticket_entity(model) if model else None

    async def update(self, ticket_id: str, fields: dict) -> Ticket:
        model = await self._load(ticket_id)
        if model is None:
            raise RepositoryException(f"Ticket {ticket_id} not found")

        for key, value in column_values(fields).items():
            if key in _ID_COLUMNS:
                value = parse_uuid(value)
            setattr(model, key, value)
        await self._session.flush()

        # Reload so the agent snapshot follows a reassignment
        return to_ticket_entity(await self._load(ticket_id))

    async def list(
        self,
        filters: TicketFilters,
        limit: int,
        offset: int
    ) -> Tuple[List[Ticket], int]:
        conditions = [TicketModel.deleted_at.is_(None)]

        if filters.status:
            conditions.append(TicketModel.status == filters.status.value)
        if filters.priority:
            conditions.append(TicketModel.priority == filters.priority.value)
        for column, raw_id in (
            (TicketModel.client_id, filters.client_id),
            (TicketModel.agent_id, filters.agent_id),
        ):
            if raw_id is None:
                continue
            parsed = parse_uuid(raw_id)
            if parsed is None:
                # A malformed id cannot match any row
                return [], 0
            conditions.append(column == parsed)
        if filters.date_from:
            conditions.append(TicketModel.created_at >= filters.date_from)
        if filters.date_to:
            conditions.append(TicketModel.created_at <= filters.date_to)

        stmt = (
            self._select()
            .where(*conditions)
            .order_by(TicketModel.created_at.desc(), TicketModel.id)
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        tickets = [to_ticket_entity(model) for model in result.scalars().all()]

        count_stmt = select(func.count()).select_from(TicketModel).where(*conditions)
        total = await self._session.scalar(count_stmt)

        return tickets, total or 0

    async def list_sla_candidates(
        self,
        statuses: Sequence[TicketStatus]
    ) -> Tuple[List[Ticket], List[str]]:
        stmt = (
            select(TicketModel)
            .options(selectinload(TicketModel.client))
            .where(
                TicketModel.deleted_at.is_(None),
                TicketModel.status.in_([status.value for status in statuses]),
            )
            .order_by(TicketModel.created_at)
        )
        result = await self._session.execute(stmt)

        tickets, unreadable_ids = [], []
        for model in result.scalars().all():
            try:
                tickets.append(to_ticket_entity(model, with_agent=False))
            except (ValueError, TypeError) as e:
                unreadable_ids.append(str(model.id))
                logger.error(
                    "Unreadable ticket row skipped",
                    extra={"ticket_id": str(model.id), "error": str(e)}
                )

        return tickets, unreadable_ids

    async def escalate(
        self,
        ticket_id: str,
        expected_tier: EscalationTier,
        new_tier: EscalationTier,
        at: datetime
    ) -> bool:
        """
        Conditional escalation write.

        The WHERE clause re-checks soft deletion, tracked status and tier, so a
        ticket changed since it was scanned is left alone. Runs in a savepoint
        so one failed row does not poison the rest of a sweep.
        """
        ticket_uuid = parse_uuid(ticket_id)
        if ticket_uuid is None:
            return False

        stmt = (
            update(TicketModel)
            .where(
                TicketModel.id == ticket_uuid,
                TicketModel.deleted_at.is_(None),
                TicketModel.status.in_([status.value for status in SLA_TRACKED_STATUSES]),
                TicketModel.escalation_tier == expected_tier.value,
            )
            .values(
                status=TicketStatus.ESCALATED.value,
                escalation_tier=new_tier.value,
                updated_at=at,
            )
            .execution_options(synchronize_session=False)
        )

        try:
            async with self._session.begin_nested():
                result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(
                "Escalation write failed",
                extra={"ticket_id": ticket_id, "error": str(e)}
            )
            raise RepositoryException(
                f"Failed to escalate ticket {ticket_id}",
                {"ticket_id": ticket_id}
            ) from e

        return result.rowcount == 1
