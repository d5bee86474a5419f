"""
Ticket Application Services
===========================

Use cases of the ticket lifecycle.

Following SOLID principles:
- Single Responsibility: the lifecycle service owns ticket mutations only
- Dependency Inversion: depends on repository interfaces, not SQLAlchemy
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from uuid import uuid4

from supportdesk.config import EscalationTier, TicketStatus
from supportdesk.core import (
    Clock,
    ForbiddenException,
    ResourceNotFoundException,
    ValidationException,
    ensure_utc,
    utcnow,
)
from supportdesk.directory.application import IAgentRepository, IClientRepository
from supportdesk.directory.domain import Agent
from supportdesk.shared.infrastructure.logging import get_logger
from supportdesk.shared.pagination import Page, PageRequest
from supportdesk.tickets.application.access import AccessPolicy, policy_for
from supportdesk.tickets.application.dto import (
    TicketCreateDTO,
    TicketFilters,
    TicketUpdateDTO,
)
from supportdesk.tickets.domain import (
    INITIAL_STATUS,
    Ticket,
    TicketStateMachine,
    resolution_minutes,
)

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class ITicketRepository(ABC):
    """Interface for ticket data access."""

    @abstractmethod
    async def create(self, ticket: Ticket) -> Ticket:
        """Persist a new ticket and return it with its snapshots."""

    @abstractmethod
    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        """Get a ticket by ID, soft-deleted rows included."""

    @abstractmethod
    async def update(self, ticket_id: str, fields: dict) -> Ticket:
        """Apply a partial update and return the stored ticket."""

    @abstractmethod
    async def list(
        self,
        filters: TicketFilters,
        limit: int,
        offset: int
    ) -> Tuple[List[Ticket], int]:
        """List live tickets newest first, plus the total matching count."""

    @abstractmethod
    async def list_sla_candidates(
        self,
        statuses: Sequence[TicketStatus]
    ) -> Tuple[List[Ticket], List[str]]:
        """
        Live tickets in the given statuses, each with its client loaded.

        Rows that cannot be read back as a ``Ticket`` are left out and their
        ids returned as the second element.
        """

    @abstractmethod
    async def escalate(
        self,
        ticket_id: str,
        expected_tier: EscalationTier,
        new_tier: EscalationTier,
        at: datetime
    ) -> bool:
        """
        Escalate a ticket only if it is still live, still SLA tracked and
        still at ``expected_tier``. Returns whether a row was written.
        """


# ========== Application Service ==========

class TicketLifecycleService:
    """
    Service for creating, reading, updating and soft-deleting tickets.

    Every read and write goes through the actor's access policy.
    """

    def __init__(
        self,
        ticket_repository: ITicketRepository,
        client_repository: IClientRepository,
        agent_repository: IAgentRepository,
        clock: Clock = utcnow
    ):
        self._tickets = ticket_repository
        self._clients = client_repository
        self._agents = agent_repository
        self._clock = clock

    def _policy(self, actor_role) -> AccessPolicy:
        return policy_for(actor_role, self._agents)

    async def _active_agent(self, agent_id: str) -> Agent:
        agent = await self._agents.get_by_id(agent_id)
        if agent is None or not agent.active:
            raise ResourceNotFoundException("Agent", agent_id)
        return agent

    async def create_ticket(self, data: TicketCreateDTO) -> Ticket:
        """
        Create a ticket for a client.

        The priority comes from the client's category; every ticket starts
        OPEN at TIER_1.

        Raises:
            ResourceNotFoundException: Unknown client, or unknown/inactive agent
        """
        client = await self._clients.get_by_id(data.client_id)
        if client is None:
            raise ResourceNotFoundException("Client", data.client_id)

        if data.agent_id:
            await self._active_agent(data.agent_id)

        now = self._clock()
        ticket = await self._tickets.create(Ticket(
            id=str(uuid4()),
            title=data.title,
            description=data.description,
            status=INITIAL_STATUS,
            priority=client.ticket_priority,
            escalation_tier=EscalationTier.TIER_1,
            client_id=client.id,
            agent_id=data.agent_id,
            created_at=now,
            updated_at=now,
        ))

        logger.info(
            "Ticket created",
            extra={
                "ticket_id": ticket.id,
                "client_id": ticket.client_id,
                "priority": ticket.priority.value,
            }
        )
        return ticket

    async def get_ticket(self, ticket_id: str, actor_id: str, actor_role) -> Ticket:
        """
        Get a live ticket the actor is allowed to see.

        Raises:
            ResourceNotFoundException: Missing or soft-deleted ticket
            ForbiddenException: Agent without a profile, or not the assignee
        """
        ticket = await self._tickets.get_by_id(ticket_id)
        if ticket is None or ticket.is_deleted:
            raise ResourceNotFoundException("Ticket", ticket_id)

        scope = await self._policy(actor_role).visibility_scope(actor_id)
        if not scope.allows(ticket):
            raise ForbiddenException(
                "You are not allowed to view this ticket",
                {"ticket_id": ticket_id}
            )
        return ticket

    async def list_tickets(
        self,
        filters: TicketFilters,
        pagination: PageRequest,
        actor_id: str,
        actor_role
    ) -> Page[Ticket]:
        """
        List live tickets matching ``filters``.

        Agents are always restricted to their own tickets, whatever
        ``agent_id`` filter they pass.

        Raises:
            ValidationException: ``date_from`` is after ``date_to``
        """
        date_from = ensure_utc(filters.date_from)
        date_to = ensure_utc(filters.date_to)
        if date_from and date_to and date_from > date_to:
            raise ValidationException(
                "date_from must not be after date_to",
                {"date_from": date_from.isoformat(), "date_to": date_to.isoformat()}
            )

        scope = await self._policy(actor_role).visibility_scope(actor_id)
        update = {"date_from": date_from, "date_to": date_to}
        if not scope.is_unrestricted:
            update["agent_id"] = scope.agent_id
        filters = filters.model_copy(update=update)

        tickets, total = await self._tickets.list(filters, pagination.limit, pagination.offset)
        return Page.build(tickets, pagination, total)

    async def update_ticket(
        self,
        ticket_id: str,
        data: TicketUpdateDTO,
        actor_id: str,
        actor_role
    ) -> Ticket:
        """
        Apply a partial update.

        Raises:
            ResourceNotFoundException: Ticket not visible, or unknown/inactive agent
            InvalidTransitionException: Status change not in the transition table
            ForbiddenException: Agent level below the tier of an escalated ticket
        """
        policy = self._policy(actor_role)
        ticket = await self.get_ticket(ticket_id, actor_id, actor_role)

        if data.status is not None:
            TicketStateMachine.validate(ticket.status, data.status)

        if data.agent_id is not None:
            agent = await self._active_agent(data.agent_id)
            if not policy.can_assign(ticket, agent):
                raise ForbiddenException(
                    f"A {agent.level.value} agent cannot take a ticket escalated "
                    f"to {ticket.escalation_tier.value}",
                    {
                        "ticket_id": ticket_id,
                        "agent_id": agent.id,
                        "agent_level": agent.level.value,
                        "escalation_tier": ticket.escalation_tier.value,
                    }
                )

        now = self._clock()
        fields = data.model_dump(exclude_none=True)

        if data.status == TicketStatus.RESOLVED and ticket.status != TicketStatus.RESOLVED:
            fields["resolved_at"] = now
            fields["resolution_minutes"] = resolution_minutes(ticket.created_at, now)

        fields["updated_at"] = now
        updated = await self._tickets.update(ticket_id, fields)

        if data.status is not None:
            logger.info(
                "Ticket status changed",
                extra={
                    "ticket_id": ticket_id,
                    "from_status": ticket.status.value,
                    "to_status": data.status.value,
                    "actor_id": actor_id,
                }
            )
        return updated

    async def delete_ticket(self, ticket_id: str, actor_id: str, actor_role) -> None:
        """
        Soft-delete a ticket. Deleting it again raises NotFound.

        Raises:
            ForbiddenException: The actor's role cannot manage tickets
            ResourceNotFoundException: Missing or already deleted
        """
        if not self._policy(actor_role).can_manage:
            raise ForbiddenException(
                "Only admins and supervisors can delete tickets",
                {"ticket_id": ticket_id}
            )

        await self.get_ticket(ticket_id, actor_id, actor_role)

        now = self._clock()
        await self._tickets.update(ticket_id, {"deleted_at": now, "updated_at": now})
        logger.info("Ticket deleted", extra={"ticket_id": ticket_id, "actor_id": actor_id})
