"""
Ticket API Dependencies
=======================

FastAPI dependency factories wiring repositories into services, plus the
permission guard shared by every router that mutates data.
"""

from typing import Callable

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from supportdesk.core import ForbiddenException
from supportdesk.directory.infrastructure import (
    SQLAlchemyAgentRepository,
    SQLAlchemyClientRepository,
)
from supportdesk.infrastructure.database import get_session
from supportdesk.shared.api.auth import Actor, get_actor
from supportdesk.tickets.application import TicketLifecycleService, policy_for
from supportdesk.tickets.infrastructure import SQLAlchemyTicketRepository


async def get_ticket_service(
    session: AsyncSession = Depends(get_session)
) -> TicketLifecycleService:
    """Get ticket lifecycle service instance."""
    return TicketLifecycleService(
        SQLAlchemyTicketRepository(session),
        SQLAlchemyClientRepository(session),
        SQLAlchemyAgentRepository(session),
    )


def require_permission(permission: str) -> Callable:
    """
    Build a dependency admitting only actors whose policy grants ``permission``.

    ``permission`` names a policy flag such as ``can_manage``.
    """

    async def check(actor: Actor = Depends(get_actor)) -> Actor:
        policy = policy_for(actor.role, agent_repository=None)
        if not getattr(policy, permission):
            raise ForbiddenException(
                f"Role {actor.role.value} is not allowed to perform this action",
                {"role": actor.role.value, "permission": permission}
            )
        return actor

    return check
