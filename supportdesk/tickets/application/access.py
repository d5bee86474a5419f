"""
Ticket Access Policies
======================

Role-based visibility and management rules.

One policy variant per role:
- AdminPolicy: sees and manages everything, the only role that deletes clients
- SupervisorPolicy: sees and manages everything
- AgentPolicy: sees only tickets assigned to its own agent profile
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from supportdesk.config import Role
from supportdesk.core import ForbiddenException
from supportdesk.directory.domain import Agent
from supportdesk.tickets.domain import Ticket


@dataclass(frozen=True)
class VisibilityScope:
    """Tickets an actor may see. ``agent_id=None`` means every ticket."""
    agent_id: Optional[str] = None

    @property
    def is_unrestricted(self) -> bool:
        return self.agent_id is None

    def allows(self, ticket: Ticket) -> bool:
        return self.is_unrestricted or ticket.agent_id == self.agent_id


class AccessPolicy(ABC):
    """Base policy. Subclasses fix the role flags and the visibility scope."""

    role: Role
    can_view_all: bool = False
    can_manage: bool = False
    can_delete_clients: bool = False

    def __init__(self, agent_repository):
        self._agents = agent_repository

    @abstractmethod
    async def visibility_scope(self, actor_id: str) -> VisibilityScope:
        """Resolve the set of tickets ``actor_id`` may see."""

    def can_assign(self, ticket: Ticket, agent: Agent) -> bool:
        """
        Check whether ``agent`` may take ``ticket``.

        Escalated tickets need an agent whose level covers the ticket's tier.
        """
        if not agent.active:
            return False
        if ticket.is_escalated:
            return agent.can_handle(ticket.escalation_tier)
        return True


class AdminPolicy(AccessPolicy):
    role = Role.ADMIN
    can_view_all = True
    can_manage = True
    can_delete_clients = True

    async def visibility_scope(self, actor_id: str) -> VisibilityScope:
        return VisibilityScope()


class SupervisorPolicy(AccessPolicy):
    role = Role.SUPERVISOR
    can_view_all = True
    can_manage = True

    async def visibility_scope(self, actor_id: str) -> VisibilityScope:
        return VisibilityScope()


class AgentPolicy(AccessPolicy):
    role = Role.AGENT

    async def visibility_scope(self, actor_id: str) -> VisibilityScope:
        """
        Scope an agent to its own tickets.

        Raises:
            ForbiddenException: The actor has no agent profile
        """
        agent = await self._agents.get_by_user_id(actor_id)
        if agent is None:
            raise ForbiddenException(
                "No agent profile for this user",
                {"actor_id": actor_id}
            )
        return VisibilityScope(agent_id=agent.id)


_POLICIES = {
    Role.ADMIN: AdminPolicy,
    Role.SUPERVISOR: SupervisorPolicy,
    Role.AGENT: AgentPolicy,
}


def policy_for(role, agent_repository) -> AccessPolicy:
    """
    Return the policy for ``role``.

    Raises:
        ForbiddenException: Unknown role
    """
    try:
        policy_cls = _POLICIES[Role(role)]
    except ValueError:
        raise ForbiddenException("Unknown role", {"role": str(role)})
    return policy_cls(agent_repository)


def can_view_all(role) -> bool:
    try:
        return _POLICIES[Role(role)].can_view_all
    except ValueError:
        return False
