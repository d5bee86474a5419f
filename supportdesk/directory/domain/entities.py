"""
Directory Domain Entities
=========================

Pure Python entities for clients and agents.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from supportdesk.config import ClientCategory, EscalationTier, Priority


@dataclass
class Client:
    """
    A customer that raises tickets.

    The category is fixed at creation time; it decides the priority of every
    ticket the client opens and the SLA window those tickets run against.
    """

    id: str
    name: str
    email: str
    category: ClientCategory = ClientCategory.NORMAL
    organization: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_vip(self) -> bool:
        return self.category == ClientCategory.VIP

    @property
    def ticket_priority(self) -> Priority:
        """Priority assigned to new tickets from this client."""
        return Priority.HIGH if self.is_vip else Priority.MEDIUM


@dataclass
class Agent:
    """
    A support agent linked one-to-one to a staff user account.

    ``level`` is the highest escalation tier the agent may work.
    """

    id: str
    name: str
    email: str
    user_id: str
    level: EscalationTier = EscalationTier.TIER_1
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def can_handle(self, tier: EscalationTier) -> bool:
        """Check whether the agent's level covers the given escalation tier."""
        return self.level.rank >= tier.rank
