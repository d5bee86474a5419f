"""
Ticket Value Objects
====================

The ticket status state machine and the resolution-time rule.
"""

import math
from datetime import datetime
from types import MappingProxyType
from typing import FrozenSet, Mapping

from supportdesk.config import TicketStatus
from supportdesk.core import InvalidTransitionException

# Allowed next states per status. CLOSED is terminal.
STATUS_TRANSITIONS: Mapping[TicketStatus, FrozenSet[TicketStatus]] = MappingProxyType({
    TicketStatus.OPEN: frozenset({TicketStatus.IN_PROGRESS, TicketStatus.ESCALATED}),
    TicketStatus.IN_PROGRESS: frozenset({TicketStatus.RESOLVED, TicketStatus.ESCALATED}),
    TicketStatus.ESCALATED: frozenset({TicketStatus.IN_PROGRESS, TicketStatus.RESOLVED}),
    TicketStatus.RESOLVED: frozenset({TicketStatus.CLOSED}),
    TicketStatus.CLOSED: frozenset(),
})

INITIAL_STATUS = TicketStatus.OPEN


class TicketStateMachine:
    """
    Stateless checks against ``STATUS_TRANSITIONS``.

    Any pair not listed in the table is rejected, including a status
    "transitioning" to itself.
    """

    @staticmethod
    def allowed_next(status: TicketStatus) -> FrozenSet[TicketStatus]:
        return STATUS_TRANSITIONS[status]

    @staticmethod
    def can_transition(current: TicketStatus, requested: TicketStatus) -> bool:
        return requested in STATUS_TRANSITIONS[current]

    @staticmethod
    def is_terminal(status: TicketStatus) -> bool:
        return not STATUS_TRANSITIONS[status]

    @classmethod
    def validate(cls, current: TicketStatus, requested: TicketStatus) -> None:
        """
        Raise if ``current -> requested`` is not a legal transition.

        Raises:
            InvalidTransitionException: naming both statuses
        """
        if not cls.can_transition(current, requested):
            raise InvalidTransitionException(current.value, requested.value)


def resolution_minutes(created_at: datetime, resolved_at: datetime) -> int:
    """Whole minutes between creation and resolution, rounded down."""
    return math.floor((resolved_at - created_at).total_seconds() / 60)
