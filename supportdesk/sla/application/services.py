"""
SLA Application Services
=========================

Application services orchestrate business logic and coordinate between
domain entities and repositories.

Following SOLID principles:
- Single Responsibility: the sweeper only decides and applies SLA escalations
- Dependency Inversion: Depend on abstractions (repositories), not concrete implementations
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from supportdesk.config import SLA_TRACKED_STATUSES
from supportdesk.core import ApplicationException, Clock, DomainException, utcnow
from supportdesk.shared.infrastructure.logging import get_logger
from supportdesk.sla.domain import SLABreach, SLACalculator, SLAConfig, SweepResult
from supportdesk.tickets.application import ITicketRepository
from supportdesk.tickets.domain import Ticket

logger = get_logger(__name__)


class ISLAConfigProvider(ABC):
    """Interface for SLA configuration access."""

    @abstractmethod
    def get_config(self) -> SLAConfig:
        """Get current SLA configuration."""


class SLAEscalationSweeper:
    """
    Service that escalates tickets past their SLA window.

    Run periodically by the scheduler and on demand through the API. Each
    ticket is handled on its own: a failure is logged and counted, and the
    sweep moves on to the next ticket.
    """

    def __init__(
        self,
        ticket_repository: ITicketRepository,
        config_provider: ISLAConfigProvider,
        clock: Clock = utcnow
    ):
        self._tickets = ticket_repository
        self._config_provider = config_provider
        self._clock = clock

    def _evaluate(self, ticket: Ticket, config: SLAConfig, now: datetime) -> Optional[SLABreach]:
        """Return the breach for ``ticket``, or None while it is inside its window."""
        if ticket.client is None:
            raise DomainException(
                "Ticket has no client loaded",
                {"ticket_id": ticket.id}
            )

        window = config.window_hours(ticket.client.category)
        elapsed = SLACalculator.elapsed_hours(ticket.created_at, now)
        if not SLACalculator.is_breached(elapsed, window):
            return None

        return SLABreach(
            ticket_id=ticket.id,
            category=ticket.client.category,
            elapsed_hours=elapsed,
            window_hours=window,
            current_tier=ticket.escalation_tier,
            next_tier=SLACalculator.next_tier(ticket.escalation_tier),
            deadline=SLACalculator.deadline(ticket.created_at, window),
        )

    async def sweep(self) -> SweepResult:
        """
        Escalate every live OPEN or IN_PROGRESS ticket past its window.

        Returns:
            SweepResult with the scanned count and escalated/failed ids
        """
        config = self._config_provider.get_config()
        now = self._clock()

        candidates, unreadable_ids = await self._tickets.list_sla_candidates(SLA_TRACKED_STATUSES)
        result = SweepResult(
            scanned=len(candidates) + len(unreadable_ids),
            failed_ids=list(unreadable_ids),
        )

        for ticket in candidates:
            try:
                breach = self._evaluate(ticket, config, now)
                if breach is None:
                    continue
                written = await self._tickets.escalate(
                    ticket.id, breach.current_tier, breach.next_tier, now
                )
            except Exception as e:
                # One bad ticket must not end the sweep
                result.failed_ids.append(ticket.id)
                logger.error(
                    "SLA escalation failed",
                    extra={
                        "ticket_id": ticket.id,
                        "error_type": getattr(e, "error_type", type(e).__name__),
                        "error": str(e),
                    },
                    exc_info=not isinstance(e, ApplicationException),
                )
                continue

            if not written:
                # Changed by someone else since the scan
                logger.info("Ticket no longer eligible for escalation", extra={"ticket_id": ticket.id})
                continue

            result.escalated_ids.append(ticket.id)
            logger.warning(
                "Ticket escalated for SLA breach",
                extra={
                    "ticket_id": ticket.id,
                    "category": breach.category.value,
                    "elapsed_hours": round(breach.elapsed_hours, 2),
                    "window_hours": breach.window_hours,
                    "from_tier": breach.current_tier.value,
                    "to_tier": breach.next_tier.value,
                }
            )

        logger.info("SLA sweep completed", extra=result.to_dict())
        return result

    async def preview(self) -> List[SLABreach]:
        """List the tickets a sweep would escalate right now, without writing."""
        config = self._config_provider.get_config()
        now = self._clock()

        candidates, _ = await self._tickets.list_sla_candidates(SLA_TRACKED_STATUSES)

        breaches = []
        for ticket in candidates:
            try:
                breach = self._evaluate(ticket, config, now)
            except ApplicationException as e:
                logger.error(
                    "SLA evaluation failed",
                    extra={"ticket_id": ticket.id, "error": e.message}
                )
                continue
            if breach is not None:
                breaches.append(breach)

        return breaches
