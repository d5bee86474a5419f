"""
SLA Controllers (API Routes)
=============================

FastAPI routes for SLA escalation.

Controllers are thin - they delegate to application services.
"""

import time
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from supportdesk.config import settings
from supportdesk.infrastructure.database import get_session
from supportdesk.shared.api.auth import Actor
from supportdesk.shared.infrastructure.logging import get_logger
from supportdesk.sla.application import (
    BreachResponse,
    ISLAConfigProvider,
    SLAEscalationSweeper,
    SweepResponse,
)
from supportdesk.sla.domain import SLAConfig
from supportdesk.sla.infrastructure import StaticSLAConfigProvider
from supportdesk.tickets.infrastructure import SQLAlchemyTicketRepository
from supportdesk.tickets.interfaces import require_permission

logger = get_logger(__name__)
router = APIRouter(prefix="/sla", tags=["SLA Escalation"])


# ========== Example payloads for Swagger ==========

SWEEP_RESPONSE_EXAMPLE = {
    "scanned": 12,
    "escalated": 2,
    "escalated_ids": [
        "3f0c7a4e-2b1d-4a53-9a43-6f1b2b7f9e10",
        "8d2f5c61-94c7-4a0e-b6a5-0c3e1d2f4a77"
    ],
    "failed": 0
}


# ========== Dependencies ==========

def get_config_provider(request: Request) -> ISLAConfigProvider:
    """The hot-reloading provider set up at startup, or the settings windows."""
    provider = getattr(request.app.state, "sla_config_provider", None)
    if provider is None:
        provider = StaticSLAConfigProvider(SLAConfig.from_settings(settings))
    return provider


async def get_sweeper(
    session: AsyncSession = Depends(get_session),
    config_provider: ISLAConfigProvider = Depends(get_config_provider),
) -> SLAEscalationSweeper:
    """Get SLA sweeper instance."""
    return SLAEscalationSweeper(SQLAlchemyTicketRepository(session), config_provider)


# ========== Route Handlers ==========

@router.post(
    "/sweep",
    response_model=SweepResponse,
    summary="Run an SLA sweep now",
    description="""
    Escalate every live `OPEN` or `IN_PROGRESS` ticket that is past its SLA
    window (VIP: 2 hours, NORMAL: 24 hours by default).

    Escalation sets the status to `ESCALATED` and raises the tier
    (`TIER_1 -> TIER_2`, otherwise `TIER_3`). Restricted to admins and
    supervisors.
    """,
    responses={
        200: {
            "description": "Sweep summary",
            "content": {"application/json": {"example": SWEEP_RESPONSE_EXAMPLE}}
        }
    }
)
async def run_sweep(
    actor: Actor = Depends(require_permission("can_manage")),
    sweeper: SLAEscalationSweeper = Depends(get_sweeper),
):
    start_time = time.perf_counter()
    result = await sweeper.sweep()

    logger.info(
        "Manual SLA sweep complete",
        extra={
            "actor_id": actor.id,
            "processing_time_ms": int((time.perf_counter() - start_time) * 1000),
            **result.to_dict(),
        }
    )
    return SweepResponse.from_result(result)


@router.get(
    "/breaches",
    response_model=List[BreachResponse],
    summary="List current SLA breaches",
    description="Dry run of the sweep: the tickets it would escalate right now, unchanged.",
)
async def list_breaches(
    actor: Actor = Depends(require_permission("can_manage")),
    sweeper: SLAEscalationSweeper = Depends(get_sweeper),
):
    breaches = await sweeper.preview()
    return [BreachResponse.from_domain(breach) for breach in breaches]


# Export router for inclusion in main app
sla_router = router
