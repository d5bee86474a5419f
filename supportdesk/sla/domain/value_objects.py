"""
SLA Value Objects
==================

Immutable value objects for the SLA domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field

from supportdesk.config import ClientCategory, EscalationTier


class SLAConfig(BaseModel):
    """
    SLA windows per client category, in hours.

    Loaded from settings and optionally overridden by a YAML file.
    """
    model_config = ConfigDict(frozen=True)

    vip_hours: float = Field(default=2, gt=0, description="Window for VIP clients")
    normal_hours: float = Field(default=24, gt=0, description="Window for NORMAL clients")

    def window_hours(self, category: ClientCategory) -> float:
        """Get the SLA window that applies to a client category."""
        if category == ClientCategory.VIP:
            return self.vip_hours
        return self.normal_hours

    @classmethod
    def from_settings(cls, settings) -> "SLAConfig":
        return cls(vip_hours=settings.sla_vip_hours, normal_hours=settings.sla_normal_hours)


class SLACalculator:
    """
    Pure functions for SLA calculations.

    Stateless utility class - all breach and tier arithmetic lives here.
    """

    @staticmethod
    def elapsed_hours(created_at: datetime, now: datetime) -> float:
        return (now - created_at).total_seconds() / 3600

    @staticmethod
    def deadline(created_at: datetime, window_hours: float) -> datetime:
        return created_at + timedelta(hours=window_hours)

    @staticmethod
    def is_breached(elapsed_hours: float, window_hours: float) -> bool:
        """A ticket is in breach only once it is strictly past its window."""
        return elapsed_hours > window_hours

    @staticmethod
    def next_tier(current: EscalationTier) -> EscalationTier:
        """
        Tier after an SLA escalation.

        TIER_1 moves to TIER_2; anything else goes straight to TIER_3.
        """
        if current == EscalationTier.TIER_1:
            return EscalationTier.TIER_2
        return EscalationTier.TIER_3
