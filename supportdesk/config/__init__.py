"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="supportdesk", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/supportdesk",
        description="PostgreSQL connection URL (async)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== SLA Configuration ==========
    sla_vip_hours: float = Field(
        default=2,
        description="Hours a VIP ticket may stay open before escalation",
        gt=0
    )
    sla_normal_hours: float = Field(
        default=24,
        description="Hours a NORMAL ticket may stay open before escalation",
        gt=0
    )
    sla_config_path: Optional[Path] = Field(
        default=None,
        description="Optional YAML file overriding the SLA windows (hot-reloaded)"
    )
    sla_sweep_enabled: bool = Field(
        default=True,
        description="Run the SLA escalation sweep on a schedule"
    )
    sla_sweep_interval_seconds: int = Field(
        default=300,
        description="Seconds between scheduled SLA sweeps",
        ge=10
    )

    # ========== Pagination ==========
    default_page_size: int = Field(default=10, ge=1, le=100)
    max_page_size: int = Field(default=100, ge=1, le=100)

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "test", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @model_validator(mode="after")
    def validate_page_sizes(self) -> "Settings":
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size cannot exceed max_page_size")
        return self


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class Role(str, Enum):
    """Roles of the acting principal, as issued by the auth layer."""
    ADMIN = "ADMIN"
    SUPERVISOR = "SUPERVISOR"
    AGENT = "AGENT"


class ClientCategory(str, Enum):
    """Business classification of a client. Drives priority and SLA window."""
    VIP = "VIP"
    NORMAL = "NORMAL"


class TicketStatus(str, Enum):
    """Ticket lifecycle statuses."""
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"
    ESCALATED = "ESCALATED"


class Priority(str, Enum):
    """Ticket priority levels."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class EscalationTier(str, Enum):
    """
    Escalation tiers.

    Used both as a ticket's escalation tier and as an agent's competence level.
    """
    TIER_1 = "TIER_1"
    TIER_2 = "TIER_2"
    TIER_3 = "TIER_3"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]


_TIER_RANK = {
    EscalationTier.TIER_1: 1,
    EscalationTier.TIER_2: 2,
    EscalationTier.TIER_3: 3,
}


# ========== Lists for validation ==========

VALID_ROLES = [Role.ADMIN, Role.SUPERVISOR, Role.AGENT]
VALID_STATUSES = list(TicketStatus)
VALID_PRIORITIES = list(Priority)
VALID_TIERS = list(EscalationTier)

# Statuses the SLA sweep looks at
SLA_TRACKED_STATUSES = [TicketStatus.OPEN, TicketStatus.IN_PROGRESS]
