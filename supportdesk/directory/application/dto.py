"""
Directory Application DTOs
==========================

Pydantic models for client and agent requests and responses.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from supportdesk.config import ClientCategory, EscalationTier
from supportdesk.directory.domain import Agent, Client
from supportdesk.shared.pagination import PaginationMeta

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


# ========== Request DTOs ==========

class ClientCreateDTO(BaseModel):
    """DTO for creating a client."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    category: ClientCategory = Field(default=ClientCategory.NORMAL)
    organization: Optional[str] = Field(None, max_length=200)


class ClientUpdateDTO(BaseModel):
    """DTO for updating a client. Category is fixed at creation."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[str] = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    organization: Optional[str] = Field(None, max_length=200)

    @model_validator(mode="after")
    def require_one_field(self) -> "ClientUpdateDTO":
        if not self.model_dump(exclude_none=True):
            raise ValueError("At least one field must be provided")
        return self


class AgentCreateDTO(BaseModel):
    """DTO for creating an agent profile for an existing staff account."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    user_id: str = Field(..., min_length=1, max_length=255)
    level: EscalationTier = Field(default=EscalationTier.TIER_1)


class AgentUpdateDTO(BaseModel):
    """DTO for updating an agent."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    level: Optional[EscalationTier] = None

    @model_validator(mode="after")
    def require_one_field(self) -> "AgentUpdateDTO":
        if not self.model_dump(exclude_none=True):
            raise ValueError("At least one field must be provided")
        return self


# ========== Response DTOs ==========

class ClientResponse(BaseModel):
    """Response model for a client."""
    id: str
    name: str
    email: str
    category: ClientCategory
    organization: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    ticket_count: Optional[int] = None

    @classmethod
    def from_domain(cls, client: Client, ticket_count: Optional[int] = None) -> "ClientResponse":
        return cls(
            id=client.id,
            name=client.name,
            email=client.email,
            category=client.category,
            organization=client.organization,
            created_at=client.created_at,
            updated_at=client.updated_at,
            ticket_count=ticket_count,
        )


class ClientListResponse(BaseModel):
    data: List[ClientResponse]
    pagination: PaginationMeta


class AgentResponse(BaseModel):
    """Response model for an agent."""
    id: str
    name: str
    email: str
    user_id: str
    level: EscalationTier
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, agent: Agent) -> "AgentResponse":
        return cls(
            id=agent.id,
            name=agent.name,
            email=agent.email,
            user_id=agent.user_id,
            level=agent.level,
            active=agent.active,
            created_at=agent.created_at,
            updated_at=agent.updated_at,
        )
