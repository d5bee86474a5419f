"""
Directory Infrastructure Layer
==============================

- Models: SQLAlchemy ORM models
- Repositories: Data access layer
"""

from supportdesk.directory.infrastructure.models import ClientModel, AgentModel
from supportdesk.directory.infrastructure.repositories import (
    SQLAlchemyClientRepository,
    SQLAlchemyAgentRepository,
    to_client_entity,
    to_agent_entity,
)

__all__ = [
    "ClientModel",
    "AgentModel",
    "SQLAlchemyClientRepository",
    "SQLAlchemyAgentRepository",
    "to_client_entity",
    "to_agent_entity",
]
