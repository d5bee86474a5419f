"""
Directory Application Layer
===========================

Contains:
- Services: ClientService, AgentService
- DTOs: request/response models for clients and agents
- Repository interfaces consumed by this and the tickets module
"""

from supportdesk.directory.application.dto import (
    ClientCreateDTO,
    ClientUpdateDTO,
    ClientResponse,
    ClientListResponse,
    AgentCreateDTO,
    AgentUpdateDTO,
    AgentResponse,
)
from supportdesk.directory.application.services import (
    ClientService,
    AgentService,
    IClientRepository,
    IAgentRepository,
)

__all__ = [
    # DTOs
    "ClientCreateDTO",
    "ClientUpdateDTO",
    "ClientResponse",
    "ClientListResponse",
    "AgentCreateDTO",
    "AgentUpdateDTO",
    "AgentResponse",
    # Services
    "ClientService",
    "AgentService",
    # Repository Interfaces
    "IClientRepository",
    "IAgentRepository",
]
