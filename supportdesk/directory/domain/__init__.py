"""
Directory Domain Layer
======================

Contains:
- Entities: Client, Agent

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from supportdesk.directory.domain.entities import Client, Agent

__all__ = [
    "Client",
    "Agent",
]
