"""
Directory Interfaces Layer
==========================

Interface adapters (controllers) for clients and agents.
"""

from supportdesk.directory.interfaces.controllers import agents_router, clients_router

__all__ = ["clients_router", "agents_router"]
