"""
Ticket Interfaces Layer
=======================

Interface adapters (controllers) for the ticket lifecycle.

This is the outermost layer - handles HTTP requests/responses and
delegates to application services.
"""

from supportdesk.tickets.interfaces.controllers import tickets_router
from supportdesk.tickets.interfaces.dependencies import get_ticket_service, require_permission

__all__ = ["tickets_router", "get_ticket_service", "require_permission"]
