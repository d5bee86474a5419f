"""
SLA Infrastructure Layer
=========================

Infrastructure implementations for SLA escalation:
- External: config file watcher and the sweep scheduler

Ticket persistence is shared with the tickets module
(``SQLAlchemyTicketRepository``).
"""

from supportdesk.sla.infrastructure.external import (
    SLAConfigManager,
    StaticSLAConfigProvider,
    SLAScheduler,
    ConfigFileHandler,
)

__all__ = [
    "SLAConfigManager",
    "StaticSLAConfigProvider",
    "SLAScheduler",
    "ConfigFileHandler",
]
