"""
Shared Kernel Module
====================

This module contains shared infrastructure used across all bounded contexts
(Directory, Tickets and SLA Escalation).

Architecture Pattern: Modular Monolith
- Each module (directory, tickets, sla) is a bounded context
- Shared kernel contains only generic infrastructure: logging, pagination,
  actor resolution and HTTP middleware

DO NOT add ticket or SLA business logic to the shared kernel.
"""

__version__ = "1.0.0"
