"""
Directory Module
================

Bounded Context for the people a ticket refers to: clients (who raise
tickets) and agents (who work them).

Responsibilities:
- Client records with a business category (VIP / NORMAL)
- Agent profiles with an escalation competence level and an active flag
- Deletion guards: clients with tickets cannot be deleted, agents are only
  ever deactivated
"""

__version__ = "1.0.0"
