"""
Tickets Module
==============

Bounded Context for the ticket lifecycle.

Responsibilities:
- Create tickets with a priority derived from the client category
- Validate status transitions against the lifecycle state machine
- Enforce agent eligibility for escalated tickets
- Stamp resolution time once, when a ticket is first resolved
- Soft-delete tickets
- Restrict what each actor may see through access policies
"""

__version__ = "1.0.0"
