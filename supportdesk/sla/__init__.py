"""
SLA Escalation Module
=====================

Bounded Context for Service Level Agreement enforcement.

Responsibilities:
- Apply the SLA window of each client category (VIP / NORMAL)
- Sweep live OPEN and IN_PROGRESS tickets and escalate those past their window
- Report current breaches without writing (dry run)
- Hot-reload SLA windows from a YAML file via watchdog
- Run the sweep on an APScheduler interval
"""

__version__ = "1.0.0"
