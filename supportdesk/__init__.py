"""
SupportDesk
===========

Support ticket lifecycle service with SLA-driven escalation.
"""

__version__ = "1.0.0"
