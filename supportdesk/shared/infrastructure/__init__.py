"""
Infrastructure Layer
=====================

Low-level technical concerns shared by every module:
- Structured JSON logging
- Correlation ID propagation into log records
"""
