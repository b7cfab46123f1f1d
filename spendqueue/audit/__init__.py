"""Audit logging package."""

from spendqueue.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
