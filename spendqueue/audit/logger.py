"""
Audit Logger

DESIGN DECISION: Every state change is logged as a structured event.
This provides:
1. Traceability of every balance change
2. Debugging capability when the state file looks wrong

The audit logger:
- Writes to stderr through the stdlib logging module, so stdout stays
  reserved for command output
- Never raises: a logging failure must not fail a purchase
"""

import logging
import sys
from typing import Optional

import structlog

from spendqueue.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


_SEVERITY_METHODS = {
    AuditSeverity.DEBUG: "debug",
    AuditSeverity.INFO: "info",
    AuditSeverity.WARNING: "warning",
    AuditSeverity.ERROR: "error",
}


def configure_logging(level: str = "WARNING", json_output: bool = False) -> None:
    """
    Configure structlog on top of stdlib logging.

    Call once at startup; the CLI does this from settings.
    """
    # No-op if the root logger already has handlers (e.g. under pytest).
    logging.basicConfig(format="%(message)s", stream=sys.stderr)
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.WARNING))
    configure_structlog(json_output)


def configure_structlog(json_output: bool = False) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """Central audit logging service."""

    def __init__(self, logger_name: str = "spendqueue.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event couldn't be written.
        """
        method = getattr(self._logger, _SEVERITY_METHODS[event.severity])
        try:
            method("audit_event", **event.to_log_dict())
        except Exception as e:
            # Log failure but don't raise
            print(f"Warning: audit log failed: {e}", file=sys.stderr)
            return False
        return True

    def log_error(self, error_type: str, error_message: str, details: Optional[dict] = None) -> None:
        self.log(AuditEventBuilder.system_error(error_type, error_message, details))


# Configure structlog for local logging
configure_structlog()
