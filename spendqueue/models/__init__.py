"""
Data Models Package

This package contains all Pydantic models used in spendqueue.
Everything read from or written to the state file conforms to these schemas.
"""

from spendqueue.models.money import (
    CENT,
    SECONDS_PER_DAY,
    InvalidMoneyError,
    Money,
    Timestamp,
    format_money,
    format_timestamp,
    local_now,
    parse_timestamp,
    to_money,
)
from spendqueue.models.queue import (
    DEFAULT_QUEUE_NAME,
    Income,
    Item,
    Queue,
    State,
)
from spendqueue.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Money
    "CENT",
    "SECONDS_PER_DAY",
    "InvalidMoneyError",
    "Money",
    "Timestamp",
    "format_money",
    "format_timestamp",
    "local_now",
    "parse_timestamp",
    "to_money",
    # Queue models
    "DEFAULT_QUEUE_NAME",
    "Income",
    "Item",
    "Queue",
    "State",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
