"""
Audit Models for spendqueue

Every state change the operator makes is described by one audit event.
This provides:
1. A readable trail of what happened to the balance and why
2. Debugging information when a state file looks wrong
3. One place that knows how to describe each kind of change

DESIGN DECISION: Audit events are emitted to the log only.
They are never written into the state document.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from spendqueue.models.money import format_money


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Directory
    STATE_CREATED = "state_created"
    STATE_MIGRATED = "state_migrated"
    QUEUE_CREATED = "queue_created"

    # Accrual
    BALANCE_RECALCULATED = "balance_recalculated"
    ACCRUAL_SKIPPED_PAUSED = "accrual_skipped_paused"
    BUDGET_UPDATED = "budget_updated"
    STATUS_SKIPPED_GLOBAL_PAUSE = "status_skipped_global_pause"

    # Pausing
    QUEUE_PAUSED = "queue_paused"
    QUEUE_UNPAUSED = "queue_unpaused"
    GLOBAL_PAUSED = "global_paused"
    GLOBAL_UNPAUSED = "global_unpaused"

    # Queue state machine
    ITEM_ADDED = "item_added"
    ITEM_DELETED = "item_deleted"
    ITEM_BUMPED = "item_bumped"
    ITEM_BOUGHT = "item_bought"
    PURCHASE_REJECTED = "purchase_rejected"
    OPERATION_REJECTED = "operation_rejected"
    LINK_OPENED = "link_opened"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_PROCESS_ERROR = "external_process_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    queue_name: Optional[str] = Field(
        default=None,
        description="Queue the event relates to, if any"
    )
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None
    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "queue": self.queue_name,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.item_added("books", "Dune", Decimal("9.99"), prepend=False)
        event = AuditEventBuilder.item_bought("books", "Dune", Decimal("9.99"), remaining, forced=False)
    """

    @staticmethod
    def state_created(path: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_CREATED,
            description="No state file found, starting from the default state",
            details={"path": path},
        )

    @staticmethod
    def state_migrated(path: str, schema: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_MIGRATED,
            severity=AuditSeverity.WARNING,
            description=f"Migrated state file from {schema} schema",
            details={"path": path, "schema": schema},
        )

    @staticmethod
    def queue_created(queue_name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.QUEUE_CREATED,
            queue_name=queue_name,
            description=f"Queue created: {queue_name}",
            is_user_action=True,
        )

    @staticmethod
    def balance_recalculated(
        queue_name: str,
        elapsed_seconds: int,
        earned: Decimal,
        balance: Decimal,
        applied: bool,
    ) -> AuditEvent:
        if applied:
            return AuditEvent(
                event_type=AuditEventType.BALANCE_RECALCULATED,
                severity=AuditSeverity.DEBUG,
                queue_name=queue_name,
                description=f"Accrued {format_money(earned)} over {elapsed_seconds}s",
                details={
                    "elapsed_seconds": elapsed_seconds,
                    "earned": str(earned),
                    "balance": str(balance),
                },
            )
        return AuditEvent(
            event_type=AuditEventType.ACCRUAL_SKIPPED_PAUSED,
            severity=AuditSeverity.DEBUG,
            queue_name=queue_name,
            description=f"Queue paused, {elapsed_seconds}s not credited",
            details={"elapsed_seconds": elapsed_seconds, "balance": str(balance)},
        )

    @staticmethod
    def budget_updated(queue_name: str, amount: float, interval_in_days: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_UPDATED,
            queue_name=queue_name,
            description=f"Income set to {amount:.2f} per {interval_in_days} days",
            details={"amount": amount, "interval_in_days": interval_in_days},
            is_user_action=True,
        )

    @staticmethod
    def status_skipped() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATUS_SKIPPED_GLOBAL_PAUSE,
            severity=AuditSeverity.DEBUG,
            description="Globally paused, status not recalculated",
        )

    @staticmethod
    def paused(queue_name: Optional[str], paused: bool) -> AuditEvent:
        if queue_name is None:
            event_type = AuditEventType.GLOBAL_PAUSED if paused else AuditEventType.GLOBAL_UNPAUSED
            description = "All queues paused" if paused else "All queues unpaused"
        else:
            event_type = AuditEventType.QUEUE_PAUSED if paused else AuditEventType.QUEUE_UNPAUSED
            description = f"Queue {'paused' if paused else 'unpaused'}: {queue_name}"
        return AuditEvent(
            event_type=event_type,
            queue_name=queue_name,
            description=description,
            is_user_action=True,
        )

    @staticmethod
    def item_added(queue_name: str, item_name: str, amount: Decimal, prepend: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_ADDED,
            queue_name=queue_name,
            description=f"Added {item_name} for {format_money(amount)}",
            details={"item": item_name, "amount": str(amount), "prepend": prepend},
            is_user_action=True,
        )

    @staticmethod
    def item_deleted(queue_name: str, item_name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_DELETED,
            queue_name=queue_name,
            description=f"Deleted head item: {item_name}",
            details={"item": item_name},
            is_user_action=True,
        )

    @staticmethod
    def item_bumped(queue_name: str, item_name: str, position: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_BUMPED,
            queue_name=queue_name,
            description=f"Bumped {item_name} to index {position}",
            details={"item": item_name, "position": position},
            is_user_action=True,
        )

    @staticmethod
    def item_bought(
        queue_name: str,
        item_name: str,
        cost: Decimal,
        remaining: Decimal,
        forced: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_BOUGHT,
            queue_name=queue_name,
            description=f"Bought {item_name} for {format_money(cost)}",
            details={
                "item": item_name,
                "cost": str(cost),
                "remaining": str(remaining),
                "forced": forced,
            },
            is_user_action=True,
        )

    @staticmethod
    def operation_rejected(queue_name: str, operation: str, reason: str) -> AuditEvent:
        event_type = (
            AuditEventType.PURCHASE_REJECTED
            if operation == "buy"
            else AuditEventType.OPERATION_REJECTED
        )
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.WARNING,
            queue_name=queue_name,
            description=f"{operation} rejected: {reason}",
            details={"operation": operation},
            is_user_action=True,
        )

    @staticmethod
    def link_opened(queue_name: str, url: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LINK_OPENED,
            queue_name=queue_name,
            description="Opened purchase link",
            details={"url": url},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )

    @staticmethod
    def external_process_error(command: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_PROCESS_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External process failed: {command}",
            error_message=error_message,
            details={"command": command},
        )
