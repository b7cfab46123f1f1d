"""
Status Reporting

Looks like a read, behaves like a write: unless the directory is globally
paused, reporting brings the selected queue up to date and the caller
persists the result.

NOTE: "purchasable" uses balance >= price, while buying requires
price < balance. An item costing exactly the balance is shown as
purchasable but a plain `buy` rejects it. Both checks are kept as they are.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from spendqueue.accrual import apply_recalculation, recalculate
from spendqueue.models.queue import Item, State
from spendqueue.queues.directory import selected_queue


class StatusReport(BaseModel):
    """What `status` shows."""

    globally_paused: bool = False
    queue_name: Optional[str] = None
    queue_paused: bool = False
    balance: Optional[Decimal] = None
    earned: Decimal = Field(
        default=Decimal(0),
        description="Credited since the previous calculation (0 while paused)"
    )
    elapsed_seconds: int = 0
    next_item: Optional[Item] = None
    purchasable: bool = False

    @property
    def should_persist(self) -> bool:
        """A globally paused report changes nothing and writes nothing."""
        return not self.globally_paused


def is_purchasable(balance: Decimal, item: Item) -> bool:
    return balance >= item.amount


def build_status(state: State, now: datetime) -> StatusReport:
    """
    Bring the selected queue up to `now` and describe it.

    Mutates `state` in place (timestamp always, balance unless paused).
    When globally paused nothing is touched.

    Raises:
        SelectionError: The selected queue doesn't exist.
    """
    if state.globally_paused:
        return StatusReport(globally_paused=True)

    queue = selected_queue(state)
    result = recalculate(queue, now)
    applied = apply_recalculation(queue, result)

    report = StatusReport(
        queue_name=queue.name,
        queue_paused=queue.paused,
        balance=queue.current_balance,
        earned=result.earned if applied else Decimal(0),
        elapsed_seconds=result.elapsed_seconds,
    )
    head = queue.head
    if head is not None:
        report.next_item = head
        report.purchasable = is_purchasable(queue.current_balance, head)
    return report
