"""
Accrual Engine

Computes how much a queue has earned since its last calculation.

DESIGN DECISION: recalculate() is pure. It returns what the queue
*would* look like at `now` and leaves applying it to the caller,
through apply_recalculation().

WRITE-BACK POLICY:
- last_calculation ALWAYS moves to `now`
- current_balance only moves if neither the queue nor the whole
  directory is paused

Consequence: paused time is never credited, not even retroactively.
Unpausing does not "catch up" on the time spent paused.
"""

from datetime import datetime
from decimal import Decimal, localcontext
from typing import NamedTuple

from spendqueue.models.money import MONEY_CONTEXT
from spendqueue.models.queue import Queue


class Recalculation(NamedTuple):
    """Outcome of bringing a queue up to `timestamp`."""
    timestamp: datetime
    balance: Decimal
    earned: Decimal
    elapsed_seconds: int


def elapsed_seconds(since: datetime, now: datetime) -> int:
    """
    Whole seconds between two instants.

    Negative if the clock moved backward; that is not guarded against.
    """
    return int((now - since).total_seconds())


def recalculate(queue: Queue, now: datetime) -> Recalculation:
    """
    Compute the queue's balance at `now` without mutating it.

    earned = income.amount / (interval_in_days * 86400) * elapsed_seconds
    """
    elapsed = elapsed_seconds(queue.last_calculation, now)
    with localcontext(MONEY_CONTEXT):
        earned = queue.income.per_second * Decimal(elapsed)
        balance = queue.current_balance + earned
    return Recalculation(
        timestamp=now,
        balance=balance,
        earned=earned,
        elapsed_seconds=elapsed,
    )


def apply_recalculation(
    queue: Queue,
    result: Recalculation,
    globally_paused: bool = False,
) -> bool:
    """
    Apply the write-back policy.

    Returns True if the balance was updated, False if the queue or the
    directory is paused and only the timestamp moved.
    """
    queue.last_calculation = result.timestamp
    if queue.paused or globally_paused:
        return False
    queue.current_balance = result.balance
    return True
