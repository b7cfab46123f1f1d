"""
Purchase Queue State Machine

Operations on a single queue's pending and past lists:
- add:    insert at the head or the tail
- delete: drop the head without recording it
- bump:   move the head to a random later position ("not right now")
- buy:    debit the balance and move the head into the history
- peek:   hand out the head's purchase link, nothing else

DESIGN DECISION: Rejections are exceptions.
Every operation either fully applies or leaves the queue untouched
and raises a QueueOperationError subclass. The orchestrator turns those
into diagnostics; they are never fatal.
"""

import random
from datetime import datetime
from decimal import Decimal
from typing import Optional

from spendqueue.models.money import format_money, to_money
from spendqueue.models.queue import Item, Queue


class QueueOperationError(Exception):
    """Base exception for rejected queue operations."""
    pass


class EmptyQueueError(QueueOperationError):
    """The operation needs a head item and there is none."""
    pass


class NotEnoughItemsError(QueueOperationError):
    """Bumping needs at least two pending items."""

    def __init__(self, count: int):
        self.count = count
        if count == 0:
            message = "No items in the queue, can't bump anything."
        else:
            message = "One item in the queue, can't bump anything."
        super().__init__(message)


class InsufficientFundsError(QueueOperationError):
    """The head costs at least as much as the balance and force wasn't given."""

    def __init__(self, cost: Decimal, balance: Decimal):
        self.cost = cost
        self.balance = balance
        super().__init__(
            f"Can't buy item, not enough money accumulated "
            f"(costs {format_money(cost)}, have {format_money(balance)})."
        )


class InvalidItemError(QueueOperationError):
    """The item can't be queued (negative price, already bought)."""
    pass


def add_item(queue: Queue, item: Item, prepend: bool = False) -> int:
    """
    Queue an item.

    Returns the index it was inserted at.
    """
    if item.is_purchased:
        raise InvalidItemError(f"{item.name} was already bought")
    if item.amount < 0:
        raise InvalidItemError(f"{item.name} has a negative price")

    if prepend:
        queue.future_purchases.insert(0, item)
        return 0
    queue.future_purchases.append(item)
    return len(queue.future_purchases) - 1


def delete_head(queue: Queue) -> Item:
    """Remove and return the head. The item is discarded, not recorded."""
    if not queue.future_purchases:
        raise EmptyQueueError("No item in queue, can't remove any.")
    return queue.future_purchases.pop(0)


def bump_head(queue: Queue, rng: Optional[random.Random] = None) -> int:
    """
    Move the head back to a uniformly random later position.

    For n pending items the new index is drawn from [1, n - 1] inclusive,
    so index 0 is excluded and the head always changes. With n == 2 the
    only choice is the tail.

    Args:
        rng: optional RNG (useful for deterministic tests).

    Returns:
        The item's new index.
    """
    count = len(queue.future_purchases)
    if count < 2:
        raise NotEnoughItemsError(count)

    r = rng or random
    head = queue.future_purchases.pop(0)
    # After the pop there are n - 1 items; inserting at len() appends.
    new_index = r.randint(1, len(queue.future_purchases))
    queue.future_purchases.insert(new_index, head)
    return new_index


def can_afford(queue: Queue, cost: Decimal) -> bool:
    """Purchase gate: strictly less than the balance."""
    return cost < queue.current_balance


def buy_head(
    queue: Queue,
    now: datetime,
    cost: Optional[Decimal] = None,
    force: bool = False,
) -> Item:
    """
    Buy the head item.

    Args:
        now: Purchase time recorded on the item.
        cost: What was actually paid. Defaults to the listed price.
        force: Skip the affordability check; the balance may go negative.

    Returns:
        The bought item, now at the tail of past_purchases.

    Raises:
        EmptyQueueError: Nothing to buy.
        InvalidItemError: Negative cost.
        InsufficientFundsError: cost >= balance and not forced.
    """
    head = queue.head
    if head is None:
        raise EmptyQueueError("No item in the queue, can't buy it!")

    cost = head.amount if cost is None else to_money(cost)
    if cost < 0:
        raise InvalidItemError("A purchase can't have a negative price")

    if not (force or can_afford(queue, cost)):
        raise InsufficientFundsError(cost, queue.current_balance)

    queue.current_balance = queue.current_balance - cost
    item = queue.future_purchases.pop(0)
    item.amount = cost
    item.time_purchased = now
    queue.past_purchases.append(item)
    return item


def peek_head(queue: Queue) -> Optional[str]:
    """
    The head's purchase link, or None if it has none.

    Never mutates the queue and never checks the balance.
    """
    head = queue.head
    if head is None:
        raise EmptyQueueError("No item in the queue, nothing to peek at.")
    return head.purchase_link
