"""
Multi-Queue Directory

A State holds queues keyed by unique name, which one is selected,
and a directory-wide pause flag.

PERSISTENCE DISCIPLINE for any single-queue change:
1. Load the entire State
2. Mutate exactly one Queue in memory
3. Replace it by name
4. Write the entire State back

KNOWN LIMITATION: there is no locking. Two invocations running at the
same time race, and the later writer wins.
"""

from datetime import datetime

from spendqueue.models.queue import Income, Queue, State


class DirectoryError(Exception):
    """Base exception for directory operations."""
    pass


class SelectionError(DirectoryError):
    """
    `currently_selected` names no existing queue.

    Unrecoverable: the state file has to be fixed by hand.
    """

    def __init__(self, selected: str, available: list[str]):
        self.selected = selected
        self.available = available
        super().__init__(
            f"Selected queue '{selected}' doesn't exist "
            f"(known queues: {', '.join(available) or 'none'}). "
            "Fix 'currently_selected' in the state file."
        )


class DuplicateQueueError(DirectoryError):
    """A queue with this name already exists."""
    pass


def selected_queue(state: State) -> Queue:
    try:
        return state.queues[state.currently_selected]
    except KeyError:
        raise SelectionError(state.currently_selected, sorted(state.queues))


def replace_queue(state: State, queue: Queue) -> None:
    """Store `queue` under its name, replacing any queue with that name."""
    state.queues[queue.name] = queue


def create_queue(state: State, name: str, now: datetime) -> Queue:
    """Add a default queue (1 per day, empty) named `name`."""
    name = name.strip()
    if not name:
        raise DirectoryError("A queue needs a name")
    if name in state.queues:
        raise DuplicateQueueError(f"Queue already exists: {name}")

    queue = Queue.new(name, now)
    replace_queue(state, queue)
    return queue


def set_income(queue: Queue, amount: float, interval_in_days: int) -> Income:
    queue.income = Income(amount=amount, interval_in_days=interval_in_days)
    return queue.income
