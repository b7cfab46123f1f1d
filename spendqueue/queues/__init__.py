"""Queue state machine and directory package."""

from spendqueue.queues.directory import (
    DirectoryError,
    DuplicateQueueError,
    SelectionError,
    create_queue,
    replace_queue,
    selected_queue,
    set_income,
)
from spendqueue.queues.operations import (
    EmptyQueueError,
    InsufficientFundsError,
    InvalidItemError,
    NotEnoughItemsError,
    QueueOperationError,
    add_item,
    buy_head,
    bump_head,
    can_afford,
    delete_head,
    peek_head,
)

__all__ = [
    # Directory
    "DirectoryError",
    "DuplicateQueueError",
    "SelectionError",
    "create_queue",
    "replace_queue",
    "selected_queue",
    "set_income",
    # State machine
    "EmptyQueueError",
    "InsufficientFundsError",
    "InvalidItemError",
    "NotEnoughItemsError",
    "QueueOperationError",
    "add_item",
    "buy_head",
    "bump_head",
    "can_afford",
    "delete_head",
    "peek_head",
]
