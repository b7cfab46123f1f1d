"""
Main Orchestrator for spendqueue

This module ties together all the components and defines one flow per
command. Every flow is the same shape:

1. Load the entire State
2. Resolve the selected queue (pause may act on the whole directory)
3. Run exactly one queue/state operation
4. Write the entire State back

DESIGN DECISION: The orchestrator enforces the boundaries:
- Rejections (empty queue, not enough money) are reported, not raised,
  and the accrual write-back of the same command is still saved
- Fatal problems (unreadable or corrupt state, dangling selection,
  opener failure) propagate to the caller
- External side effects (opening a link) happen only after the state
  has been saved, so a failed opener never hides a completed purchase
"""

import random
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError

from spendqueue.accrual import Recalculation, apply_recalculation, recalculate
from spendqueue.audit import AuditLogger
from spendqueue.config import get_settings
from spendqueue.models.audit import AuditEventBuilder
from spendqueue.models.money import format_money, local_now
from spendqueue.models.queue import Income, Item, Queue, State
from spendqueue.queues import (
    DuplicateQueueError,
    DirectoryError,
    QueueOperationError,
    add_item,
    buy_head,
    bump_head,
    can_afford,
    create_queue,
    delete_head,
    peek_head,
    replace_queue,
    selected_queue,
    set_income,
)
from spendqueue.reporting import StatusReport, build_status
from spendqueue.services.opener import UrlOpener, UrlOpenerError
from spendqueue.services.storage import JsonFileStateStorage, StateStorageInterface


PriceResolver = Callable[[Item], Decimal]


class SpendQueueApp:
    """
    Orchestrates every command against one state store.

    Flows return `(result, ok, message)` for operations that can be
    rejected, mirroring how the operator sees them: `ok` False means
    "reported, nothing bought/moved", never "crashed".
    """

    def __init__(
        self,
        storage: StateStorageInterface,
        opener: Optional[UrlOpener] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], datetime] = local_now,
        rng: Optional[random.Random] = None,
    ):
        self._storage = storage
        self._opener = opener
        self._audit_logger = audit_logger or AuditLogger()
        self._clock = clock
        self._rng = rng

    @property
    def storage(self) -> StateStorageInterface:
        return self._storage

    def _audit(self, event) -> None:
        self._audit_logger.log(event)

    def _get_opener(self) -> UrlOpener:
        if self._opener is None:
            self._opener = UrlOpener()
        return self._opener

    def _commit(self, state: State, queue: Queue) -> None:
        replace_queue(state, queue)
        self._storage.save(state)

    def _bring_up_to_date(
        self,
        queue: Queue,
        now: datetime,
        globally_paused: bool = False,
    ) -> Recalculation:
        result = recalculate(queue, now)
        applied = apply_recalculation(queue, result, globally_paused)
        self._audit(AuditEventBuilder.balance_recalculated(
            queue_name=queue.name,
            elapsed_seconds=result.elapsed_seconds,
            earned=result.earned,
            balance=queue.current_balance,
            applied=applied,
        ))
        return result

    def _open_link(self, queue_name: str, url: str) -> None:
        opener = self._get_opener()
        try:
            opener.open(url)
        except UrlOpenerError as e:
            self._audit(AuditEventBuilder.external_process_error(opener.command, str(e)))
            raise
        self._audit(AuditEventBuilder.link_opened(queue_name, url))

    # =========================================================================
    # STATUS
    # =========================================================================

    def status(self) -> StatusReport:
        """
        Report the selected queue, bringing it up to date.

        Globally paused: nothing is recalculated and nothing is written.
        """
        state = self._storage.load()
        report = build_status(state, self._clock())

        if not report.should_persist:
            self._audit(AuditEventBuilder.status_skipped())
            return report

        queue = selected_queue(state)
        self._audit(AuditEventBuilder.balance_recalculated(
            queue_name=queue.name,
            elapsed_seconds=report.elapsed_seconds,
            earned=report.earned,
            balance=queue.current_balance,
            applied=not queue.paused,
        ))
        self._commit(state, queue)
        return report

    # =========================================================================
    # QUEUE SETTINGS
    # =========================================================================

    def update_budget(self, amount: float, interval_in_days: int) -> Income:
        """
        Change the selected queue's income.

        Time up to now is credited at the old rate first.
        """
        state = self._storage.load()
        queue = selected_queue(state)
        self._bring_up_to_date(queue, self._clock(), state.globally_paused)

        income = set_income(queue, amount, interval_in_days)
        self._commit(state, queue)
        self._audit(AuditEventBuilder.budget_updated(queue.name, amount, interval_in_days))
        return income

    def pause(self, queue_only: bool = False) -> str:
        """
        Pause accrual.

        Without `queue_only` this sets the directory-wide flag, which
        stops status reporting and accrual for every queue. With it, only
        the selected queue stops earning. Either way, what was earned up
        to now is credited first.
        """
        return self._set_paused(True, queue_only)

    def unpause(self, queue_only: bool = False) -> str:
        """Resume accrual. Paused time is not credited."""
        return self._set_paused(False, queue_only)

    def _set_paused(self, paused: bool, queue_only: bool) -> str:
        state = self._storage.load()
        verb = "Paused" if paused else "Unpaused"

        if not queue_only:
            # Settle every queue under the old flag: pausing credits time so
            # far, unpausing skips the paused stretch.
            now = self._clock()
            for queue in state.queues.values():
                self._bring_up_to_date(queue, now, state.globally_paused)
            state.globally_paused = paused
            self._storage.save(state)
            self._audit(AuditEventBuilder.paused(None, paused))
            return f"{verb} all queues."

        queue = selected_queue(state)
        self._bring_up_to_date(queue, self._clock(), state.globally_paused)
        queue.paused = paused
        self._commit(state, queue)
        self._audit(AuditEventBuilder.paused(queue.name, paused))
        return f"{verb} queue {queue.name}."

    def create_queue(self, name: str) -> tuple[Optional[Queue], bool, str]:
        state = self._storage.load()
        try:
            queue = create_queue(state, name, self._clock())
        except DuplicateQueueError as e:
            self._audit(AuditEventBuilder.operation_rejected(name, "queue new", str(e)))
            return None, False, str(e)
        except DirectoryError as e:
            return None, False, str(e)

        self._storage.save(state)
        self._audit(AuditEventBuilder.queue_created(queue.name))
        return queue, True, f"Created queue {queue.name}."

    # =========================================================================
    # QUEUE CONTENTS
    # =========================================================================

    def pending_items(self) -> list[Item]:
        state = self._storage.load()
        return list(selected_queue(state).future_purchases)

    def past_items(self) -> list[Item]:
        state = self._storage.load()
        return list(selected_queue(state).past_purchases)

    def add_item(
        self,
        name: str,
        amount: Decimal,
        purchase_link: Optional[str] = None,
        prepend: bool = False,
    ) -> tuple[Optional[Item], bool, str]:
        state = self._storage.load()
        queue = selected_queue(state)

        try:
            item = Item(name=name, amount=amount, purchase_link=purchase_link)
        except ValidationError as e:
            return None, False, f"Invalid item: {e.errors()[0]['msg']}"

        try:
            add_item(queue, item, prepend=prepend)
        except QueueOperationError as e:
            self._audit(AuditEventBuilder.operation_rejected(queue.name, "add", str(e)))
            return None, False, str(e)

        self._commit(state, queue)
        self._audit(AuditEventBuilder.item_added(queue.name, item.name, item.amount, prepend))
        return item, True, f'Adding "{item.name}" for ${format_money(item.amount)} to the list.'

    def delete_head(self) -> tuple[Optional[Item], bool, str]:
        state = self._storage.load()
        queue = selected_queue(state)
        try:
            item = delete_head(queue)
        except QueueOperationError as e:
            self._audit(AuditEventBuilder.operation_rejected(queue.name, "delete", str(e)))
            return None, False, str(e)

        self._commit(state, queue)
        self._audit(AuditEventBuilder.item_deleted(queue.name, item.name))
        return item, True, f"Deleted item at head of queue: {item.name}"

    def bump_head(self) -> tuple[Optional[int], bool, str]:
        """
        Move the head back to a random later position.

        Returns:
            (new_index, ok, message)
        """
        state = self._storage.load()
        queue = selected_queue(state)
        head = queue.head
        try:
            new_index = bump_head(queue, rng=self._rng)
        except QueueOperationError as e:
            self._audit(AuditEventBuilder.operation_rejected(queue.name, "bump", str(e)))
            return None, False, str(e)

        self._commit(state, queue)
        self._audit(AuditEventBuilder.item_bumped(queue.name, head.name, new_index))
        return new_index, True, (
            f"Moved {head.name} from head of queue to position {new_index + 1}. "
            f"Next item is now {queue.head.name}."
        )

    # =========================================================================
    # BUYING
    # =========================================================================

    def buy(
        self,
        price: Optional[Decimal] = None,
        force: bool = False,
        open_link: bool = True,
        price_resolver: Optional[PriceResolver] = None,
    ) -> tuple[Optional[Item], bool, str]:
        """
        Buy the head of the selected queue.

        Flow:
        1. Bring the queue up to date (always saved, even on rejection)
        2. Decide the cost: `price`, else `price_resolver(head)` (asked only
           when the listed price is affordable or forced), else listed
        3. Check cost < balance unless forced
        4. Save
        5. Open the purchase link (after the save)

        Raises:
            UrlOpenerError: The link couldn't be opened. The purchase
                            is already saved at that point.
        """
        state = self._storage.load()
        queue = selected_queue(state)
        now = self._clock()
        self._bring_up_to_date(queue, now, state.globally_paused)

        head = queue.head
        # Only ask about the actual price when the listed one would go through.
        if (
            head is not None
            and price is None
            and price_resolver is not None
            and (force or can_afford(queue, head.amount))
        ):
            price = price_resolver(head)

        try:
            item = buy_head(queue, now, cost=price, force=force)
        except QueueOperationError as e:
            self._commit(state, queue)
            self._audit(AuditEventBuilder.operation_rejected(queue.name, "buy", str(e)))
            return None, False, str(e)

        self._commit(state, queue)
        self._audit(AuditEventBuilder.item_bought(
            queue_name=queue.name,
            item_name=item.name,
            cost=item.amount,
            remaining=queue.current_balance,
            forced=force,
        ))

        message = (
            f"Bought {item.name} for ${format_money(item.amount)}. "
            f"Remaining: ${format_money(queue.current_balance)}"
        )
        if open_link:
            if item.purchase_link:
                self._open_link(queue.name, item.purchase_link)
            else:
                message += "\nWould open purchase link, none present."
        return item, True, message

    def peek(self) -> tuple[Optional[str], bool, str]:
        """
        Open the head's purchase link without buying anything.

        Never writes the state and never checks the balance.
        """
        state = self._storage.load()
        queue = selected_queue(state)
        try:
            url = peek_head(queue)
        except QueueOperationError as e:
            return None, False, str(e)

        if url is None:
            return None, False, "Would open purchase link, none present."

        self._open_link(queue.name, url)
        return url, True, f"Opened purchase link for {queue.head.name}."


def create_app(
    state_file: Optional[Path] = None,
    opener_command: Optional[str] = None,
    clock: Callable[[], datetime] = local_now,
) -> SpendQueueApp:
    """
    Factory function to create the application with its collaborators.

    Args:
        state_file: Overrides the configured state file location.
        opener_command: Overrides the configured URL opener program.
    """
    settings = get_settings()
    audit_logger = AuditLogger()
    path = state_file or settings.storage.state_file

    storage = JsonFileStateStorage(path, clock=clock, audit_logger=audit_logger)

    seed = settings.app.bump_seed
    rng = random.Random(seed) if seed is not None else None

    return SpendQueueApp(
        storage=storage,
        opener=UrlOpener(opener_command) if opener_command else None,
        audit_logger=audit_logger,
        clock=clock,
        rng=rng,
    )
