"""Tests for the multi-queue directory."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from spendqueue.models.queue import Income, State
from spendqueue.queues import (
    DirectoryError,
    DuplicateQueueError,
    SelectionError,
    create_queue,
    replace_queue,
    selected_queue,
    set_income,
)


START = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestSelection:
    """Tests for selected_queue()."""

    def test_resolves_current_selection(self):
        """Test that the selected queue is returned."""
        state = State.default(START)
        assert selected_queue(state).name == "default"

    def test_dangling_selection_is_fatal(self):
        """Test that a selection naming no queue is reported with the fix."""
        state = State.default(START)
        state.currently_selected = "missing"
        with pytest.raises(SelectionError) as exc_info:
            selected_queue(state)
        assert exc_info.value.selected == "missing"
        assert exc_info.value.available == ["default"]
        assert "currently_selected" in str(exc_info.value)


class TestCreateQueue:
    """Tests for create_queue()."""

    def test_adds_default_queue_without_selecting_it(self):
        """Test that a new queue starts at 1 per day and the selection stays."""
        state = State.default(START)
        queue = create_queue(state, "books", START)
        assert set(state.queues) == {"default", "books"}
        assert queue.income == Income()
        assert queue.current_balance == Decimal(0)
        assert queue.last_calculation == START
        assert state.currently_selected == "default"

    def test_duplicate_name_is_rejected(self):
        """Test that names stay unique."""
        state = State.default(START)
        with pytest.raises(DuplicateQueueError):
            create_queue(state, "default", START)
        assert len(state.queues) == 1

    def test_blank_name_is_rejected(self):
        """Test that a queue needs a name."""
        with pytest.raises(DirectoryError):
            create_queue(State.default(START), "   ", START)


class TestReplaceQueue:
    """Tests for replace_queue() and set_income()."""

    def test_replaces_by_name(self):
        """Test that only the named queue is swapped."""
        state = State.default(START)
        create_queue(state, "books", START)

        books = state.queues["books"].model_copy(deep=True)
        books.current_balance = Decimal("12")
        replace_queue(state, books)

        assert state.queues["books"].current_balance == Decimal("12")
        assert state.queues["default"].current_balance == Decimal(0)

    def test_set_income(self):
        """Test that the income is replaced."""
        state = State.default(START)
        queue = selected_queue(state)
        income = set_income(queue, 250.0, 30)
        assert queue.income == income
        assert income.amount == 250.0
        assert income.interval_in_days == 30
