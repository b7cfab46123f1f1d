"""
Tests for spendqueue

Test strategy:
1. Unit tests for individual components (money, models, validators)
2. Flow tests against in-memory or temporary-directory storage
3. No real clock, home directory or external programs (use fakes)
"""

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from spendqueue.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from spendqueue.models.money import (
    InvalidMoneyError,
    format_money,
    format_timestamp,
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


START = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestMoney:
    """Tests for the Decimal money helpers."""

    def test_float_input_keeps_its_shortest_decimal_form(self):
        """Test that 0.1 becomes Decimal('0.1'), not the binary expansion."""
        assert to_money(0.1) == Decimal("0.1")
        assert to_money(0.1) + to_money(0.2) == Decimal("0.3")

    def test_string_input_accepts_dollar_sign_and_commas(self):
        """Test that typed amounts like '$1,200.50' parse."""
        assert to_money("$1,200.50") == Decimal("1200.50")
        assert to_money(" 12 ") == Decimal("12")

    def test_rejects_garbage_and_non_finite(self):
        """Test that unparseable and infinite inputs are rejected."""
        with pytest.raises(InvalidMoneyError):
            to_money("twelve")
        with pytest.raises(InvalidMoneyError):
            to_money(float("inf"))
        with pytest.raises(InvalidMoneyError):
            to_money("NaN")
        with pytest.raises(InvalidMoneyError):
            to_money(True)

    def test_format_money_has_two_fraction_digits(self):
        """Test the fixed display form."""
        assert format_money(Decimal("12.3")) == "12.30"
        assert format_money(Decimal("0.005")) == "0.01"
        assert format_money(Decimal("-3")) == "-3.00"
        assert format_money(Decimal("99.99499999")) == "99.99"


class TestTimestamps:
    """Tests for RFC 2822 timestamp handling."""

    def test_parse_rfc2822_with_offset(self):
        """Test that a stored timestamp keeps its offset."""
        parsed = parse_timestamp("Fri, 01 Mar 2024 13:00:00 +0100")
        assert parsed == START
        assert parsed.utcoffset() == timedelta(hours=1)

    def test_format_then_parse_is_the_same_instant(self):
        """Test that formatting keeps second precision."""
        assert parse_timestamp(format_timestamp(START)) == START

    def test_naive_datetime_is_taken_as_utc(self):
        """Test that naive values are made comparable."""
        parsed = parse_timestamp(datetime(2024, 3, 1, 12, 0, 0))
        assert parsed.tzinfo is not None
        assert parsed == START

    def test_rejects_unparseable_text(self):
        """Test that a broken timestamp is an error."""
        with pytest.raises(ValueError):
            parse_timestamp("yesterday-ish")


class TestQueueModels:
    """Tests for Income, Item and Queue."""

    def test_income_defaults_to_one_per_day(self):
        """Test the first-run income."""
        income = Income()
        assert income.amount == 1.0
        assert income.interval_in_days == 1

    def test_income_rejects_zero_interval(self):
        """Test that an interval must be at least one day."""
        with pytest.raises(ValidationError):
            Income(amount=10, interval_in_days=0)

    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), float("-inf")])
    def test_income_rejects_non_finite_amount(self, amount):
        """Test that an amount JSON can't represent is refused."""
        with pytest.raises(ValidationError):
            Income(amount=amount, interval_in_days=30)

    def test_income_per_second(self):
        """Test the accrual rate."""
        assert Income(amount=86400, interval_in_days=1).per_second == Decimal(1)
        assert Income(amount=172800, interval_in_days=2).per_second == Decimal(1)

    def test_item_strips_name_and_blank_link(self):
        """Test that whitespace is stripped and a blank link means none."""
        item = Item(name="  Dune  ", amount="9.99", purchase_link="   ")
        assert item.name == "Dune"
        assert item.amount == Decimal("9.99")
        assert item.purchase_link is None
        assert not item.is_purchased

    def test_item_rejects_negative_amount(self):
        """Test that negative prices are rejected."""
        with pytest.raises(ValidationError):
            Item(name="Refund", amount=Decimal("-1"))

    def test_item_rejects_empty_name(self):
        """Test that an item needs a name."""
        with pytest.raises(ValidationError):
            Item(name="   ", amount=Decimal("1"))

    def test_item_rejects_unknown_fields(self):
        """Test that unknown fields fail loudly instead of being dropped."""
        with pytest.raises(ValidationError):
            Item(name="Dune", amount=Decimal("1"), colour="blue")

    def test_queue_head(self):
        """Test that the head is the first pending item."""
        queue = Queue.new("books", START)
        assert queue.head is None
        queue.future_purchases.append(Item(name="Dune", amount=Decimal("9")))
        queue.future_purchases.append(Item(name="Emma", amount=Decimal("5")))
        assert queue.head.name == "Dune"

    def test_new_queue_is_empty_and_unpaused(self):
        """Test the fresh queue defaults."""
        queue = Queue.new("books", START)
        assert queue.current_balance == Decimal(0)
        assert queue.last_calculation == START
        assert queue.future_purchases == []
        assert queue.past_purchases == []
        assert queue.paused is False


class TestState:
    """Tests for the State document."""

    def _sample_state(self) -> State:
        books = Queue.new("books", START)
        books.income = Income(amount=30.0, interval_in_days=30)
        books.current_balance = Decimal("12.3456789012345678901234567")
        books.future_purchases.append(
            Item(name="Dune", amount=Decimal("9.99"), purchase_link="https://example.com/dune")
        )
        books.past_purchases.append(
            Item(name="Emma", amount=Decimal("5"), time_purchased=START - timedelta(days=2))
        )
        games = Queue.new("games", START)
        games.paused = True
        return State(
            queues={books.name: books, games.name: games},
            currently_selected="games",
            globally_paused=True,
        )

    def test_default_state(self):
        """Test the first-run state: one selected default queue."""
        state = State.default(START)
        assert list(state.queues) == [DEFAULT_QUEUE_NAME]
        assert state.currently_selected == DEFAULT_QUEUE_NAME
        assert state.globally_paused is False

    def test_json_round_trip_is_field_for_field_equal(self):
        """Test that a State survives serialization unchanged."""
        state = self._sample_state()
        restored = State.model_validate_json(state.model_dump_json())
        assert restored.model_dump() == state.model_dump()
        assert restored.queues["books"].current_balance == Decimal(
            "12.3456789012345678901234567"
        )

    def test_json_layout(self):
        """Test the on-disk shape: queues as a list, money as strings, RFC 2822 times."""
        document = json.loads(self._sample_state().model_dump_json())
        assert [q["name"] for q in document["queues"]] == ["books", "games"]
        books = document["queues"][0]
        assert books["current_balance"] == "12.3456789012345678901234567"
        assert books["last_calculation"] == "Fri, 01 Mar 2024 12:00:00 +0000"
        assert books["income"] == {"amount": 30.0, "interval_in_days": 30}
        assert books["future_purchases"][0]["time_purchased"] is None
        assert document["currently_selected"] == "games"
        assert document["globally_paused"] is True

    def test_small_balances_are_written_in_plain_notation(self):
        """Test that tiny accruals don't turn into exponent notation."""
        queue = Queue.new(DEFAULT_QUEUE_NAME, START)
        queue.current_balance = Decimal("1E-7")
        state = State(queues={queue.name: queue})
        document = json.loads(state.model_dump_json())
        assert document["queues"][0]["current_balance"] == "0.0000001"

    def test_rejects_duplicate_queue_names(self):
        """Test that two queues can't share a name."""
        queue = Queue.new("books", START).model_dump(mode="json")
        document = {"queues": [queue, queue], "currently_selected": "books"}
        with pytest.raises(ValidationError, match="Duplicate queue name"):
            State.model_validate(document)

    def test_rejects_key_that_differs_from_name(self):
        """Test that the directory key always matches the queue's name."""
        with pytest.raises(ValidationError):
            State(queues={"books": Queue.new("games", START)})

    def test_dangling_selection_still_loads(self):
        """Test that a bad selection is left for the command to report."""
        state = State(queues={"books": Queue.new("books", START)}, currently_selected="nope")
        assert state.currently_selected == "nope"


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.ITEM_ADDED,
            description="Added Dune",
            queue_name="books",
        )
        assert event.event_type == AuditEventType.ITEM_ADDED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description="Test error",
            error_message="Something went wrong",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "system_error"
        assert log_dict["severity"] == "error"
        assert log_dict["error_message"] == "Something went wrong"

    def test_builder_item_bought(self):
        """Test the purchase event."""
        event = AuditEventBuilder.item_bought(
            queue_name="books",
            item_name="Dune",
            cost=Decimal("9.99"),
            remaining=Decimal("0.01"),
            forced=False,
        )
        assert event.event_type == AuditEventType.ITEM_BOUGHT
        assert event.queue_name == "books"
        assert event.is_user_action is True
        assert "9.99" in event.description

    def test_builder_rejected_buy_is_a_purchase_rejection(self):
        """Test that a rejected buy is distinguishable from other rejections."""
        rejected_buy = AuditEventBuilder.operation_rejected("books", "buy", "not enough money")
        rejected_bump = AuditEventBuilder.operation_rejected("books", "bump", "one item")
        assert rejected_buy.event_type == AuditEventType.PURCHASE_REJECTED
        assert rejected_bump.event_type == AuditEventType.OPERATION_REJECTED
        assert rejected_buy.severity == AuditSeverity.WARNING

    def test_builder_paused_global_vs_queue(self):
        """Test pause events for the whole directory and a single queue."""
        assert AuditEventBuilder.paused(None, True).event_type == AuditEventType.GLOBAL_PAUSED
        assert AuditEventBuilder.paused("books", False).event_type == AuditEventType.QUEUE_UNPAUSED

    def test_builder_balance_recalculated_while_paused(self):
        """Test that a paused recalculation is recorded as skipped accrual."""
        event = AuditEventBuilder.balance_recalculated(
            queue_name="books",
            elapsed_seconds=60,
            earned=Decimal("1"),
            balance=Decimal("5"),
            applied=False,
        )
        assert event.event_type == AuditEventType.ACCRUAL_SKIPPED_PAUSED
