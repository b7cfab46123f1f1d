"""Tests for interactive prompts and console rendering."""

import sys
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from spendqueue.cli import prompts
from spendqueue.cli.render import (
    EMPTY_QUEUE,
    GLOBALLY_PAUSED,
    Style,
    render_past,
    render_pending,
    render_status,
)
from spendqueue.models.queue import Item
from spendqueue.reporting import StatusReport


def scripted(*answers):
    replies = iter(answers)

    def reply(prompt):
        try:
            return next(replies)
        except StopIteration:
            raise EOFError
    return reply


class TestPrompts:
    """Tests for read_amount, yes_no and read_optional_line."""

    def test_read_amount_retries_until_valid(self, capsys):
        """Test that bad and negative answers are asked again."""
        amount = prompts.read_amount("How much?", scripted("abc", "-4", " $1,250.5 "))
        assert amount == Decimal("1250.5")
        err = capsys.readouterr().err
        assert "Can't parse amount, try again: 'abc'" in err
        assert "Amount can't be negative, try again." in err

    def test_yes_no(self, capsys):
        """Test the accepted spellings and the retry diagnostic."""
        assert prompts.yes_no("OK?", scripted("Yes")) is True
        assert prompts.yes_no("OK?", scripted("?", "n")) is False
        assert "Please enter either yes/y or no/n" in capsys.readouterr().err

    def test_optional_line(self):
        """Test that an empty answer is None."""
        assert prompts.read_optional_line("URL?", scripted("  ")) is None
        assert prompts.read_optional_line("URL?", scripted(" https://x.test ")) == "https://x.test"

    def test_end_of_input_is_not_retried(self):
        """Test that EOF propagates instead of looping."""
        with pytest.raises(EOFError):
            prompts.read_amount("How much?", scripted("abc"))


class TestRender:
    """Tests for the console renderers."""

    def test_status_without_styles(self):
        """Test the plain status text."""
        report = StatusReport(
            queue_name="default",
            balance=Decimal("12.345"),
            next_item=Item(name="Dune", amount=Decimal("9.99")),
            purchasable=True,
        )
        assert render_status(report, Style(enabled=False)).splitlines() == [
            "Currently available free budget: $12.35",
            "The next item in the queue is Dune for $9.99",
            "*** NEXT ITEM PURCHASEABLE ***",
        ]

    def test_status_empty_and_paused(self):
        """Test the empty-queue line and the paused-queue line."""
        report = StatusReport(queue_name="books", queue_paused=True, balance=Decimal("1"))
        lines = render_status(report, Style(enabled=False)).splitlines()
        assert lines[0] == "Queue books is paused, nothing is accruing."
        assert lines[-1] == EMPTY_QUEUE

    def test_globally_paused(self):
        """Test the banner replaces everything else."""
        assert render_status(StatusReport(globally_paused=True), Style()) == GLOBALLY_PAUSED

    def test_styles_when_enabled(self):
        """Test that linked items are bold italic in the status."""
        report = StatusReport(
            queue_name="default",
            balance=Decimal("1"),
            next_item=Item(name="Dune", amount=Decimal("9"), purchase_link="https://x.test"),
        )
        text = render_status(report, Style(enabled=True))
        assert "\x1b[1m\x1b[3mDune\x1b[0m" in text

    def test_style_for_non_tty_stream(self, capsys):
        """Test that captured output gets no escapes."""
        assert Style.for_stream(sys.stdout).enabled is False

    def test_pending_marks_linked_items(self):
        """Test that items with a link are italic."""
        items = [
            Item(name="Dune", amount=Decimal("9.5"), purchase_link="https://x.test"),
            Item(name="Emma", amount=Decimal("3")),
        ]
        assert render_pending(items, Style(enabled=True)).splitlines() == [
            "\x1b[3mDune\x1b[0m\t$9.50",
            "Emma\t$3.00",
        ]

    def test_past(self):
        """Test name, price and RFC 2822 purchase time."""
        bought = datetime(2024, 2, 28, 9, 30, tzinfo=timezone.utc)
        items = [Item(name="Emma", amount=Decimal("5"), time_purchased=bought)]
        assert render_past(items) == "Emma\t$5.00\tWed, 28 Feb 2024 09:30:00 +0000"
