"""
Console rendering for the `sq` commands.

Everything here returns strings; printing is left to the caller.
Bold/italic use ANSI escapes and are switched off when stdout isn't a tty.
"""

import sys
from typing import Iterable, Optional, TextIO

from spendqueue.models.money import format_money, format_timestamp
from spendqueue.models.queue import Item
from spendqueue.reporting import StatusReport


FIRST_RUN_NOTICE = (
    "Can't read statefile, continuing with default\n"
    "You're going to want to adjust the income, currently $1/day."
)
MIGRATED_NOTICE = "Migrated config file to current format, continuing..."
GLOBALLY_PAUSED = "All queues are paused, nothing is being calculated. Run `sq unpause` to resume."
PURCHASABLE_BANNER = "*** NEXT ITEM PURCHASEABLE ***"
EMPTY_QUEUE = "There's no next item in the queue, add one!"


class Style:
    """ANSI text styling that can be switched off."""

    BOLD = "\x1b[1m"
    ITALIC = "\x1b[3m"
    RESET = "\x1b[0m"

    def __init__(self, enabled: bool = False):
        self.enabled = enabled

    @classmethod
    def for_stream(cls, stream: Optional[TextIO] = None) -> "Style":
        stream = stream or sys.stdout
        isatty = getattr(stream, "isatty", None)
        return cls(enabled=bool(isatty and isatty()))

    def _wrap(self, codes: str, text: str) -> str:
        if not self.enabled:
            return text
        return f"{codes}{text}{self.RESET}"

    def bold(self, text: str) -> str:
        return self._wrap(self.BOLD, text)

    def italic(self, text: str) -> str:
        return self._wrap(self.ITALIC, text)

    def bold_italic(self, text: str) -> str:
        return self._wrap(self.BOLD + self.ITALIC, text)


def render_status(report: StatusReport, style: Style) -> str:
    if report.globally_paused:
        return GLOBALLY_PAUSED

    lines = []
    if report.queue_paused:
        lines.append(f"Queue {style.bold(report.queue_name)} is paused, nothing is accruing.")
    lines.append(
        f"Currently available free budget: ${style.bold(format_money(report.balance))}"
    )

    item = report.next_item
    if item is None:
        lines.append(EMPTY_QUEUE)
    else:
        name = style.bold_italic(item.name) if item.purchase_link else style.bold(item.name)
        lines.append(
            f"The next item in the queue is {name} for ${style.bold(format_money(item.amount))}"
        )
        if report.purchasable:
            lines.append(style.bold(PURCHASABLE_BANNER))

    lines.append("")
    return "\n".join(lines)


def render_pending(items: Iterable[Item], style: Style) -> str:
    """One `name<TAB>$price` line per item; linked items in italics."""
    lines = []
    for item in items:
        name = style.italic(item.name) if item.purchase_link else item.name
        lines.append(f"{name}\t${format_money(item.amount)}")
    return "\n".join(lines)


def render_past(items: Iterable[Item]) -> str:
    lines = []
    for item in items:
        bought = format_timestamp(item.time_purchased) if item.time_purchased else ""
        lines.append(f"{item.name}\t${format_money(item.amount)}\t{bought}")
    return "\n".join(lines)


def render_income(amount: float, interval_in_days: int) -> str:
    return f"Updated income to ${amount:.2f} per {interval_in_days} days."
