"""
Money and Timestamp Types

DESIGN DECISION: All currency is Python's Decimal, never float.
The balance is updated by tiny per-second increments; binary floating
point would drift away from the accrual window over months of updates.

Floats only enter the system at the edges (income rate, user input).
They are converted through their shortest repr, so 19.99 becomes
Decimal("19.99") and not Decimal(19.99).

Timestamps are persisted as RFC 2822 strings, second precision.
"""

import math
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation, localcontext
from email.utils import format_datetime, parsedate_to_datetime
from typing import Annotated, Union

from pydantic import BeforeValidator, PlainSerializer


SECONDS_PER_DAY = 24 * 60 * 60
CENT = Decimal("0.01")
ZERO = Decimal(0)

# Accrual divides by the number of seconds in an interval; 28 digits (the
# default context) is enough for display, 50 keeps t1 + t2 == t1+t2 exact
# far below a cent.
MONEY_CONTEXT = Context(prec=50, rounding=ROUND_HALF_UP)


class InvalidMoneyError(ValueError):
    """A value could not be interpreted as an amount of money."""
    pass


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """
    Convert raw input into an exact Decimal.

    Raises:
        InvalidMoneyError: For anything that isn't a finite number.
    """
    if isinstance(value, bool):
        raise InvalidMoneyError(f"Not an amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidMoneyError(f"Not a finite amount: {value!r}")
        result = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip().lstrip("$").replace(",", "")
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise InvalidMoneyError(f"Can't parse amount: {value!r}")
    else:
        raise InvalidMoneyError(f"Unsupported amount type: {type(value).__name__}")

    if not result.is_finite():
        raise InvalidMoneyError(f"Not a finite amount: {value!r}")
    return result


def format_money(amount: Decimal) -> str:
    """Fixed two-fraction-digit display form, e.g. '12.30' or '-3.00'."""
    with localcontext(MONEY_CONTEXT):
        return f"{amount.quantize(CENT, rounding=ROUND_HALF_UP):.2f}"


def _money_to_json(amount: Decimal) -> str:
    # Plain notation; str() would give '1E-7' for very small accruals.
    return format(amount, "f")


def parse_timestamp(value: Union[datetime, str]) -> datetime:
    """
    Parse an RFC 2822 timestamp.

    Naive values are taken as UTC so every stored time is comparable.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError, IndexError):
            raise ValueError(f"Can't parse timestamp: {value!r}")
        if parsed is None:
            raise ValueError(f"Can't parse timestamp: {value!r}")
    else:
        raise ValueError(f"Unsupported timestamp type: {type(value).__name__}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value)


def local_now() -> datetime:
    """Current local time, truncated to the precision the state file keeps."""
    return datetime.now().astimezone().replace(microsecond=0)


Money = Annotated[
    Decimal,
    BeforeValidator(to_money),
    PlainSerializer(_money_to_json, return_type=str, when_used="json"),
]

Timestamp = Annotated[
    datetime,
    BeforeValidator(parse_timestamp),
    PlainSerializer(format_timestamp, return_type=str, when_used="json"),
]
