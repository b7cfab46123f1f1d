"""
Interactive prompts.

Amount and yes/no questions are asked again until the answer parses.
Only parse failures retry; end of input propagates to the caller.
"""

import sys
from decimal import Decimal
from typing import Callable, Optional

from tenacity import retry, retry_if_exception_type, stop_never

from spendqueue.models.money import InvalidMoneyError, to_money


InputFn = Callable[[str], str]


class InvalidAnswerError(ValueError):
    """The answer couldn't be understood; the question is asked again."""
    pass


def _print_diagnostic(retry_state) -> None:
    print(retry_state.outcome.exception(), file=sys.stderr)


_ask_again = retry(
    retry=retry_if_exception_type(InvalidAnswerError),
    stop=stop_never,
    after=_print_diagnostic,
    reraise=True,
)


def read_line(prompt: str, input_fn: InputFn = input) -> str:
    print(prompt)
    return input_fn("").strip()


def read_optional_line(prompt: str, input_fn: InputFn = input) -> Optional[str]:
    """Empty answer means None."""
    return read_line(prompt, input_fn) or None


@_ask_again
def read_amount(prompt: str, input_fn: InputFn = input) -> Decimal:
    """Ask for a non-negative amount such as `12.50` or `$1,200`."""
    answer = read_line(prompt, input_fn)
    try:
        amount = to_money(answer)
    except InvalidMoneyError:
        raise InvalidAnswerError(f"Can't parse amount, try again: {answer!r}")
    if amount < 0:
        raise InvalidAnswerError("Amount can't be negative, try again.")
    return amount


@_ask_again
def yes_no(prompt: str, input_fn: InputFn = input) -> bool:
    answer = read_line(f"{prompt} (y/n)", input_fn).lower()
    if answer in ("y", "yes"):
        return True
    if answer in ("n", "no"):
        return False
    raise InvalidAnswerError("Please enter either yes/y or no/n")
