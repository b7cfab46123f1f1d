"""
`sq` command line.

Each subcommand maps onto one SpendQueueApp flow. Normal output goes to
stdout, diagnostics to stderr.

Exit codes:
    0  done (including reported rejections such as "not enough money")
    1  the state can't be used (unreadable, corrupt, dangling selection)
    2  the URL opener couldn't be started
"""

import argparse
import math
import sys
from decimal import Decimal
from pathlib import Path
from typing import Callable, Optional

from spendqueue import __version__
from spendqueue.audit import AuditLogger, configure_logging
from spendqueue.cli import prompts
from spendqueue.cli.render import (
    FIRST_RUN_NOTICE,
    MIGRATED_NOTICE,
    Style,
    render_income,
    render_past,
    render_pending,
    render_status,
)
from spendqueue.config import get_settings
from spendqueue.models.money import InvalidMoneyError, format_money, to_money
from spendqueue.models.queue import Item
from spendqueue.orchestrator import SpendQueueApp, create_app
from spendqueue.queues import SelectionError
from spendqueue.services.opener import UrlOpenerError
from spendqueue.services.storage import StorageError


EXIT_OK = 0
EXIT_FATAL = 1
EXIT_OPENER = 2

AppFactory = Callable[..., SpendQueueApp]


def _money_arg(value: str) -> Decimal:
    try:
        amount = to_money(value)
    except InvalidMoneyError as e:
        raise argparse.ArgumentTypeError(str(e))
    if amount < 0:
        raise argparse.ArgumentTypeError(f"amount can't be negative: {value}")
    return amount


def _income_arg(value: str) -> float:
    try:
        amount = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value}")
    if not math.isfinite(amount):
        raise argparse.ArgumentTypeError(f"income must be a finite number: {value}")
    return amount


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a whole number of days: {value}")
    if number < 1:
        raise argparse.ArgumentTypeError("interval must be at least 1 day")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sq",
        description="The tiniest spending queue: a budget that accrues over time.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--state-file",
        type=Path,
        default=None,
        help="state file to use (default: $SQ_STATE_FILE or ~/.config/sq/state.json)",
    )

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    sub.add_parser("status", help="show the balance and the next item (default)")

    budget = sub.add_parser("budget", help="set the income of the selected queue")
    budget.add_argument("--amount", type=_income_arg, required=True, help="income per interval")
    budget.add_argument(
        "--interval",
        type=_positive_int,
        default=None,
        help="interval in days (default: $SQ_DEFAULT_INTERVAL_DAYS or 30)",
    )

    buy = sub.add_parser("buy", help="buy the next item")
    buy.add_argument("--no-open", action="store_true", help="don't open the purchase link")
    buy.add_argument("--peek", action="store_true", help="only open the purchase link")
    buy.add_argument("--price", type=_money_arg, default=None, help="what it actually cost")
    buy.add_argument("--force", action="store_true", help="buy even without enough money")

    sub.add_parser("list", help="list pending items")
    sub.add_parser("past", help="list past purchases")
    sub.add_parser("delete", help="drop the next item without buying it")
    sub.add_parser("bump", help="move the next item to a random later position")

    for name, help_text in (("pause", "stop accruing"), ("unpause", "resume accruing")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument(
            "--queue",
            action="store_true",
            help="only the selected queue (default: all queues)",
        )

    add = sub.add_parser("add", help="add an item")
    add.add_argument("--prepend", action="store_true", help="put it at the head of the queue")
    add.add_argument("--price", type=_money_arg, default=None, help="price (asked if missing)")
    add.add_argument("--link", default=None, help="purchase link (asked if --price is missing)")
    add.add_argument("words", nargs="+", help="item name")

    queue = sub.add_parser("queue", help="manage queues")
    queue_sub = queue.add_subparsers(dest="queue_command", metavar="ACTION", required=True)
    new = queue_sub.add_parser("new", help="create a queue")
    new.add_argument("--name", required=True)
    select = queue_sub.add_parser("select", help="select a queue (not implemented)")
    select.add_argument("name", nargs="?")

    return parser


def _report(ok: bool, message: str) -> None:
    print(message, file=sys.stdout if ok else sys.stderr)


def _print_storage_notices(app: SpendQueueApp) -> None:
    storage = app.storage
    if getattr(storage, "migrated", False):
        print(MIGRATED_NOTICE)
    if getattr(storage, "created_default", False):
        print(FIRST_RUN_NOTICE, file=sys.stderr)


def _confirm_price(input_fn: prompts.InputFn) -> Callable[[Item], Decimal]:
    def resolve(item: Item) -> Decimal:
        if prompts.yes_no(f"Did it cost ${format_money(item.amount)}?", input_fn):
            return item.amount
        return prompts.read_amount("How much did it cost?", input_fn)
    return resolve


def _show_status(app: SpendQueueApp, style: Style) -> None:
    print(render_status(app.status(), style))


def run(args: argparse.Namespace, app: SpendQueueApp, input_fn: prompts.InputFn) -> int:
    """Dispatch one parsed command."""
    style = Style.for_stream(sys.stdout)
    command = args.command or "status"

    if command == "status":
        _show_status(app, style)

    elif command == "budget":
        interval = args.interval or get_settings().app.default_interval_days
        income = app.update_budget(args.amount, interval)
        print(render_income(income.amount, income.interval_in_days))

    elif command == "buy":
        if args.peek:
            _, ok, message = app.peek()
            _report(ok, message)
            return EXIT_OK
        resolver = None if args.price is not None else _confirm_price(input_fn)
        _, ok, message = app.buy(
            price=args.price,
            force=args.force,
            open_link=not args.no_open,
            price_resolver=resolver,
        )
        _report(ok, message)

    elif command == "list":
        output = render_pending(app.pending_items(), style)
        if output:
            print(output)

    elif command == "past":
        output = render_past(app.past_items())
        if output:
            print(output)

    elif command in ("delete", "bump"):
        flow = app.delete_head if command == "delete" else app.bump_head
        _, ok, message = flow()
        _report(ok, message)
        if ok:
            _show_status(app, style)

    elif command in ("pause", "unpause"):
        flow = app.pause if command == "pause" else app.unpause
        print(flow(queue_only=args.queue))

    elif command == "add":
        name = " ".join(args.words)
        price, link = args.price, args.link
        if price is None:
            price = prompts.read_amount(f"How much does {name} cost?", input_fn)
            if link is None:
                link = prompts.read_optional_line(
                    "Do you have a purchase URL? (Leave empty for no)", input_fn
                )
        _, ok, message = app.add_item(name, price, purchase_link=link, prepend=args.prepend)
        _report(ok, message)

    elif command == "queue":
        if args.queue_command == "new":
            _, ok, message = app.create_queue(args.name)
            _report(ok, message)
        else:
            print("Selecting queues isn't implemented yet, nothing changed.", file=sys.stderr)

    return EXIT_OK


def main(
    argv: Optional[list[str]] = None,
    app_factory: AppFactory = create_app,
    input_fn: prompts.InputFn = input,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.app.log_level, settings.app.log_json)

    app = app_factory(state_file=args.state_file)
    try:
        # First load: creates or migrates the state before any command output.
        app.storage.load()
        _print_storage_notices(app)
        code = run(args, app, input_fn)
    except (StorageError, SelectionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        AuditLogger().log_error(type(e).__name__, str(e))
        return EXIT_FATAL
    except UrlOpenerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_OPENER
    except EOFError:
        print("Error: no input", file=sys.stderr)
        return EXIT_FATAL
    return code


if __name__ == "__main__":
    sys.exit(main())
