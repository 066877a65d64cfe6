"""
CLI (Command Line Interface).

Commands:

    carpark interactive [--staff N] [--visitor N] [--data FILE] [--load]
    carpark show [--data FILE]
    carpark fee --category staff --minutes 130 [--strategy weekend]

Note:
- The menu-driven UI lives in carpark/interactive.py
- Output of show/fee is plain text (no rich formatting) so it can be piped
"""

from __future__ import annotations

import argparse
import logging
from datetime import timedelta

from rich.logging import RichHandler

from carpark.errors import ParkingError
from carpark.fees import STANDARD, STRATEGY_NAMES, describe_fee_calculator, get_fee_calculator
from carpark.model import HOURLY_RATES, Category
from carpark.registry import CarPark
from carpark.storage import DEFAULT_DATA_FILE, load_car_park, load_snapshot


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def _cmd_interactive(args: argparse.Namespace) -> int:
    from carpark.interactive import initialize_interactive, run_interactive

    if args.load:
        try:
            car_park = load_car_park(args.data)
        except ParkingError as e:
            print(f"Error [{e.code}]: {e.message}")
            return 1
        print(f"Loaded {car_park.total_slots} slots ({car_park.occupied_count} occupied) from {args.data}")
    else:
        car_park = CarPark()
        if args.staff is not None or args.visitor is not None:
            try:
                car_park.initialize(args.staff or 0, args.visitor or 0)
            except ValueError as e:
                print(str(e))
                return 1
        else:
            initialize_interactive(car_park)

    run_interactive(car_park, data_path=args.data)
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    """
    Print a summary of a saved data file.
    """
    try:
        snapshot = load_snapshot(args.data)
    except ParkingError as e:
        print(f"Error [{e.code}]: {e.message}")
        return 1

    print(f"Saved at: {snapshot.get('savedAt', '?')} (format {snapshot.get('version', '?')})")
    print(f"Total: {snapshot.get('totalSlots', 0)} | Occupied: {snapshot.get('occupiedSlots', 0)}")

    slots = snapshot.get("slots", [])
    if not isinstance(slots, list) or not slots:
        print("No slots.")
        return 0

    for rec in slots:
        if not isinstance(rec, dict):
            continue
        line = f"{rec.get('slotId', '?')} [{rec.get('slotType', '?')}]"
        car = rec.get("car")
        if rec.get("isOccupied") and isinstance(car, dict):
            line += f" OCCUPIED by {car.get('registrationNumber')} since {car.get('parkingTime')}"
        else:
            line += " EMPTY"
        print(line)
    return 0


def _cmd_fee(args: argparse.Namespace) -> int:
    """
    Quote a fee for a stay of N minutes without touching any registry.
    """
    if args.minutes < 0:
        print("Minutes must not be negative.")
        return 1

    category = Category.parse(args.category)
    rate = HOURLY_RATES[category]
    try:
        calc = get_fee_calculator(args.strategy, args.daily_max)
    except ValueError as e:
        print(str(e))
        return 1

    fee = calc(timedelta(minutes=args.minutes), rate)
    print(describe_fee_calculator(args.strategy, rate, args.daily_max))
    print(f"Fee for {args.minutes} minutes ({category.label}): ${fee:.2f}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="carpark", description="CarPark CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_inter = sub.add_parser("interactive", help="Interactive menu mode")
    p_inter.add_argument("--staff", type=int, default=None, help="Number of staff slots (skips the prompt)")
    p_inter.add_argument("--visitor", type=int, default=None, help="Number of visitor slots (skips the prompt)")
    p_inter.add_argument("--data", type=str, default=DEFAULT_DATA_FILE, help="Data file used by 'Save data'")
    p_inter.add_argument("--load", action="store_true", help="Restore slots and cars from the data file first")

    p_show = sub.add_parser("show", help="Summarize a saved data file")
    p_show.add_argument("--data", type=str, default=DEFAULT_DATA_FILE, help="Data file to read")

    p_fee = sub.add_parser("fee", help="Quote a parking fee")
    p_fee.add_argument("--category", "-c", choices=[c.value for c in Category], required=True)
    p_fee.add_argument("--minutes", "-m", type=int, required=True, help="Parked duration in minutes")
    p_fee.add_argument("--strategy", "-s", choices=STRATEGY_NAMES, default=STANDARD)
    p_fee.add_argument("--daily-max", type=float, default=None, help="Cap for the daily-max strategy")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "interactive":
        if (args.staff is not None and args.staff < 0) or (args.visitor is not None and args.visitor < 0):
            print("Slot counts must not be negative.")
            raise SystemExit(1)
        raise SystemExit(_cmd_interactive(args))
    if args.command == "show":
        raise SystemExit(_cmd_show(args))
    if args.command == "fee":
        raise SystemExit(_cmd_fee(args))

    raise SystemExit(2)
