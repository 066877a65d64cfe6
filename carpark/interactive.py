from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from carpark.errors import ParkingError
from carpark.model import HOURLY_RATES, Car, Category, Slot
from carpark.registry import CarPark
from carpark.storage import save_car_park
from carpark.validation import is_valid_registration, is_valid_slot_id, normalize_identifier

console = Console()

MENU = (
    "\n[1] Add a parking slot\n"
    "[2] Delete a parking slot\n"
    "[3] List all slots\n"
    "[4] Delete all unoccupied slots\n"
    "[5] Park a car\n"
    "[6] Find a car\n"
    "[7] Remove a car\n"
    "[8] Save data\n"
    "[9] Exit\n"
    "Select option (1-9): "
)


def _println(msg: str = "") -> None:
    console.print(msg, highlight=False)


def _prompt(msg: str) -> str:
    return console.input(msg)


# ---------------------------------------------------------------------------
# Input helpers: re-prompt until the answer is well-formed
# ---------------------------------------------------------------------------


def _ask_slot_id(msg: str) -> str:
    while True:
        value = normalize_identifier(_prompt(msg))
        if is_valid_slot_id(value):
            return value
        _println("Invalid format. Use: Letter + 2 digits (e.g., D01)")


def _ask_registration(msg: str) -> str:
    while True:
        value = normalize_identifier(_prompt(msg))
        if is_valid_registration(value):
            return value
        _println("Invalid format. Use: Letter + 4 digits (e.g., T1234)")


def _ask_yes_no(msg: str) -> bool:
    while True:
        answer = _prompt(msg).strip().lower()
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        _println("Enter 'y' or 'n'.")


def _ask_positive_int(msg: str, max_value: int = 99) -> int:
    while True:
        raw = _prompt(msg).strip()
        try:
            n = int(raw)
        except ValueError:
            _println("Invalid number.")
            continue
        if 0 < n <= max_value:
            return n
        _println(f"Enter a number between 1 and {max_value}.")


def _ask_owner_name(msg: str) -> str:
    while True:
        name = _prompt(msg).strip()
        if name:
            return name
        _println("Owner name cannot be empty.")


# ---------------------------------------------------------------------------
# Start-up
# ---------------------------------------------------------------------------


def initialize_interactive(car_park: CarPark) -> None:
    """
    Ask for the number of staff and visitor slots and create S01.. / V01..
    """
    _println("\n--- Car Park Initialization ---")
    staff = _ask_positive_int("Enter number of staff slots: ")
    visitor = _ask_positive_int("Enter number of visitor slots: ")
    car_park.initialize(staff, visitor)
    _println(
        f"Initialized: {staff} staff slots (${HOURLY_RATES[Category.STAFF]:.0f}/hr) + "
        f"{visitor} visitor slots (${HOURLY_RATES[Category.VISITOR]:.0f}/hr)"
    )


# ---------------------------------------------------------------------------
# Menu flows
# ---------------------------------------------------------------------------


def _flow_add_slot(car_park: CarPark) -> None:
    slot_id = _ask_slot_id("Enter slot ID (e.g., D01): ")
    is_staff = _ask_yes_no("Is this a staff slot? (y/n): ")
    slot = car_park.add_slot(Slot(slot_id, Category.from_is_staff(is_staff)))
    _println(f"Added {slot.category.label} slot: {slot.slot_id}")


def _flow_delete_slot(car_park: CarPark) -> None:
    if car_park.total_slots == 0:
        _println("No slots available.")
        return
    slot_id = _ask_slot_id("Enter slot ID to delete: ")
    car_park.remove_slot(slot_id)
    _println(f"Deleted slot: {slot_id}")


def _flow_list_slots(car_park: CarPark) -> None:
    slots = car_park.all_slots()
    if not slots:
        _println("No slots available.")
        return

    _println(
        f"Total: {car_park.total_slots} | Occupied: {car_park.occupied_count} | "
        f"Available: {car_park.available_count}"
    )

    table = Table(title="Parking slots", box=box.SIMPLE)
    table.add_column("Slot")
    table.add_column("Type")
    table.add_column("Rate", justify="right")
    table.add_column("Status")
    for slot in slots:
        if slot.car is None:
            status = "[green]EMPTY[/]"
        else:
            status = f"[red]OCCUPIED[/] by {slot.car.registration} (Owner: {escape(slot.car.owner_name)})"
        table.add_row(f"[bold cyan]{slot.slot_id}[/]", slot.category.label, f"${slot.hourly_rate:.2f}", status)
    console.print(table)


def _flow_delete_unoccupied(car_park: CarPark) -> None:
    removed = car_park.remove_all_unoccupied_slots()
    _println(f"Removed {removed} unoccupied slot(s)")


def _flow_park_car(car_park: CarPark) -> None:
    if car_park.total_slots == 0:
        _println("No slots available.")
        return
    slot_id = _ask_slot_id("Enter slot ID: ")
    registration = _ask_registration("Enter registration (e.g., T1234): ")
    owner = _ask_owner_name("Enter owner name: ")
    is_staff = _ask_yes_no("Is owner a staff member? (y/n): ")

    car = Car(registration, owner, is_staff)
    car_park.park_car(slot_id, car)
    _println(f"Parked {registration} in slot {slot_id}")
    _println(f"  Parking time: {car.formatted_parking_time()}")


def _flow_find_car(car_park: CarPark) -> None:
    registration = _ask_registration("Enter registration to find: ")
    slot = car_park.find_by_registration(registration)
    if slot is None or slot.car is None:
        _println(f"Car {registration} not found.")
        return

    car = slot.car
    _println(f"Found in slot {slot.slot_id}")
    _println(f"  Owner: {escape(car.owner_name)} ({car.category.label})")
    _println(f"  Parked at: {car.formatted_parking_time()}")
    _println(f"  Duration: {car.formatted_duration()}")
    _println(f"  Current fee: ${car_park.quote_fee(registration):.2f}")


def _flow_remove_car(car_park: CarPark) -> None:
    registration = _ask_registration("Enter registration to remove: ")
    departure = car_park.remove_car_by_registration(registration)
    _println(f"Removed {registration} from slot {departure.slot_id} (Owner: {escape(departure.car.owner_name)})")
    _println(f"  Total fee charged: ${departure.fee:.2f}")


def _flow_save(car_park: CarPark, data_path: Optional[Path]) -> None:
    # StorageError is a ParkingError: reported by the loop, not fatal
    out = save_car_park(car_park, data_path)
    _println(f"Data saved to {out}")


# ---------------------------------------------------------------------------
# Main loop
# ---------------------------------------------------------------------------


def run_interactive(car_park: CarPark, data_path: str | Path | None = None) -> None:
    """
    Menu loop. Every ParkingError is reported and the loop continues.
    """
    save_path = Path(data_path) if data_path is not None else None

    flows: dict[str, Callable[[CarPark], None]] = {
        "1": _flow_add_slot,
        "2": _flow_delete_slot,
        "3": _flow_list_slots,
        "4": _flow_delete_unoccupied,
        "5": _flow_park_car,
        "6": _flow_find_car,
        "7": _flow_remove_car,
        "8": lambda cp: _flow_save(cp, save_path),
    }

    while True:
        _println("\n=== CarPark (interactive) ===")
        _println(
            f"Slots: {car_park.total_slots} | Occupied: {car_park.occupied_count} | "
            f"Available: {car_park.available_count}"
        )
        try:
            choice = _prompt(MENU).strip()
        except EOFError:
            choice = "9"

        if choice == "9":
            _println("Thank you for using the parking management system!")
            return

        flow = flows.get(choice)
        if flow is None:
            _println("Invalid choice. Enter 1-9.")
            continue

        try:
            flow(car_park)
        except ParkingError as e:
            console.print(f"Error [{e.code}]: {e.message}", style="red", markup=False, highlight=False)
        except EOFError:
            _println("\nInput closed.")
            return
