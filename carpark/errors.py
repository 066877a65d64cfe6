"""
Error types raised by the car park registry.

Every failure the registry can report is a subclass of ParkingError.
Each one carries:
- a stable error code (shown by the menu as "Error [CODE]: message")
- the identifier(s) that caused it, so callers can build their own messages

The front end catches ParkingError once per command and keeps running.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from carpark.model import Category


class ParkingError(Exception):
    """Base class for all car park errors."""

    code = "PARKING_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidSlotIdError(ParkingError):
    code = "INVALID_SLOT_ID"

    def __init__(self, slot_id: object) -> None:
        super().__init__(f"Invalid slot ID format: {slot_id!r} (expected letter + 2 digits, e.g. D01)")
        self.slot_id = slot_id


class InvalidRegistrationError(ParkingError):
    code = "INVALID_REGISTRATION"

    def __init__(self, registration: object) -> None:
        super().__init__(
            f"Invalid registration format: {registration!r} (expected letter + 4 digits, e.g. T1234)"
        )
        self.registration = registration


class DuplicateSlotError(ParkingError):
    code = "DUPLICATE_SLOT"

    def __init__(self, slot_id: str) -> None:
        super().__init__(f"Slot {slot_id} already exists")
        self.slot_id = slot_id


class DuplicateCarError(ParkingError):
    code = "DUPLICATE_CAR"

    def __init__(self, registration: str, slot_id: str) -> None:
        super().__init__(f"Car {registration} is already parked in slot {slot_id}")
        self.registration = registration
        self.slot_id = slot_id


class SlotNotFoundError(ParkingError):
    code = "SLOT_NOT_FOUND"

    def __init__(self, slot_id: str) -> None:
        super().__init__(f"Slot {slot_id} not found")
        self.slot_id = slot_id


class CarNotFoundError(ParkingError):
    code = "CAR_NOT_FOUND"

    def __init__(self, registration: str) -> None:
        super().__init__(f"Car {registration} not found")
        self.registration = registration


class SlotOccupiedError(ParkingError):
    code = "SLOT_OCCUPIED"

    def __init__(self, slot_id: str) -> None:
        super().__init__(f"Slot {slot_id} is occupied")
        self.slot_id = slot_id


class SlotTypeMismatchError(ParkingError):
    code = "TYPE_MISMATCH"

    def __init__(self, slot_id: str, slot_category: Category, car_category: Category) -> None:
        super().__init__(
            f"Type mismatch: {slot_category.label} slot {slot_id} cannot accept "
            f"{car_category.label.lower()} car"
        )
        self.slot_id = slot_id
        self.slot_category = slot_category
        self.car_category = car_category


class SlotEmptyError(ParkingError):
    """Raised when removing a car from a slot that holds none."""

    code = "SLOT_EMPTY"

    def __init__(self, slot_id: str) -> None:
        super().__init__(f"Slot {slot_id} has no parked car")
        self.slot_id = slot_id


class StorageError(ParkingError):
    """Raised when the data file cannot be written, read or decoded."""

    code = "STORAGE_ERROR"

    def __init__(self, path: object, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
