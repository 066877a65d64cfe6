"""
Central data model: parking slots and the cars parked in them.

A Slot has a fixed Category (staff or visitor) which decides:
- which cars may park there (the car's category must match)
- the hourly rate used for billing (see HOURLY_RATES)

A Car is identified by its registration number only. Two Car objects with
the same registration compare equal even if the owner differs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional

from carpark.errors import SlotEmptyError, SlotOccupiedError, SlotTypeMismatchError
from carpark.fees import standard_fee
from carpark.validation import validate_registration, validate_slot_id

FeeCalculator = Callable[[timedelta, float], float]

# Used for display and for the persisted "parkingTime" field
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class Category(Enum):
    STAFF = "staff"
    VISITOR = "visitor"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def from_is_staff(cls, is_staff: bool) -> "Category":
        return cls.STAFF if is_staff else cls.VISITOR

    @classmethod
    def parse(cls, text: str) -> "Category":
        """
        Accept 'staff' / 'visitor' in any case (also the 'Staff' label).
        Raises ValueError for anything else.
        """
        return cls((text or "").strip().lower())


HOURLY_RATES: dict[Category, float] = {
    Category.STAFF: 3.0,
    Category.VISITOR: 5.0,
}


@dataclass(eq=False)
class Car:
    """
    A vehicle. parking_time is set while the car sits in a slot.
    """

    registration: str
    owner_name: str
    is_staff: bool
    parking_time: Optional[datetime] = None

    def __post_init__(self) -> None:
        validate_registration(self.registration)
        self.owner_name = (self.owner_name or "").strip()
        if not self.owner_name:
            raise ValueError("Owner name cannot be empty")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Car):
            return NotImplemented
        return self.registration == other.registration

    def __hash__(self) -> int:
        return hash(self.registration)

    @property
    def category(self) -> Category:
        return Category.from_is_staff(self.is_staff)

    @property
    def is_parked(self) -> bool:
        return self.parking_time is not None

    def mark_parked(self, at: Optional[datetime] = None) -> None:
        self.parking_time = at if at is not None else datetime.now()

    def clear_parking_time(self) -> None:
        self.parking_time = None

    def elapsed(self, now: Optional[datetime] = None) -> timedelta:
        if self.parking_time is None:
            return timedelta(0)
        now = now if now is not None else datetime.now()
        return now - self.parking_time

    def formatted_parking_time(self) -> str:
        if self.parking_time is None:
            return "Not parked"
        return self.parking_time.strftime(TIME_FORMAT)

    def formatted_duration(self, now: Optional[datetime] = None) -> str:
        if self.parking_time is None:
            return "Not parked"
        total = int(self.elapsed(now).total_seconds())
        hours, rest = divmod(max(total, 0), 3600)
        minutes, seconds = divmod(rest, 60)
        return f"{hours} hours {minutes} minutes {seconds} seconds"

    def __str__(self) -> str:
        return f"Car[{self.registration}, Owner: {self.owner_name}, Type: {self.category.label}]"


@dataclass(eq=False)
class Slot:
    """
    A named parking space. Holds at most one car of the same category.

    State is either EMPTY (car is None) or OCCUPIED.
    """

    slot_id: str
    category: Category
    # filled only through park()
    car: Optional[Car] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        validate_slot_id(self.slot_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Slot):
            return NotImplemented
        return self.slot_id == other.slot_id

    def __hash__(self) -> int:
        return hash(self.slot_id)

    @property
    def hourly_rate(self) -> float:
        return HOURLY_RATES[self.category]

    @property
    def is_occupied(self) -> bool:
        return self.car is not None

    @property
    def is_staff_slot(self) -> bool:
        return self.category is Category.STAFF

    def park(self, car: Car, at: Optional[datetime] = None) -> None:
        """
        Park a car and stamp its parking time.

        Raises SlotOccupiedError if a car is already here, then
        SlotTypeMismatchError if the car's category differs from the slot's.
        """
        if self.car is not None:
            raise SlotOccupiedError(self.slot_id)
        if car.category is not self.category:
            raise SlotTypeMismatchError(self.slot_id, self.category, car.category)
        self.car = car
        car.mark_parked(at)

    def remove_car(self) -> Car:
        """
        Empty the slot and return the car that was in it.
        Raises SlotEmptyError if nothing is parked.
        """
        if self.car is None:
            raise SlotEmptyError(self.slot_id)
        car = self.car
        self.car = None
        car.clear_parking_time()
        return car

    def calculate_fee(self, calculator: Optional[FeeCalculator] = None, now: Optional[datetime] = None) -> float:
        # 0 for an empty slot or a car that was never stamped
        if self.car is None or self.car.parking_time is None:
            return 0.0
        calc = calculator if calculator is not None else standard_fee
        return calc(self.car.elapsed(now), self.hourly_rate)

    def describe(self) -> str:
        head = f"Slot {self.slot_id} [{self.category.label}] - "
        if self.car is None:
            return head + "EMPTY"
        return head + f"OCCUPIED by {self.car.registration} (Owner: {self.car.owner_name})"

    def __str__(self) -> str:
        return self.describe()


def create_slot(slot_id: str, is_staff: bool) -> Slot:
    return Slot(slot_id, Category.from_is_staff(is_staff))


def create_staff_slot(slot_id: str) -> Slot:
    return Slot(slot_id, Category.STAFF)


def create_visitor_slot(slot_id: str) -> Slot:
    return Slot(slot_id, Category.VISITOR)
