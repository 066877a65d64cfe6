"""
The car park registry.

CarPark owns every Slot (keyed by slot ID, in insertion order) and an index
from car registration to the slot holding it. Both maps are always updated
together, so:
- every occupied slot's registration is in the index
- every registration in the index points at the slot holding that car

Create one CarPark at start-up and pass it to whatever needs it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterator, Optional

from carpark.errors import (
    CarNotFoundError,
    DuplicateCarError,
    DuplicateSlotError,
    SlotNotFoundError,
    SlotOccupiedError,
)
from carpark.model import Car, Category, FeeCalculator, Slot

logger = logging.getLogger(__name__)

SLOT_PREFIXES = {Category.STAFF: "S", Category.VISITOR: "V"}


@dataclass(frozen=True)
class Departure:
    """
    Result of removing a car: duration and fee are taken before the
    car's parking time is cleared.
    """

    car: Car
    slot_id: str
    duration: timedelta
    fee: float


class CarPark:
    def __init__(self, fee_calculator: Optional[FeeCalculator] = None) -> None:
        self._slots: dict[str, Slot] = {}
        self._slot_by_registration: dict[str, Slot] = {}
        self.fee_calculator = fee_calculator

    # -----------------------------------------------------------------
    # Slots
    # -----------------------------------------------------------------

    def add_slot(self, slot: Slot) -> Slot:
        if slot.slot_id in self._slots:
            logger.warning("Rejected duplicate slot %s", slot.slot_id)
            raise DuplicateSlotError(slot.slot_id)
        self._slots[slot.slot_id] = slot
        logger.info("Added %s slot %s", slot.category.value, slot.slot_id)
        return slot

    def _free_slot_ids(self, count: int, category: Category) -> list[str]:
        """
        Pick the first `count` unused IDs for the category prefix (S01.., V01..).
        Raises ValueError before anything is added if there are not enough.
        """
        if count < 0:
            raise ValueError("count must not be negative")
        prefix = SLOT_PREFIXES[category]
        free = [f"{prefix}{n:02d}" for n in range(1, 100) if f"{prefix}{n:02d}" not in self._slots]
        if count > len(free):
            raise ValueError(f"Only {len(free)} free slot IDs left for prefix {prefix}, {count} requested")
        return free[:count]

    def add_slots(self, count: int, category: Category) -> list[Slot]:
        return [self.add_slot(Slot(sid, category)) for sid in self._free_slot_ids(count, category)]

    def initialize(self, staff: int, visitor: int) -> None:
        # both counts are checked before any slot is created
        staff_ids = self._free_slot_ids(staff, Category.STAFF)
        visitor_ids = self._free_slot_ids(visitor, Category.VISITOR)
        for sid in staff_ids:
            self.add_slot(Slot(sid, Category.STAFF))
        for sid in visitor_ids:
            self.add_slot(Slot(sid, Category.VISITOR))

    def remove_slot(self, slot_id: str) -> Slot:
        slot = self._slots.get(slot_id)
        if slot is None:
            logger.warning("Cannot remove slot %s: not found", slot_id)
            raise SlotNotFoundError(slot_id)
        if slot.is_occupied:
            logger.warning("Cannot remove slot %s: occupied", slot_id)
            raise SlotOccupiedError(slot_id)
        del self._slots[slot_id]
        logger.info("Removed slot %s", slot_id)
        return slot

    def remove_all_unoccupied_slots(self) -> int:
        empty_ids = [sid for sid, slot in self._slots.items() if not slot.is_occupied]
        for sid in empty_ids:
            del self._slots[sid]
        logger.info("Removed %d unoccupied slot(s)", len(empty_ids))
        return len(empty_ids)

    def find_slot_by_id(self, slot_id: str) -> Optional[Slot]:
        return self._slots.get(slot_id)

    def clear(self) -> None:
        self._slots.clear()
        self._slot_by_registration.clear()

    # -----------------------------------------------------------------
    # Cars
    # -----------------------------------------------------------------

    def _check_not_parked(self, car: Car) -> None:
        current = self._slot_by_registration.get(car.registration)
        if current is not None:
            logger.warning("Rejected car %s: already in slot %s", car.registration, current.slot_id)
            raise DuplicateCarError(car.registration, current.slot_id)

    def park_car(self, slot_id: str, car: Car, at: Optional[datetime] = None) -> Slot:
        """
        Park `car` in slot `slot_id`.

        Raises DuplicateCarError, SlotNotFoundError, SlotOccupiedError or
        SlotTypeMismatchError; nothing changes when one is raised.
        """
        self._check_not_parked(car)
        slot = self._slots.get(slot_id)
        if slot is None:
            raise SlotNotFoundError(slot_id)
        slot.park(car, at)
        self._slot_by_registration[car.registration] = slot
        logger.info("Parked %s in slot %s", car.registration, slot_id)
        return slot

    def find_by_registration(self, registration: str) -> Optional[Slot]:
        slot = self._slot_by_registration.get(registration)
        logger.debug("Lookup %s -> %s", registration, slot.slot_id if slot else None)
        return slot

    def quote_fee(self, registration: str, now: Optional[datetime] = None) -> float:
        slot = self._slot_by_registration.get(registration)
        if slot is None:
            raise CarNotFoundError(registration)
        return slot.calculate_fee(self.fee_calculator, now)

    def remove_car_by_registration(self, registration: str, now: Optional[datetime] = None) -> Departure:
        slot = self._slot_by_registration.get(registration)
        if slot is None:
            logger.warning("Cannot remove car %s: not found", registration)
            raise CarNotFoundError(registration)

        now = now if now is not None else datetime.now()
        parked = slot.car
        if parked is None:
            raise CarNotFoundError(registration)
        duration = parked.elapsed(now)
        fee = slot.calculate_fee(self.fee_calculator, now)

        car = slot.remove_car()
        del self._slot_by_registration[registration]
        logger.info("Removed %s from slot %s (fee %.2f)", registration, slot.slot_id, fee)
        return Departure(car=car, slot_id=slot.slot_id, duration=duration, fee=fee)

    # -----------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------

    @property
    def total_slots(self) -> int:
        return len(self._slots)

    @property
    def occupied_count(self) -> int:
        return len(self._slot_by_registration)

    @property
    def available_count(self) -> int:
        return self.total_slots - self.occupied_count

    def all_slots(self) -> list[Slot]:
        return list(self._slots.values())

    def available_slots(self) -> list[Slot]:
        return [s for s in self._slots.values() if not s.is_occupied]

    def occupied_slots(self) -> list[Slot]:
        return [s for s in self._slots.values() if s.is_occupied]

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, slot_id: object) -> bool:
        return slot_id in self._slots

    def __iter__(self) -> Iterator[Slot]:
        return iter(list(self._slots.values()))
