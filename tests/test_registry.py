"""
Unit tests for the CarPark registry.

Invariants checked throughout:
- slot IDs are unique
- one registration occupies at most one slot
- the registration index always matches slot occupancy
"""

import unittest
from datetime import datetime, timedelta

from carpark.errors import (
    CarNotFoundError,
    DuplicateCarError,
    DuplicateSlotError,
    SlotNotFoundError,
    SlotOccupiedError,
    SlotTypeMismatchError,
)
from carpark.fees import get_fee_calculator
from carpark.model import Car, Category, create_staff_slot, create_visitor_slot
from carpark.registry import CarPark

T0 = datetime(2026, 10, 19, 9, 0, 0)


class TestSlots(unittest.TestCase):
    def setUp(self) -> None:
        self.car_park = CarPark()

    def test_add_slot(self) -> None:
        self.car_park.add_slot(create_staff_slot("S01"))
        self.assertEqual(self.car_park.total_slots, 1)
        self.assertIsNotNone(self.car_park.find_slot_by_id("S01"))
        self.assertIn("S01", self.car_park)

    def test_add_duplicate_slot(self) -> None:
        self.car_park.add_slot(create_staff_slot("S01"))
        with self.assertRaises(DuplicateSlotError) as ctx:
            self.car_park.add_slot(create_visitor_slot("S01"))
        self.assertEqual(ctx.exception.slot_id, "S01")
        self.assertEqual(self.car_park.total_slots, 1)
        self.assertIs(self.car_park.find_slot_by_id("S01").category, Category.STAFF)

    def test_listing_keeps_insertion_order(self) -> None:
        for sid in ("V02", "S01", "A10"):
            self.car_park.add_slot(create_staff_slot(sid))
        self.assertEqual([s.slot_id for s in self.car_park.all_slots()], ["V02", "S01", "A10"])
        self.assertEqual([s.slot_id for s in self.car_park], ["V02", "S01", "A10"])

    def test_remove_slot(self) -> None:
        self.car_park.add_slot(create_staff_slot("S01"))
        self.car_park.remove_slot("S01")
        self.assertEqual(self.car_park.total_slots, 0)
        self.assertIsNone(self.car_park.find_slot_by_id("S01"))

    def test_remove_missing_slot(self) -> None:
        with self.assertRaises(SlotNotFoundError):
            self.car_park.remove_slot("X99")

    def test_remove_occupied_slot(self) -> None:
        self.car_park.add_slot(create_staff_slot("S01"))
        self.car_park.park_car("S01", Car("A1234", "John", True))
        with self.assertRaises(SlotOccupiedError):
            self.car_park.remove_slot("S01")
        self.assertTrue(self.car_park.find_slot_by_id("S01").is_occupied)

    def test_initialize_numbers_slots(self) -> None:
        self.car_park.initialize(staff=2, visitor=3)
        ids = [s.slot_id for s in self.car_park.all_slots()]
        self.assertEqual(ids, ["S01", "S02", "V01", "V02", "V03"])
        self.assertEqual(len(self.car_park), 5)

    def test_add_slots_skips_taken_ids(self) -> None:
        self.car_park.add_slot(create_staff_slot("S01"))
        added = self.car_park.add_slots(2, Category.STAFF)
        self.assertEqual([s.slot_id for s in added], ["S02", "S03"])

    def test_initialize_past_99_adds_nothing(self) -> None:
        with self.assertRaises(ValueError):
            self.car_park.initialize(staff=1, visitor=150)
        self.assertEqual(self.car_park.total_slots, 0)

        with self.assertRaises(ValueError):
            self.car_park.initialize(staff=150, visitor=1)
        self.assertEqual(self.car_park.total_slots, 0)

    def test_add_slots_past_99_adds_nothing(self) -> None:
        self.car_park.add_slots(98, Category.VISITOR)
        with self.assertRaises(ValueError):
            self.car_park.add_slots(2, Category.VISITOR)
        self.assertEqual(self.car_park.total_slots, 98)
        self.assertEqual(self.car_park.add_slots(1, Category.VISITOR)[0].slot_id, "V99")

    def test_slot_is_filled_only_by_parking(self) -> None:
        slot = self.car_park.add_slot(create_visitor_slot("V01"))
        self.assertFalse(slot.is_occupied)
        self.assertEqual(self.car_park.occupied_count, 0)
        with self.assertRaises(SlotTypeMismatchError):
            self.car_park.park_car("V01", Car("A1234", "John", True))
        self.assertIsNone(self.car_park.find_by_registration("A1234"))

    def test_clear_drops_slots_and_index(self) -> None:
        self.car_park.initialize(staff=1, visitor=0)
        self.car_park.park_car("S01", Car("A1234", "John", True))
        self.car_park.clear()
        self.assertEqual(self.car_park.total_slots, 0)
        self.assertEqual(self.car_park.occupied_count, 0)
        self.assertIsNone(self.car_park.find_by_registration("A1234"))


class TestCars(unittest.TestCase):
    def setUp(self) -> None:
        self.car_park = CarPark()
        self.car_park.add_slot(create_staff_slot("S01"))
        self.car_park.add_slot(create_staff_slot("S02"))
        self.car_park.add_slot(create_visitor_slot("V01"))

    def test_park_car(self) -> None:
        self.car_park.park_car("S01", Car("A1234", "John", True))
        self.assertEqual(self.car_park.occupied_count, 1)
        self.assertEqual(self.car_park.available_count, 2)
        self.assertEqual(self.car_park.find_by_registration("A1234").slot_id, "S01")

    def test_park_same_registration_twice(self) -> None:
        self.car_park.park_car("S01", Car("A1234", "John", True))
        with self.assertRaises(DuplicateCarError) as ctx:
            self.car_park.park_car("S02", Car("A1234", "John", True))
        self.assertEqual(ctx.exception.slot_id, "S01")
        self.assertFalse(self.car_park.find_slot_by_id("S02").is_occupied)
        self.assertEqual(self.car_park.occupied_count, 1)

    def test_park_in_missing_slot(self) -> None:
        with self.assertRaises(SlotNotFoundError):
            self.car_park.park_car("X99", Car("A1234", "John", True))
        self.assertIsNone(self.car_park.find_by_registration("A1234"))

    def test_park_in_occupied_slot(self) -> None:
        self.car_park.park_car("S01", Car("A1234", "John", True))
        with self.assertRaises(SlotOccupiedError):
            self.car_park.park_car("S01", Car("A9999", "Jim", True))
        self.assertIsNone(self.car_park.find_by_registration("A9999"))

    def test_type_mismatch_leaves_slot_empty(self) -> None:
        with self.assertRaises(SlotTypeMismatchError):
            self.car_park.park_car("V01", Car("A1234", "John", True))
        with self.assertRaises(SlotTypeMismatchError):
            self.car_park.park_car("S01", Car("B1234", "Jane", False))
        self.assertEqual(self.car_park.occupied_count, 0)
        self.assertEqual(len(self.car_park.occupied_slots()), 0)

    def test_remove_car(self) -> None:
        car = Car("A1234", "John", True)
        self.car_park.park_car("S01", car, at=T0)
        departure = self.car_park.remove_car_by_registration("A1234", now=T0 + timedelta(hours=2, minutes=10))

        self.assertEqual(departure.car, car)
        self.assertEqual(departure.slot_id, "S01")
        self.assertEqual(departure.duration, timedelta(hours=2, minutes=10))
        self.assertEqual(departure.fee, 6.0)
        self.assertIsNone(car.parking_time)
        self.assertFalse(self.car_park.find_slot_by_id("S01").is_occupied)
        self.assertIsNone(self.car_park.find_by_registration("A1234"))
        self.assertEqual(self.car_park.occupied_count, 0)

    def test_remove_missing_car(self) -> None:
        with self.assertRaises(CarNotFoundError) as ctx:
            self.car_park.remove_car_by_registration("X9999")
        self.assertEqual(ctx.exception.registration, "X9999")

    def test_remove_car_with_emptied_slot_raises_not_found(self) -> None:
        self.car_park.park_car("S01", Car("A1234", "John", True))
        # slot emptied behind the registry's back
        self.car_park.find_slot_by_id("S01").car = None
        with self.assertRaises(CarNotFoundError):
            self.car_park.remove_car_by_registration("A1234")

    def test_car_can_park_again_after_removal(self) -> None:
        self.car_park.park_car("S01", Car("A1234", "John", True))
        self.car_park.remove_car_by_registration("A1234")
        self.car_park.park_car("S02", Car("A1234", "John", True))
        self.assertEqual(self.car_park.find_by_registration("A1234").slot_id, "S02")

    def test_many_cars_lookup(self) -> None:
        car_park = CarPark()
        for i in range(1, 100):
            slot = car_park.add_slot(create_staff_slot(f"S{i:02d}"))
            car_park.park_car(slot.slot_id, Car(f"A{i:04d}", f"Owner{i}", True))
        found = car_park.find_by_registration("A0050")
        self.assertEqual(found.car.registration, "A0050")
        self.assertEqual(car_park.occupied_count, 99)

    def test_available_and_occupied_lists(self) -> None:
        self.car_park.park_car("S02", Car("A0002", "Jane", True))
        self.assertEqual([s.slot_id for s in self.car_park.available_slots()], ["S01", "V01"])
        self.assertEqual([s.slot_id for s in self.car_park.occupied_slots()], ["S02"])

    def test_quote_fee_with_substituted_strategy(self) -> None:
        car_park = CarPark(fee_calculator=get_fee_calculator("daily-max", daily_max=4.0))
        car_park.add_slot(create_visitor_slot("V01"))
        car_park.park_car("V01", Car("B1234", "Jane", False), at=T0)
        self.assertEqual(car_park.quote_fee("B1234", now=T0 + timedelta(hours=3)), 4.0)
        with self.assertRaises(CarNotFoundError):
            car_park.quote_fee("Z0000")


class TestRemoveUnoccupied(unittest.TestCase):
    def test_removes_only_empty_slots(self) -> None:
        car_park = CarPark()
        for i in range(1, 6):
            car_park.add_slot(create_staff_slot(f"S{i:02d}"))
        car_park.park_car("S01", Car("A0001", "John", True))
        car_park.park_car("S03", Car("A0003", "Jane", True))

        self.assertEqual(car_park.remove_all_unoccupied_slots(), 3)
        self.assertEqual([s.slot_id for s in car_park.all_slots()], ["S01", "S03"])
        self.assertEqual(car_park.find_by_registration("A0003").slot_id, "S03")

        self.assertEqual(car_park.remove_all_unoccupied_slots(), 0)
        self.assertEqual(car_park.total_slots, 2)


class TestEndToEnd(unittest.TestCase):
    def test_staff_car_lifecycle(self) -> None:
        car_park = CarPark()
        car_park.add_slot(create_staff_slot("S01"))
        car_park.add_slot(create_visitor_slot("V01"))
        self.assertEqual(car_park.find_slot_by_id("S01").hourly_rate, 3.0)
        self.assertEqual(car_park.find_slot_by_id("V01").hourly_rate, 5.0)

        car = Car("A1234", "John", True)
        car_park.park_car("S01", car)
        self.assertTrue(car_park.find_slot_by_id("S01").is_occupied)

        with self.assertRaises(DuplicateCarError):
            car_park.park_car("V01", car)

        departure = car_park.remove_car_by_registration("A1234")
        self.assertGreaterEqual(departure.fee, 3.0)
        self.assertFalse(car_park.find_slot_by_id("S01").is_occupied)

        self.assertEqual(car_park.remove_all_unoccupied_slots(), 2)
        self.assertEqual(car_park.total_slots, 0)


if __name__ == "__main__":
    unittest.main()
