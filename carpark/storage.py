"""
Persistent storage for the car park.

This module manages the file:

    parking_data.json   (in the current working directory by default)

File format (version 2.0):

    {
      "version": "2.0",
      "savedAt": "2026-10-19T09:30:00",
      "totalSlots": 2,
      "occupiedSlots": 1,
      "slots": [
        {"slotId": "S01", "slotType": "Staff", "isOccupied": true,
         "car": {"registrationNumber": "A1234", "ownerName": "John",
                 "isStaff": true, "parkingTime": "2026-10-19 09:00:00"}},
        {"slotId": "V01", "slotType": "Visitor", "isOccupied": false}
      ]
    }

Saving only happens when the user asks for it. Nothing here prints; errors
are raised as StorageError so the menu can report them and keep running.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from carpark.errors import ParkingError, StorageError
from carpark.model import TIME_FORMAT, Car, Category, FeeCalculator, Slot
from carpark.registry import CarPark

logger = logging.getLogger(__name__)

FORMAT_VERSION = "2.0"
DEFAULT_DATA_FILE = "parking_data.json"


def _default_data_path() -> Path:
    """
    Return the default location of parking_data.json.

    A function instead of a constant so tests can patch it.
    """
    return Path.cwd() / DEFAULT_DATA_FILE


def _resolve(path: str | Path | None) -> Path:
    return Path(path) if path is not None else _default_data_path()


def _slot_record(slot: Slot) -> dict[str, Any]:
    record: dict[str, Any] = {
        "slotId": slot.slot_id,
        "slotType": slot.category.label,
        "isOccupied": slot.is_occupied,
    }
    if slot.car is not None:
        record["car"] = {
            "registrationNumber": slot.car.registration,
            "ownerName": slot.car.owner_name,
            "isStaff": slot.car.is_staff,
            "parkingTime": slot.car.formatted_parking_time(),
        }
    return record


def build_snapshot(car_park: CarPark, saved_at: Optional[datetime] = None) -> dict[str, Any]:
    saved_at = saved_at if saved_at is not None else datetime.now()
    return {
        "version": FORMAT_VERSION,
        "savedAt": saved_at.isoformat(timespec="seconds"),
        "totalSlots": car_park.total_slots,
        "occupiedSlots": car_park.occupied_count,
        "slots": [_slot_record(s) for s in car_park.all_slots()],
    }


def save_car_park(car_park: CarPark, path: str | Path | None = None) -> Path:
    """
    Write the car park to JSON. Creates parent directories if needed.
    Returns the path written.
    """
    out = _resolve(path)
    payload = build_snapshot(car_park)
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as exc:
        logger.error("Saving to %s failed: %s", out, exc)
        raise StorageError(out, f"cannot write file ({exc.strerror or exc})") from exc

    logger.info("Saved %d slot(s) to %s", payload["totalSlots"], out)
    return out


def load_snapshot(path: str | Path | None = None) -> dict[str, Any]:
    """
    Read the raw JSON document. Raises StorageError if the file is missing,
    unreadable, not JSON, or not a JSON object.
    """
    src = _resolve(path)
    try:
        data = json.loads(src.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise StorageError(src, "file not found") from exc
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise StorageError(src, f"cannot read file ({exc})") from exc

    if not isinstance(data, dict):
        raise StorageError(src, "top-level JSON value must be an object")
    return data


def _car_from_record(record: dict[str, Any]) -> Car:
    car = Car(
        registration=str(record["registrationNumber"]),
        owner_name=str(record["ownerName"]),
        is_staff=bool(record["isStaff"]),
    )
    stamp = record.get("parkingTime")
    if isinstance(stamp, str) and stamp != "Not parked":
        car.parking_time = datetime.strptime(stamp, TIME_FORMAT)
    return car


def restore_car_park(snapshot: dict[str, Any], fee_calculator: Optional[FeeCalculator] = None) -> CarPark:
    """
    Rebuild a CarPark from a snapshot produced by build_snapshot().

    Slots are added in file order; parked cars keep their parking time.
    Any malformed record raises StorageError.
    """
    version = snapshot.get("version")
    if version != FORMAT_VERSION:
        raise StorageError("<snapshot>", f"unsupported format version {version!r}")

    records = snapshot.get("slots", [])
    if not isinstance(records, list):
        raise StorageError("<snapshot>", "'slots' must be a list")

    car_park = CarPark(fee_calculator=fee_calculator)
    try:
        for rec in records:
            slot = car_park.add_slot(Slot(str(rec["slotId"]), Category.parse(str(rec["slotType"]))))
            if not rec.get("isOccupied"):
                continue
            car_rec = rec.get("car")
            if not isinstance(car_rec, dict):
                raise StorageError("<snapshot>", f"occupied slot {slot.slot_id} has no car record")
            car = _car_from_record(car_rec)
            car_park.park_car(slot.slot_id, car, at=car.parking_time)
    except StorageError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError, ParkingError) as exc:
        raise StorageError("<snapshot>", f"malformed slot record ({exc})") from exc

    logger.info("Restored %d slot(s) from snapshot", car_park.total_slots)
    return car_park


def load_car_park(path: str | Path | None = None, fee_calculator: Optional[FeeCalculator] = None) -> CarPark:
    return restore_car_park(load_snapshot(path), fee_calculator)
