"""
CarPark: an in-memory registry of staff/visitor parking slots with hourly fees.
"""

from pathlib import Path

__version__ = (Path(__file__).resolve().parent / "VERSION").read_text(encoding="utf-8").strip()
