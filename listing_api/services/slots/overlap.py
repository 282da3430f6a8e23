# listing_api/services/slots/overlap.py
"""
Start-point overlap checks against booked intervals.

A booking occupies [start, start + duration). A candidate conflicts only
when its *start* falls inside an occupied interval:

    booked_start <= candidate_start < booked_start + booked_duration

The candidate's own duration is not considered, so a long candidate that
runs into a later booking is not flagged.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from .config import time_str_to_minutes


@dataclass(frozen=True)
class BookedInterval:
    """Occupied minutes of one active booking."""
    start_min: int
    duration_min: int

    @property
    def end_min(self) -> int:
        return self.start_min + self.duration_min

    def contains(self, minute: int) -> bool:
        return self.start_min <= minute < self.end_min

    @classmethod
    def from_visit(cls, visit) -> "BookedInterval":
        """Build from anything with visit_time ("HH:MM") and duration_minutes."""
        return cls(time_str_to_minutes(visit.visit_time), visit.duration_minutes)


def is_slot_taken(time_str: str, booked: Iterable[BookedInterval]) -> bool:
    """True if the slot start lies inside any booked interval."""
    minute = time_str_to_minutes(time_str)
    return any(interval.contains(minute) for interval in booked)


def filter_available(slots: Iterable[str], booked: Iterable[BookedInterval]) -> list[str]:
    """Keep slots whose start is not inside any booked interval, preserving order."""
    booked = list(booked)
    return [slot for slot in slots if not is_slot_taken(slot, booked)]
