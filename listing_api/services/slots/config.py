# listing_api/services/slots/config.py
"""
Visit booking configuration for slots calculation.
"""

import re
from dataclasses import dataclass
from functools import lru_cache

from ...config import settings

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    match = _TIME_RE.match(value)
    if not match:
        raise ValueError(f"Time must be in HH:MM format, got {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class VisitConfig:
    """
    Configuration for the visit slot grid.

    Attributes:
        open_time: First bookable start time ("HH:MM")
        close_time: End of business hours ("HH:MM"), exclusive for start times
        slot_step_minutes: Grid step in minutes (15/30/60)
        overlap_guard: Also reject requests whose start falls inside an active booking
    """
    open_time: str = "09:00"
    close_time: str = "17:00"
    slot_step_minutes: int = 30  # 15 / 30 / 60
    overlap_guard: bool = False

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in (15, 30, 60):
            raise ValueError(f"slot_step_minutes must be 15, 30, or 60, got {self.slot_step_minutes}")
        if self.open_minutes >= self.close_minutes:
            raise ValueError(f"open_time {self.open_time} must be before close_time {self.close_time}")

    @property
    def open_minutes(self) -> int:
        return time_str_to_minutes(self.open_time)

    @property
    def close_minutes(self) -> int:
        return time_str_to_minutes(self.close_time)

    @property
    def slots_per_day(self) -> int:
        """
        Number of candidate start times in a business day.

        09:00–17:00 with a 30 min step → 16 slots
        """
        span = self.close_minutes - self.open_minutes
        return -(-span // self.slot_step_minutes)

    def within_business_hours(self, time_str: str) -> bool:
        """Start time lies in [open_time, close_time)."""
        minutes = time_str_to_minutes(time_str)
        return self.open_minutes <= minutes < self.close_minutes


@lru_cache
def get_visit_config() -> VisitConfig:
    """Get visit configuration built from settings (singleton)."""
    return VisitConfig(
        open_time=settings.visit_open_time,
        close_time=settings.visit_close_time,
        slot_step_minutes=settings.visit_slot_step_minutes,
        overlap_guard=settings.visit_overlap_guard,
    )
