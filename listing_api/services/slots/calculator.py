# listing_api/services/slots/calculator.py
"""
Level 1: Base slot grid for a business day.

Produces the ordered candidate start times "HH:MM" from open_time
(inclusive) to close_time (exclusive) with slot_step_minutes spacing.

Contains:
✓ business hours
✓ grid step

Does NOT contain:
✗ Bookings (filtered at Level 2)
"""

from collections.abc import Iterator

from .config import VisitConfig, get_visit_config, minutes_to_time_str


class DaySlots:
    """
    Lazy, restartable sequence of slot start times.

    Every iteration starts a fresh generator, so one instance can be
    walked any number of times.
    """

    def __init__(self, config: VisitConfig | None = None):
        self.config = config or get_visit_config()

    def __iter__(self) -> Iterator[str]:
        t = self.config.open_minutes
        end = self.config.close_minutes
        step = self.config.slot_step_minutes
        while t < end:
            yield minutes_to_time_str(t)
            t += step

    def __len__(self) -> int:
        return self.config.slots_per_day


def calculate_day_slots(config: VisitConfig | None = None) -> list[str]:
    """All candidate start times for a business day."""
    return list(DaySlots(config))
