# listing_api/services/slots/__init__.py
"""
Visit slots module.

Level 1: Base business-day grid (DaySlots)
Level 2: Property availability (grid minus active bookings)
"""

from .config import VisitConfig, get_visit_config
from .calculator import DaySlots, calculate_day_slots
from .overlap import BookedInterval, filter_available, is_slot_taken
from .availability import calculate_visit_availability

__all__ = [
    "VisitConfig",
    "get_visit_config",
    "DaySlots",
    "calculate_day_slots",
    "BookedInterval",
    "filter_available",
    "is_slot_taken",
    "calculate_visit_availability",
]
