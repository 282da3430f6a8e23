# listing_api/services/slots/availability.py
"""
Level 2: Visit availability for a property on a date.

Base grid (Level 1) minus every start time that falls inside an active
(pending/approved, not deleted) booking of the same property and date.
"""

from datetime import date
from sqlalchemy.orm import Session

from .config import VisitConfig, get_visit_config
from .calculator import DaySlots
from .overlap import BookedInterval, filter_available
from ..visit_states import ACTIVE_STATUS_VALUES


def calculate_visit_availability(
    db: Session,
    property_id: int,
    target_date: date,
    config: VisitConfig | None = None,
) -> list[str]:
    """
    Calculate free start times for a property.

    Returns:
        Ordered list of "HH:MM" strings.
    """
    config = config or get_visit_config()

    bookings = get_active_bookings(db, property_id, target_date)
    booked = [BookedInterval.from_visit(b) for b in bookings]

    return filter_available(DaySlots(config), booked)


# ── Database helpers ─────────────────────────────────────────────────────


def get_active_bookings(db: Session, property_id: int, target_date: date) -> list:
    """Get active, non-deleted visits for property on date."""
    from ...models.tables import Visits

    return (
        db.query(Visits)
        .filter(
            Visits.property_id == property_id,
            Visits.visit_date == target_date,
            Visits.status.in_(ACTIVE_STATUS_VALUES),
            Visits.is_deleted == 0,
        )
        .all()
    )
