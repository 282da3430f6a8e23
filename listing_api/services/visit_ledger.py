"""
Visit ledger: owns visit records and drives their status transitions.

Uniqueness is decided by the partial unique indexes on `visits`
(one pending request per visitor and property, one active booking per
exact start slot). The pre-checks below only give friendlier messages;
when two requests race past them, the losing INSERT fails with
IntegrityError and is reported as Conflict.

Status changes are written as one conditional UPDATE guarded by the
expected source statuses, so two concurrent transitions cannot both win.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session, joinedload

from ..errors import Conflict, InvalidInput, InvalidTransition, NotFound, Unauthorized
from ..models.tables import Users, Visits
from ..schemas.visits import VisitCancel, VisitCreate, VisitStatusUpdate
from .directory import resolve_property
from .events import emit_event
from .slots import BookedInterval, VisitConfig, calculate_visit_availability, get_visit_config, is_slot_taken
from .slots.availability import get_active_bookings
from .visit_states import ACTIVE_STATUSES, ACTIVE_STATUS_VALUES, VisitStatus, can_transition, sources_for

logger = logging.getLogger(__name__)

DUPLICATE_REQUEST_MSG = "You already have a pending visit request for this property"
SLOT_TAKEN_MSG = "This time slot is already booked"
SLOT_OVERLAP_MSG = "This time slot overlaps an existing visit"

AGENT_ROLES = ("agent", "admin")

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class RequestOutcome(str, Enum):
    CREATED = "created"
    CREATED_NOTIFY_FAILED = "created_notify_failed"


@dataclass(frozen=True)
class VisitRequestResult:
    """Created visit plus whether the agent notification was queued."""
    visit: Visits
    outcome: RequestOutcome

    @property
    def agent_notified(self) -> bool:
        return self.outcome is RequestOutcome.CREATED


# ──────────────────────────────────────────────────────────────────────────────
# Booking
# ──────────────────────────────────────────────────────────────────────────────

def request_visit(
    db: Session,
    visitor: Users,
    property_id: int,
    data: VisitCreate,
    config: VisitConfig | None = None,
) -> VisitRequestResult:
    """
    Book a visit for `visitor` on a listed property.

    Steps:
    1. Resolve the property through the catalog
    2. Check the start time is inside business hours
    3. Pre-check duplicate pending request and exact slot collision
    4. Optionally reject starts inside an active booking (overlap guard)
    5. Insert; the unique indexes settle any race
    6. Emit visit_requested

    Raises:
        NotFound, InvalidInput, Conflict
    """
    config = config or get_visit_config()

    prop = resolve_property(db, property_id)
    if not prop:
        raise NotFound("Property not found")

    if not config.within_business_hours(data.visit_time):
        raise InvalidInput(
            f"Visit time must be between {config.open_time} and {config.close_time}"
        )

    if _find_pending_request(db, prop.id, visitor.id):
        logger.warning(f"Duplicate visit request: property={prop.id}, visitor={visitor.id}")
        raise Conflict(DUPLICATE_REQUEST_MSG)

    if _find_slot_holder(db, prop.id, data.visit_date, data.visit_time):
        logger.warning(
            f"Slot already booked: property={prop.id}, "
            f"slot={data.visit_date.isoformat()} {data.visit_time}"
        )
        raise Conflict(SLOT_TAKEN_MSG)

    if config.overlap_guard:
        booked = [
            BookedInterval.from_visit(v)
            for v in get_active_bookings(db, prop.id, data.visit_date)
        ]
        if is_slot_taken(data.visit_time, booked):
            raise Conflict(SLOT_OVERLAP_MSG)

    visit = Visits(
        property_id=prop.id,
        agent_id=prop.agent_id,
        visitor_id=visitor.id,
        visit_date=data.visit_date,
        visit_time=data.visit_time,
        duration_minutes=data.duration_minutes,
        status=VisitStatus.PENDING.value,
        notes=data.notes,
    )
    db.add(visit)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        conflict = _conflict_from_integrity_error(exc)
        logger.warning(
            f"Visit insert rejected by unique index: property={prop.id}, "
            f"visitor={visitor.id}: {conflict.detail}"
        )
        raise conflict from None
    db.refresh(visit)

    logger.info(
        f"Visit requested: visit_id={visit.id}, property={prop.id}, "
        f"agent={visit.agent_id}, visitor={visitor.id}, "
        f"slot={visit.visit_date.isoformat()} {visit.visit_time} ({visit.duration_minutes} min)"
    )

    notified = _notify("visit_requested", visit, visitor)
    outcome = RequestOutcome.CREATED if notified else RequestOutcome.CREATED_NOTIFY_FAILED
    return VisitRequestResult(visit=visit, outcome=outcome)


def get_available_slots(
    db: Session,
    property_id: int,
    raw_date: str | date | None,
    config: VisitConfig | None = None,
) -> list[str]:
    """Free start times for a property on a date. Raises InvalidInput on a bad date."""
    target_date = parse_visit_date(raw_date)
    return calculate_visit_availability(db, property_id, target_date, config)


def parse_visit_date(raw: str | date | None) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if raw is None or not raw.strip():
        raise InvalidInput("Please provide a date")
    raw = raw.strip()
    if not _DATE_RE.match(raw):
        raise InvalidInput("Date must be in YYYY-MM-DD format")
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidInput("Date must be in YYYY-MM-DD format") from None


# ──────────────────────────────────────────────────────────────────────────────
# Reading
# ──────────────────────────────────────────────────────────────────────────────

def list_visits(db: Session, actor: Users, status: str | None = None) -> list[Visits]:
    """Visits where actor is visitor or agent, newest first."""
    query = _with_parties(_visible(db)).filter(
        or_(Visits.visitor_id == actor.id, Visits.agent_id == actor.id)
    )
    if status:
        query = query.filter(Visits.status == VisitStatus(status).value)
    return query.order_by(Visits.created_at.desc(), Visits.id.desc()).all()


def get_visit(db: Session, visit_id: int, actor: Users) -> Visits:
    query = _with_parties(_visible(db)).filter(Visits.id == visit_id)
    if actor.role != "admin":
        query = query.filter(
            or_(Visits.visitor_id == actor.id, Visits.agent_id == actor.id)
        )
    visit = query.first()
    if not visit:
        raise NotFound("Visit not found")
    return visit


# ──────────────────────────────────────────────────────────────────────────────
# Transitions
# ──────────────────────────────────────────────────────────────────────────────

def update_status(db: Session, visit_id: int, actor: Users, data: VisitStatusUpdate) -> Visits:
    """Agent decision on a pending visit: approved / rejected / cancelled."""
    _require_role(actor, AGENT_ROLES, "Only agents can update visit status")

    visit = _owned_by_agent(db, visit_id, actor)
    target = VisitStatus(data.status)

    values = {}
    if target is VisitStatus.CANCELLED and data.cancellation_reason:
        values["cancellation_reason"] = data.cancellation_reason

    visit = _transition(
        db, visit, target,
        allowed_from=frozenset({VisitStatus.PENDING}),
        error_message="Can only update status of pending visits",
        **values,
    )
    _notify("visit_status_changed", visit, actor)
    return visit


def complete_visit(db: Session, visit_id: int, actor: Users) -> Visits:
    """Agent marks an approved visit as done."""
    _require_role(actor, AGENT_ROLES, "Only agents can complete visits")

    visit = _owned_by_agent(db, visit_id, actor)
    visit = _transition(
        db, visit, VisitStatus.COMPLETED,
        allowed_from=frozenset({VisitStatus.APPROVED}),
        error_message="Can only complete approved visits",
    )
    _notify("visit_status_changed", visit, actor)
    return visit


def cancel_visit(db: Session, visit_id: int, actor: Users, data: VisitCancel) -> Visits:
    """Visitor cancels their own pending or approved visit."""
    visit = (
        _visible(db)
        .filter(Visits.id == visit_id, Visits.visitor_id == actor.id)
        .first()
    )
    if not visit:
        raise NotFound("Visit not found")

    visit = _transition(
        db, visit, VisitStatus.CANCELLED,
        allowed_from=ACTIVE_STATUSES,
        error_message="Can only cancel pending or approved visits",
        cancellation_reason=data.cancellation_reason,
    )
    _notify("visit_cancelled", visit, actor)
    return visit


def soft_delete_visit(db: Session, visit_id: int, actor: Users) -> None:
    """Admin moderation: hide a visit while keeping it for audit."""
    _require_role(actor, ("admin",), "Only admins can delete visits")

    result = db.execute(
        update(Visits)
        .where(Visits.id == visit_id, Visits.is_deleted == 0)
        .values(is_deleted=1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise NotFound("Visit not found")
    db.commit()

    logger.info(f"Visit soft-deleted: visit_id={visit_id}, by admin={actor.id}")


# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────

def _visible(db: Session) -> Query:
    return db.query(Visits).filter(Visits.is_deleted == 0)


def _with_parties(query: Query) -> Query:
    """Eager-load the property and both users shown alongside a visit."""
    return query.options(
        joinedload(Visits.property),
        joinedload(Visits.visitor),
        joinedload(Visits.agent),
    )


def _find_pending_request(db: Session, property_id: int, visitor_id: int) -> Visits | None:
    return (
        _visible(db)
        .filter(
            Visits.property_id == property_id,
            Visits.visitor_id == visitor_id,
            Visits.status == VisitStatus.PENDING.value,
        )
        .first()
    )


def _find_slot_holder(db: Session, property_id: int, visit_date: date, visit_time: str) -> Visits | None:
    return (
        _visible(db)
        .filter(
            Visits.property_id == property_id,
            Visits.visit_date == visit_date,
            Visits.visit_time == visit_time,
            Visits.status.in_(ACTIVE_STATUS_VALUES),
        )
        .first()
    )


def _conflict_from_integrity_error(exc: IntegrityError) -> Conflict:
    """Map a unique-index violation to the matching Conflict; re-raise anything else."""
    message = str(exc.orig)
    if "unique" not in message.lower():
        raise exc
    # uq_visits_pending_visitor covers (property_id, visitor_id)
    if "visitor" in message:
        return Conflict(DUPLICATE_REQUEST_MSG)
    return Conflict(SLOT_TAKEN_MSG)


def _owned_by_agent(db: Session, visit_id: int, actor: Users) -> Visits:
    visit = (
        _visible(db)
        .filter(Visits.id == visit_id, Visits.agent_id == actor.id)
        .first()
    )
    if not visit:
        raise NotFound("Visit not found")
    return visit


def _require_role(actor: Users, roles: tuple[str, ...], message: str) -> None:
    if actor.role not in roles:
        raise Unauthorized(message)


def _transition(
    db: Session,
    visit: Visits,
    target: VisitStatus,
    allowed_from: frozenset[VisitStatus],
    error_message: str,
    **values,
) -> Visits:
    """Move `visit` to `target` if its current status is an allowed source."""
    sources = sources_for(target, allowed_from)
    previous = visit.status
    if previous not in sources or not can_transition(previous, target):
        raise InvalidTransition(error_message)

    result = db.execute(
        update(Visits)
        .where(
            Visits.id == visit.id,
            Visits.is_deleted == 0,
            Visits.status.in_(sources),
        )
        .values(status=target.value, **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        # Lost a race with another transition
        db.rollback()
        raise InvalidTransition(error_message)
    db.commit()
    db.refresh(visit)

    logger.info(f"Visit {visit.id}: {previous} → {visit.status}")
    return visit


def _notify(event_type: str, visit: Visits, actor: Users) -> bool:
    return emit_event(event_type, {
        "visit_id": visit.id,
        "property_id": visit.property_id,
        "agent_id": visit.agent_id,
        "visitor_id": visit.visitor_id,
        "status": visit.status,
        "initiated_by": {
            "user_id": actor.id,
            "role": actor.role,
        },
    })
