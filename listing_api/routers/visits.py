# listing_api/routers/visits.py
"""
Visit booking API.

Public:
  GET  /visits/available-slots?propertyId=&date=
  GET  /properties/{property_id}/available-slots?date=

Authenticated (X-User-Id):
  POST   /properties/{property_id}/visits
  GET    /visits
  GET    /visits/{id}
  PUT    /visits/{id}/status     (agent)
  PUT    /visits/{id}/complete   (agent)
  PUT    /visits/{id}/cancel     (visitor)
  DELETE /visits/{id}            (admin, soft delete)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models.tables import MAX_ROW_ID, Users
from ..schemas.visits import (
    AvailableSlotsResponse,
    VisitCancel,
    VisitCreate,
    VisitCreatedResponse,
    VisitEnvelope,
    VisitListResponse,
    VisitRead,
    VisitStatusUpdate,
)
from ..services import visit_ledger
from ..services.visit_states import VisitStatus

router = APIRouter(prefix="/visits", tags=["visits"])
property_router = APIRouter(prefix="/properties", tags=["visits"])


def _slots_response(db: Session, property_id: int, raw_date: Optional[str]) -> AvailableSlotsResponse:
    target_date = visit_ledger.parse_visit_date(raw_date)
    slots = visit_ledger.get_available_slots(db, property_id, target_date)
    return AvailableSlotsResponse(property_id=property_id, date=target_date, slots=slots)


# Declared before /{id} so the literal path wins
@router.get("/available-slots", response_model=AvailableSlotsResponse)
def get_available_slots(
    property_id: int = Query(..., alias="propertyId", ge=1, le=MAX_ROW_ID),
    target_date: Optional[str] = Query(None, alias="date"),
    db: Session = Depends(get_db),
):
    return _slots_response(db, property_id, target_date)


@property_router.get("/{property_id}/available-slots", response_model=AvailableSlotsResponse)
def get_property_available_slots(
    property_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    target_date: Optional[str] = Query(None, alias="date"),
    db: Session = Depends(get_db),
):
    return _slots_response(db, property_id, target_date)


@property_router.post(
    "/{property_id}/visits",
    response_model=VisitCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def request_visit(
    data: VisitCreate,
    property_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = visit_ledger.request_visit(db, user, property_id, data)
    return VisitCreatedResponse(
        visit=VisitRead.model_validate(result.visit),
        agent_notified=result.agent_notified,
    )


@router.get("", response_model=VisitListResponse)
def list_visits(
    status_filter: Optional[VisitStatus] = Query(None, alias="status"),
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    visits = visit_ledger.list_visits(
        db, user, status_filter.value if status_filter else None
    )
    return VisitListResponse(
        count=len(visits),
        visits=[VisitRead.model_validate(v) for v in visits],
    )


@router.get("/{id}", response_model=VisitEnvelope)
def get_visit(
    id: int = Path(..., ge=1, le=MAX_ROW_ID),
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    visit = visit_ledger.get_visit(db, id, user)
    return VisitEnvelope(visit=VisitRead.model_validate(visit))


@router.put("/{id}/status", response_model=VisitEnvelope)
def update_visit_status(
    data: VisitStatusUpdate,
    id: int = Path(..., ge=1, le=MAX_ROW_ID),
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    visit = visit_ledger.update_status(db, id, user, data)
    return VisitEnvelope(visit=VisitRead.model_validate(visit))


@router.put("/{id}/complete", response_model=VisitEnvelope)
def complete_visit(
    id: int = Path(..., ge=1, le=MAX_ROW_ID),
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    visit = visit_ledger.complete_visit(db, id, user)
    return VisitEnvelope(visit=VisitRead.model_validate(visit))


@router.put("/{id}/cancel", response_model=VisitEnvelope)
def cancel_visit(
    id: int = Path(..., ge=1, le=MAX_ROW_ID),
    data: Optional[VisitCancel] = None,
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    visit = visit_ledger.cancel_visit(db, id, user, data or VisitCancel())
    return VisitEnvelope(visit=VisitRead.model_validate(visit))


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_visit(
    id: int = Path(..., ge=1, le=MAX_ROW_ID),
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    visit_ledger.soft_delete_visit(db, id, user)
