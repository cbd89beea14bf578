# interview_schedule/routers/owner_schedule.py
"""
Staff-side schedule management.

Identity comes from the upstream identity provider (X-User-Id / X-User-Role);
every route needs it. Owners are managed by the staff user who registered
them, or by an admin.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..errors import ForbiddenError, NotFoundError
from ..identity import Actor, require_actor
from ..models import Booking, Owner
from ..schemas.schedule import (
    BookingRead,
    BulkSlotsCreate,
    BulkSlotsResponse,
    CancelRequest,
    OwnerCreate,
    OwnerRead,
    SlotRead,
    SuccessResponse,
)
from ..services.slots import SlotInput, cancel_booking, create_availability
from ..services.slots import store
from ..utils.tokens import generate_schedule_token

router = APIRouter(tags=["owner-schedule"])


def _get_managed_owner(db: Session, owner_id: int, actor: Actor) -> Owner:
    owner = db.get(Owner, owner_id)
    if not owner:
        raise NotFoundError("Owner")
    if not actor.can_manage(owner):
        raise ForbiddenError()
    return owner


@router.post("/owners", response_model=OwnerRead, status_code=status.HTTP_201_CREATED)
def create_owner(
    data: OwnerCreate,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
):
    """Register a candidate and issue their public schedule token."""
    onsite = data.onsite_block_minutes
    online = data.online_block_minutes

    owner = Owner(
        name=data.name,
        schedule_token=generate_schedule_token(),
        managed_by=actor.user_id,
        onsite_block_minutes=settings.default_onsite_block_minutes if onsite is None else onsite,
        online_block_minutes=settings.default_online_block_minutes if online is None else online,
    )
    db.add(owner)
    db.commit()
    db.refresh(owner)
    return owner


@router.get("/owners/{owner_id}/slots", response_model=list[SlotRead])
def list_slots(
    owner_id: int,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
):
    owner = _get_managed_owner(db, owner_id, actor)
    return store.list_owner_slots(db, owner.id)


@router.post(
    "/owners/{owner_id}/slots/bulk",
    response_model=BulkSlotsResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_slots_bulk(
    owner_id: int,
    data: BulkSlotsCreate,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
):
    owner = _get_managed_owner(db, owner_id, actor)
    result = create_availability(db, owner, [
        SlotInput(
            date=item.date,
            start_time=item.start_time,
            end_time=item.end_time,
            interview_type=item.interview_type,
        )
        for item in data.slots
    ])
    return BulkSlotsResponse(
        created=[SlotRead.model_validate(slot) for slot in result.created],
        skipped=result.skipped,
    )


@router.get("/owners/{owner_id}/bookings", response_model=list[BookingRead])
def list_bookings(
    owner_id: int,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
):
    owner = _get_managed_owner(db, owner_id, actor)
    return (
        db.query(Booking)
        .filter(Booking.owner_id == owner.id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )


@router.post("/bookings/{booking_id}/cancel", response_model=SuccessResponse)
def cancel_owner_booking(
    booking_id: int,
    data: CancelRequest | None = None,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
):
    reason = data.reason if data else None
    cancel_booking(db, booking_id, actor, reason=reason)
    return SuccessResponse()
