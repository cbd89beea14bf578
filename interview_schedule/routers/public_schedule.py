# interview_schedule/routers/public_schedule.py
"""
Public schedule API (no login; the schedule token is the credential).

GET  /schedule/{token}                              - merged availability
POST /schedule/{token}/book                         - book one slot
POST /schedule/{token}/bookings/{booking_id}/cancel - cancel a booking
"""

from datetime import date

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import NotFoundError
from ..identity import Actor
from ..middleware.rate_limit import rate_limit
from ..models import Owner
from ..schemas.schedule import (
    BookingCreate,
    BookingCreateResponse,
    BookingRead,
    BufferConfigRead,
    CancelRequest,
    MergedSlotRead,
    PublicScheduleResponse,
    SuccessResponse,
)
from ..services.slots import (
    BookingContact,
    block_config_for,
    book_slot,
    cancel_booking,
    project_available,
)
from ..utils.tokens import is_valid_token_format

router = APIRouter(prefix="/schedule", tags=["public-schedule"])


def get_owner_by_token(owner_token: str, db: Session = Depends(get_db)) -> Owner:
    # Malformed tokens never reach the database
    if not is_valid_token_format(owner_token):
        raise NotFoundError("Schedule")
    owner = db.query(Owner).filter(Owner.schedule_token == owner_token).first()
    if not owner:
        raise NotFoundError("Schedule")
    return owner


@router.get(
    "/{owner_token}",
    response_model=PublicScheduleResponse,
    dependencies=[Depends(rate_limit("publicScheduleView"))],
)
def get_public_schedule(
    owner: Owner = Depends(get_owner_by_token),
    db: Session = Depends(get_db),
):
    """Available time from today on, contiguous slots merged."""
    config = block_config_for(owner)
    merged = project_available(db, owner.id, date.today())

    return PublicScheduleResponse(
        owner_name=owner.name,
        owner_buffer_config=BufferConfigRead(
            onsite_block_minutes=config.onsite_block_minutes,
            online_block_minutes=config.online_block_minutes,
        ),
        slots=[
            MergedSlotRead(
                slot_ids=list(m.slot_ids),
                date=m.date,
                start_time=m.start_time,
                end_time=m.end_time,
                interview_type=m.interview_type,
            )
            for m in merged
        ],
    )


@router.post(
    "/{owner_token}/book",
    response_model=BookingCreateResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("publicBooking"))],
)
def book_public_slot(
    data: BookingCreate,
    owner: Owner = Depends(get_owner_by_token),
    db: Session = Depends(get_db),
):
    contact = BookingContact(
        company_name=data.contact.company_name,
        contact_name=data.contact.contact_name,
        contact_email=data.contact.contact_email,
        notes=data.contact.notes,
    )
    result = book_slot(
        db,
        owner,
        data.slot_id,
        contact,
        interview_type=data.interview_type,
    )
    return BookingCreateResponse(
        booking=BookingRead.model_validate(result.booking),
        blocked_slot_ids=result.blocked_slot_ids,
    )


@router.post(
    "/{owner_token}/bookings/{booking_id}/cancel",
    response_model=SuccessResponse,
    dependencies=[Depends(rate_limit("publicCancel"))],
)
def cancel_public_booking(
    booking_id: int,
    data: CancelRequest | None = None,
    owner: Owner = Depends(get_owner_by_token),
    db: Session = Depends(get_db),
):
    reason = data.reason if data else None
    cancel_booking(db, booking_id, Actor.for_owner(owner), reason=reason)
    return SuccessResponse()
