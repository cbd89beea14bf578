# interview_schedule/services/slots/booking.py
"""
Booking transaction.

Turns one available slot into a booking and blocks the owner's slots of
the other interview format that fall inside the buffer window:

    window = [booked_start - buffer, booked_end + buffer]

Everything happens in one database transaction. Any failure rolls the
whole thing back, so a partial set of blocks is never persisted.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...errors import ConflictError, NotFoundError, SLOT_UNAVAILABLE_MESSAGE, ValidationError
from ...models import AvailabilitySlot, Booking, BookingInterviewType, InterviewType, Owner, SlotStatus
from ..events import emit_event
from . import store
from .config import block_config_for, is_valid_end_time_str, is_valid_time_str

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingContact:
    """Who is booking (the hiring company side)."""
    company_name: str
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class BookingResult:
    booking: Booking
    blocked_slot_ids: list[int]


def book_slot(
    db: Session,
    owner: Owner,
    slot_id: int,
    contact: BookingContact,
    interview_type: Optional[str] = None,
    today: Optional[date] = None,
) -> BookingResult:
    """
    Book `slot_id` of `owner`.

    Args:
        interview_type: online / onsite / both; None means the slot's format
        today: reference day for the "already passed" check

    Raises:
        NotFoundError: unknown slot, or slot of another owner
        ConflictError: slot not available, in the past, or race lost
        ValidationError: malformed interval or format
    """
    requested_type = _parse_interview_type(interview_type)
    today = today or date.today()

    try:
        result = _book(db, owner, slot_id, contact, requested_type, today)
        db.commit()
    except IntegrityError:
        # Partial unique index: another live booking on this slot won
        db.rollback()
        logger.warning(f"Booking race lost on slot {slot_id} (unique index)")
        raise ConflictError(SLOT_UNAVAILABLE_MESSAGE) from None
    except Exception:
        db.rollback()
        raise

    booking = result.booking
    db.refresh(booking)

    logger.info(
        f"Booking created: booking_id={booking.id}, slot_id={slot_id}, owner_id={owner.id}, "
        f"{booking.slot_date} {booking.start_time}-{booking.end_time} {booking.interview_type}, "
        f"blocked={result.blocked_slot_ids}"
    )

    emit_event("booking_created", {
        "booking_id": booking.id,
        "owner_id": owner.id,
        "owner_name": owner.name,
        "company_name": booking.company_name,
        "date": booking.slot_date.isoformat(),
        "start_time": booking.start_time,
        "end_time": booking.end_time,
        "interview_type": booking.interview_type,
    })

    return result


def _book(
    db: Session,
    owner: Owner,
    slot_id: int,
    contact: BookingContact,
    requested_type: Optional[BookingInterviewType],
    today: date,
) -> BookingResult:
    # Step 1: Load and check the slot
    slot = store.get_slot(db, slot_id, for_update=True)
    if not slot or slot.owner_id != owner.id:
        raise NotFoundError("Slot")

    if slot.status != SlotStatus.AVAILABLE.value:
        raise ConflictError(SLOT_UNAVAILABLE_MESSAGE)

    if slot.date < today:
        raise ConflictError("This slot is in the past, please choose another.")

    _validate_interval(slot)
    slot_type = InterviewType(slot.interview_type)
    booking_type = _resolve_booking_type(slot_type, requested_type)

    # Step 2: Claim the slot (compare-and-set) and create the booking
    if not store.update_status(db, slot.id, SlotStatus.BOOKED, expected_status=SlotStatus.AVAILABLE):
        logger.warning(f"Booking race lost on slot {slot.id}")
        raise ConflictError(SLOT_UNAVAILABLE_MESSAGE)

    booking = Booking(
        slot_id=slot.id,
        owner_id=owner.id,
        interview_type=booking_type.value,
        company_name=contact.company_name,
        contact_name=contact.contact_name,
        contact_email=contact.contact_email,
        notes=contact.notes,
        slot_date=slot.date,
        start_time=slot.start_time,
        end_time=slot.end_time,
    )
    db.add(booking)
    db.flush()

    # Step 3: Block the other format around the interview
    blocked = block_other_format(db, owner, slot, slot_type)

    return BookingResult(booking=booking, blocked_slot_ids=blocked)


def block_other_format(
    db: Session,
    owner: Owner,
    slot: AvailabilitySlot,
    slot_type: InterviewType,
) -> list[int]:
    """
    Block available opposite-format slots overlapping the buffer window.

    Already booked or blocked slots are left as they are.

    Returns:
        IDs of the slots that were blocked.
    """
    window_start, window_end = block_config_for(owner).window(
        slot_type, slot.start_time, slot.end_time
    )

    blocked: list[int] = []
    candidates = store.find_overlapping(
        db, owner.id, slot.date, slot_type.opposite, window_start, window_end
    )
    for other in candidates:
        if other.status != SlotStatus.AVAILABLE.value:
            continue
        if store.update_status(
            db,
            other.id,
            SlotStatus.BLOCKED,
            blocked_by_id=slot.id,
            expected_status=SlotStatus.AVAILABLE,
        ):
            blocked.append(other.id)

    logger.debug(
        f"Slot {slot.id}: window {window_start}-{window_end} blocked {blocked} "
        f"({slot_type.opposite.value})"
    )
    return blocked


# ── Validation helpers ───────────────────────────────────────────────────


def _parse_interview_type(value: Optional[str]) -> Optional[BookingInterviewType]:
    if value is None:
        return None
    try:
        return BookingInterviewType(value)
    except ValueError:
        raise ValidationError(
            f"Unknown interview type: {value!r}",
            details={"interviewType": ["must be one of online, onsite, both"]},
        ) from None


def _resolve_booking_type(
    slot_type: InterviewType,
    requested: Optional[BookingInterviewType],
) -> BookingInterviewType:
    """Requested format must be the slot's own format or "both"."""
    if requested is None:
        return BookingInterviewType(slot_type.value)
    if requested is BookingInterviewType.BOTH or requested.value == slot_type.value:
        return requested
    raise ValidationError(
        f"Slot is offered as {slot_type.value}, cannot book it as {requested.value}"
    )


def _validate_interval(slot: AvailabilitySlot) -> None:
    if not (is_valid_time_str(slot.start_time) and is_valid_end_time_str(slot.end_time)):
        raise ValidationError("Slot has a malformed time")
    if slot.start_time >= slot.end_time:
        raise ValidationError("Slot start must be before its end")
