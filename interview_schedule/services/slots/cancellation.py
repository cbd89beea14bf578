# interview_schedule/services/slots/cancellation.py
"""
Cancellation transaction.

Reverses a booking in one database transaction:
1. booking.cancelled_at / cancel_reason are set (the row is kept)
2. the booked slot becomes available again
3. slots blocked *by this slot* (blocked_by_id) are released; blocks that
   belong to any other booking are never touched
4. the affected (owner, date, format) scopes are merged back into maximal
   intervals, which restores the pre-booking shape
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import ConflictError, ForbiddenError, NotFoundError
from ...identity import Actor
from ...models import Booking, InterviewType, Owner, SlotStatus
from ...models.schedule import utcnow
from ..events import emit_event
from . import store
from .merge import MergedSlot, apply_merge

logger = logging.getLogger(__name__)


@dataclass
class CancellationResult:
    booking: Booking
    unblocked_slot_ids: list[int] = field(default_factory=list)
    merged: list[MergedSlot] = field(default_factory=list)


def cancel_booking(
    db: Session,
    booking_id: int,
    actor: Actor,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> CancellationResult:
    """
    Cancel a booking on behalf of `actor`.

    Raises:
        NotFoundError: unknown booking
        ConflictError: booking already cancelled
        ForbiddenError: actor does not manage the booking's owner
    """
    now = now or utcnow()

    try:
        result = _cancel(db, booking_id, actor, reason, now)
        db.commit()
    except Exception:
        db.rollback()
        raise

    booking = result.booking
    logger.info(
        f"Booking cancelled: booking_id={booking.id}, slot_id={booking.slot_id}, "
        f"owner_id={booking.owner_id}, unblocked={result.unblocked_slot_ids}"
    )

    emit_event("booking_cancelled", {
        "booking_id": booking.id,
        "owner_id": booking.owner_id,
        "company_name": booking.company_name,
        "date": booking.slot_date.isoformat(),
        "start_time": booking.start_time,
        "end_time": booking.end_time,
        "reason": booking.cancel_reason,
    })

    return result


def _cancel(
    db: Session,
    booking_id: int,
    actor: Actor,
    reason: Optional[str],
    now: datetime,
) -> CancellationResult:
    # Step 1: Load booking
    booking = (
        db.query(Booking)
        .filter(Booking.id == booking_id)
        .with_for_update()
        .first()
    )
    if not booking:
        raise NotFoundError("Booking")
    if booking.cancelled_at is not None:
        raise ConflictError("This booking has already been cancelled")

    # Step 2: Authorize
    owner = db.get(Owner, booking.owner_id)
    if owner is None or not actor.can_manage(owner):
        raise ForbiddenError("You are not allowed to cancel this booking")

    # Step 3: Terminate the booking (compare-and-set against a parallel cancel)
    updated = (
        db.query(Booking)
        .filter(Booking.id == booking.id, Booking.cancelled_at.is_(None))
        .update(
            {Booking.cancelled_at: now, Booking.cancel_reason: reason},
            synchronize_session="fetch",
        )
    )
    if updated != 1:
        raise ConflictError("This booking has already been cancelled")

    result = CancellationResult(booking=booking)

    slot = store.get_slot(db, booking.slot_id, for_update=True) if booking.slot_id else None
    if slot is None:
        logger.warning(f"Booking {booking.id} has no slot to restore")
        return result

    # Step 4: Free the booked slot
    store.update_status(db, slot.id, SlotStatus.AVAILABLE, blocked_by_id=None)
    affected_types = {InterviewType(slot.interview_type)}

    # Step 5: Release blocks caused by this booking only
    for blocked in store.find_blocked_by(db, slot.id):
        if store.update_status(
            db,
            blocked.id,
            SlotStatus.AVAILABLE,
            blocked_by_id=None,
            expected_status=SlotStatus.BLOCKED,
        ):
            result.unblocked_slot_ids.append(blocked.id)
            affected_types.add(InterviewType(blocked.interview_type))

    # Step 6: Recombine contiguous free time
    for interview_type in sorted(affected_types, key=lambda t: t.value):
        result.merged.extend(apply_merge(db, owner.id, slot.date, interview_type))

    return result
