# interview_schedule/services/slots/store.py
"""
Availability store: data access for availability slots.

No side effects beyond the database session and no cross-slot
validation; callers own the transaction (nothing here commits).
"""

from datetime import date
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...models import AvailabilitySlot, InterviewType, SlotStatus


# ── Read ─────────────────────────────────────────────────────────────────


def list_future_available(db: Session, owner_id: int, today: date) -> list[AvailabilitySlot]:
    """Available slots dated today or later, in one query (single snapshot)."""
    return (
        db.query(AvailabilitySlot)
        .filter(
            AvailabilitySlot.owner_id == owner_id,
            AvailabilitySlot.status == SlotStatus.AVAILABLE.value,
            AvailabilitySlot.date >= today,
        )
        .order_by(AvailabilitySlot.date, AvailabilitySlot.start_time)
        .all()
    )


def list_owner_slots(db: Session, owner_id: int) -> list[AvailabilitySlot]:
    """All slots of an owner regardless of status."""
    return (
        db.query(AvailabilitySlot)
        .filter(AvailabilitySlot.owner_id == owner_id)
        .order_by(AvailabilitySlot.date, AvailabilitySlot.start_time, AvailabilitySlot.interview_type)
        .all()
    )


def list_available_in_scope(
    db: Session,
    owner_id: int,
    slot_date: date,
    interview_type: InterviewType,
) -> list[AvailabilitySlot]:
    return (
        db.query(AvailabilitySlot)
        .filter(
            AvailabilitySlot.owner_id == owner_id,
            AvailabilitySlot.date == slot_date,
            AvailabilitySlot.interview_type == interview_type.value,
            AvailabilitySlot.status == SlotStatus.AVAILABLE.value,
        )
        .order_by(AvailabilitySlot.start_time)
        .all()
    )


def get_slot(db: Session, slot_id: int, for_update: bool = False) -> Optional[AvailabilitySlot]:
    """
    Get slot by ID.

    for_update=True takes a row lock on dialects that support it
    (ignored by SQLite, which serializes writers anyway).
    """
    query = db.query(AvailabilitySlot).filter(AvailabilitySlot.id == slot_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


def find_overlapping(
    db: Session,
    owner_id: int,
    slot_date: date,
    interview_type: InterviewType,
    window_start: str,
    window_end: str,
) -> list[AvailabilitySlot]:
    """Slots whose [start_time, end_time) intersects [window_start, window_end)."""
    return (
        db.query(AvailabilitySlot)
        .filter(
            AvailabilitySlot.owner_id == owner_id,
            AvailabilitySlot.date == slot_date,
            AvailabilitySlot.interview_type == interview_type.value,
            AvailabilitySlot.start_time < window_end,
            AvailabilitySlot.end_time > window_start,
        )
        .order_by(AvailabilitySlot.start_time)
        .all()
    )


def find_blocked_by(db: Session, slot_id: int) -> list[AvailabilitySlot]:
    """Slots currently blocked because of the booking on `slot_id`."""
    return (
        db.query(AvailabilitySlot)
        .filter(
            AvailabilitySlot.blocked_by_id == slot_id,
            AvailabilitySlot.status == SlotStatus.BLOCKED.value,
        )
        .order_by(AvailabilitySlot.start_time)
        .all()
    )


# ── Write ────────────────────────────────────────────────────────────────


def create_slots(db: Session, owner_id: int, slots: Iterable[dict]) -> list[AvailabilitySlot]:
    """
    Bulk insert available slots.

    Each item: {"date", "start_time", "end_time", "interview_type"}.
    No merge is applied at insert time.
    """
    created = [
        AvailabilitySlot(
            owner_id=owner_id,
            date=item["date"],
            start_time=item["start_time"],
            end_time=item["end_time"],
            interview_type=InterviewType(item["interview_type"]).value,
            status=SlotStatus.AVAILABLE.value,
        )
        for item in slots
    ]
    db.add_all(created)
    db.flush()
    return created


def update_status(
    db: Session,
    slot_id: int,
    status: SlotStatus,
    blocked_by_id: Optional[int] = None,
    expected_status: Optional[SlotStatus] = None,
) -> bool:
    """
    Set slot status (and the blocked_by back-reference).

    With expected_status this is a compare-and-set: the row only changes
    if it still has that status. Returns True if a row was updated.
    """
    query = db.query(AvailabilitySlot).filter(AvailabilitySlot.id == slot_id)
    if expected_status is not None:
        query = query.filter(AvailabilitySlot.status == expected_status.value)

    updated = query.update(
        {
            AvailabilitySlot.status: status.value,
            AvailabilitySlot.blocked_by_id: blocked_by_id,
        },
        synchronize_session="fetch",
    )
    return updated == 1


def update_end_time(db: Session, slot_id: int, end_time: str) -> None:
    db.query(AvailabilitySlot).filter(AvailabilitySlot.id == slot_id).update(
        {AvailabilitySlot.end_time: end_time},
        synchronize_session="fetch",
    )


def delete_slots(db: Session, ids: list[int]) -> int:
    """Delete slots by id. Returns number of deleted rows."""
    if not ids:
        return 0
    return (
        db.query(AvailabilitySlot)
        .filter(AvailabilitySlot.id.in_(ids))
        .delete(synchronize_session="fetch")
    )
