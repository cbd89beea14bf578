# interview_schedule/services/slots/merge.py
"""
Merging of contiguous available slots.

One pure function, merge_adjacent(), used two ways:
- project_available(): transient view for the public listing (read-only)
- apply_merge(): persists the result after a cancellation, so that
  fragments do not accumulate in the store

Slots merge only when owner, date and interview type match and one
slot's end_time equals the next one's start_time.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable

from sqlalchemy.orm import Session

from ...errors import SlotOverlapError
from ...models import InterviewType
from . import store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergedSlot:
    """A maximal run of contiguous available slots."""
    owner_id: int
    date: date
    start_time: str
    end_time: str
    interview_type: str
    slot_ids: tuple[int, ...]


def _to_merged(slot) -> MergedSlot:
    # Accepts store rows and MergedSlot alike, so merging is idempotent
    slot_ids = getattr(slot, "slot_ids", None) or (slot.id,)
    return MergedSlot(
        owner_id=slot.owner_id,
        date=slot.date,
        start_time=slot.start_time,
        end_time=slot.end_time,
        interview_type=InterviewType(slot.interview_type).value,
        slot_ids=tuple(slot_ids),
    )


def _scope(slot: MergedSlot) -> tuple:
    return slot.owner_id, slot.date, slot.interview_type


def merge_adjacent(slots: Iterable) -> list[MergedSlot]:
    """
    Collapse contiguous slots into maximal intervals.

    Input: slots with owner_id, date, start_time, end_time, interview_type
    and id (or slot_ids). All of them are treated as available.

    Returns:
        MergedSlot list ordered by (date, start_time, interview_type).

    Raises:
        SlotOverlapError: two slots of the same scope overlap. That can only
        come from an earlier invariant violation, so nothing is coalesced.
    """
    items = sorted(
        (_to_merged(s) for s in slots),
        key=lambda s: (s.owner_id, s.date, s.interview_type, s.start_time),
    )

    merged: list[MergedSlot] = []
    current: MergedSlot | None = None

    for slot in items:
        if current is not None and _scope(slot) == _scope(current):
            if slot.start_time < current.end_time:
                logger.error(
                    f"Overlapping available slots {current.slot_ids} and {slot.slot_ids} "
                    f"for owner {slot.owner_id} on {slot.date}"
                )
                raise SlotOverlapError()
            if slot.start_time == current.end_time:
                current = replace(
                    current,
                    end_time=slot.end_time,
                    slot_ids=current.slot_ids + slot.slot_ids,
                )
                continue

        if current is not None:
            merged.append(current)
        current = slot

    if current is not None:
        merged.append(current)

    merged.sort(key=lambda s: (s.date, s.start_time, s.interview_type, s.owner_id))
    return merged


def project_available(db: Session, owner_id: int, today: date) -> list[MergedSlot]:
    """Merged view of the owner's available slots from today on (no writes)."""
    return merge_adjacent(store.list_future_available(db, owner_id, today))


def apply_merge(
    db: Session,
    owner_id: int,
    slot_date: date,
    interview_type: InterviewType,
) -> list[MergedSlot]:
    """
    Persist merging for one (owner, date, interview type) scope.

    For every group of more than one row, the first row is extended to the
    group's end and the other rows are deleted. Must run inside the
    caller's transaction; nothing is committed here.
    """
    merged = merge_adjacent(store.list_available_in_scope(db, owner_id, slot_date, interview_type))

    for group in merged:
        if len(group.slot_ids) < 2:
            continue
        first_id, *absorbed = group.slot_ids
        store.update_end_time(db, first_id, group.end_time)
        store.delete_slots(db, absorbed)
        logger.info(
            f"Merged slots {group.slot_ids} into {first_id} "
            f"({group.date} {group.start_time}-{group.end_time} {group.interview_type})"
        )

    return [replace(group, slot_ids=group.slot_ids[:1]) for group in merged]
