# interview_schedule/services/slots/registration.py
"""
Owner-side bulk registration of availability.

Exact duplicates of existing slots are skipped; a slot that overlaps an
existing slot of the same format (or another slot in the same batch) is
rejected, since overlapping availability would break merging later on.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session

from ...errors import ValidationError
from ...models import InterviewType, Owner
from . import store
from .config import is_valid_end_time_str, is_valid_time_str

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotInput:
    date: date
    start_time: str
    end_time: str
    interview_type: str = InterviewType.ONLINE.value


@dataclass
class RegistrationResult:
    created: list
    skipped: int


def create_availability(db: Session, owner: Owner, slots: list[SlotInput]) -> RegistrationResult:
    errors = _validate_items(slots)
    if errors:
        raise ValidationError("Invalid availability slots", details=errors)

    existing = defaultdict(list)
    for slot in store.list_owner_slots(db, owner.id):
        existing[(slot.date, slot.interview_type)].append((slot.start_time, slot.end_time))

    to_create: list[SlotInput] = []
    skipped = 0
    for index, item in enumerate(slots):
        scope = (item.date, item.interview_type)
        interval = (item.start_time, item.end_time)

        if interval in existing[scope]:
            skipped += 1
            continue

        for start, end in existing[scope]:
            if item.start_time < end and start < item.end_time:
                raise ValidationError(
                    "Slot overlaps existing availability",
                    details={f"slots.{index}": [f"overlaps {start}-{end} on {item.date}"]},
                )

        existing[scope].append(interval)
        to_create.append(item)

    try:
        created = store.create_slots(db, owner.id, [
            {
                "date": item.date,
                "start_time": item.start_time,
                "end_time": item.end_time,
                "interview_type": item.interview_type,
            }
            for item in to_create
        ])
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Owner {owner.id}: created {len(created)} slots, skipped {skipped} duplicates")
    return RegistrationResult(created=created, skipped=skipped)


def _validate_items(slots: list[SlotInput]) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for index, item in enumerate(slots):
        problems = []
        if not is_valid_time_str(item.start_time):
            problems.append("startTime must be HH:MM")
        if not is_valid_end_time_str(item.end_time):
            problems.append("endTime must be HH:MM (24:00 allowed)")
        if not problems and item.start_time >= item.end_time:
            problems.append("startTime must be before endTime")
        if item.interview_type not in (InterviewType.ONLINE.value, InterviewType.ONSITE.value):
            problems.append("interviewType must be online or onsite")
        if problems:
            errors[f"slots.{index}"] = problems
    return errors
