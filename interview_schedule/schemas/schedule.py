# interview_schedule/schemas/schedule.py
"""
Pydantic schemas for the schedule API.

JSON is camelCase on the wire; Python attributes stay snake_case.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ── Slots ────────────────────────────────────────────────────────────────


class SlotRead(CamelModel):
    id: int
    date: date
    start_time: str
    end_time: str
    interview_type: str
    status: str
    blocked_by_id: Optional[int] = None


class MergedSlotRead(CamelModel):
    """Contiguous available time, as shown to the public."""
    slot_ids: list[int]
    date: date
    start_time: str
    end_time: str
    interview_type: str


class BufferConfigRead(CamelModel):
    onsite_block_minutes: int
    online_block_minutes: int


class PublicScheduleResponse(CamelModel):
    owner_name: str
    owner_buffer_config: BufferConfigRead
    slots: list[MergedSlotRead]


class SlotCreate(CamelModel):
    date: date
    start_time: str = Field(description='"HH:MM"')
    end_time: str = Field(description='"HH:MM"')
    interview_type: str = "online"


class BulkSlotsCreate(CamelModel):
    slots: list[SlotCreate] = Field(min_length=1, max_length=500)


class BulkSlotsResponse(CamelModel):
    created: list[SlotRead]
    skipped: int


# ── Bookings ─────────────────────────────────────────────────────────────


class BookingContactIn(CamelModel):
    company_name: str = Field(min_length=1, max_length=200)
    contact_name: Optional[str] = Field(default=None, max_length=200)
    contact_email: Optional[str] = Field(default=None, max_length=320)
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("company_name")
    @classmethod
    def company_name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("companyName must not be blank")
        return value


class BookingCreate(CamelModel):
    slot_id: int
    interview_type: Optional[str] = None
    contact: BookingContactIn


class BookingRead(CamelModel):
    id: int
    slot_id: Optional[int] = None
    owner_id: int
    interview_type: str

    company_name: str
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    notes: Optional[str] = None

    slot_date: date
    start_time: str
    end_time: str

    created_at: datetime
    cancelled_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None


class BookingCreateResponse(CamelModel):
    booking: BookingRead
    blocked_slot_ids: list[int]


class CancelRequest(CamelModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class SuccessResponse(CamelModel):
    success: bool = True


# ── Owners ───────────────────────────────────────────────────────────────


class OwnerCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    onsite_block_minutes: Optional[int] = Field(default=None, ge=0, le=24 * 60)
    online_block_minutes: Optional[int] = Field(default=None, ge=0, le=24 * 60)


class OwnerRead(CamelModel):
    id: int
    name: str
    schedule_token: str
    managed_by: Optional[int] = None
    onsite_block_minutes: Optional[int] = None
    online_block_minutes: Optional[int] = None
    created_at: datetime
