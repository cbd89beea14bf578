from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class InterviewType(str, Enum):
    ONLINE = "online"
    ONSITE = "onsite"

    @property
    def opposite(self) -> "InterviewType":
        return InterviewType.ONSITE if self is InterviewType.ONLINE else InterviewType.ONLINE


class BookingInterviewType(str, Enum):
    """Format actually reserved; "both" is a negotiated either-way booking."""
    ONLINE = "online"
    ONSITE = "onsite"
    BOTH = "both"


class SlotStatus(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    BLOCKED = "blocked"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Owner(Base):
    """Candidate whose interview availability is published."""
    __tablename__ = 'owners'

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    schedule_token = Column(Text, nullable=False, unique=True)
    managed_by = Column(Integer)
    onsite_block_minutes = Column(Integer, server_default=text('60'))
    online_block_minutes = Column(Integer, server_default=text('30'))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    slots = relationship('AvailabilitySlot', back_populates='owner')
    bookings = relationship('Booking', back_populates='owner')


class AvailabilitySlot(Base):
    __tablename__ = 'availability_slots'
    __table_args__ = (
        CheckConstraint(
            "status IN ('available', 'booked', 'blocked')",
            name='ck_availability_slots_status',
        ),
        CheckConstraint(
            "interview_type IN ('online', 'onsite')",
            name='ck_availability_slots_interview_type',
        ),
        CheckConstraint('start_time < end_time', name='ck_availability_slots_interval'),
        Index('ix_availability_slots_scope', 'owner_id', 'date', 'interview_type', 'status'),
    )

    id = Column(Integer, primary_key=True)
    owner_id = Column(ForeignKey('owners.id', ondelete='CASCADE'), nullable=False)
    date = Column(Date, nullable=False)
    # "HH:MM", zero padded so string order == time order
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)
    interview_type = Column(Text, nullable=False, server_default=text("'online'"))
    status = Column(Text, nullable=False, server_default=text("'available'"))
    # Id of the booked slot that caused the block. Lookup key only: no FK,
    # no relationship, nothing cascades through it.
    blocked_by_id = Column(Integer, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    owner = relationship('Owner', back_populates='slots')

    def __repr__(self) -> str:
        return (
            f"<AvailabilitySlot id={self.id} {self.date} {self.start_time}-{self.end_time} "
            f"{self.interview_type} {self.status}>"
        )


class Booking(Base):
    __tablename__ = 'schedule_bookings'
    __table_args__ = (
        CheckConstraint(
            "interview_type IN ('online', 'onsite', 'both')",
            name='ck_schedule_bookings_interview_type',
        ),
        # At most one live booking per slot
        Index(
            'uq_schedule_bookings_active_slot',
            'slot_id',
            unique=True,
            sqlite_where=text('cancelled_at IS NULL'),
            postgresql_where=text('cancelled_at IS NULL'),
        ),
    )

    id = Column(Integer, primary_key=True)
    # SET NULL: a merge may absorb the slot row of an already cancelled booking
    slot_id = Column(ForeignKey('availability_slots.id', ondelete='SET NULL'))
    owner_id = Column(ForeignKey('owners.id', ondelete='CASCADE'), nullable=False)
    interview_type = Column(Text, nullable=False)

    company_name = Column(Text, nullable=False)
    contact_name = Column(Text)
    contact_email = Column(Text)
    notes = Column(Text)

    # Reserved interval as it was at booking time
    slot_date = Column(Date, nullable=False)
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    cancelled_at = Column(DateTime(timezone=True))
    cancel_reason = Column(Text)

    owner = relationship('Owner', back_populates='bookings')
    slot = relationship('AvailabilitySlot')

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled_at is not None
