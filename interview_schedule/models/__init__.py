from .schedule import (
    AvailabilitySlot,
    Base,
    Booking,
    BookingInterviewType,
    InterviewType,
    Owner,
    SlotStatus,
    metadata,
)

__all__ = [
    "AvailabilitySlot",
    "Base",
    "Booking",
    "BookingInterviewType",
    "InterviewType",
    "Owner",
    "SlotStatus",
    "metadata",
]
