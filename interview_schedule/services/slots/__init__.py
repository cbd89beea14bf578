# interview_schedule/services/slots/__init__.py
"""
Interview availability engine.

store         - data access for availability slots
merge         - merge_adjacent() and its read-only / persistent wrappers
booking       - booking transaction with cross-format blocking
cancellation  - cancellation transaction restoring availability
registration  - owner-side bulk creation of slots
"""

from .config import BlockConfig, block_config_for, get_default_block_config
from .merge import MergedSlot, apply_merge, merge_adjacent, project_available
from .booking import BookingContact, BookingResult, book_slot
from .cancellation import CancellationResult, cancel_booking
from .registration import RegistrationResult, SlotInput, create_availability

__all__ = [
    "BlockConfig",
    "block_config_for",
    "get_default_block_config",
    "MergedSlot",
    "apply_merge",
    "merge_adjacent",
    "project_available",
    "BookingContact",
    "BookingResult",
    "book_slot",
    "CancellationResult",
    "cancel_booking",
    "RegistrationResult",
    "SlotInput",
    "create_availability",
]
