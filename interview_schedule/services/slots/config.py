# interview_schedule/services/slots/config.py
"""
Buffer configuration and "HH:MM" time helpers for the slots engine.
"""

import re
from dataclasses import dataclass
from functools import lru_cache

from ...config import settings
from ...models import InterviewType

MINUTES_PER_DAY = 24 * 60
END_OF_DAY = "24:00"

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def is_valid_time_str(value: str) -> bool:
    return bool(_TIME_RE.match(value or ""))


def is_valid_end_time_str(value: str) -> bool:
    """End of an interval: any valid "HH:MM" or "24:00" (midnight of the next day)."""
    return value == END_OF_DAY or is_valid_time_str(value)


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight ("24:00" -> 1440)."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time_str(value: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{value // 60:02d}:{value % 60:02d}"


@dataclass(frozen=True)
class BlockConfig:
    """
    Cross-format blocking buffers of one owner.

    Attributes:
        onsite_block_minutes: Padding around a booked onsite interview
        online_block_minutes: Padding around a booked online interview
    """
    onsite_block_minutes: int = 60
    online_block_minutes: int = 30

    def __post_init__(self):
        if self.onsite_block_minutes < 0 or self.online_block_minutes < 0:
            raise ValueError("Block minutes must be >= 0")

    def buffer_for(self, booked_type: InterviewType) -> int:
        """
        Padding applied around an interview of `booked_type`.

        An onsite interview needs travel time on both sides, so booking
        onsite blocks the online calendar by onsite_block_minutes; booking
        online blocks the onsite calendar by online_block_minutes.
        """
        if booked_type is InterviewType.ONSITE:
            return self.onsite_block_minutes
        return self.online_block_minutes

    def window(self, booked_type: InterviewType, start_time: str, end_time: str) -> tuple[str, str]:
        """
        Buffer window [start - buffer, end + buffer] clamped to the day.

        The upper bound may be "24:00", which compares greater than any
        valid "HH:MM".
        """
        buffer = self.buffer_for(booked_type)
        start_min = max(0, time_str_to_minutes(start_time) - buffer)
        end_min = min(MINUTES_PER_DAY, time_str_to_minutes(end_time) + buffer)
        return minutes_to_time_str(start_min), minutes_to_time_str(end_min)


@lru_cache
def get_default_block_config() -> BlockConfig:
    return BlockConfig(
        onsite_block_minutes=settings.default_onsite_block_minutes,
        online_block_minutes=settings.default_online_block_minutes,
    )


def block_config_for(owner) -> BlockConfig:
    """Owner's buffers, falling back to the configured defaults for NULLs."""
    default = get_default_block_config()
    onsite = owner.onsite_block_minutes
    online = owner.online_block_minutes
    return BlockConfig(
        onsite_block_minutes=default.onsite_block_minutes if onsite is None else onsite,
        online_block_minutes=default.online_block_minutes if online is None else online,
    )
