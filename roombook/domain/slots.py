"""Bookable day window, slot partitioning, and the interval overlap predicate.

All values are resource-local wall-clock strings. No timezone conversion is
performed here: zero-padded ``HH:MM`` strings compare lexically in the same
order as the times they denote, so overlap checks operate on them directly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from roombook.domain.constraints import SlotConfig, validate_slot_config
from roombook.domain.models import TimeInterval


_CLOCK_PATTERN = re.compile(r"^(\d{2}):(\d{2})$")


def parse_clock(value: str) -> int:
    """Return minutes since midnight for a ``HH:MM`` string."""
    match = _CLOCK_PATTERN.match(value or "")
    if match is None:
        raise ValueError(f"time must follow HH:MM format, got {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 24 or minutes > 59 or (hours == 24 and minutes != 0):
        raise ValueError(f"time is out of range: {value!r}")
    return hours * 60 + minutes


def format_clock(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_12_hour(value: str) -> str:
    """Render ``HH:MM`` as a 12-hour label, e.g. ``13:00`` -> ``1:00 PM``."""
    if not value:
        return ""
    hour = parse_clock(value) // 60
    period = "PM" if 12 <= hour < 24 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:00 {period}"


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """Strict half-open overlap; touching endpoints do not overlap."""
    return a.start < b.end and b.start < a.end


@dataclass(frozen=True)
class SlotModel:
    day_start_hour: int = 7
    day_end_hour: int = 18
    slot_hours: int = 1

    def __post_init__(self) -> None:
        validate_slot_config(
            SlotConfig(
                day_start_hour=self.day_start_hour,
                day_end_hour=self.day_end_hour,
                slot_hours=self.slot_hours,
            )
        )

    @property
    def window(self) -> TimeInterval:
        return TimeInterval(
            format_clock(self.day_start_hour * 60),
            format_clock(self.day_end_hour * 60),
        )

    @property
    def day_hours(self) -> int:
        return self.day_end_hour - self.day_start_hour

    def slots_for_day(self) -> tuple[TimeInterval, ...]:
        return tuple(
            TimeInterval(format_clock(hour * 60), format_clock((hour + self.slot_hours) * 60))
            for hour in range(self.day_start_hour, self.day_end_hour, self.slot_hours)
        )

    def clipped_hours(self, interval: TimeInterval) -> float:
        """Hours of `interval` that fall inside the bookable window."""
        window = self.window
        if not overlaps(interval, window):
            return 0.0
        start = max(interval.start, window.start)
        end = min(interval.end, window.end)
        return TimeInterval(start, end).hours
