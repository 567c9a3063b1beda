"""Application-wide constants for the tutoring platform."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from enum import Enum

# Every session the engine creates occupies exactly one slot
SLOT_DURATION_MINUTES = 90


class SlotStart(Enum):
    """Fixed slot starts offered to families. Order is display order."""

    AFTERNOON = time(16, 0)
    EARLY_EVENING = time(17, 30)
    EVENING = time(19, 0)
    LATE_EVENING = time(20, 30)

    @classmethod
    def from_time(cls, value: time) -> "SlotStart | None":
        try:
            return cls(value.replace(tzinfo=None))
        except ValueError:
            return None

    @property
    def label(self) -> str:
        return self.value.strftime("%H:%M")

    @property
    def end_time(self) -> time:
        return slot_end_time(self.value)


def slot_end_time(start: time) -> time:
    """Return the end of a slot starting at ``start``."""
    anchor = datetime.combine(date(2000, 1, 1), start)
    return (anchor + timedelta(minutes=SLOT_DURATION_MINUTES)).time()


def describe_slot_starts() -> str:
    """Human-readable list of slot starts: "16:00, 17:30, 19:00, or 20:30"."""
    labels = [slot.label for slot in SlotStart]
    return ", ".join(labels[:-1]) + f", or {labels[-1]}"


# Text constraints
MAX_REASON_LENGTH = 500
MAX_NOTE_LENGTH = 500

# Appended to the request reason when staff leave a note on approval
STAFF_NOTE_SEPARATOR = " | Staff note: "
