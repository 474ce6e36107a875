# barbearia/slots.py
"""
Slot engine.

Given a barber's working window for one civil date, the scheduled
appointments and the manual blocks of that date, produce the ordered list of
slots covering the window. Pure: no store access, no clock reads. Callers
fetch, call `compute_slots`, write, and call it again.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from enum import Enum
from typing import Iterable, Optional, Protocol, Union

from .core import as_utc, local_on_date, truncate_to_minute

DEFAULT_SLOT_DURATION_MINUTES = 45


class SlotStatus(str, Enum):
    available = "available"
    booked = "booked"
    blocked = "blocked"


class WorkingHours(Protocol):
    start_time: time
    end_time: time


@dataclass(frozen=True)
class WorkingWindow:
    start_time: time
    end_time: time


@dataclass(frozen=True)
class BookingDetails:
    appointment_id: int
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    service_name: Optional[str] = None


@dataclass(frozen=True)
class BlockDetails:
    blocked_slot_id: int


@dataclass(frozen=True)
class BookedEntry:
    at: datetime
    details: BookingDetails


@dataclass(frozen=True)
class BlockedEntry:
    at: datetime
    id: int


@dataclass(frozen=True)
class Slot:
    time: datetime
    status: SlotStatus
    details: Union[BookingDetails, BlockDetails, None] = None


@dataclass(frozen=True)
class NoAvailabilityConfigured:
    """No working window exists for the date. Not the same thing as an empty day."""
    target_date: date


SlotsResult = Union[list[Slot], NoAvailabilityConfigured]

# An appointment is a stronger commitment than an operator block: when one
# instant carries both, the first status in this tuple wins.
STATUS_PRECEDENCE = (SlotStatus.booked, SlotStatus.blocked)


def compute_slots(
    working_window: Optional[WorkingHours],
    appointments: Iterable[BookedEntry],
    blocked_slots: Iterable[BlockedEntry],
    target_date: date,
    now: datetime,
    slot_duration_minutes: int = DEFAULT_SLOT_DURATION_MINUTES,
    tz: tzinfo = timezone.utc,
) -> SlotsResult:
    """
    Build the slots of `target_date` in ascending order.

    Window bounds are composed from the date and the times of day directly in
    `tz`. Entry instants are recombined with `target_date` through
    `local_on_date` before lookup. Past slots with no booking or block are
    dropped; booked and blocked slots stay visible whatever `now` is.

    Returns `NoAvailabilityConfigured` when `working_window` is None and an
    empty list for a degenerate window (start >= end) or a non-positive
    duration, which would never advance.
    """
    if working_window is None:
        return NoAvailabilityConfigured(target_date)
    if working_window.start_time >= working_window.end_time or slot_duration_minutes <= 0:
        return []

    window_start = truncate_to_minute(datetime.combine(target_date, working_window.start_time, tzinfo=tz))
    window_end = truncate_to_minute(datetime.combine(target_date, working_window.end_time, tzinfo=tz))

    lookups = {
        SlotStatus.booked: _index(appointments, target_date, tz, lambda e: e.details),
        SlotStatus.blocked: _index(blocked_slots, target_date, tz, lambda e: BlockDetails(blocked_slot_id=e.id)),
    }

    if now.tzinfo is None:
        now = now.replace(tzinfo=tz)
    cutoff = truncate_to_minute(now)
    step = timedelta(minutes=slot_duration_minutes)

    slots: list[Slot] = []
    current = window_start
    while current < window_end:
        slot = _label(current, lookups)
        if slot is not None:
            slots.append(slot)
        elif current > cutoff:
            slots.append(Slot(time=current, status=SlotStatus.available))
        current = truncate_to_minute(current + step)

    return slots


def available_slots(result: SlotsResult) -> list[Slot]:
    """Client view: anything not available is simply not offered."""
    if isinstance(result, NoAvailabilityConfigured):
        return []
    return [s for s in result if s.status == SlotStatus.available]


def partition_slots(slots: Iterable[Slot]) -> dict[SlotStatus, list[Slot]]:
    parts: dict[SlotStatus, list[Slot]] = {status: [] for status in SlotStatus}
    for slot in slots:
        parts[slot.status].append(slot)
    return parts


def find_slot(slots: Iterable[Slot], instant: datetime, tz: tzinfo) -> Optional[Slot]:
    """Slot starting exactly at `instant` (naive means UTC, as SQLite returns it)."""
    local = as_utc(instant).astimezone(tz)
    for slot in slots:
        if slot.time == local:
            return slot
    return None


def _index(entries, target_date: date, tz: tzinfo, details_of) -> dict:
    index = {}
    for entry in entries:
        index.setdefault(local_on_date(entry.at, target_date, tz), details_of(entry))
    return index


def _label(current: datetime, lookups: dict) -> Optional[Slot]:
    for status in STATUS_PRECEDENCE:
        details = lookups[status].get(current)
        if details is not None:
            return Slot(time=current, status=status, details=details)
    return None
