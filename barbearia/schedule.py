# barbearia/schedule.py
"""
Store reads feeding the slot engine.

Every consumer (client picker, barber schedule, block toggling, booking)
goes through `day_slots`, so there is one fetch and one computation per
request and no per-route variants of the slot walk.
"""

from datetime import date, datetime, tzinfo
from typing import Optional

from sqlmodel import Session, select, col

from .config import get_settings
from .core import as_utc, day_bounds_utc, shop_timezone
from .models import Appointment, BarberAvailability, BlockedSlot, Profile, Service
from .slots import (
    BlockDetails,
    BlockedEntry,
    BookedEntry,
    BookingDetails,
    NoAvailabilityConfigured,
    Slot,
    SlotsResult,
    compute_slots,
    find_slot,
)


def get_window(session: Session, barber_id: int, target_date: date) -> Optional[BarberAvailability]:
    return session.exec(
        select(BarberAvailability)
        .where(BarberAvailability.barber_id == barber_id)
        .where(BarberAvailability.date == target_date)
    ).first()


def get_barber(session: Session, barber_id: int) -> Optional[Profile]:
    profile = session.get(Profile, barber_id)
    if profile is None or profile.role != "admin":
        return None
    return profile


def scheduled_appointments(session: Session, barber_id: int, target_date: date, tz: tzinfo) -> list[Appointment]:
    start, end = day_bounds_utc(target_date, tz)
    return session.exec(
        select(Appointment)
        .where(Appointment.barber_id == barber_id)
        .where(Appointment.status == "scheduled")
        .where(Appointment.appointment_time >= start)
        .where(Appointment.appointment_time < end)
        .order_by(Appointment.appointment_time)
    ).all()


def blocked_slots(session: Session, barber_id: int, target_date: date, tz: tzinfo) -> list[BlockedSlot]:
    start, end = day_bounds_utc(target_date, tz)
    return session.exec(
        select(BlockedSlot)
        .where(BlockedSlot.barber_id == barber_id)
        .where(BlockedSlot.start_time >= start)
        .where(BlockedSlot.start_time < end)
    ).all()


def display_names(session: Session, appointments: list[Appointment]) -> tuple[dict, dict]:
    """(client_id -> full_name, service_id -> name) for the given appointments."""
    client_ids = {a.client_id for a in appointments}
    service_ids = {a.service_id for a in appointments}
    clients = {}
    services = {}
    if client_ids:
        for p in session.exec(select(Profile).where(col(Profile.id).in_(sorted(client_ids)))).all():
            clients[p.id] = p.full_name
    if service_ids:
        for s in session.exec(select(Service).where(col(Service.id).in_(sorted(service_ids)))).all():
            services[s.id] = s.name
    return clients, services


def booking_details(appt: Appointment, clients: dict, services: dict) -> BookingDetails:
    # profile name first, then the name captured at booking time
    return BookingDetails(
        appointment_id=appt.id,
        client_name=clients.get(appt.client_id) or appt.client_name,
        client_phone=appt.client_phone,
        service_name=services.get(appt.service_id),
    )


def day_slots(
    session: Session,
    barber_id: int,
    target_date: date,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> SlotsResult:
    tz = tz or shop_timezone()
    window = get_window(session, barber_id, target_date)
    if window is None:
        return compute_slots(None, [], [], target_date, now, tz=tz)

    appointments = scheduled_appointments(session, barber_id, target_date, tz)
    clients, services = display_names(session, appointments)

    return compute_slots(
        window,
        [BookedEntry(at=a.appointment_time, details=booking_details(a, clients, services)) for a in appointments],
        [BlockedEntry(at=b.start_time, id=b.id) for b in blocked_slots(session, barber_id, target_date, tz)],
        target_date,
        now,
        slot_duration_minutes=get_settings().SLOT_DURATION_MINUTES,
        tz=tz,
    )


def slot_at(
    session: Session,
    barber_id: int,
    instant: datetime,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> tuple[SlotsResult, Optional[Slot]]:
    """
    Fresh engine output for the civil day of `instant` (UTC), plus the
    slot starting at that instant if there is one.
    """
    tz = tz or shop_timezone()
    result = day_slots(session, barber_id, local_time(instant, tz).date(), now, tz)
    if isinstance(result, NoAvailabilityConfigured):
        return result, None
    return result, find_slot(result, instant, tz)


def slot_public(slot: Slot) -> dict:
    details = None
    if isinstance(slot.details, BookingDetails):
        details = {
            "id": slot.details.appointment_id,
            "client_name": slot.details.client_name,
            "client_phone": slot.details.client_phone,
            "service_name": slot.details.service_name,
        }
    elif isinstance(slot.details, BlockDetails):
        details = {"id": slot.details.blocked_slot_id}
    return {"time": slot.time, "status": slot.status.value, "details": details}


def local_time(stored: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Stored UTC instant as an aware shop-local datetime."""
    return as_utc(stored).astimezone(tz or shop_timezone())
