# barbearia/routers/appointments_routes.py

import logging
from datetime import date, datetime
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from barbearia.db import get_session
from barbearia.config import get_settings
from barbearia.core import can_client_cancel, day_bounds_utc, shop_timezone, to_storage
from barbearia.models import Appointment, Service
from barbearia.schemas import AppointmentPublic, ClientAppointmentCreate
from barbearia.auth import get_current_user
from barbearia.deps import require_role, get_now
from barbearia.schedule import display_names, get_barber, local_time, slot_at
from barbearia.slots import NoAvailabilityConfigured, SlotStatus

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(
    tags=["appointments"],
)

STATUS_FILTERS = ("scheduled", "cancelled", "all")


def _appointment_public(appt: Appointment, clients: dict, services: dict) -> dict:
    return {
        "id": appt.id,
        "barber_id": appt.barber_id,
        "client_id": appt.client_id,
        "service_id": appt.service_id,
        "appointment_time": local_time(appt.appointment_time),
        "status": appt.status,
        "client_name": clients.get(appt.client_id) or appt.client_name,
        "client_phone": appt.client_phone,
        "service_name": services.get(appt.service_id),
    }


def _public_list(session: Session, appts: list[Appointment]) -> list[dict]:
    clients, services = display_names(session, appts)
    return [_appointment_public(a, clients, services) for a in appts]


def _check_status_filter(status: str):
    if status not in STATUS_FILTERS:
        raise HTTPException(status_code=422, detail="status must be 'scheduled', 'cancelled', or 'all'")


@router.post("/barbers/{barber_id}/appointments", response_model=AppointmentPublic, status_code=201)
def client_create_appointment(
    barber_id: int,
    appt: ClientAppointmentCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    require_role(current_user, "client")

    # 1) Validate barber and service
    if get_barber(session, barber_id) is None:
        raise HTTPException(status_code=404, detail="Barber not found")

    service = session.get(Service, appt.service_id)
    if service is None or not service.is_active:
        raise HTTPException(status_code=422, detail="Service not available")

    # 2) The requested time must be an available slot of a fresh computation
    instant = to_storage(appt.appointment_time)
    result, slot = slot_at(session, barber_id, instant, now)
    if isinstance(result, NoAvailabilityConfigured):
        raise HTTPException(status_code=404, detail="Barber has no availability on this date")
    if slot is None:
        raise HTTPException(status_code=422, detail="Not a bookable time")
    if slot.status != SlotStatus.available:
        logger.warning("Client %s tried to book %s slot %s", current_user["id"], slot.status.value, slot.time)
        raise HTTPException(status_code=409, detail="Slot not available")

    # 3) Create and save appointment; name and phone are captured as given now
    db_appt = Appointment(
        barber_id=barber_id,
        client_id=current_user["id"],
        service_id=service.id,
        appointment_time=instant,
        status="scheduled",
        client_name=appt.client_name or current_user["full_name"],
        client_phone=appt.client_phone or current_user["phone"],
    )

    session.add(db_appt)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Slot not available")

    session.refresh(db_appt)
    logger.info("Appointment %s booked with barber %s at %s", db_appt.id, barber_id, slot.time)
    return _appointment_public(db_appt, {}, {service.id: service.name})


@router.patch("/appointments/{appt_id}/cancel", response_model=AppointmentPublic)
def cancel_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    # 1) Find the appointment in DB
    target = session.get(Appointment, appt_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Appointment not found")

    # 2) Authorization: only the barber or the client who booked
    user_id = current_user["id"]
    if user_id not in (target.barber_id, target.client_id):
        raise HTTPException(status_code=403, detail="Forbidden")

    # 3) Already cancelled?
    if target.status == "cancelled":
        raise HTTPException(status_code=409, detail="Appointment already cancelled")

    # 4) The barber may cancel at any time, the client only in advance
    if user_id != target.barber_id and not can_client_cancel(
        target.appointment_time, now, settings.CLIENT_CANCEL_MIN_HOURS
    ):
        raise HTTPException(
            status_code=409,
            detail=f"Appointments can only be cancelled at least {settings.CLIENT_CANCEL_MIN_HOURS} hours in advance",
        )

    # 5) Cancel and persist
    target.status = "cancelled"
    session.add(target)
    session.commit()
    session.refresh(target)
    logger.info("Appointment %s cancelled by user %s", target.id, user_id)

    return _public_list(session, [target])[0]


@router.get("/barbers/me/appointments", response_model=List[AppointmentPublic])
def list_barber_appointments(
    status: Optional[str] = "scheduled",
    on_date: Optional[date] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")
    _check_status_filter(status)

    stmt = select(Appointment).where(Appointment.barber_id == current_user["id"])

    if on_date is not None:
        day_start, day_end = day_bounds_utc(on_date, shop_timezone())
        stmt = stmt.where(Appointment.appointment_time >= day_start).where(Appointment.appointment_time < day_end)

    if status != "all":
        stmt = stmt.where(Appointment.status == status)

    appts = session.exec(stmt.order_by(Appointment.appointment_time)).all()
    return _public_list(session, appts)


@router.get("/clients/me/appointments", response_model=List[AppointmentPublic])
def list_my_appointments(
    status: Optional[str] = "scheduled",
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "client")
    _check_status_filter(status)

    stmt = select(Appointment).where(Appointment.client_id == current_user["id"])

    if status != "all":
        stmt = stmt.where(Appointment.status == status)

    appts = session.exec(stmt.order_by(Appointment.appointment_time)).all()
    return _public_list(session, appts)
