# barbearia/routers/barbers_routes.py

import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from barbearia.db import get_session
from barbearia.config import get_settings
from barbearia.core import shop_timezone, to_storage
from barbearia.models import BarberAvailability, BlockedSlot
from barbearia.schemas import (
    AvailabilityUpsert,
    AvailabilityPublic,
    BlockCreate,
    BlockedSlotPublic,
    ClientSlotsResponse,
    ScheduleResponse,
    SlotToggle,
    SlotToggleResult,
)
from barbearia.auth import get_current_user
from barbearia.deps import require_role, get_now
from barbearia.schedule import day_slots, get_barber, get_window, local_time, slot_at, slot_public
from barbearia.slots import NoAvailabilityConfigured, Slot, SlotStatus, available_slots

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(
    prefix="/barbers",
    tags=["barbers"],
)

NOT_CONFIGURED = "Availability not configured for this date; set your working hours first"


# ---- working hours -------------------------------------------------------

@router.put("/me/availability", response_model=AvailabilityPublic)
def upsert_availability(
    availability: AvailabilityUpsert,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")
    if availability.start_time >= availability.end_time:
        raise HTTPException(status_code=422, detail="start_time must be before end_time")

    barber_id = current_user["id"]

    # DB upsert: one window per barber and date
    db_window = get_window(session, barber_id, availability.date)
    if db_window is None:
        db_window = BarberAvailability(
            barber_id=barber_id,
            date=availability.date,
            start_time=availability.start_time,
            end_time=availability.end_time,
        )
    else:
        db_window.start_time = availability.start_time
        db_window.end_time = availability.end_time

    session.add(db_window)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Availability was changed concurrently, reload and retry")

    session.refresh(db_window)
    logger.info(
        "Barber %s availability %s set to %s-%s",
        barber_id, db_window.date, db_window.start_time, db_window.end_time,
    )
    return db_window


@router.get("/me/availability", response_model=List[AvailabilityPublic])
def list_availability(
    from_date: Optional[date] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    stmt = select(BarberAvailability).where(BarberAvailability.barber_id == current_user["id"])
    if from_date is not None:
        stmt = stmt.where(BarberAvailability.date >= from_date)

    return session.exec(stmt.order_by(BarberAvailability.date)).all()


@router.delete("/me/availability/{on_date}", status_code=204)
def delete_availability(
    on_date: date,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    db_window = get_window(session, current_user["id"], on_date)
    if db_window is None:
        raise HTTPException(status_code=404, detail="No availability for this date")

    session.delete(db_window)
    session.commit()
    logger.info("Barber %s availability %s removed", current_user["id"], on_date)


# ---- slot views ----------------------------------------------------------

@router.get("/me/schedule", response_model=ScheduleResponse)
def my_schedule(
    on_date: date,
    status: Optional[SlotStatus] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    require_role(current_user, "admin")

    result = day_slots(session, current_user["id"], on_date, now)
    if isinstance(result, NoAvailabilityConfigured):
        raise HTTPException(status_code=404, detail=NOT_CONFIGURED)

    slots = [s for s in result if status is None or s.status == status]
    return {
        "barber_id": current_user["id"],
        "date": on_date,
        "slots": [slot_public(s) for s in slots],
    }


@router.get("/{barber_id}/slots", response_model=ClientSlotsResponse)
def barber_slots(
    barber_id: int,
    on_date: date,
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    if get_barber(session, barber_id) is None:
        raise HTTPException(status_code=404, detail="Barber not found")

    result = day_slots(session, barber_id, on_date, now)
    return {
        "barber_id": barber_id,
        "date": on_date,
        "configured": not isinstance(result, NoAvailabilityConfigured),
        "available": [s.time for s in available_slots(result)],
    }


# ---- blocks --------------------------------------------------------------

def _writable_slot(session: Session, barber_id: int, instant: datetime, now: datetime) -> Slot:
    result, slot = slot_at(session, barber_id, instant, now)
    if isinstance(result, NoAvailabilityConfigured):
        raise HTTPException(status_code=404, detail=NOT_CONFIGURED)
    if slot is None:
        raise HTTPException(status_code=422, detail="Not a slot of this day's working hours")
    return slot


def _block(session: Session, barber_id: int, instant: datetime) -> BlockedSlot:
    db_block = BlockedSlot(
        barber_id=barber_id,
        start_time=instant,
        end_time=instant + timedelta(minutes=settings.SLOT_DURATION_MINUTES),
    )
    session.add(db_block)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Slot already blocked")

    session.refresh(db_block)
    logger.info("Barber %s blocked slot %s (block %s)", barber_id, instant, db_block.id)
    return db_block


def _block_public(db_block: BlockedSlot) -> dict:
    tz = shop_timezone()
    return {
        "id": db_block.id,
        "barber_id": db_block.barber_id,
        "start_time": local_time(db_block.start_time, tz),
        "end_time": local_time(db_block.end_time, tz),
    }


@router.post("/me/blocks", response_model=BlockedSlotPublic, status_code=201)
def create_block(
    block: BlockCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    require_role(current_user, "admin")
    barber_id = current_user["id"]
    instant = to_storage(block.start_time)

    # A block may only cover a slot that is currently available
    slot = _writable_slot(session, barber_id, instant, now)
    if slot.status == SlotStatus.booked:
        logger.warning("Barber %s tried to block booked slot %s", barber_id, instant)
        raise HTTPException(status_code=409, detail="Slot is booked")
    if slot.status == SlotStatus.blocked:
        raise HTTPException(status_code=409, detail="Slot already blocked")

    return _block_public(_block(session, barber_id, instant))


@router.delete("/me/blocks/{block_id}", status_code=204)
def delete_block(
    block_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    db_block = session.get(BlockedSlot, block_id)
    if db_block is None or db_block.barber_id != current_user["id"]:
        raise HTTPException(status_code=404, detail="Blocked slot not found")

    start_time = db_block.start_time
    session.delete(db_block)
    session.commit()
    logger.info("Barber %s unblocked slot %s", current_user["id"], start_time)


@router.post("/me/slots/toggle", response_model=SlotToggleResult)
def toggle_slot(
    toggle: SlotToggle,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    require_role(current_user, "admin")
    barber_id = current_user["id"]
    instant = to_storage(toggle.time)

    slot = _writable_slot(session, barber_id, instant, now)

    if slot.status == SlotStatus.booked:
        raise HTTPException(status_code=409, detail="Slot is booked")

    if slot.status == SlotStatus.blocked:
        db_block = session.get(BlockedSlot, slot.details.blocked_slot_id)
        session.delete(db_block)
        session.commit()
        logger.info("Barber %s unblocked slot %s", barber_id, instant)
        return {"time": slot.time, "status": SlotStatus.available.value, "blocked_slot_id": None}

    db_block = _block(session, barber_id, instant)
    return {"time": slot.time, "status": SlotStatus.blocked.value, "blocked_slot_id": db_block.id}
