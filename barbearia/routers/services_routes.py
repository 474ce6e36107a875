# barbearia/routers/services_routes.py

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from barbearia.db import get_session
from barbearia.models import Profile, Service
from barbearia.schemas import ServiceCreate, ServicePublic, BarberPublic
from barbearia.auth import get_current_user
from barbearia.deps import require_role

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["catalogue"],
)


@router.get("/services", response_model=List[ServicePublic])
def list_services(session: Session = Depends(get_session)):
    return session.exec(
        select(Service).where(Service.is_active == True).order_by(Service.name)  # noqa: E712
    ).all()


@router.post("/services", response_model=ServicePublic, status_code=201)
def create_service(
    service: ServiceCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    db_service = Service(**service.model_dump())
    session.add(db_service)
    session.commit()
    session.refresh(db_service)
    logger.info("Service %s created by %s", db_service.id, current_user["id"])
    return db_service


@router.get("/barbers", response_model=List[BarberPublic])
def list_barbers(session: Session = Depends(get_session)):
    return session.exec(
        select(Profile).where(Profile.role == "admin").order_by(Profile.full_name)
    ).all()
