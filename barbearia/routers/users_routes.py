# barbearia/routers/users_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barbearia.db import get_session
from barbearia.models import Profile
from barbearia.schemas import UserCreate, UserPublic, UserRole, ProfileUpdate, PasswordChange
from barbearia.auth import get_current_user, hash_password, verify_password, public_user

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["users"],
)


@router.get("/me", response_model=UserPublic)
def me(current_user: dict = Depends(get_current_user)):
    return current_user


@router.patch("/me", response_model=UserPublic)
def update_me(
    update: ProfileUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    profile = session.get(Profile, current_user["id"])
    for field, value in update.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)

    session.add(profile)
    session.commit()
    session.refresh(profile)
    return public_user(profile)


@router.post("/me/password", status_code=204)
def change_password(
    change: PasswordChange,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    profile = session.get(Profile, current_user["id"])
    if not verify_password(change.current_password, profile.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    profile.password_hash = hash_password(change.new_password)
    session.add(profile)
    session.commit()
    logger.info("Password changed for user %s", profile.id)


@router.post("/users", status_code=201, response_model=UserPublic)
def create_user(
    user: UserCreate,
    session: Session = Depends(get_session),
):
    # 1) Check if email already exists
    existing = session.exec(
        select(Profile).where(Profile.email == user.email)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    # 2) Create profile in DB; sign-up always makes a client, barbers are seeded
    db_user = Profile(
        email=user.email,
        password_hash=hash_password(user.password),
        full_name=user.full_name,
        phone=user.phone,
        role=UserRole.client.value,
    )

    session.add(db_user)
    session.commit()
    session.refresh(db_user)  # fills db_user.id
    logger.info("Registered %s user %s", db_user.role, db_user.id)

    # 3) Return public user
    return public_user(db_user)
