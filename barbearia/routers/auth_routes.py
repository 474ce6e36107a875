# barbearia/routers/auth_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session, select

from barbearia.db import get_session
from barbearia.models import Profile
from barbearia.schemas import Token
from barbearia.auth import verify_password, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
):
    # Swagger OAuth2 "password" flow uses the "username" field for the email
    email = form_data.username
    password = form_data.password

    profile = session.exec(
        select(Profile).where(Profile.email == email)
    ).first()

    if profile is None or not verify_password(password, profile.password_hash):
        logger.warning("Failed login for %s", email)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": profile.email})
    return {"access_token": token, "token_type": "bearer"}
