# barbearia/deps.py

from datetime import datetime

from fastapi import HTTPException

from .core import shop_timezone


def require_role(user: dict, role: str):
    if user["role"] != role:
        raise HTTPException(status_code=403, detail="Forbidden")


# The only place the wall clock is read; tests override it.
def get_now() -> datetime:
    return datetime.now(shop_timezone())
