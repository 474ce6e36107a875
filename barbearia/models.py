# barbearia/models.py

from typing import Optional
from datetime import datetime, date as Date, time, timezone

from sqlalchemy import DateTime, Index, UniqueConstraint, text
from sqlmodel import SQLModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Profile(SQLModel, table=True):
    __tablename__ = "profiles"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str = "client"  # client or admin (admins are the barbers)


class Service(SQLModel, table=True):
    __tablename__ = "services"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    price: float
    duration_minutes: int = 45
    is_active: bool = True


class BarberAvailability(SQLModel, table=True):
    __tablename__ = "barber_availability"
    __table_args__ = (
        UniqueConstraint("barber_id", "date", name="uq_barber_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    barber_id: int = Field(foreign_key="profiles.id", index=True)
    date: Date = Field(index=True)
    start_time: time
    end_time: time


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    # one scheduled appointment per barber and instant; cancelled rows may repeat
    __table_args__ = (
        Index(
            "uq_barber_scheduled_time",
            "barber_id",
            "appointment_time",
            unique=True,
            sqlite_where=text("status = 'scheduled'"),
            postgresql_where=text("status = 'scheduled'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    barber_id: int = Field(foreign_key="profiles.id", index=True)
    client_id: int = Field(foreign_key="profiles.id", index=True)
    service_id: int = Field(foreign_key="services.id")
    appointment_time: datetime = Field(sa_type=DateTime(timezone=True))  # UTC
    status: str = "scheduled"  # scheduled or cancelled
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow, sa_type=DateTime(timezone=True))


class BlockedSlot(SQLModel, table=True):
    __tablename__ = "blocked_slots"
    __table_args__ = (
        UniqueConstraint("barber_id", "start_time", name="uq_barber_block_start"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    barber_id: int = Field(foreign_key="profiles.id", index=True)
    start_time: datetime = Field(sa_type=DateTime(timezone=True))  # UTC
    end_time: datetime = Field(sa_type=DateTime(timezone=True))
