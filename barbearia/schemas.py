# barbearia/schemas.py

from pydantic import BaseModel, Field
from enum import Enum
from datetime import datetime, date, time
from typing import List, Optional


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    admin = "admin"
    client = "client"


class AppointmentStatus(str, Enum):
    scheduled = "scheduled"
    cancelled = "cancelled"


class UserPublic(BaseModel):
    id: int
    email: str
    role: UserRole
    full_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    full_name: str = Field(min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)
    avatar_url: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8, max_length=72)


class ServiceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    price: float = Field(ge=0)
    duration_minutes: int = Field(default=45, gt=0)


class ServicePublic(BaseModel):
    id: int
    name: str
    price: float
    duration_minutes: int


class BarberPublic(BaseModel):
    id: int
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class AvailabilityUpsert(BaseModel):
    date: date
    start_time: time
    end_time: time


class AvailabilityPublic(BaseModel):
    id: int
    date: date
    start_time: time
    end_time: time


class SlotDetailsPublic(BaseModel):
    id: int
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    service_name: Optional[str] = None


class SlotPublic(BaseModel):
    time: datetime
    status: str
    details: Optional[SlotDetailsPublic] = None


class ScheduleResponse(BaseModel):
    barber_id: int
    date: date
    slots: List[SlotPublic]


class ClientSlotsResponse(BaseModel):
    barber_id: int
    date: date
    configured: bool
    available: List[datetime]


class BlockCreate(BaseModel):
    start_time: datetime  # naive = shop-local wall clock


class BlockedSlotPublic(BaseModel):
    id: int
    barber_id: int
    start_time: datetime
    end_time: datetime


class SlotToggle(BaseModel):
    time: datetime


class SlotToggleResult(BaseModel):
    time: datetime
    status: str
    blocked_slot_id: Optional[int] = None


class ClientAppointmentCreate(BaseModel):
    service_id: int
    appointment_time: datetime  # naive = shop-local wall clock
    client_name: Optional[str] = Field(default=None, max_length=100)
    client_phone: Optional[str] = Field(default=None, max_length=20)


class AppointmentPublic(BaseModel):
    id: int
    barber_id: int
    client_id: int
    service_id: int
    appointment_time: datetime
    status: AppointmentStatus
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    service_name: Optional[str] = None
