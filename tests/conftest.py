import os

# before anything reads the settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TIMEZONE"] = "America/Sao_Paulo"

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine, select

from barbearia.main import app
from barbearia.auth import create_access_token, hash_password
from barbearia.db import get_session, seed_services
from barbearia.deps import get_now
from barbearia.models import Profile, Service

TZ = ZoneInfo("America/Sao_Paulo")
NOW = datetime(2025, 3, 10, 8, 0, tzinfo=TZ)  # Monday 08:00 at the shop
TOMORROW = "2025-03-11"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        seed_services(session)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def clock():
    # mutable so a test can move time forward between requests
    return {"now": NOW}


@pytest.fixture
def client(engine, clock):
    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_now] = lambda: clock["now"]
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    def _make(email, role="client", full_name="Test User", phone=None, password="secret123"):
        profile = Profile(
            email=email,
            password_hash=hash_password(password),
            role=role,
            full_name=full_name,
            phone=phone,
        )
        session.add(profile)
        session.commit()
        session.refresh(profile)
        token = create_access_token({"sub": email})
        return profile, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def barber(make_user):
    return make_user("barbeiro@barbearia.com", role="admin", full_name="Seu Zé")


@pytest.fixture
def customer(make_user):
    return make_user("cliente@teste.com", full_name="Cliente Teste", phone="11999990000")


@pytest.fixture
def haircut(session):
    return session.exec(select(Service).where(Service.name == "Corte de Cabelo")).one()


@pytest.fixture
def open_tomorrow(client, barber):
    """Barber works 09:00-10:30 tomorrow: slots at 09:00 and 09:45."""
    _, headers = barber
    res = client.put(
        "/barbers/me/availability",
        json={"date": TOMORROW, "start_time": "09:00", "end_time": "10:30"},
        headers=headers,
    )
    assert res.status_code == 200
    return res.json()


def local(iso: str) -> datetime:
    return datetime.fromisoformat(iso.replace("Z", "+00:00")).astimezone(TZ)
