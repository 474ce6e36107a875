from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from barbearia import db
from barbearia.auth import verify_password
from barbearia.config import Settings
from barbearia.main import app
from barbearia.db import get_session, init_db, seed_admin
from barbearia.models import Profile


def register(client, email="novo@teste.com", password="secret123", **extra):
    body = {"email": email, "password": password, "full_name": "Novo Cliente", "phone": "11988887777"}
    body.update(extra)
    return client.post("/users", json=body)


def login(client, email, password):
    return client.post("/auth/login", data={"username": email, "password": password})


def test_register_and_login(client):
    res = register(client)
    assert res.status_code == 201
    assert res.json()["role"] == "client"
    assert res.json()["full_name"] == "Novo Cliente"

    res = login(client, "novo@teste.com", "secret123")
    assert res.status_code == 200
    token = res.json()["access_token"]

    me = client.get("/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "novo@teste.com"
    assert me.json()["phone"] == "11988887777"


def test_duplicate_email(client):
    assert register(client).status_code == 201
    assert register(client).status_code == 409


def test_short_password_rejected(client):
    assert register(client, password="short").status_code == 422


def test_bad_credentials(client):
    register(client)

    assert login(client, "novo@teste.com", "wrong-password").status_code == 401
    assert login(client, "nobody@teste.com", "secret123").status_code == 401


def test_invalid_token(client):
    res = client.get("/me", headers={"Authorization": "Bearer not-a-token"})
    assert res.status_code == 401


def test_update_profile(client, customer):
    _, headers = customer

    res = client.patch("/me", json={"full_name": "Cliente Renomeado"}, headers=headers)

    assert res.status_code == 200
    assert res.json()["full_name"] == "Cliente Renomeado"
    assert res.json()["phone"] == "11999990000"


def test_change_password(client, customer):
    profile, headers = customer

    res = client.post(
        "/me/password",
        json={"current_password": "wrong-one", "new_password": "another123"},
        headers=headers,
    )
    assert res.status_code == 400

    res = client.post(
        "/me/password",
        json={"current_password": "secret123", "new_password": "another123"},
        headers=headers,
    )
    assert res.status_code == 204
    assert login(client, profile.email, "another123").status_code == 200
    assert login(client, profile.email, "secret123").status_code == 401


def test_catalogue(client, barber, customer):
    services = client.get("/services").json()
    assert [s["name"] for s in services] == ["Barba", "Corte + Barba", "Corte de Cabelo", "Pezinho"]

    barbers = client.get("/barbers").json()
    assert [b["full_name"] for b in barbers] == ["Seu Zé"]


def test_only_barbers_add_services(client, barber, customer):
    body = {"name": "Sobrancelha", "price": 15.0}

    assert client.post("/services", json=body, headers=customer[1]).status_code == 403

    res = client.post("/services", json=body, headers=barber[1])
    assert res.status_code == 201
    assert res.json()["duration_minutes"] == 45


def test_store_failure_is_reported(client):
    def broken_session():
        class Broken:
            def exec(self, *args, **kwargs):
                raise OperationalError("SELECT", {}, Exception("database is locked"))

        yield Broken()

    app.dependency_overrides[get_session] = broken_session

    res = client.get("/services")

    assert res.status_code == 503
    assert res.json() == {"detail": "Store unavailable, try again"}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_registration_always_makes_a_client(client):
    res = register(client, role="admin")
    assert res.status_code == 201
    assert res.json()["role"] == "client"

    token = login(client, "novo@teste.com", "secret123").json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    assert client.post("/services", json={"name": "Sobrancelha", "price": 15.0}, headers=headers).status_code == 403
    assert client.get("/barbers").json() == []


def test_seed_admin_creates_the_barber_once(session):
    settings = Settings(ADMIN_EMAIL="dono@barbearia.com", ADMIN_PASSWORD="navalha123", ADMIN_NAME="Dono")

    assert seed_admin(session, settings) is True
    assert seed_admin(session, settings) is False

    profile = session.exec(select(Profile).where(Profile.email == "dono@barbearia.com")).one()
    assert profile.role == "admin"
    assert profile.full_name == "Dono"
    assert verify_password("navalha123", profile.password_hash)


def test_seed_admin_needs_email_and_password(session):
    assert seed_admin(session, Settings(ADMIN_EMAIL="dono@barbearia.com")) is False
    assert session.exec(select(Profile)).all() == []


def test_init_db_seeds_the_configured_barber(engine, monkeypatch):
    settings = Settings(ADMIN_EMAIL="dono@barbearia.com", ADMIN_PASSWORD="navalha123")
    monkeypatch.setattr(db, "get_settings", lambda: settings)

    init_db(engine)
    init_db(engine)

    with Session(engine) as session:
        barbers = session.exec(select(Profile).where(Profile.role == "admin")).all()
    assert [b.email for b in barbers] == ["dono@barbearia.com"]
