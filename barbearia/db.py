# barbearia/db.py

import logging

from sqlmodel import SQLModel, Session, create_engine, select

from .config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

if settings.DATABASE_URL.startswith("sqlite"):
    # required for SQLite + FastAPI
    engine = create_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        pool_pre_ping=True,
    )

DEFAULT_SERVICES = [
    {"name": "Corte de Cabelo", "price": 35.0},
    {"name": "Barba", "price": 25.0},
    {"name": "Corte + Barba", "price": 55.0},
    {"name": "Pezinho", "price": 10.0},
]


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session


def seed_services(session: Session) -> int:
    from .models import Service

    if session.exec(select(Service)).first() is not None:
        return 0
    for data in DEFAULT_SERVICES:
        session.add(Service(**data))
    session.commit()
    return len(DEFAULT_SERVICES)


def seed_admin(session: Session, settings=None) -> bool:
    """Create the configured barber account once. Returns True when it was added."""
    from .auth import hash_password
    from .models import Profile

    settings = settings or get_settings()
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return False
    if session.exec(select(Profile).where(Profile.email == settings.ADMIN_EMAIL)).first() is not None:
        return False

    session.add(Profile(
        email=settings.ADMIN_EMAIL,
        password_hash=hash_password(settings.ADMIN_PASSWORD),
        full_name=settings.ADMIN_NAME,
        role="admin",
    ))
    session.commit()
    logger.info("Seeded barber account %s", settings.ADMIN_EMAIL)
    return True


def init_db(bind=None):
    """Create all tables, then seed the service catalogue and the configured barber."""
    from . import models  # noqa: F401  registers the tables

    bind = bind or engine
    SQLModel.metadata.create_all(bind)
    with Session(bind) as session:
        added = seed_services(session)
        seed_admin(session)
    if added:
        logger.info("Seeded %d default services", added)
