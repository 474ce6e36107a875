# barbearia/main.py

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .config import get_settings
from .db import init_db
from .errors import register_error_handlers
from .routers import appointments_routes, auth_routes, barbers_routes, services_routes, users_routes

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Barbearia AF API started (timezone %s)", settings.TIMEZONE)
    yield


app = FastAPI(title="Barbearia AF", lifespan=lifespan)

register_error_handlers(app)

app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(services_routes.router)
app.include_router(barbers_routes.router)
app.include_router(appointments_routes.router)


@app.get("/health")
def health_check():
    return {"status": "ok"}


def run():
    """`barbearia` console script: serve the API with uvicorn."""
    uvicorn.run("barbearia.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
