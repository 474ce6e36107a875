# barbearia/errors.py
"""
Store failure handling.

Routes raise HTTPException for domain refusals themselves. What reaches this
module is the store misbehaving (unreachable, locked, permission denied):
it is logged and answered with a message the client can show.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

STATUS_STORE_UNAVAILABLE = 503
MSG_STORE_UNAVAILABLE = "Store unavailable, try again"


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Store error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=STATUS_STORE_UNAVAILABLE,
        content={"detail": MSG_STORE_UNAVAILABLE},
    )


def register_error_handlers(app) -> None:
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
