"""Map domain and persistence errors to {"message": ...} JSON responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from stockroom.core.errors import StockroomError, Unauthenticated

logger = logging.getLogger(__name__)


def setup_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(StockroomError)
    async def stockroom_error_handler(request: Request, exc: StockroomError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
        return JSONResponse(content=exc.to_payload(), status_code=exc.status_code, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            content={
                "message": "Request validation failed",
                "errors": jsonable_encoder(exc.errors()),
            },
            status_code=422,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            content={"message": str(exc.detail)},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(PoolTimeoutError)
    async def pool_timeout_handler(request: Request, exc: PoolTimeoutError) -> JSONResponse:
        logger.warning("Database pool exhausted on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            content={"message": "Database is busy, try again later"},
            status_code=503,
        )

    @app.exception_handler(SQLAlchemyError)
    async def persistence_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception("Unhandled persistence error on %s %s", request.method, request.url.path)
        return JSONResponse(
            content={"message": "Internal persistence error"},
            status_code=500,
        )
