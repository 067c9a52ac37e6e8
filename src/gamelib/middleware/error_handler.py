"""Global error handlers: domain errors and consistent JSON error bodies."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gamelib.errors import ConsistencyError, GameLibError

logger = structlog.get_logger()


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(GameLibError)
    async def domain_exception_handler(request: Request, exc: GameLibError) -> JSONResponse:
        """Map ConflictError/NotFoundError/ConsistencyError to 409/404/500."""
        if isinstance(exc, ConsistencyError):
            logger.error(
                "consistency_violation",
                path=request.url.path,
                method=request.method,
                error=exc.detail,
            )
            return JSONResponse(status_code=500, content={"detail": "Internal server error"})
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": jsonable_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions: always return JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors without non-serializable ``ctx`` values (e.g. exceptions)."""
    errors = []
    for error in exc.errors():
        cleaned = {k: v for k, v in error.items() if k not in ("ctx", "input")}
        if "ctx" in error:
            cleaned["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        errors.append(cleaned)
    return errors
