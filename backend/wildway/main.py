from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wildway.core.config import Settings, load_settings
from wildway.core.exceptions import InternalError, WildwayException
from wildway.core.logging import setup_logging
from wildway.core.rate_limit import SlidingWindowLimiter
from wildway.core.security import TokenService
from wildway.core.security_headers import install_security_headers_middleware
from wildway.db.session import create_db_engine, create_session_factory
from wildway.routers import auth, tours
from wildway.services.email import Mailer

logger = logging.getLogger(__name__)


def _validation_details(exc: RequestValidationError) -> list[dict[str, str]]:
    details = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        details.append({"field": ".".join(location), "message": str(error.get("msg", "invalid"))})
    return details


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    settings.validate_runtime_security()
    setup_logging(settings.LOG_LEVEL)

    engine = create_db_engine(settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        try:
            yield
        finally:
            engine.dispose()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.token_service = TokenService.from_settings(settings)
    app.state.mailer = Mailer.from_settings(settings)
    app.state.rate_limiter = SlidingWindowLimiter()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.allowed_hosts,
    )
    install_security_headers_middleware(app, settings)

    app.include_router(auth.router, prefix="/api/v1/users", tags=["users"])
    app.include_router(tours.router, prefix="/api/v1/tours", tags=["tours"])

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.exception_handler(WildwayException)
    async def handle_wildway_exception(request: Request, exc: WildwayException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        headers = exc.headers if getattr(exc, "headers", None) else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        content = {
            "status": "fail",
            "message": "Invalid input data.",
            "error_code": "VALIDATION_ERROR",
            "details": {"errors": _validation_details(exc)},
        }
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        status = "error" if exc.status_code >= 500 else "fail"
        content = {"status": status, "message": str(exc.detail), "error_code": "HTTP_ERROR"}
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        error = InternalError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    return app


app = create_app()
