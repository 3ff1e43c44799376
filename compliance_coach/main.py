from contextlib import asynccontextmanager
from typing import Any, Optional
import logging
import sys

import httpx
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from compliance_coach.api.dependencies import (
    AppContext,
    check_rate_limit,
    client_ip,
    is_rate_limited_path,
    rate_limit_headers,
)
from compliance_coach.api.routes import router
from compliance_coach.api.schemas import ErrorResponse
from compliance_coach.core.config import Settings, get_settings
from compliance_coach.core.constants import AppSettings, Messages
from compliance_coach.core.errors import (
    ConfigurationError,
    RateLimitExceeded,
    ValidationError,
)
from compliance_coach.core.logging_setup import (
    configure_logging,
    install_excepthook,
    install_loop_exception_handler,
)

logger = logging.getLogger(__name__)


def _describe_request_error(error: dict) -> str:
    if error.get("type") == "json_invalid":
        return "Request body must be valid JSON"
    if error.get("type") == "missing":
        return '"value" is required'
    return error.get("msg", "Invalid request body")


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    context: AppContext = app.state.context
    settings = context.settings

    # Raising here aborts uvicorn before it binds the socket
    settings.check_startup()
    if settings.FAIL_FAST:
        install_loop_exception_handler()

    logger.info(
        "Starting | env=%s | version=%s | api_key_configured=%s | rate_limit=%d/%ds",
        settings.ENVIRONMENT.value,
        AppSettings.VERSION,
        settings.api_key_configured,
        settings.RATE_LIMIT,
        settings.RATE_LIMIT_WINDOW_SECONDS,
    )

    try:
        yield
    finally:
        await context.client.aclose()
        logger.info("Shutting down")


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Compliance Coach API",
        description="Microsoft 365 compliance recommendations from project documents",
        version=AppSettings.VERSION,
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url=None,
    )
    app.state.context = AppContext.from_settings(settings, transport=transport)

    # Middleware added last runs first: CORS, then request logging, then
    # the rate limit, so every /api/* request is counted before routing.
    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        if not is_rate_limited_path(request.url.path):
            return await call_next(request)

        try:
            limit_status = await check_rate_limit(app.state.context, request)
        except RateLimitExceeded as exc:
            logger.warning("Rate limit exceeded | ip=%s", client_ip(request))
            return PlainTextResponse(
                Messages.RATE_LIMITED,
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                headers={**exc.headers, "Retry-After": str(exc.retry_after)},
            )

        response = await call_next(request)
        response.headers.update(rate_limit_headers(limit_status))
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(
            "%s %s | ip=%s | ua=%s",
            request.method,
            request.url.path,
            client_ip(request),
            request.headers.get("user-agent", "-"),
        )
        return await call_next(request)

    origins = settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # If allowing '*', credentials must be False.
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.warning("Validation error: %s", exc.messages)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(
                error=Messages.INVALID_INPUT, details=exc.messages).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [_describe_request_error(e) for e in exc.errors()]
        logger.warning("Malformed request body: %s", details)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(
                error=Messages.INVALID_INPUT, details=details).model_dump(),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "client_ip": client_ip(request),
            }
        )
        details = Messages.INTERNAL_ERROR if settings.is_production else str(exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error=Messages.INTERNAL_ERROR, details=details).model_dump(),
        )

    return app


app = create_app()


def main() -> None:
    """Console entry point: fail fast on bad configuration, then serve."""
    settings = get_settings()
    configure_logging(settings)
    install_excepthook()

    try:
        settings.check_startup()
    except ConfigurationError as e:
        logger.critical("%s", e)
        sys.exit(1)

    logger.info("Starting server on %s:%d", settings.HOST, settings.PORT)
    uvicorn.run(
        "compliance_coach.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
