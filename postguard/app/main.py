from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from postguard.app.api.generate import router as generate_router
from postguard.app.core.config import Settings, settings as default_settings
from postguard.app.core.http_client import init_http_client
from postguard.app.core.logging import get_log_context, get_logger, setup_logging
from postguard.app.exceptions import (
    ForbiddenRequestError,
    InvalidRequestError,
    UpstreamError,
)
from postguard.app.middleware.request_id import RequestIdMiddleware, get_request_id
from postguard.app.providers import BaseProvider, create_provider
from postguard.app.services.admission import AdmissionEngine


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[AdmissionEngine] = None,
    provider: Optional[BaseProvider] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use (defaults to the environment-loaded settings)
        engine: Admission engine; a fresh one is built from settings if omitted
        provider: Upstream provider; built from settings if omitted

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or default_settings
    setup_logging()
    logger = get_logger(__name__)

    provider_injected = provider is not None

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Share one pooled HTTP client with the provider for the app's lifetime."""
        async with init_http_client() as http_client:
            if not provider_injected:
                app.state.provider = create_provider(settings, http_client)
            logger.info(
                "Application startup complete",
                extra={
                    "provider": type(app.state.provider).__name__,
                    "debug_mode": settings.debug,
                },
            )
            yield
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="PostGuard",
        description="Admission control in front of a paid text-generation API",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.admission_engine = engine or AdmissionEngine.from_settings(settings)
    app.state.provider = provider or create_provider(settings)

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        expose_headers=["X-Request-ID", "Retry-After"],
        max_age=600,
    )

    app.include_router(generate_router)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        """Health check with the number of clients currently tracked."""
        engine_state: AdmissionEngine = app.state.admission_engine
        return {
            "status": "ok",
            "components": {
                "admission": {
                    "rate_limited_clients": len(engine_state.rate_limiter),
                    "history_clients": len(engine_state.history),
                },
                "provider": type(app.state.provider).__name__,
            },
        }

    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(request: Request, exc: InvalidRequestError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(ForbiddenRequestError)
    async def forbidden_handler(request: Request, exc: ForbiddenRequestError) -> JSONResponse:
        logger.warning(
            f"Request blocked: {exc.message}",
            extra=get_log_context(request_id=get_request_id(request)),
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
        """Upstream failures surface as a generic 500; details stay server-side."""
        logger.error(
            f"Upstream call failed: {exc.message}",
            extra=get_log_context(
                request_id=get_request_id(request),
                upstream_status=exc.upstream_status,
            ),
        )
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to process request"},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler for unhandled exceptions.

        Never returns a traceback to the client; debug mode adds the
        exception message and type.
        """
        request_id = get_request_id(request)
        logger.exception(
            f"Unhandled exception [request_id={request_id}]",
            extra=get_log_context(request_id=request_id, exception_type=type(exc).__name__),
        )

        content: dict[str, Any] = {
            "success": False,
            "error": "Failed to process request",
            "request_id": request_id,
        }
        if settings.debug:
            content["message"] = str(exc)
            content["exception_type"] = type(exc).__name__
        return JSONResponse(status_code=500, content=content)

    return app


# Create the application instance
app = create_app()
