from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import models  # noqa: F401  registers every table on Base.metadata
from app.api.v1.api import api_router
from app.core.config import settings
from app.core.database import init_db
from app.core.exceptions import SalonError
from app.core.logging import setup_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    setup_logging()
    logger.info(
        "Starting application",
        project=settings.PROJECT_NAME,
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
    )
    await init_db()

    yield

    logger.info("Shutting down application")


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    @app.exception_handler(SalonError)
    async def salon_error_handler(request: Request, exc: SalonError):
        if exc.status_code >= 500:
            logger.error("Request failed", path=request.url.path, error=exc.message)
        else:
            logger.info(
                "Request rejected",
                path=request.url.path,
                status_code=exc.status_code,
                error=exc.message,
            )
        return JSONResponse(
            status_code=exc.status_code, content={"message": exc.message}
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        # Missing or malformed parameters are client errors (400), same as
        # the engine's own input checks
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(
            str(part)
            for part in first.get("loc", ())
            if part not in ("body", "query", "path")
        )
        message = first.get("msg", "Invalid request")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "message": f"{field}: {message}" if field else message,
                "errors": jsonable_errors(errors),
            },
        )

    app.include_router(api_router, prefix="/api")

    @app.get("/health", tags=["monitoring"])
    async def health():
        return {"status": "ok", "version": settings.VERSION}

    return app


def jsonable_errors(errors) -> list:
    """Validation errors without the raw exception objects pydantic attaches."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in errors
    ]


app = create_app()
