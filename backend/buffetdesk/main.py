"""
Main FastAPI Application
"""
from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from buffetdesk.api import auth, cashflow, crm, expenses, inventory, payments, stats
from buffetdesk.core.config import Settings
from buffetdesk.core.database import Database
from buffetdesk.core.exceptions import BuffetDeskError
from buffetdesk.core.rate_limit import RateLimitMiddleware
from buffetdesk.core.request_id import REQUEST_ID_HEADER, RequestIdMiddleware, get_request_id
from buffetdesk.schemas import ErrorResponse

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    429: "RATE_LIMITED",
}

# Documented on every business route
ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def error_response(request: Request, status_code: int, code: str, message: str, headers=None) -> JSONResponse:
    request_id = get_request_id(request)
    response_headers = dict(headers or {})
    if request_id:
        response_headers[REQUEST_ID_HEADER] = request_id
    return JSONResponse(
        status_code=status_code,
        content={"code": code, "message": message, "requestId": request_id},
        headers=response_headers,
    )


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BuffetDeskError)
    async def domain_error_handler(request: Request, exc: BuffetDeskError):
        return error_response(request, exc.status_code, exc.code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(request, status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", _validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        code = HTTP_ERROR_CODES.get(exc.status_code, f"HTTP_{exc.status_code}")
        return error_response(request, exc.status_code, code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Database error: %s", exc, exc_info=True)
        return error_response(
            request, status.HTTP_503_SERVICE_UNAVAILABLE,
            "INFRASTRUCTURE_ERROR", "Storage is temporarily unavailable"
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception: %s", exc, exc_info=True)
        return error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_ERROR", "An unexpected error occurred"
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around an explicit settings object"""
    settings = settings or Settings()
    settings.validate_security_settings()

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        logger.info("Starting up %s %s (%s)", settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT)
        database = Database(settings).open()
        if settings.AUTO_CREATE_TABLES:
            database.create_all()
        app.state.database = database

        yield

        logger.info("Shutting down...")
        database.close()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        lifespan=lifespan
    )
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting middleware (must be after CORS)
    app.add_middleware(RateLimitMiddleware, enabled=settings.RATE_LIMIT_ENABLED)

    # Added last so it wraps everything and tags every response
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    # Health checks
    @app.get("/healthz", tags=["Health"])
    def liveness():
        return {"status": "ok", "version": settings.APP_VERSION}

    @app.get("/readyz", tags=["Health"])
    def readiness(request: Request):
        database = request.app.state.database
        try:
            ready = database.is_open and database.ping()
        except SQLAlchemyError as exc:
            logger.error("Readiness check failed: %s", exc)
            ready = False
        if not ready:
            return error_response(
                request, status.HTTP_503_SERVICE_UNAVAILABLE,
                "INFRASTRUCTURE_ERROR", "Database is unreachable"
            )
        return {"status": "ready"}

    # Include routers
    app.include_router(auth.router, prefix="/api", responses=ERROR_RESPONSES)
    app.include_router(stats.router, prefix="/api", responses=ERROR_RESPONSES)
    app.include_router(crm.clients_router, prefix="/api", responses=ERROR_RESPONSES)
    app.include_router(crm.events_router, prefix="/api", responses=ERROR_RESPONSES)
    app.include_router(payments.router, prefix="/api", responses=ERROR_RESPONSES)
    app.include_router(expenses.router, prefix="/api", responses=ERROR_RESPONSES)
    app.include_router(inventory.router, prefix="/api", responses=ERROR_RESPONSES)
    app.include_router(cashflow.router, prefix="/api", responses=ERROR_RESPONSES)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
