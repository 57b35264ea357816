"""Main FastAPI application"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging
import time
import uuid
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.config import settings
from api.ratelimit import limiter
from api.routers import calendar, events, onboarding, placements, portfolio, stocks, votes
from api.schemas.errors import ErrorCode, ErrorResponse
from api.utils.exceptions import StockCalException
from api.utils.identity import identity_cookie_middleware
from stockcal.db.session import init_db
from stockcal.config import settings as core_settings
from stockcal.log_config import bind_request_context, clear_request_context, configure_logging
from stockcal.utils.errors import (
    DuplicateRecordError,
    FixedDateEventError,
    InvalidDragTransitionError,
    RateLimitError,
    RecordNotFoundError,
    StockCalError,
    ValidationError,
)

logger = logging.getLogger(__name__)
api_logger = logging.getLogger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    configure_logging()
    logger.info("Starting Stock Event Calendar API...")

    init_db()
    logger.info("Database tables created/verified")

    yield

    logger.info("Shutting down Stock Event Calendar API...")


app = FastAPI(
    title=settings.API_TITLE,
    description="Market event calendar: catalog events, per-user placements, impact votes "
                "and questionnaire-driven stock recommendations.",
    version=settings.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "events", "description": "Event catalog with filters and search"},
        {"name": "calendar", "description": "Month grid with default and placed events"},
        {"name": "placements", "description": "Per-user event placements (server sync)"},
        {"name": "votes", "description": "Impact votes and tallies"},
        {"name": "onboarding", "description": "Questionnaire and stock recommendations"},
        {"name": "stocks", "description": "Stock catalog lookup and search"},
        {"name": "portfolio", "description": "Portfolio holdings (mock brokerage)"},
    ]
)

# Add SlowAPI state and middleware
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["content-type"],
)

app.middleware("http")(identity_cookie_middleware)


# Access logging middleware
@app.middleware("http")
async def access_log_middleware(request: Request, call_next):
    """Log all API requests with timing"""
    bind_request_context(
        request_id=uuid.uuid4().hex[:12],
        user_id=request.cookies.get(core_settings.user_cookie_name),
    )
    t0 = time.time()
    try:
        response = await call_next(request)
    finally:
        clear_request_context()
    ms = int((time.time() - t0) * 1000)

    api_logger.info(f"{request.method} {request.url.path} {response.status_code} {ms}ms")

    return response


def _error_response(status_code: int, error_code: str, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error_code=error_code,
            message=message,
            details=details,
            status_code=status_code,
        ).model_dump(),
    )


# Global exception handlers
@app.exception_handler(StockCalException)
async def stockcal_exception_handler(request: Request, exc: StockCalException):
    """Handle API exceptions with standard format"""
    return _error_response(exc.status_code, exc.error_code, str(exc.detail), exc.details)


@app.exception_handler(StockCalError)
async def domain_error_handler(request: Request, exc: StockCalError):
    """Map domain errors raised below the routers to HTTP responses"""
    if isinstance(exc, RecordNotFoundError):
        return _error_response(404, ErrorCode.NOT_FOUND, exc.message, exc.details or None)
    if isinstance(exc, FixedDateEventError):
        return _error_response(400, ErrorCode.FIXED_DATE_EVENT, exc.message, exc.details or None)
    if isinstance(exc, (ValidationError, InvalidDragTransitionError)):
        return _error_response(400, ErrorCode.VALIDATION_ERROR, exc.message, exc.details or None)
    if isinstance(exc, DuplicateRecordError):
        return _error_response(409, ErrorCode.ALREADY_EXISTS, exc.message, exc.details or None)
    if isinstance(exc, RateLimitError):
        response = _error_response(429, ErrorCode.RATE_LIMIT_EXCEEDED, exc.message, exc.details or None)
        if exc.retry_after:
            response.headers["Retry-After"] = str(exc.retry_after)
        return response

    logger.exception("Unhandled domain error")
    return _error_response(500, ErrorCode.INTERNAL_ERROR, "An unexpected error occurred")


@app.exception_handler(RateLimitExceeded)
async def slowapi_rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return _error_response(429, ErrorCode.RATE_LIMIT_EXCEEDED, f"Rate limit exceeded: {exc.detail}")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTPException with standard format"""
    error_code_map = {
        401: ErrorCode.UNAUTHORIZED,
        404: ErrorCode.NOT_FOUND,
        429: ErrorCode.RATE_LIMIT_EXCEEDED,
        500: ErrorCode.INTERNAL_ERROR,
    }

    error_code = error_code_map.get(exc.status_code, "HTTP_ERROR")
    return _error_response(exc.status_code, error_code, str(exc.detail), getattr(exc, "details", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Missing fields and out-of-range values are bad requests with field-level messages"""
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query")),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    message = errors[0]["message"] if errors else "Validation error"
    return _error_response(status.HTTP_400_BAD_REQUEST, ErrorCode.VALIDATION_ERROR, message, {"errors": errors})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all for unexpected errors"""
    logger.exception("Unhandled exception")
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.INTERNAL_ERROR,
        "An unexpected error occurred",
    )


# Include routers
app.include_router(events.router)
app.include_router(calendar.router)
app.include_router(placements.router)
app.include_router(votes.router)
app.include_router(onboarding.router)
app.include_router(stocks.router)
app.include_router(portfolio.router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": "Stock Event Calendar API",
        "version": settings.API_VERSION,
        "status": "running"
    }


@app.get("/healthz")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=settings.API_HOST, port=settings.API_PORT)
