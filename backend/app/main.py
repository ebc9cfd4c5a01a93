"""
FastAPI application entry point for the StudyLink API.

This is the main app that:
- Initializes FastAPI with CORS
- Registers all API routers
- Converts errors into the {"error", "details"} JSON shape
- Provides health check endpoint
- Sets up database connection lifecycle
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app import database
from app.errors import PlatformError
# Import API routers
from app.api import auth, job_requests, companies, schools, students, jobs

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An error occurred while processing your request"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    On startup: Database connection is already handled by engine
    On shutdown: Close database connections gracefully
    """
    # Startup
    logger.info("Starting StudyLink API...")
    logger.info(f"Database: {settings.database_url.split('@')[1] if '@' in settings.database_url else 'configured'}")
    logger.info(f"Email mode: {settings.email_mode}")

    yield

    # Shutdown
    logger.info("Shutting down StudyLink API...")
    await database.engine.dispose()


# Initialize FastAPI app
app = FastAPI(
    title="StudyLink API",
    description="Job placement platform for students, schools and companies",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
)

# Configure CORS
allowed_origins = [
    "http://localhost:3000",  # Local development
]

# Add production origins from environment variable
if settings.allowed_origins:
    allowed_origins.extend(origin.strip() for origin in settings.allowed_origins.split(','))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error handlers
def _validation_details(exc: RequestValidationError) -> dict:
    """Map pydantic errors to {field: message} using wire field names."""
    details = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        details.setdefault(field, error.get("msg", "Invalid value"))
    return details


@app.exception_handler(PlatformError)
async def platform_error_handler(request: Request, exc: PlatformError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid data", "details": _validation_details(exc)},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Global exception handler. Never leaks internals to the caller."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})


# Health check endpoint
@app.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return {
        "status": "healthy",
        "service": "StudyLink API",
        "version": "1.0.0",
    }


# Root endpoint
@app.get("/")
async def root():
    """API root with basic info."""
    return {
        "message": "StudyLink API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


# Register API routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(job_requests.router, prefix="/api/students/job-requests", tags=["job-requests"])
app.include_router(students.router, prefix="/api/students", tags=["students"])
app.include_router(companies.router, prefix="/api/companies", tags=["companies"])
app.include_router(schools.router, prefix="/api/schools", tags=["schools"])
app.include_router(jobs.router, prefix="/api/jobs", tags=["jobs"])
