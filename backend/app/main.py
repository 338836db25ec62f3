"""
Code Attendance Service - FastAPI Application Entry Point.

This is the main application module that:
1. Initializes the FastAPI app with CORS middleware
2. Sets up structured JSON logging
3. Implements request ID middleware (X-Request-ID header)
4. Renders attendance rejections as JSON errors
5. Registers all API route handlers and the health check

The application follows a modular architecture:
- routes/: API endpoint handlers
- models/: SQLAlchemy ORM models
- services/: Business logic (sessions, admission, fingerprint, identity)
- errors.py: Attendance error taxonomy
- logging_config.py: Structured logging configuration
- database.py: Database connection management
"""

import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from app.errors import AttendanceError
from app.routes import attendance, sessions, users
from app.database import DATABASE_URL, create_tables

# Import all models so they are registered with Base.metadata
from app.models.user import User
from app.models.attendance_session import AttendanceSession
from app.models.attendance_record import AttendanceRecord

# Initialize structured logging before anything else
setup_logging()
logger = get_logger("http")
admission_logger = get_logger("admission")

# Auto-create tables for SQLite local development
if DATABASE_URL.startswith("sqlite"):
    logger.info("Using SQLite — creating tables directly")
    create_tables()

app = FastAPI(
    title="Code Attendance Service",
    description=(
        "Instructors open short-lived, code-identified attendance windows; "
        "students sign them once each, with a heuristic device check "
        "against signing for someone else."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"]
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """
    Generate a unique request ID for every HTTP request.

    The ID is stored in a context variable for all log entries, returned in
    the X-Request-ID response header, and logged with request latency.
    """
    req_id = generate_request_id()
    request_id_var.set(req_id)

    start_time = time.time()

    log_with_context(logger, "INFO",
        f"Request started: {request.method} {request.url.path}",
        context={"request_id": req_id},
        extra_data={
            "ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
        })

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    response.headers["X-Request-ID"] = req_id

    log_with_context(logger, "INFO",
        f"Request completed: {request.method} {request.url.path} → {response.status_code}",
        context={"request_id": req_id},
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "status_code": response.status_code
        })

    return response


@app.exception_handler(AttendanceError)
async def attendance_error_handler(request: Request, exc: AttendanceError):
    """Render a rejected attendance operation with its stable error code."""
    log_with_context(admission_logger, "INFO",
        "Rejected {} {}: {}".format(request.method, request.url.path, exc.code),
        extra_data={"status_code": exc.status_code})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(users.router, tags=["Users"])
app.include_router(sessions.router, tags=["Sessions"])
app.include_router(attendance.router, tags=["Attendance"])


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for Docker health checks and monitoring."""
    return {"status": "healthy", "service": "code-attendance-backend", "version": "1.0.0"}


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "service": "Code Attendance Service",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "register": "POST /api/users",
            "me": "GET /api/users/me",
            "open_session": "POST /api/sessions",
            "active_session": "GET /api/sessions/active",
            "session_history": "GET /api/sessions",
            "session_records": "GET /api/sessions/{id}/records",
            "sign": "POST /api/attendance",
            "my_attendance": "GET /api/attendance/me"
        }
    }
