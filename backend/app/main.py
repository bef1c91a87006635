"""
Student Registry - FastAPI application entry point.

Sets up, in order:
1. Structured JSON logging
2. The students table (SQLite only; PostgreSQL uses Alembic)
3. The FastAPI app with CORS and request id middleware
4. Student routes plus health and root endpoints

Layout:
- routes/: HTTP endpoints
- models/: SQLAlchemy ORM models
- services/: the registry and its result types
- logging_config.py: structured logging
- database.py: engine and sessions
"""

import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from app.routes import students
from app.database import DATABASE_URL, create_tables

# Registers the students table with Base.metadata
from app.models.student import Student  # noqa: F401

# ──────────────────────────────────────────────────────────────
# Logging first, so table setup below is already logged as JSON
# ──────────────────────────────────────────────────────────────
setup_logging()
logger = get_logger("http")
db_logger = get_logger("db")

# SQLite gets its table here; PostgreSQL is migrated with Alembic
if DATABASE_URL.startswith("sqlite"):
    log_with_context(db_logger, "INFO", "Using SQLite, creating tables directly",
                     extra_data={"database_url": DATABASE_URL})
    create_tables()

# ──────────────────────────────────────────────────────────────
# FastAPI application
# ──────────────────────────────────────────────────────────────
app = FastAPI(
    title="Student Registry",
    description=(
        "Stores enrolled student records keyed by id and exposes create, "
        "lookup by id or name, listing, update and delete."
    ),
    version="1.0.0",
    docs_url="/docs",        # Swagger UI
    redoc_url="/redoc"       # ReDoc
)

# ──────────────────────────────────────────────────────────────
# CORS Middleware
#
# Open to any origin so browser clients and admin tools can call the
# registry directly. Narrow allow_origins when deploying behind a
# known frontend.
# ──────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"]     # Let browsers read the trace id
)


# ──────────────────────────────────────────────────────────────
# Request ID Middleware
#
# 1. Reuses the caller's X-Request-ID or generates a UUID4
# 2. Holds it in a context variable for every log entry of the request
# 3. Returns it in the X-Request-ID response header
# 4. Logs request start and completion with latency
# ──────────────────────────────────────────────────────────────
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """
    Tag each request with an id.

    An incoming X-Request-ID header is reused, otherwise a UUID4 is
    generated. The id is put in the logging context for the duration of
    the request and echoed back in the X-Request-ID response header.
    """
    req_id = request.headers.get("X-Request-ID") or generate_request_id()
    token = request_id_var.set(req_id)
    # Record start time for latency measurement
    start_time = time.time()

    log_with_context(logger, "INFO",
        f"Request started: {request.method} {request.url.path}",
        extra_data={
            "ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
            "query_params": dict(request.query_params)
        })

    try:
        # Process the request
        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        # Echo the trace id to the caller
        response.headers["X-Request-ID"] = req_id

        log_with_context(logger, "INFO",
            f"Request completed: {request.method} {request.url.path} -> {response.status_code}",
            extra_data={
                "duration_ms": round(duration_ms, 2),
                "status_code": response.status_code
            })
        return response
    finally:
        request_id_var.reset(token)


# ──────────────────────────────────────────────────────────────
# Register API routes
# ──────────────────────────────────────────────────────────────
app.include_router(students.router, tags=["Students"])


# ──────────────────────────────────────────────────────────────
# Health check and service index
# ──────────────────────────────────────────────────────────────
@app.get("/health", tags=["Health"])
def health_check():
    """Liveness probe for containers and monitoring."""
    return {"status": "healthy", "service": "student-registry", "version": "1.0.0"}


@app.get("/", tags=["Root"])
def root():
    """Service summary and endpoint index."""
    return {
        "service": "Student Registry",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "create": "POST /api/students",
            "list": "GET /api/students",
            "search": "GET /api/students/search?name=",
            "detail": "GET /api/students/{id}",
            "update": "PUT /api/students/{id}",
            "delete": "DELETE /api/students/{id}"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="127.0.0.1", port=8000)
