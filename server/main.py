"""
cyclevote API Server

FastAPI application for Employee of the Cycle voting. Routes, services and
the pure voting engine live in separate modules; this file wires them up.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import config, get_logger
from database.db_postgres import Database
from exceptions import CycleVoteError
from notifications.emailer import EmailService
from server.metrics import metrics
from server.middleware.logging import log_requests
from server.middleware.metrics import metrics_middleware
from server.middleware.request_id import RequestIDMiddleware
from server.routes import ballots, cycles, monitoring, notifications, results
from server.utils.responses import error_response

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup async database connection pool"""
    db = await Database.create()
    await db.init_schema()
    logger.info("initialized PostgreSQL database with async connection pool")
    app.state.db = db

    if config.has_mailer():
        app.state.mailer = EmailService()
        logger.info("email delivery enabled")
    else:
        app.state.mailer = None
        logger.warning("Mailgun not configured; invite and winner emails are disabled")

    yield

    try:
        active_connections = db.pool.get_size()
        logger.info(
            "closing connection pool",
            active_connections=active_connections,
            min_size=db.pool.get_min_size(),
            max_size=db.pool.get_max_size(),
        )
        await db.close()
        logger.info("closed PostgreSQL connection pool")
    except Exception as e:
        # Shutdown proceeds regardless
        logger.error("error closing connection pool", error=str(e), exc_info=True)


app = FastAPI(title="cyclevote API", description="Employee of the Cycle voting", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)

# Request ID middleware (must be early in stack for tracing)
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(CycleVoteError)
async def cyclevote_error_handler(request: Request, exc: CycleVoteError):
    if exc.status_code >= 500:
        logger.error("request failed", path=request.url.path, error=str(exc), error_type=type(exc).__name__)
        metrics.record_error("api", exc)
    return JSONResponse(status_code=exc.status_code, content=error_response(exc.message))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        message = str(errors[0].get("msg", message)).removeprefix("Value error, ")
    return JSONResponse(status_code=400, content=error_response(message, errors=len(errors)))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("unhandled error", path=request.url.path, error=str(exc), exc_info=True)
    metrics.record_error("api", exc)
    return JSONResponse(status_code=500, content=error_response("Internal server error"))


# FastAPI middleware stack: last registered runs first
@app.middleware("http")
async def log_requests_middleware(request, call_next):
    return await log_requests(request, call_next)


@app.middleware("http")
async def metrics_middleware_wrapper(request, call_next):
    return await metrics_middleware(request, call_next)


app.include_router(monitoring.router)     # Root, health and Prometheus endpoints
app.include_router(results.router)        # Reports, winners, history (before /{cycle_id} routes)
app.include_router(cycles.router)         # Cycle CRUD and voter participation
app.include_router(ballots.router)        # Eligibility and casting
app.include_router(notifications.router)  # Invite and winner emails


if __name__ == "__main__":
    import sys

    import uvicorn

    logging.getLogger().addHandler(logging.FileHandler(config.LOG_PATH, mode="a"))
    logger.info("configuration", config_summary=config.summary())

    if len(sys.argv) > 1 and sys.argv[1] == "--init-db":
        import asyncio

        async def init_db():
            db = await Database.create()
            try:
                await db.init_schema()
                logger.info("database schema initialized")
            finally:
                await db.close()

        asyncio.run(init_db())
        sys.exit(0)

    uvicorn.run(
        app,
        host=config.API_HOST,
        port=config.API_PORT,
        access_log=False,  # Custom middleware logs requests
    )
