"""FastAPI application entry point.

Wires the API routers together, configures middleware and creates the
database tables on startup.
"""

import os
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starquest.routes import (
    auth,
    children,
    quests,
    activity,
    rewards,
    redemptions,
    levels,
    credit,
)
from starquest.database import create_db_and_tables
from starquest.exceptions import BatchOperationError

# The log level is taken from the environment so deployments can adjust
# verbosity without code changes.
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, LOG_LEVEL))
logger = logging.getLogger(__name__)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

app = FastAPI(title="StarQuest")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def on_startup():
    await create_db_and_tables()


app.include_router(auth.router)
app.include_router(children.router)
app.include_router(quests.router)
app.include_router(activity.router)
app.include_router(rewards.router)
app.include_router(redemptions.router)
app.include_router(levels.router)
app.include_router(credit.router)


@app.get("/")
async def read_root():
    return {"message": "Welcome to StarQuest API"}


@app.exception_handler(BatchOperationError)
async def batch_operation_error_handler(request: Request, exc: BatchOperationError):
    """Report a failed review action by its message key."""
    logger.error("Review action failed on %s: %s", request.url.path, exc.code)
    return JSONResponse(
        status_code=500,
        content={
            "code": exc.code,
            "message": str(exc.error) if exc.error is not None else exc.code,
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler that logs the stack trace once."""
    logger.exception("Unhandled error during request %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "code": "internal_server_error",
            "message": "An unexpected error occurred",
        },
    )
