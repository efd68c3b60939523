"""
dmflow.api.main — FastAPI application entry point
==================================================

Run with::

    uvicorn dmflow.api.main:app --reload --port 3001
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

load_dotenv()

from dmflow.api.deps import get_config, get_engine  # noqa: E402
from dmflow.api.routes.campaigns import router as campaigns_router  # noqa: E402
from dmflow.api.routes.drawings import router as drawings_router  # noqa: E402
from dmflow.api.routes.encounters import router as encounters_router  # noqa: E402
from dmflow.api.routes.flow import router as flow_router  # noqa: E402
from dmflow.api.routes.spotify import router as spotify_router  # noqa: E402
from dmflow.database.engine import init_db  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — warm the engine and verify tables."""
    engine = get_engine()
    init_db(engine)
    logger.info("DM Flow API started — engine ready (%s)", engine.url.database)
    yield
    logger.info("DM Flow API shutting down")


app = FastAPI(
    title="DM Flow API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_config().frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------
@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    """Missing or malformed fields are a plain 400, not FastAPI's 422."""
    errors = exc.errors()
    fields = []
    for err in errors:
        loc = [part for part in err.get("loc", ()) if isinstance(part, str)]
        # loc[0] is "body"/"query"/"path"; the rest is already the camelCase alias
        if len(loc) > 1:
            name = loc[-1]
            if name not in fields:
                fields.append(name)
    if fields:
        detail = "Invalid or missing fields: " + ", ".join(fields)
    elif errors:
        detail = str(errors[0].get("msg", "Invalid request"))
    else:
        detail = "Invalid request"
    return JSONResponse(status_code=400, content={"detail": detail})


@app.exception_handler(SQLAlchemyError)
async def database_error(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Mount routers
app.include_router(campaigns_router, prefix="/api")
app.include_router(flow_router, prefix="/api")
app.include_router(encounters_router, prefix="/api")
app.include_router(drawings_router, prefix="/api")
app.include_router(spotify_router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok"}
