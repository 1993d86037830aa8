"""Yearbook Server - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from yearbook.config import settings
from yearbook.database import init_db
from yearbook.errors import AccessError, Internal

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    init_db()
    yield


app = FastAPI(
    title="Yearbook",
    description="Album access & membership service for yearbook albums",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error handling ---

@app.exception_handler(AccessError)
async def access_error_handler(request: Request, exc: AccessError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.message},
    )


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    # Store errors never reach the client verbatim
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    error = Internal()
    return JSONResponse(
        status_code=error.status_code,
        content={"error": error.kind, "detail": error.message},
    )


# --- Register API routers ---
from yearbook.api.auth import router as auth_router  # noqa: E402
from yearbook.api.albums import router as albums_router  # noqa: E402
from yearbook.api.access import router as access_router  # noqa: E402
from yearbook.api.members import router as members_router  # noqa: E402

API_PREFIX = "/api/v1"

app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(albums_router, prefix=API_PREFIX)
app.include_router(access_router, prefix=API_PREFIX)
app.include_router(members_router, prefix=API_PREFIX)


@app.get("/")
def root():
    """Health check / server info."""
    return {
        "name": settings.server_name,
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/api/v1/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("yearbook.main:app", host=settings.host, port=settings.port)
