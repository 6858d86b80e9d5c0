"""FastAPI application entry point."""

import os
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from web.routes import context, journal, preferences
from web.user_store import init_db

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("web.startup")
    yield
    logger.info("web.shutdown")


app = FastAPI(
    title="Steward",
    version="0.1.0",
    lifespan=lifespan,
)

frontend_origin = os.getenv("FRONTEND_ORIGIN", "http://localhost:3000")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[frontend_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Fixed /api/journal/* paths must be mounted before the /{journal_id} catch-all
app.include_router(preferences.router)
app.include_router(context.router)
app.include_router(journal.router)


@app.get("/api/health")
async def health():
    return {"status": "ok"}
