"""FastAPI application for the Overtime Analysis API."""

from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from overtime_tool.logging_config import setup_logging

setup_logging(
    os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("LOG_FORMAT", "json").lower() == "json",
)

app = FastAPI(
    title="Overtime Analysis API",
    description="Deterministic regular/overtime, billable and premium breakdown from time-tracking snapshots.",
    version="1.0.0",
)


def _cors_origins() -> list[str]:
    """Origins from ALLOWED_ORIGINS (comma-separated, "*" for any); none by default."""
    raw = os.environ.get("ALLOWED_ORIGINS", "")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return ["*"] if "*" in origins else origins


ALLOWED_ORIGINS = _cors_origins()

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=ALLOWED_ORIGINS != ["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

app.include_router(router)


@app.get("/")
async def root():
    """Service index: where to find the analysis and health endpoints."""
    return {
        "service": app.title,
        "version": app.version,
        "analyze": "/api/v1/analyze",
        "health": "/api/v1/health",
    }
