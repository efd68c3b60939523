"""
dmflow.api.deps — FastAPI dependency injection
===============================================
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from functools import lru_cache
from typing import Annotated

import httpx
from fastapi import Depends, HTTPException
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from dmflow.config import DmflowConfig, load_config
from dmflow.database.engine import create_db_engine

SPOTIFY_HTTP_TIMEOUT = 10


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> DmflowConfig:
    return load_config()


def get_session(engine: Annotated[Engine, Depends(get_engine)]):
    with Session(engine) as session:
        yield session


def get_spotify_config(
    cfg: Annotated[DmflowConfig, Depends(get_config)],
) -> DmflowConfig:
    """Return the config, or raise a clear 500 if Spotify is not set up."""
    missing = cfg.missing_spotify_settings()
    if missing:
        raise HTTPException(
            status_code=500,
            detail="Spotify is not configured: missing " + ", ".join(missing),
        )
    return cfg


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """One outbound client per request; fixed timeout, no retries."""
    async with httpx.AsyncClient(timeout=SPOTIFY_HTTP_TIMEOUT) as client:
        yield client
