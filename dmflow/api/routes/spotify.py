"""
dmflow.api.routes.spotify — Spotify OAuth + playback endpoints
===============================================================

    GET  /spotify/auth       — Consent-screen URL (with a fresh state)
    GET  /spotify/callback   — OAuth redirect target; bounces to the frontend
    GET  /spotify/status     — {"connected": bool}
    GET  /spotify/playback   — What is playing right now
    PUT  /spotify/play       — Resume
    PUT  /spotify/pause      — Pause
    PUT  /spotify/track      — Play one track by URI
    GET  /spotify/search?q=  — Up to ten matching tracks

Upstream failures surface as a 500 with a fixed message; the real cause
is only logged.
"""

from __future__ import annotations

import logging
import secrets
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse

from dmflow.api.deps import get_config, get_engine, get_http_client, get_spotify_config
from dmflow.api.schemas import TrackPlay
from dmflow.config import DmflowConfig
from dmflow.database.engine import run_db
from dmflow.services import spotify_service
from dmflow.services.spotify_service import SpotifyAPIError, SpotifyAuthError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/spotify", tags=["spotify"])


def _upstream_error(exc: Exception, message: str) -> HTTPException:
    """Translate a service exception into the 500 the client sees."""
    if isinstance(exc, SpotifyAuthError):
        return HTTPException(500, str(exc))
    logger.exception(message)
    return HTTPException(500, message)


def _frontend_redirect(cfg: DmflowConfig, **params: str) -> RedirectResponse:
    return RedirectResponse(f"{cfg.frontend_url}?{urlencode(params)}")


# ---------------------------------------------------------------------------
# OAuth
# ---------------------------------------------------------------------------
@router.get("/auth")
async def auth_url(
    cfg: DmflowConfig = Depends(get_spotify_config),
    engine=Depends(get_engine),
):
    state = secrets.token_urlsafe(32)
    await run_db(spotify_service.store_oauth_state, engine, state)
    return {"url": spotify_service.build_authorize_url(cfg, state)}


@router.get("/callback")
async def callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    cfg: DmflowConfig = Depends(get_config),
    engine=Depends(get_engine),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """Finish the OAuth dance and send the browser back to the app."""
    missing = cfg.missing_spotify_settings()
    if missing:
        logger.warning("Spotify callback but not configured: missing %s", ", ".join(missing))
        return _frontend_redirect(cfg, spotify_error="callback_failed")
    if error:
        logger.warning("Spotify authorization refused: %s", error)
        return _frontend_redirect(cfg, spotify_error=error)
    if not code:
        return _frontend_redirect(cfg, spotify_error="no_code")
    if not state or not await run_db(spotify_service.consume_oauth_state, engine, state):
        logger.warning("Spotify callback with unknown or expired state")
        return _frontend_redirect(cfg, spotify_error="invalid_state")

    try:
        await spotify_service.handle_callback(engine, client, cfg, code)
    except SpotifyAPIError:
        logger.exception("Spotify token exchange failed")
        return _frontend_redirect(cfg, spotify_error="callback_failed")

    return _frontend_redirect(cfg, spotify_connected="true")


@router.get("/status")
async def status(engine=Depends(get_engine)):
    return {"connected": await run_db(spotify_service.is_connected, engine)}


# ---------------------------------------------------------------------------
# Playback
# ---------------------------------------------------------------------------
@router.get("/playback")
async def playback(
    cfg: DmflowConfig = Depends(get_spotify_config),
    engine=Depends(get_engine),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    try:
        return await spotify_service.get_playback(engine, client, cfg)
    except (SpotifyAuthError, SpotifyAPIError) as exc:
        raise _upstream_error(exc, "Failed to get playback state")


@router.put("/play")
async def play(
    cfg: DmflowConfig = Depends(get_spotify_config),
    engine=Depends(get_engine),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    try:
        await spotify_service.play(engine, client, cfg)
    except (SpotifyAuthError, SpotifyAPIError) as exc:
        raise _upstream_error(exc, "Failed to start playback")
    return {"success": True}


@router.put("/pause")
async def pause(
    cfg: DmflowConfig = Depends(get_spotify_config),
    engine=Depends(get_engine),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    try:
        await spotify_service.pause(engine, client, cfg)
    except (SpotifyAuthError, SpotifyAPIError) as exc:
        raise _upstream_error(exc, "Failed to pause playback")
    return {"success": True}


@router.put("/track")
async def play_track(
    body: TrackPlay,
    cfg: DmflowConfig = Depends(get_spotify_config),
    engine=Depends(get_engine),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    try:
        await spotify_service.play_track(engine, client, cfg, body.track_uri)
    except (SpotifyAuthError, SpotifyAPIError) as exc:
        raise _upstream_error(exc, "Failed to play track")
    return {"success": True}


@router.get("/search")
async def search(
    q: str | None = None,
    cfg: DmflowConfig = Depends(get_spotify_config),
    engine=Depends(get_engine),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    if not q:
        raise HTTPException(400, "Search query is required")
    try:
        return await spotify_service.search_tracks(engine, client, cfg, q)
    except (SpotifyAuthError, SpotifyAPIError) as exc:
        raise _upstream_error(exc, "Failed to search tracks")
