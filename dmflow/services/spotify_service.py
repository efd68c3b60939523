"""
dmflow.services.spotify_service — Spotify OAuth + playback wrapper
===================================================================

The whole deployment shares one Spotify account: a single
``spotify_tokens`` row keyed ``"default"``.

States::

    Unauthenticated ──(authorize URL → callback with code)──▶ Authenticated
                                                              │
                        expires_at in the past ──refresh──────┘

Every privileged call goes through :func:`ensure_valid_token`, which reads
the row, refreshes the access token when expired, and writes the new
expiry back.  This is a plain read-then-write with no lock; two requests
racing past expiry will both refresh, and the later write wins.  Spotify
accepts either token, so nothing breaks for a single DM.

DB helpers are synchronous and take an ``Engine`` (callers bridge them with
:func:`~dmflow.database.engine.run_db`); HTTP helpers are ``async`` and take
an :class:`httpx.AsyncClient`.  Nothing here retries.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import urlencode

import httpx
from sqlalchemy import Engine, delete

from dmflow.config import DmflowConfig
from dmflow.constants import (
    OAUTH_STATE_TTL_SECONDS,
    SPOTIFY_ACCOUNTS_URL,
    SPOTIFY_API_URL,
    SPOTIFY_SCOPES,
    SPOTIFY_SEARCH_LIMIT,
    SPOTIFY_TOKEN_USER_ID,
)
from dmflow.database.engine import get_session, run_db
from dmflow.database.models import OAuthState, SpotifyToken
from dmflow.services.serialize import as_utc

logger = logging.getLogger(__name__)

NOT_PLAYING: dict[str, Any] = {"isPlaying": False, "track": None}


class SpotifyAuthError(Exception):
    """No Spotify credential has been stored yet."""


class SpotifyAPIError(Exception):
    """Spotify rejected a request or could not be reached."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _track_to_dict(item: dict[str, Any]) -> dict[str, Any]:
    images = item.get("album", {}).get("images") or []
    return {
        "id": item.get("id"),
        "name": item.get("name"),
        "artists": ", ".join(a.get("name", "") for a in item.get("artists", [])),
        "album": item.get("album", {}).get("name"),
        "uri": item.get("uri"),
        "albumArt": images[0].get("url") if images else None,
    }


# ---------------------------------------------------------------------------
# OAuth state (one-time CSRF tokens)
# ---------------------------------------------------------------------------
def store_oauth_state(engine: Engine, state: str) -> None:
    """Persist an OAuth state token and prune stale entries."""
    cutoff = datetime.now(UTC) - timedelta(seconds=OAUTH_STATE_TTL_SECONDS)
    with get_session(engine) as session:
        session.execute(delete(OAuthState).where(OAuthState.created_at < cutoff))
        session.add(OAuthState(state=state))


def consume_oauth_state(engine: Engine, state: str) -> bool:
    """Consume a one-time OAuth state token if valid and unexpired."""
    cutoff = datetime.now(UTC) - timedelta(seconds=OAUTH_STATE_TTL_SECONDS)
    with get_session(engine) as session:
        session.execute(delete(OAuthState).where(OAuthState.created_at < cutoff))
        row = session.get(OAuthState, state)
        if row is None:
            return False
        session.delete(row)
        return True


def build_authorize_url(cfg: DmflowConfig, state: str) -> str:
    """Spotify consent-screen URL.  Pure string construction."""
    query = urlencode(
        {
            "client_id": cfg.spotify_client_id,
            "response_type": "code",
            "redirect_uri": cfg.spotify_redirect_uri,
            "scope": " ".join(SPOTIFY_SCOPES),
            "state": state,
        }
    )
    return f"{SPOTIFY_ACCOUNTS_URL}/authorize?{query}"


# ---------------------------------------------------------------------------
# Token storage
# ---------------------------------------------------------------------------
def save_tokens(
    engine: Engine,
    *,
    access_token: str,
    refresh_token: str | None,
    expires_in: int,
) -> None:
    """Upsert the shared credential row.

    ``refresh_token=None`` keeps the stored one (Spotify only sometimes
    rotates it on refresh).
    """
    expires_at = datetime.now(UTC) + timedelta(seconds=expires_in)
    with get_session(engine) as session:
        row = session.get(SpotifyToken, SPOTIFY_TOKEN_USER_ID)
        if row is None:
            if not refresh_token:
                raise SpotifyAPIError("Token response did not include a refresh token")
            session.add(SpotifyToken(
                user_id=SPOTIFY_TOKEN_USER_ID,
                access_token=access_token,
                refresh_token=refresh_token,
                expires_at=expires_at,
            ))
        else:
            row.access_token = access_token
            if refresh_token:
                row.refresh_token = refresh_token
            row.expires_at = expires_at


def load_token(engine: Engine) -> tuple[str, str, datetime] | None:
    """Return ``(access_token, refresh_token, expires_at)`` or ``None``."""
    with get_session(engine) as session:
        row = session.get(SpotifyToken, SPOTIFY_TOKEN_USER_ID)
        if row is None:
            return None
        return row.access_token, row.refresh_token, as_utc(row.expires_at)


def is_connected(engine: Engine) -> bool:
    return load_token(engine) is not None


# ---------------------------------------------------------------------------
# Accounts service (token endpoint)
# ---------------------------------------------------------------------------
async def _token_request(
    client: httpx.AsyncClient, cfg: DmflowConfig, data: dict[str, str]
) -> dict[str, Any]:
    try:
        resp = await client.post(
            f"{SPOTIFY_ACCOUNTS_URL}/api/token",
            data=data,
            auth=(cfg.spotify_client_id, cfg.spotify_client_secret),
        )
    except httpx.HTTPError as exc:
        raise SpotifyAPIError(f"Token request failed: {exc}") from exc

    if resp.status_code != 200:
        raise SpotifyAPIError(
            f"Token request rejected ({resp.status_code}): {resp.text[:200]}"
        )
    payload = resp.json()
    if not payload.get("access_token"):
        raise SpotifyAPIError("Token response did not include an access token")
    return payload


async def handle_callback(
    engine: Engine, client: httpx.AsyncClient, cfg: DmflowConfig, code: str
) -> None:
    """Exchange an authorization code for tokens and store them."""
    payload = await _token_request(
        client,
        cfg,
        {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": cfg.spotify_redirect_uri,
        },
    )
    await run_db(
        save_tokens,
        engine,
        access_token=payload["access_token"],
        refresh_token=payload.get("refresh_token"),
        expires_in=int(payload.get("expires_in", 3600)),
    )
    logger.info("Spotify account connected")


async def ensure_valid_token(
    engine: Engine, client: httpx.AsyncClient, cfg: DmflowConfig
) -> str:
    """Return a usable access token, refreshing it first if it has expired.

    Raises
    ------
    SpotifyAuthError
        If the OAuth callback has never completed.
    SpotifyAPIError
        If the refresh request fails.
    """
    stored = await run_db(load_token, engine)
    if stored is None:
        raise SpotifyAuthError("Not authenticated with Spotify")

    access_token, refresh_token, expires_at = stored
    if expires_at > datetime.now(UTC):
        return access_token

    payload = await _token_request(
        client,
        cfg,
        {"grant_type": "refresh_token", "refresh_token": refresh_token},
    )
    await run_db(
        save_tokens,
        engine,
        access_token=payload["access_token"],
        refresh_token=payload.get("refresh_token"),
        expires_in=int(payload.get("expires_in", 3600)),
    )
    logger.info("Spotify access token refreshed")
    return payload["access_token"]


# ---------------------------------------------------------------------------
# Web API
# ---------------------------------------------------------------------------
async def _api_request(
    engine: Engine,
    client: httpx.AsyncClient,
    cfg: DmflowConfig,
    method: str,
    path: str,
    **kwargs: Any,
) -> httpx.Response:
    token = await ensure_valid_token(engine, client, cfg)
    try:
        resp = await client.request(
            method,
            f"{SPOTIFY_API_URL}{path}",
            headers={"Authorization": f"Bearer {token}"},
            **kwargs,
        )
    except httpx.HTTPError as exc:
        raise SpotifyAPIError(f"{method} {path} failed: {exc}") from exc

    if resp.status_code >= 400:
        raise SpotifyAPIError(
            f"{method} {path} rejected ({resp.status_code}): {resp.text[:200]}"
        )
    return resp


async def get_playback(
    engine: Engine, client: httpx.AsyncClient, cfg: DmflowConfig
) -> dict[str, Any]:
    """Current playback as ``{isPlaying, track, progress, duration}``.

    Spotify answers 204 when no device is active; that maps to
    :data:`NOT_PLAYING`.
    """
    resp = await _api_request(engine, client, cfg, "GET", "/me/player")
    if resp.status_code == 204 or not resp.content:
        return dict(NOT_PLAYING)

    body = resp.json()
    item = body.get("item")
    # Podcast episodes have no "artists"; report them as no track.
    track = _track_to_dict(item) if item and "artists" in item else None
    return {
        "isPlaying": bool(body.get("is_playing")),
        "track": track,
        "progress": body.get("progress_ms"),
        "duration": item.get("duration_ms") if item else None,
    }


async def play(engine: Engine, client: httpx.AsyncClient, cfg: DmflowConfig) -> None:
    await _api_request(engine, client, cfg, "PUT", "/me/player/play")


async def pause(engine: Engine, client: httpx.AsyncClient, cfg: DmflowConfig) -> None:
    await _api_request(engine, client, cfg, "PUT", "/me/player/pause")


async def play_track(
    engine: Engine, client: httpx.AsyncClient, cfg: DmflowConfig, track_uri: str
) -> None:
    await _api_request(
        engine, client, cfg, "PUT", "/me/player/play", json={"uris": [track_uri]}
    )


async def search_tracks(
    engine: Engine, client: httpx.AsyncClient, cfg: DmflowConfig, query: str
) -> list[dict[str, Any]]:
    """Up to ten tracks matching *query*, normalised like playback tracks."""
    resp = await _api_request(
        engine,
        client,
        cfg,
        "GET",
        "/search",
        params={"q": query, "type": "track", "limit": SPOTIFY_SEARCH_LIMIT},
    )
    items = (resp.json().get("tracks") or {}).get("items") or []
    return [_track_to_dict(item) for item in items[:SPOTIFY_SEARCH_LIMIT]]
