"""
dmflow.config — YAML + Environment Configuration Loader
========================================================

Settings come from two places:

1. An optional ``config.yaml`` for soft, non-secret settings
   (listening port, front-end origin).
2. Environment variables (usually from ``.env`` via python-dotenv), which
   always win.  Spotify credentials should only ever live here.

``DATABASE_URL`` is deliberately absent: it is read by
:func:`dmflow.database.engine.create_db_engine` and nowhere else.

Usage::

    from dmflow.config import load_config

    cfg = load_config()          # reads ./config.yaml if present
    print(cfg.port)              # 3001
    print(cfg.frontend_url)      # "http://localhost:5173"
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_PORT = 3001
DEFAULT_FRONTEND_URL = "http://localhost:5173"


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class DmflowConfig:
    """Immutable configuration for the API process."""

    # Server
    port: int
    frontend_url: str  # the single CORS origin and OAuth redirect target

    # Spotify (empty string = not configured)
    spotify_client_id: str = ""
    spotify_client_secret: str = ""
    spotify_redirect_uri: str = ""

    def missing_spotify_settings(self) -> list[str]:
        """Return the env var names of any unset Spotify credentials."""
        missing = []
        if not self.spotify_client_id:
            missing.append("SPOTIFY_CLIENT_ID")
        if not self.spotify_client_secret:
            missing.append("SPOTIFY_CLIENT_SECRET")
        if not self.spotify_redirect_uri:
            missing.append("SPOTIFY_REDIRECT_URI")
        return missing


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> DmflowConfig:
    """Build a :class:`DmflowConfig` from *path* and the environment.

    Parameters
    ----------
    path:
        Filesystem path to an optional YAML file.  A missing file is not
        an error; every setting has a default or an environment variable.

    Raises
    ------
    ValueError
        If ``PORT`` (or ``port`` in YAML) is not an integer, or the YAML
        document is not a mapping.
    """
    raw: dict = {}
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh)
        if loaded is not None and not isinstance(loaded, dict):
            raise ValueError(f"{config_path} must contain a YAML mapping")
        raw = loaded or {}

    def _pick(env_key: str, yaml_key: str, default: str) -> str:
        value = os.getenv(env_key, "").strip()
        if value:
            return value
        value = raw.get(yaml_key)
        return str(value).strip() if value is not None else default

    return DmflowConfig(
        port=int(_pick("PORT", "port", str(DEFAULT_PORT))),
        frontend_url=_pick("FRONTEND_URL", "frontend_url", DEFAULT_FRONTEND_URL).rstrip("/"),
        spotify_client_id=os.getenv("SPOTIFY_CLIENT_ID", "").strip(),
        spotify_client_secret=os.getenv("SPOTIFY_CLIENT_SECRET", "").strip(),
        spotify_redirect_uri=_pick("SPOTIFY_REDIRECT_URI", "spotify_redirect_uri", ""),
    )
