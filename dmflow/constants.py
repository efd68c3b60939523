"""
dmflow.constants — Shared Constants
====================================

Single source of truth for loot defaults, patchable field allow lists and
Spotify endpoints.  Import from here instead of duplicating in services
and routes.
"""

from __future__ import annotations

from dmflow.database.models import Rarity

# ---------------------------------------------------------------------------
# Loot defaults
# ---------------------------------------------------------------------------
DEFAULT_LOOT_QUANTITY = 1
DEFAULT_LOOT_RARITY = Rarity.COMMON.value

# ---------------------------------------------------------------------------
# Partial-update allow lists (snake_case model attributes)
# ---------------------------------------------------------------------------
ALLOWED_CAMPAIGN_FIELDS: set[str] = {"name", "description", "spotify_playlist_id"}

ALLOWED_NODE_FIELDS: set[str] = {
    "type", "label", "description", "position_x", "position_y", "encounter_id",
}

ALLOWED_EDGE_FIELDS: set[str] = {"label"}

ALLOWED_ENCOUNTER_FIELDS: set[str] = {
    "name", "story_text", "dm_notes", "spotify_track_uri",
}

ALLOWED_ENEMY_FIELDS: set[str] = {
    "name", "hit_points", "armor_class", "challenge", "abilities", "image_url",
}

ALLOWED_LOOT_FIELDS: set[str] = {"name", "description", "quantity", "rarity"}

# ---------------------------------------------------------------------------
# Spotify
# ---------------------------------------------------------------------------
SPOTIFY_ACCOUNTS_URL = "https://accounts.spotify.com"
SPOTIFY_API_URL = "https://api.spotify.com/v1"

SPOTIFY_SCOPES: tuple[str, ...] = (
    "user-read-playback-state",
    "user-modify-playback-state",
    "user-read-currently-playing",
    "streaming",
    "app-remote-control",
)

# The whole deployment shares one credential row.
SPOTIFY_TOKEN_USER_ID = "default"

SPOTIFY_SEARCH_LIMIT = 10
OAUTH_STATE_TTL_SECONDS = 600
