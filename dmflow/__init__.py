"""
DM Flow — Campaign flowchart planner for tabletop Dungeon Masters
==================================================================
Stores campaigns as directed graphs of story nodes, with encounters
(enemies, loot, story text, DM notes), a freehand drawing per node, and
shared Spotify playback control for table music.

Package layout::

    dmflow/
    ├── config.py          # config.yaml + env → typed Python config
    ├── constants.py       # Enum values, patchable fields, Spotify constants
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # All ORM models (9 tables)
    ├── services/
    │   ├── campaign_service.py   # Campaign CRUD + detail loading
    │   ├── flow_service.py       # Nodes, edges, bulk position update
    │   ├── encounter_service.py  # Encounters, enemies, loot
    │   ├── drawing_service.py    # Per-node drawing upsert
    │   ├── spotify_service.py    # OAuth tokens + Web API calls
    │   └── serialize.py          # ORM → camelCase dicts
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # Engine / session / config / HTTP client deps
        ├── schemas.py     # Pydantic request bodies
        └── routes/        # REST endpoints under /api
"""

__version__ = "0.1.0"
