"""
dmflow.__main__ — Entry point for ``python -m dmflow``
=======================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings) with env overrides.
3. Start uvicorn on the configured port.

Run with::

    python -m dmflow
"""

from __future__ import annotations

import logging

import uvicorn
from dotenv import load_dotenv

from dmflow.config import load_config

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("dmflow")


def main() -> None:
    """Bootstrap and serve the DM Flow API."""
    load_dotenv()
    cfg = load_config()

    missing = cfg.missing_spotify_settings()
    if missing:
        logger.warning(
            "Spotify is not configured (missing %s); music endpoints will fail.",
            ", ".join(missing),
        )

    logger.info("Serving DM Flow API on port %d", cfg.port)
    uvicorn.run("dmflow.api.main:app", host="0.0.0.0", port=cfg.port, log_config=None)


if __name__ == "__main__":
    main()
