"""
tests/test_config.py — Configuration Loader & Engine Factory
=============================================================
"""

from __future__ import annotations

import dataclasses

import pytest
from sqlalchemy import inspect

from dmflow.config import DEFAULT_FRONTEND_URL, DEFAULT_PORT, DmflowConfig, load_config
from dmflow.database.engine import create_db_engine, init_db

ENV_KEYS = (
    "PORT",
    "FRONTEND_URL",
    "SPOTIFY_CLIENT_ID",
    "SPOTIFY_CLIENT_SECRET",
    "SPOTIFY_REDIRECT_URI",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


# ===========================================================================
# load_config
# ===========================================================================
class TestLoadConfig:
    def test_defaults_without_file_or_env(self, tmp_path):
        cfg = load_config(tmp_path / "missing.yaml")
        assert cfg.port == DEFAULT_PORT == 3001
        assert cfg.frontend_url == DEFAULT_FRONTEND_URL
        assert cfg.missing_spotify_settings() == [
            "SPOTIFY_CLIENT_ID",
            "SPOTIFY_CLIENT_SECRET",
            "SPOTIFY_REDIRECT_URI",
        ]

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("port: 8080\nfrontend_url: https://dm.example.com/\n")
        cfg = load_config(path)
        assert cfg.port == 8080
        assert cfg.frontend_url == "https://dm.example.com"

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("port: 8080\n")
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("FRONTEND_URL", "http://table.local:5173")
        cfg = load_config(path)
        assert cfg.port == 9000
        assert cfg.frontend_url == "http://table.local:5173"

    def test_spotify_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SPOTIFY_CLIENT_ID", "cid")
        monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "secret")
        monkeypatch.setenv("SPOTIFY_REDIRECT_URI", "http://localhost:3001/api/spotify/callback")
        cfg = load_config(tmp_path / "missing.yaml")
        assert cfg.spotify_client_id == "cid"
        assert cfg.missing_spotify_settings() == []

    def test_non_mapping_yaml_is_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

    def test_bad_port_is_rejected(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PORT", "not-a-number")
        with pytest.raises(ValueError):
            load_config(tmp_path / "missing.yaml")

    def test_config_is_frozen(self):
        cfg = DmflowConfig(port=1, frontend_url="x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.port = 2  # type: ignore[misc]


# ===========================================================================
# Engine factory
# ===========================================================================
class TestCreateEngine:
    def test_missing_database_url(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        with pytest.raises(RuntimeError, match="DATABASE_URL"):
            create_db_engine()

    def test_sqlite_file_database(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'dmflow.db'}")
        engine = create_db_engine()
        init_db(engine)

        tables = set(inspect(engine).get_table_names())
        assert {
            "campaigns",
            "flow_nodes",
            "flow_edges",
            "encounters",
            "enemies",
            "loot",
            "drawings",
            "spotify_tokens",
            "oauth_states",
        } <= tables
        engine.dispose()
