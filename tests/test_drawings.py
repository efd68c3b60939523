"""
tests/test_drawings.py — Drawing Routes
========================================
One drawing per node, saved as an upsert.
"""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from conftest import make_campaign, make_node
from dmflow.database.models import Drawing


@pytest.fixture
def node(client):
    return make_node(client, make_campaign(client)["id"])


class TestDrawings:
    def test_missing_drawing_is_404(self, client, node):
        resp = client.get(f"/api/drawings/nodes/{node['id']}")
        assert resp.status_code == 404

    def test_save_then_get(self, client, node):
        resp = client.post(
            f"/api/drawings/nodes/{node['id']}",
            json={"canvasData": '[{"type":"line"}]', "thumbnailUrl": "data:image/png;base64,AA"},
        )
        assert resp.status_code == 200
        assert resp.json()["flowNodeId"] == node["id"]

        data = client.get(f"/api/drawings/nodes/{node['id']}").json()
        assert data["canvasData"] == '[{"type":"line"}]'
        assert data["thumbnailUrl"] == "data:image/png;base64,AA"

    def test_second_save_overwrites_in_place(self, client, node, db_engine):
        first = client.post(
            f"/api/drawings/nodes/{node['id']}",
            json={"canvasData": "v1", "thumbnailUrl": "thumb-1"},
        ).json()
        second = client.post(
            f"/api/drawings/nodes/{node['id']}", json={"canvasData": "v2"}
        ).json()

        assert second["id"] == first["id"]
        assert second["canvasData"] == "v2"
        assert second["thumbnailUrl"] == "thumb-1"

        with Session(db_engine) as session:
            assert session.scalar(select(func.count()).select_from(Drawing)) == 1

    def test_explicit_null_clears_thumbnail(self, client, node):
        client.post(
            f"/api/drawings/nodes/{node['id']}",
            json={"canvasData": "v1", "thumbnailUrl": "thumb-1"},
        )
        resp = client.post(
            f"/api/drawings/nodes/{node['id']}",
            json={"canvasData": "v2", "thumbnailUrl": None},
        )
        assert resp.status_code == 200
        assert resp.json()["thumbnailUrl"] is None
        assert client.get(f"/api/drawings/nodes/{node['id']}").json()["thumbnailUrl"] is None

    def test_missing_canvas_data_is_400(self, client, node):
        resp = client.post(f"/api/drawings/nodes/{node['id']}", json={})
        assert resp.status_code == 400
        assert "canvasData" in resp.json()["detail"]

    def test_unknown_node_is_404(self, client):
        resp = client.post("/api/drawings/nodes/nope", json={"canvasData": "[]"})
        assert resp.status_code == 404

    def test_delete(self, client, node):
        client.post(f"/api/drawings/nodes/{node['id']}", json={"canvasData": "[]"})
        assert client.delete(f"/api/drawings/nodes/{node['id']}").status_code == 204
        assert client.get(f"/api/drawings/nodes/{node['id']}").status_code == 404
        assert client.delete(f"/api/drawings/nodes/{node['id']}").status_code == 404
