"""
tests/test_campaigns.py — Campaign Routes
==========================================
CRUD over /api/campaigns, including the detail view and delete cascade.
"""

from __future__ import annotations

from unittest.mock import patch

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from conftest import make_campaign, make_encounter, make_node
from dmflow.database.models import Drawing, Encounter, Enemy, FlowEdge, FlowNode, Loot


# ===========================================================================
# Health
# ===========================================================================
class TestHealth:
    def test_health_returns_ok(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


# ===========================================================================
# Create / read
# ===========================================================================
class TestCreateCampaign:
    def test_create_returns_201_with_defaults(self, client):
        resp = client.post("/api/campaigns", json={"name": "Lost Mine"})
        assert resp.status_code == 201
        data = resp.json()
        assert data["name"] == "Lost Mine"
        assert data["description"] == ""
        assert data["spotifyPlaylistId"] is None
        assert data["id"]
        assert data["createdAt"] and data["updatedAt"]

    def test_create_accepts_optional_fields(self, client):
        data = make_campaign(
            client, description="Phandelver", spotifyPlaylistId="37i9dQZF1DX"
        )
        assert data["description"] == "Phandelver"
        assert data["spotifyPlaylistId"] == "37i9dQZF1DX"

    def test_missing_name_is_400(self, client):
        resp = client.post("/api/campaigns", json={"description": "no name"})
        assert resp.status_code == 400
        assert "name" in resp.json()["detail"]

    def test_empty_name_is_400(self, client):
        resp = client.post("/api/campaigns", json={"name": ""})
        assert resp.status_code == 400


class TestListCampaigns:
    def test_empty(self, client):
        resp = client.get("/api/campaigns")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_most_recently_updated_first(self, client):
        first = make_campaign(client, "First")
        make_campaign(client, "Second")

        names = [c["name"] for c in client.get("/api/campaigns").json()]
        assert names == ["Second", "First"]

        client.put(f"/api/campaigns/{first['id']}", json={"description": "touched"})
        names = [c["name"] for c in client.get("/api/campaigns").json()]
        assert names == ["First", "Second"]


class TestGetCampaign:
    def test_unknown_is_404(self, client):
        resp = client.get("/api/campaigns/does-not-exist")
        assert resp.status_code == 404
        assert resp.json() == {"detail": "Campaign not found"}

    def test_timestamps_match_create_response(self, client):
        created = make_campaign(client)
        fetched = client.get(f"/api/campaigns/{created['id']}").json()
        assert fetched["createdAt"] == created["createdAt"]
        assert fetched["updatedAt"] == created["updatedAt"]
        assert fetched["createdAt"].endswith("+00:00")

        listed = client.get("/api/campaigns").json()[0]
        assert listed["updatedAt"].endswith("+00:00")

    def test_new_node_shows_up_in_detail(self, client):
        campaign = make_campaign(client)
        node = make_node(client, campaign["id"], type="start", label="Start")

        detail = client.get(f"/api/campaigns/{campaign['id']}").json()
        assert [n["id"] for n in detail["flowNodes"]] == [node["id"]]
        assert detail["flowNodes"][0]["type"] == "start"
        assert detail["flowEdges"] == []
        assert detail["encounters"] == []

    def test_detail_nests_encounter_and_drawing(self, client):
        campaign = make_campaign(client)
        encounter = make_encounter(client, campaign["id"])
        node = make_node(client, campaign["id"], encounterId=encounter["id"])
        client.post(
            f"/api/drawings/nodes/{node['id']}", json={"canvasData": '{"shapes":[]}'}
        )

        detail = client.get(f"/api/campaigns/{campaign['id']}").json()
        nested = detail["flowNodes"][0]
        assert nested["encounter"]["id"] == encounter["id"]
        assert nested["drawing"]["canvasData"] == '{"shapes":[]}'
        assert [e["id"] for e in detail["encounters"]] == [encounter["id"]]


# ===========================================================================
# Update
# ===========================================================================
class TestUpdateCampaign:
    def test_partial_update_leaves_other_fields(self, client):
        campaign = make_campaign(client, description="Original")
        resp = client.put(
            f"/api/campaigns/{campaign['id']}", json={"spotifyPlaylistId": "pl-1"}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["spotifyPlaylistId"] == "pl-1"
        assert data["name"] == "Lost Mine"
        assert data["description"] == "Original"

    def test_explicit_null_clears_playlist(self, client):
        campaign = make_campaign(client, spotifyPlaylistId="pl-1")
        resp = client.put(
            f"/api/campaigns/{campaign['id']}", json={"spotifyPlaylistId": None}
        )
        assert resp.status_code == 200
        assert resp.json()["spotifyPlaylistId"] is None

    def test_empty_name_is_400(self, client):
        campaign = make_campaign(client)
        resp = client.put(f"/api/campaigns/{campaign['id']}", json={"name": ""})
        assert resp.status_code == 400

    def test_null_name_is_400(self, client):
        campaign = make_campaign(client)
        resp = client.put(f"/api/campaigns/{campaign['id']}", json={"name": None})
        assert resp.status_code == 400
        assert client.get(f"/api/campaigns/{campaign['id']}").json()["name"] == "Lost Mine"

    def test_unknown_is_404(self, client):
        resp = client.put("/api/campaigns/nope", json={"name": "X"})
        assert resp.status_code == 404


# ===========================================================================
# Delete
# ===========================================================================
class TestDeleteCampaign:
    def test_delete_returns_204(self, client):
        campaign = make_campaign(client)
        resp = client.delete(f"/api/campaigns/{campaign['id']}")
        assert resp.status_code == 204
        assert resp.content == b""
        assert client.get(f"/api/campaigns/{campaign['id']}").status_code == 404

    def test_unknown_is_404(self, client):
        assert client.delete("/api/campaigns/nope").status_code == 404

    def test_delete_cascades_to_everything(self, client, db_engine):
        campaign = make_campaign(client)
        cid = campaign["id"]
        encounter = make_encounter(client, cid)
        start = make_node(client, cid, type="start", label="Start")
        fight = make_node(client, cid, encounterId=encounter["id"])
        edge = client.post(
            f"/api/flow/campaigns/{cid}/edges",
            json={"sourceNodeId": start["id"], "targetNodeId": fight["id"]},
        ).json()
        client.post(
            f"/api/encounters/{encounter['id']}/enemies",
            json={"name": "Goblin", "hitPoints": 7, "armorClass": 15, "challenge": "1/4"},
        )
        client.post(f"/api/encounters/{encounter['id']}/loot", json={"name": "Gold"})
        client.post(f"/api/drawings/nodes/{fight['id']}", json={"canvasData": "[]"})

        assert client.delete(f"/api/campaigns/{cid}").status_code == 204

        assert client.get(f"/api/flow/campaigns/{cid}").status_code == 404
        assert client.get(f"/api/encounters/{encounter['id']}").status_code == 404
        assert client.get(f"/api/drawings/nodes/{fight['id']}").status_code == 404
        assert client.put(f"/api/flow/edges/{edge['id']}", json={"label": "x"}).status_code == 404

        with Session(db_engine) as session:
            for model in (FlowNode, FlowEdge, Encounter, Enemy, Loot, Drawing):
                count = session.scalar(select(func.count()).select_from(model))
                assert count == 0, model.__tablename__

    def test_other_campaigns_untouched(self, client):
        keep = make_campaign(client, "Keep")
        drop = make_campaign(client, "Drop")
        make_node(client, keep["id"])
        make_node(client, drop["id"])

        client.delete(f"/api/campaigns/{drop['id']}")
        detail = client.get(f"/api/campaigns/{keep['id']}").json()
        assert len(detail["flowNodes"]) == 1


# ===========================================================================
# Error mapping
# ===========================================================================
class TestErrorHandling:
    def test_database_error_is_opaque_500(self, client):
        with patch(
            "dmflow.services.campaign_service.get_all_campaigns",
            side_effect=OperationalError("SELECT", {}, Exception("disk I/O error")),
        ):
            resp = client.get("/api/campaigns")
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Internal server error"}

    def test_unexpected_error_is_opaque_500(self, client):
        with patch(
            "dmflow.services.campaign_service.get_campaign",
            side_effect=RuntimeError("boom"),
        ):
            resp = client.get("/api/campaigns/anything")
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Internal server error"}

    def test_malformed_json_is_400(self, client):
        resp = client.post(
            "/api/campaigns",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
