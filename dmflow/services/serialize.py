"""
dmflow.services.serialize — ORM → JSON-ready dict helpers
==========================================================

Every dict produced here uses the camelCase keys the front end expects.
Nested shapes mirror what each endpoint returns:

* campaign detail → nodes (with ``encounter`` + ``drawing``), edges, encounters
* encounter detail → enemies, loot, linking ``flowNode``
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from dmflow.database.models import (
    Campaign,
    Drawing,
    Encounter,
    Enemy,
    FlowEdge,
    FlowNode,
    Loot,
)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _iso(value: datetime | None) -> str | None:
    return as_utc(value).isoformat() if value else None


# ---------------------------------------------------------------------------
# Campaign
# ---------------------------------------------------------------------------
def campaign_to_dict(campaign: Campaign) -> dict[str, Any]:
    return {
        "id": campaign.id,
        "name": campaign.name,
        "description": campaign.description,
        "spotifyPlaylistId": campaign.spotify_playlist_id,
        "createdAt": _iso(campaign.created_at),
        "updatedAt": _iso(campaign.updated_at),
    }


def campaign_detail_to_dict(campaign: Campaign) -> dict[str, Any]:
    """Campaign plus its whole flowchart and encounter list."""
    data = campaign_to_dict(campaign)
    data["flowNodes"] = [node_to_dict(n) for n in campaign.flow_nodes]
    data["flowEdges"] = [edge_to_dict(e) for e in campaign.flow_edges]
    data["encounters"] = [encounter_to_dict(e) for e in campaign.encounters]
    return data


# ---------------------------------------------------------------------------
# Flow graph
# ---------------------------------------------------------------------------
def node_to_dict(node: FlowNode, *, nested: bool = True) -> dict[str, Any]:
    """Serialise a node.  With *nested*, include its encounter and drawing."""
    data: dict[str, Any] = {
        "id": node.id,
        "campaignId": node.campaign_id,
        "type": node.type,
        "label": node.label,
        "description": node.description,
        "positionX": node.position_x,
        "positionY": node.position_y,
        "encounterId": node.encounter_id,
        "createdAt": _iso(node.created_at),
        "updatedAt": _iso(node.updated_at),
    }
    if nested:
        data["encounter"] = encounter_to_dict(node.encounter) if node.encounter else None
        data["drawing"] = drawing_to_dict(node.drawing) if node.drawing else None
    return data


def edge_to_dict(edge: FlowEdge) -> dict[str, Any]:
    return {
        "id": edge.id,
        "campaignId": edge.campaign_id,
        "sourceNodeId": edge.source_node_id,
        "targetNodeId": edge.target_node_id,
        "label": edge.label,
        "createdAt": _iso(edge.created_at),
    }


# ---------------------------------------------------------------------------
# Encounters
# ---------------------------------------------------------------------------
def encounter_to_dict(encounter: Encounter) -> dict[str, Any]:
    return {
        "id": encounter.id,
        "campaignId": encounter.campaign_id,
        "name": encounter.name,
        "storyText": encounter.story_text,
        "dmNotes": encounter.dm_notes,
        "spotifyTrackUri": encounter.spotify_track_uri,
        "createdAt": _iso(encounter.created_at),
        "updatedAt": _iso(encounter.updated_at),
    }


def encounter_detail_to_dict(
    encounter: Encounter,
    *,
    with_flow_node: bool = False,
    flow_node: FlowNode | None = None,
) -> dict[str, Any]:
    """Encounter plus enemies and loot, optionally the node linking to it."""
    data = encounter_to_dict(encounter)
    data["enemies"] = [enemy_to_dict(e) for e in encounter.enemies]
    data["loot"] = [loot_to_dict(item) for item in encounter.loot]
    if with_flow_node:
        data["flowNode"] = node_to_dict(flow_node, nested=False) if flow_node else None
    return data


def enemy_to_dict(enemy: Enemy) -> dict[str, Any]:
    return {
        "id": enemy.id,
        "encounterId": enemy.encounter_id,
        "name": enemy.name,
        "hitPoints": enemy.hit_points,
        "armorClass": enemy.armor_class,
        "challenge": enemy.challenge,
        "abilities": enemy.abilities,
        "imageUrl": enemy.image_url,
    }


def loot_to_dict(item: Loot) -> dict[str, Any]:
    return {
        "id": item.id,
        "encounterId": item.encounter_id,
        "name": item.name,
        "description": item.description,
        "quantity": item.quantity,
        "rarity": item.rarity,
    }


# ---------------------------------------------------------------------------
# Drawings
# ---------------------------------------------------------------------------
def drawing_to_dict(drawing: Drawing) -> dict[str, Any]:
    return {
        "id": drawing.id,
        "flowNodeId": drawing.flow_node_id,
        "canvasData": drawing.canvas_data,
        "thumbnailUrl": drawing.thumbnail_url,
        "createdAt": _iso(drawing.created_at),
        "updatedAt": _iso(drawing.updated_at),
    }
