"""
dmflow.services.flow_service — Flowchart nodes & edges
=======================================================

CRUD for the branching story graph.  The graph is stored as positions and
labels only: no traversal, no cycle detection, and no check that an edge's
endpoints share a campaign.  Those rules belong to whoever draws the graph.

The one coordinated write is :func:`bulk_update_positions`, used to persist
a drag-and-drop.  It validates every id before touching anything, so the
caller's single commit moves either all nodes or none.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session, selectinload

from dmflow.constants import ALLOWED_EDGE_FIELDS, ALLOWED_NODE_FIELDS
from dmflow.database.models import Campaign, FlowEdge, FlowNode
from dmflow.services.serialize import edge_to_dict, node_to_dict

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def get_flow_data(session: Session, campaign_id: str) -> dict[str, Any] | None:
    """All nodes (with encounter + drawing) and edges of a campaign."""
    if session.get(Campaign, campaign_id) is None:
        return None

    nodes = session.scalars(
        select(FlowNode)
        .options(selectinload(FlowNode.encounter), selectinload(FlowNode.drawing))
        .where(FlowNode.campaign_id == campaign_id)
        .order_by(FlowNode.created_at)
    ).all()
    edges = session.scalars(
        select(FlowEdge)
        .where(FlowEdge.campaign_id == campaign_id)
        .order_by(FlowEdge.created_at)
    ).all()

    return {
        "nodes": [node_to_dict(n) for n in nodes],
        "edges": [edge_to_dict(e) for e in edges],
    }


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------
def create_node(
    session: Session,
    campaign_id: str,
    *,
    type: str,
    label: str,
    position_x: float,
    position_y: float,
    description: str | None = None,
    encounter_id: str | None = None,
) -> dict[str, Any]:
    if session.get(Campaign, campaign_id) is None:
        raise ValueError(f"Campaign not found: {campaign_id}")

    node = FlowNode(
        campaign_id=campaign_id,
        type=type,
        label=label,
        description=description or "",
        position_x=position_x,
        position_y=position_y,
        encounter_id=encounter_id,
    )
    session.add(node)
    session.flush()
    return node_to_dict(node)


def update_node(
    session: Session,
    node_id: str,
    *,
    updates: dict[str, Any],
) -> dict[str, Any]:
    """Patch a node.  ``encounter_id=None`` unlinks its encounter."""
    node = session.get(FlowNode, node_id)
    if node is None:
        raise ValueError(f"Node not found: {node_id}")

    for key, value in updates.items():
        if key in ALLOWED_NODE_FIELDS:
            setattr(node, key, value)

    session.flush()
    # encounter_id may have moved under an already-loaded relationship.
    session.expire(node, ["encounter"])
    return node_to_dict(node)


def delete_node(session: Session, node_id: str) -> bool:
    """Remove a node, its drawing, and every edge touching it."""
    node = session.get(FlowNode, node_id)
    if node is None:
        return False

    session.execute(
        delete(FlowEdge).where(
            or_(FlowEdge.source_node_id == node_id, FlowEdge.target_node_id == node_id)
        )
    )
    session.delete(node)
    session.flush()
    return True


def bulk_update_positions(
    session: Session,
    campaign_id: str,
    positions: list[dict[str, Any]],
) -> int:
    """Move many nodes of one campaign at once.

    Each entry needs ``id``, ``position_x`` and ``position_y``.  Raises
    :class:`ValueError` listing unknown ids before any node is modified.
    Returns the number of nodes moved.
    """
    ids = [p["id"] for p in positions]
    nodes = session.scalars(
        select(FlowNode).where(
            FlowNode.campaign_id == campaign_id, FlowNode.id.in_(ids)
        )
    ).all() if ids else []
    by_id = {n.id: n for n in nodes}

    missing = [node_id for node_id in dict.fromkeys(ids) if node_id not in by_id]
    if missing:
        raise ValueError(f"Nodes not found: {', '.join(missing)}")

    for entry in positions:
        node = by_id[entry["id"]]
        node.position_x = entry["position_x"]
        node.position_y = entry["position_y"]

    session.flush()
    logger.debug("Moved %d nodes in campaign %s", len(positions), campaign_id)
    return len(by_id)


# ---------------------------------------------------------------------------
# Edges
# ---------------------------------------------------------------------------
def create_edge(
    session: Session,
    campaign_id: str,
    *,
    source_node_id: str,
    target_node_id: str,
    label: str | None = None,
) -> dict[str, Any]:
    if session.get(Campaign, campaign_id) is None:
        raise ValueError(f"Campaign not found: {campaign_id}")

    edge = FlowEdge(
        campaign_id=campaign_id,
        source_node_id=source_node_id,
        target_node_id=target_node_id,
        label=label,
    )
    session.add(edge)
    session.flush()
    return edge_to_dict(edge)


def update_edge(
    session: Session,
    edge_id: str,
    *,
    updates: dict[str, Any],
) -> dict[str, Any]:
    edge = session.get(FlowEdge, edge_id)
    if edge is None:
        raise ValueError(f"Edge not found: {edge_id}")

    for key, value in updates.items():
        if key in ALLOWED_EDGE_FIELDS:
            setattr(edge, key, value)

    session.flush()
    return edge_to_dict(edge)


def delete_edge(session: Session, edge_id: str) -> bool:
    edge = session.get(FlowEdge, edge_id)
    if edge is None:
        return False
    session.delete(edge)
    session.flush()
    return True
