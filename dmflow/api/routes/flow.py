"""
dmflow.api.routes.flow — Flowchart endpoints
=============================================

    GET    /flow/campaigns/{campaign_id}         — Nodes + edges
    POST   /flow/campaigns/{campaign_id}/nodes   — Create node
    PUT    /flow/nodes/{node_id}                 — Patch node
    DELETE /flow/nodes/{node_id}                 — Delete node (and its edges)
    POST   /flow/campaigns/{campaign_id}/edges   — Create edge
    PUT    /flow/edges/{edge_id}                 — Patch edge label
    DELETE /flow/edges/{edge_id}                 — Delete edge
    PUT    /flow/campaigns/{campaign_id}/bulk    — Move many nodes atomically
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from dmflow.api.deps import get_session
from dmflow.api.schemas import (
    BulkPositions,
    EdgeCreate,
    EdgeUpdate,
    NodeCreate,
    NodeUpdate,
)
from dmflow.services import flow_service

router = APIRouter(prefix="/flow", tags=["flow"])


@router.get("/campaigns/{campaign_id}")
def get_flow_data(campaign_id: str, session: Session = Depends(get_session)):
    data = flow_service.get_flow_data(session, campaign_id)
    if data is None:
        raise HTTPException(404, "Campaign not found")
    return data


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------
@router.post("/campaigns/{campaign_id}/nodes", status_code=status.HTTP_201_CREATED)
def create_node(
    campaign_id: str,
    body: NodeCreate,
    session: Session = Depends(get_session),
):
    try:
        result = flow_service.create_node(
            session,
            campaign_id,
            type=body.type.value,
            label=body.label,
            description=body.description,
            position_x=body.position_x,
            position_y=body.position_y,
            encounter_id=body.encounter_id,
        )
    except ValueError:
        raise HTTPException(404, "Campaign not found")
    session.commit()
    return result


@router.put("/nodes/{node_id}")
def update_node(
    node_id: str,
    body: NodeUpdate,
    session: Session = Depends(get_session),
):
    try:
        result = flow_service.update_node(session, node_id, updates=body.updates())
    except ValueError:
        raise HTTPException(404, "Node not found")
    session.commit()
    return result


@router.delete("/nodes/{node_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_node(node_id: str, session: Session = Depends(get_session)):
    if not flow_service.delete_node(session, node_id):
        raise HTTPException(404, "Node not found")
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/campaigns/{campaign_id}/bulk")
def bulk_update_nodes(
    campaign_id: str,
    body: BulkPositions,
    session: Session = Depends(get_session),
):
    """Persist a drag-and-drop: every node moves, or none does."""
    positions = [p.model_dump() for p in body.nodes]
    try:
        updated = flow_service.bulk_update_positions(session, campaign_id, positions)
    except ValueError as exc:
        session.rollback()
        raise HTTPException(404, str(exc))
    session.commit()
    return {"success": True, "updated": updated}


# ---------------------------------------------------------------------------
# Edges
# ---------------------------------------------------------------------------
@router.post("/campaigns/{campaign_id}/edges", status_code=status.HTTP_201_CREATED)
def create_edge(
    campaign_id: str,
    body: EdgeCreate,
    session: Session = Depends(get_session),
):
    try:
        result = flow_service.create_edge(
            session,
            campaign_id,
            source_node_id=body.source_node_id,
            target_node_id=body.target_node_id,
            label=body.label,
        )
    except ValueError:
        raise HTTPException(404, "Campaign not found")
    session.commit()
    return result


@router.put("/edges/{edge_id}")
def update_edge(
    edge_id: str,
    body: EdgeUpdate,
    session: Session = Depends(get_session),
):
    try:
        result = flow_service.update_edge(session, edge_id, updates=body.updates())
    except ValueError:
        raise HTTPException(404, "Edge not found")
    session.commit()
    return result


@router.delete("/edges/{edge_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_edge(edge_id: str, session: Session = Depends(get_session)):
    if not flow_service.delete_edge(session, edge_id):
        raise HTTPException(404, "Edge not found")
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
