"""
dmflow.api.routes.drawings — Per-node drawing endpoints
========================================================

    GET    /drawings/nodes/{node_id}   — Fetch (404 if the node has none)
    POST   /drawings/nodes/{node_id}   — Create or overwrite
    DELETE /drawings/nodes/{node_id}   — Remove
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from dmflow.api.deps import get_session
from dmflow.api.schemas import DrawingSave
from dmflow.services import drawing_service

router = APIRouter(prefix="/drawings", tags=["drawings"])


@router.get("/nodes/{node_id}")
def get_drawing(node_id: str, session: Session = Depends(get_session)):
    drawing = drawing_service.get_drawing(session, node_id)
    if drawing is None:
        raise HTTPException(404, "Drawing not found")
    return drawing


@router.post("/nodes/{node_id}")
def save_drawing(
    node_id: str,
    body: DrawingSave,
    session: Session = Depends(get_session),
):
    extra = {}
    if "thumbnail_url" in body.model_fields_set:
        extra["thumbnail_url"] = body.thumbnail_url
    try:
        result = drawing_service.save_drawing(
            session, node_id, canvas_data=body.canvas_data, **extra
        )
    except ValueError:
        raise HTTPException(404, "Node not found")
    session.commit()
    return result


@router.delete("/nodes/{node_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_drawing(node_id: str, session: Session = Depends(get_session)):
    if not drawing_service.delete_drawing(session, node_id):
        raise HTTPException(404, "Drawing not found")
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
