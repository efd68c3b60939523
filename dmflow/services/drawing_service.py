"""
dmflow.services.drawing_service — Per-node area maps
=====================================================

Each flow node has at most one drawing.  Saving is an upsert keyed by node
id: the first save creates the row, later saves overwrite it in place.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from dmflow.database.models import Drawing, FlowNode
from dmflow.services.serialize import drawing_to_dict


def _find(session: Session, node_id: str) -> Drawing | None:
    return session.scalar(select(Drawing).where(Drawing.flow_node_id == node_id))


def get_drawing(session: Session, node_id: str) -> dict[str, Any] | None:
    drawing = _find(session, node_id)
    return drawing_to_dict(drawing) if drawing else None


_KEEP: Any = object()


def save_drawing(
    session: Session,
    node_id: str,
    *,
    canvas_data: str,
    thumbnail_url: str | None = _KEEP,
) -> dict[str, Any]:
    """Create or overwrite the drawing for *node_id*.

    ``canvas_data`` is stored as-is.  ``thumbnail_url`` is only written when
    passed, so a save without it keeps the stored thumbnail; passing
    ``None`` clears it.
    """
    if session.get(FlowNode, node_id) is None:
        raise ValueError(f"Node not found: {node_id}")

    drawing = _find(session, node_id)
    if drawing is None:
        drawing = Drawing(flow_node_id=node_id, canvas_data=canvas_data)
        session.add(drawing)
    else:
        drawing.canvas_data = canvas_data
    if thumbnail_url is not _KEEP:
        drawing.thumbnail_url = thumbnail_url

    session.flush()
    return drawing_to_dict(drawing)


def delete_drawing(session: Session, node_id: str) -> bool:
    drawing = _find(session, node_id)
    if drawing is None:
        return False
    session.delete(drawing)
    session.flush()
    return True
