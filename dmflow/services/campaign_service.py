"""
dmflow.services.campaign_service — Campaign CRUD
=================================================

Services only ``flush``; the calling route owns the commit.  Unknown ids
come back as ``None`` / ``False`` (reads, deletes) or raise
:class:`ValueError` (updates) so routes can answer 404.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, selectinload

from dmflow.constants import ALLOWED_CAMPAIGN_FIELDS
from dmflow.database.models import Campaign, FlowEdge, FlowNode
from dmflow.services.serialize import campaign_detail_to_dict, campaign_to_dict

logger = logging.getLogger(__name__)


def get_all_campaigns(session: Session) -> list[dict[str, Any]]:
    """Every campaign, most recently updated first."""
    campaigns = session.scalars(
        select(Campaign).order_by(Campaign.updated_at.desc())
    ).all()
    return [campaign_to_dict(c) for c in campaigns]


def get_campaign(session: Session, campaign_id: str) -> dict[str, Any] | None:
    """One campaign with nodes (plus encounter/drawing), edges and encounters."""
    campaign = session.scalar(
        select(Campaign)
        .options(
            selectinload(Campaign.flow_nodes).selectinload(FlowNode.encounter),
            selectinload(Campaign.flow_nodes).selectinload(FlowNode.drawing),
            selectinload(Campaign.flow_edges),
            selectinload(Campaign.encounters),
        )
        .where(Campaign.id == campaign_id)
    )
    if campaign is None:
        return None
    return campaign_detail_to_dict(campaign)


def create_campaign(
    session: Session,
    *,
    name: str,
    description: str | None = None,
    spotify_playlist_id: str | None = None,
) -> dict[str, Any]:
    campaign = Campaign(
        name=name,
        description=description or "",
        spotify_playlist_id=spotify_playlist_id,
    )
    session.add(campaign)
    session.flush()
    logger.info("Created campaign %s (%r)", campaign.id, campaign.name)
    return campaign_to_dict(campaign)


def update_campaign(
    session: Session,
    campaign_id: str,
    *,
    updates: dict[str, Any],
) -> dict[str, Any]:
    """Apply only the supplied fields; everything else is left alone."""
    campaign = session.get(Campaign, campaign_id)
    if campaign is None:
        raise ValueError(f"Campaign not found: {campaign_id}")

    for key, value in updates.items():
        if key in ALLOWED_CAMPAIGN_FIELDS:
            setattr(campaign, key, value)

    session.flush()
    return campaign_to_dict(campaign)


def delete_campaign(session: Session, campaign_id: str) -> bool:
    """Remove a campaign and, by cascade, its nodes, edges and encounters."""
    campaign = session.get(Campaign, campaign_id)
    if campaign is None:
        return False
    # Edges have no ORM link to nodes, so clear them before the cascade runs.
    session.execute(delete(FlowEdge).where(FlowEdge.campaign_id == campaign_id))
    session.delete(campaign)
    session.flush()
    logger.info("Deleted campaign %s", campaign_id)
    return True
