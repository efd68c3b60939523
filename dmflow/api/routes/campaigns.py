"""
dmflow.api.routes.campaigns — Campaign endpoints
=================================================

    GET    /campaigns        — All campaigns, most recently updated first
    GET    /campaigns/{id}   — One campaign with nodes, edges and encounters
    POST   /campaigns        — Create
    PUT    /campaigns/{id}   — Partial update
    DELETE /campaigns/{id}   — Delete (cascades to the whole flowchart)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from dmflow.api.deps import get_session
from dmflow.api.schemas import CampaignCreate, CampaignUpdate
from dmflow.services import campaign_service

router = APIRouter(prefix="/campaigns", tags=["campaigns"])


@router.get("")
def list_campaigns(session: Session = Depends(get_session)):
    return campaign_service.get_all_campaigns(session)


@router.get("/{campaign_id}")
def get_campaign(campaign_id: str, session: Session = Depends(get_session)):
    campaign = campaign_service.get_campaign(session, campaign_id)
    if campaign is None:
        raise HTTPException(404, "Campaign not found")
    return campaign


@router.post("", status_code=status.HTTP_201_CREATED)
def create_campaign(body: CampaignCreate, session: Session = Depends(get_session)):
    result = campaign_service.create_campaign(
        session,
        name=body.name,
        description=body.description,
        spotify_playlist_id=body.spotify_playlist_id,
    )
    session.commit()
    return result


@router.put("/{campaign_id}")
def update_campaign(
    campaign_id: str,
    body: CampaignUpdate,
    session: Session = Depends(get_session),
):
    try:
        result = campaign_service.update_campaign(
            session, campaign_id, updates=body.updates()
        )
    except ValueError:
        raise HTTPException(404, "Campaign not found")
    session.commit()
    return result


@router.delete("/{campaign_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_campaign(campaign_id: str, session: Session = Depends(get_session)):
    if not campaign_service.delete_campaign(session, campaign_id):
        raise HTTPException(404, "Campaign not found")
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
