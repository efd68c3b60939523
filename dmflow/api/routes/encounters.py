"""
dmflow.api.routes.encounters — Encounter, enemy and loot endpoints
===================================================================

    GET    /encounters/{id}                       — With enemies, loot, linking node
    POST   /encounters/campaigns/{campaign_id}    — Create
    PUT    /encounters/{id}                       — Patch
    DELETE /encounters/{id}                       — Delete

    POST   /encounters/{encounter_id}/enemies     — Add enemy
    PUT    /encounters/enemies/{id}               — Patch enemy
    DELETE /encounters/enemies/{id}               — Delete enemy

    POST   /encounters/{encounter_id}/loot        — Add loot
    PUT    /encounters/loot/{id}                  — Patch loot
    DELETE /encounters/loot/{id}                  — Delete loot

The ``/enemies/{id}`` and ``/loot/{id}`` routes are registered before
``/{encounter_id}`` so the literal segment wins.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from dmflow.api.deps import get_session
from dmflow.api.schemas import (
    EncounterCreate,
    EncounterUpdate,
    EnemyCreate,
    EnemyUpdate,
    LootCreate,
    LootUpdate,
)
from dmflow.services import encounter_service

router = APIRouter(prefix="/encounters", tags=["encounters"])


# ---------------------------------------------------------------------------
# Enemies
# ---------------------------------------------------------------------------
@router.post("/{encounter_id}/enemies", status_code=status.HTTP_201_CREATED)
def add_enemy(
    encounter_id: str,
    body: EnemyCreate,
    session: Session = Depends(get_session),
):
    try:
        result = encounter_service.add_enemy(
            session,
            encounter_id,
            name=body.name,
            hit_points=body.hit_points,
            armor_class=body.armor_class,
            challenge=body.challenge,
            abilities=body.abilities,
            image_url=body.image_url,
        )
    except ValueError:
        raise HTTPException(404, "Encounter not found")
    session.commit()
    return result


@router.put("/enemies/{enemy_id}")
def update_enemy(
    enemy_id: str,
    body: EnemyUpdate,
    session: Session = Depends(get_session),
):
    try:
        result = encounter_service.update_enemy(session, enemy_id, updates=body.updates())
    except ValueError:
        raise HTTPException(404, "Enemy not found")
    session.commit()
    return result


@router.delete("/enemies/{enemy_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_enemy(enemy_id: str, session: Session = Depends(get_session)):
    if not encounter_service.delete_enemy(session, enemy_id):
        raise HTTPException(404, "Enemy not found")
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Loot
# ---------------------------------------------------------------------------
@router.post("/{encounter_id}/loot", status_code=status.HTTP_201_CREATED)
def add_loot(
    encounter_id: str,
    body: LootCreate,
    session: Session = Depends(get_session),
):
    try:
        result = encounter_service.add_loot(
            session,
            encounter_id,
            name=body.name,
            description=body.description,
            quantity=body.quantity,
            rarity=body.rarity.value,
        )
    except ValueError:
        raise HTTPException(404, "Encounter not found")
    session.commit()
    return result


@router.put("/loot/{loot_id}")
def update_loot(
    loot_id: str,
    body: LootUpdate,
    session: Session = Depends(get_session),
):
    try:
        result = encounter_service.update_loot(session, loot_id, updates=body.updates())
    except ValueError:
        raise HTTPException(404, "Loot not found")
    session.commit()
    return result


@router.delete("/loot/{loot_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_loot(loot_id: str, session: Session = Depends(get_session)):
    if not encounter_service.delete_loot(session, loot_id):
        raise HTTPException(404, "Loot not found")
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Encounters
# ---------------------------------------------------------------------------
@router.post("/campaigns/{campaign_id}", status_code=status.HTTP_201_CREATED)
def create_encounter(
    campaign_id: str,
    body: EncounterCreate,
    session: Session = Depends(get_session),
):
    try:
        result = encounter_service.create_encounter(
            session,
            campaign_id,
            name=body.name,
            story_text=body.story_text,
            dm_notes=body.dm_notes,
            spotify_track_uri=body.spotify_track_uri,
        )
    except ValueError:
        raise HTTPException(404, "Campaign not found")
    session.commit()
    return result


@router.get("/{encounter_id}")
def get_encounter(encounter_id: str, session: Session = Depends(get_session)):
    encounter = encounter_service.get_encounter(session, encounter_id)
    if encounter is None:
        raise HTTPException(404, "Encounter not found")
    return encounter


@router.put("/{encounter_id}")
def update_encounter(
    encounter_id: str,
    body: EncounterUpdate,
    session: Session = Depends(get_session),
):
    try:
        result = encounter_service.update_encounter(
            session, encounter_id, updates=body.updates()
        )
    except ValueError:
        raise HTTPException(404, "Encounter not found")
    session.commit()
    return result


@router.delete("/{encounter_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_encounter(encounter_id: str, session: Session = Depends(get_session)):
    if not encounter_service.delete_encounter(session, encounter_id):
        raise HTTPException(404, "Encounter not found")
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
