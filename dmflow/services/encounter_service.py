"""
dmflow.services.encounter_service — Encounters, enemies and loot
=================================================================

An encounter bundles player-visible story text, private DM notes and an
optional music cue, and owns two ordered collections: enemies and loot.
Both collections come back in insertion order.

Same conventions as the other services: flush only, ``None``/``False`` for
unknown ids on reads/deletes, :class:`ValueError` on updates and on
creates whose parent does not exist.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from dmflow.constants import (
    ALLOWED_ENCOUNTER_FIELDS,
    ALLOWED_ENEMY_FIELDS,
    ALLOWED_LOOT_FIELDS,
    DEFAULT_LOOT_QUANTITY,
    DEFAULT_LOOT_RARITY,
)
from dmflow.database.models import Campaign, Encounter, Enemy, FlowNode, Loot
from dmflow.services.serialize import (
    encounter_detail_to_dict,
    enemy_to_dict,
    loot_to_dict,
)


def _apply(obj: Any, updates: dict[str, Any], allowed: set[str]) -> None:
    for key, value in updates.items():
        if key in allowed:
            setattr(obj, key, value)


# ---------------------------------------------------------------------------
# Encounter CRUD
# ---------------------------------------------------------------------------
def get_encounter(session: Session, encounter_id: str) -> dict[str, Any] | None:
    """Encounter with enemies, loot and the node that links to it (if any).

    Several nodes may link the same encounter; the earliest one is reported.
    """
    encounter = session.scalar(
        select(Encounter)
        .options(selectinload(Encounter.enemies), selectinload(Encounter.loot))
        .where(Encounter.id == encounter_id)
    )
    if encounter is None:
        return None
    flow_node = session.scalar(
        select(FlowNode)
        .where(FlowNode.encounter_id == encounter_id)
        .order_by(FlowNode.created_at, FlowNode.id)
        .limit(1)
    )
    return encounter_detail_to_dict(encounter, with_flow_node=True, flow_node=flow_node)


def create_encounter(
    session: Session,
    campaign_id: str,
    *,
    name: str,
    story_text: str | None = None,
    dm_notes: str | None = None,
    spotify_track_uri: str | None = None,
) -> dict[str, Any]:
    if session.get(Campaign, campaign_id) is None:
        raise ValueError(f"Campaign not found: {campaign_id}")

    encounter = Encounter(
        campaign_id=campaign_id,
        name=name,
        story_text=story_text or "",
        dm_notes=dm_notes or "",
        spotify_track_uri=spotify_track_uri,
    )
    session.add(encounter)
    session.flush()
    return encounter_detail_to_dict(encounter)


def update_encounter(
    session: Session,
    encounter_id: str,
    *,
    updates: dict[str, Any],
) -> dict[str, Any]:
    encounter = session.get(Encounter, encounter_id)
    if encounter is None:
        raise ValueError(f"Encounter not found: {encounter_id}")

    _apply(encounter, updates, ALLOWED_ENCOUNTER_FIELDS)
    session.flush()
    return encounter_detail_to_dict(encounter)


def delete_encounter(session: Session, encounter_id: str) -> bool:
    """Remove an encounter with its enemies and loot; unlink any node."""
    encounter = session.get(Encounter, encounter_id)
    if encounter is None:
        return False

    session.execute(
        update(FlowNode)
        .where(FlowNode.encounter_id == encounter_id)
        .values(encounter_id=None)
    )
    session.delete(encounter)
    session.flush()
    return True


# ---------------------------------------------------------------------------
# Enemies
# ---------------------------------------------------------------------------
def add_enemy(
    session: Session,
    encounter_id: str,
    *,
    name: str,
    hit_points: int,
    armor_class: int,
    challenge: str,
    abilities: str | None = None,
    image_url: str | None = None,
) -> dict[str, Any]:
    if session.get(Encounter, encounter_id) is None:
        raise ValueError(f"Encounter not found: {encounter_id}")

    enemy = Enemy(
        encounter_id=encounter_id,
        name=name,
        hit_points=hit_points,
        armor_class=armor_class,
        challenge=challenge,
        abilities=abilities or "",
        image_url=image_url,
    )
    session.add(enemy)
    session.flush()
    return enemy_to_dict(enemy)


def update_enemy(
    session: Session,
    enemy_id: str,
    *,
    updates: dict[str, Any],
) -> dict[str, Any]:
    enemy = session.get(Enemy, enemy_id)
    if enemy is None:
        raise ValueError(f"Enemy not found: {enemy_id}")

    _apply(enemy, updates, ALLOWED_ENEMY_FIELDS)
    session.flush()
    return enemy_to_dict(enemy)


def delete_enemy(session: Session, enemy_id: str) -> bool:
    enemy = session.get(Enemy, enemy_id)
    if enemy is None:
        return False
    session.delete(enemy)
    session.flush()
    return True


# ---------------------------------------------------------------------------
# Loot
# ---------------------------------------------------------------------------
def add_loot(
    session: Session,
    encounter_id: str,
    *,
    name: str,
    description: str | None = None,
    quantity: int | None = None,
    rarity: str | None = None,
) -> dict[str, Any]:
    """Add a loot item.  Quantity defaults to 1, rarity to ``common``."""
    if session.get(Encounter, encounter_id) is None:
        raise ValueError(f"Encounter not found: {encounter_id}")

    item = Loot(
        encounter_id=encounter_id,
        name=name,
        description=description or "",
        quantity=quantity or DEFAULT_LOOT_QUANTITY,
        rarity=rarity or DEFAULT_LOOT_RARITY,
    )
    session.add(item)
    session.flush()
    return loot_to_dict(item)


def update_loot(
    session: Session,
    loot_id: str,
    *,
    updates: dict[str, Any],
) -> dict[str, Any]:
    item = session.get(Loot, loot_id)
    if item is None:
        raise ValueError(f"Loot not found: {loot_id}")

    _apply(item, updates, ALLOWED_LOOT_FIELDS)
    session.flush()
    return loot_to_dict(item)


def delete_loot(session: Session, loot_id: str) -> bool:
    item = session.get(Loot, loot_id)
    if item is None:
        return False
    session.delete(item)
    session.flush()
    return True
