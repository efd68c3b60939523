"""
dmflow.api.schemas — Pydantic request bodies
=============================================

Attributes are snake_case in Python and camelCase on the wire
(``positionX``, ``storyText`` …).  ``model_dump(exclude_unset=True)`` on an
``*Update`` model yields exactly the fields the client sent, keyed by the
snake_case names the services and ORM use.

Update models reject an explicit ``null`` for columns that cannot be
empty; nullable columns (``encounterId``, ``label``, …) accept it to
clear the value.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from dmflow.database.models import NodeType, Rarity


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PatchModel(CamelModel):
    """Base for partial updates."""

    non_nullable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        for name in sorted(self.model_fields_set & self.non_nullable):
            if getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def updates(self) -> dict:
        return self.model_dump(exclude_unset=True, mode="json")


# ---------------------------------------------------------------------------
# Campaigns
# ---------------------------------------------------------------------------
class CampaignCreate(CamelModel):
    name: str = Field(min_length=1)
    description: str | None = None
    spotify_playlist_id: str | None = None


class CampaignUpdate(PatchModel):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"name", "description"})

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    spotify_playlist_id: str | None = None


# ---------------------------------------------------------------------------
# Flow graph
# ---------------------------------------------------------------------------
class NodeCreate(CamelModel):
    type: NodeType
    label: str = Field(min_length=1)
    position_x: float
    position_y: float
    description: str | None = None
    encounter_id: str | None = None


class NodeUpdate(PatchModel):
    non_nullable: ClassVar[frozenset[str]] = frozenset(
        {"type", "label", "description", "position_x", "position_y"}
    )

    type: NodeType | None = None
    label: str | None = Field(default=None, min_length=1)
    description: str | None = None
    position_x: float | None = None
    position_y: float | None = None
    encounter_id: str | None = None


class EdgeCreate(CamelModel):
    source_node_id: str = Field(min_length=1)
    target_node_id: str = Field(min_length=1)
    label: str | None = None


class EdgeUpdate(PatchModel):
    label: str | None = None


class NodePosition(CamelModel):
    id: str
    position_x: float
    position_y: float


class BulkPositions(CamelModel):
    nodes: list[NodePosition]


# ---------------------------------------------------------------------------
# Encounters
# ---------------------------------------------------------------------------
class EncounterCreate(CamelModel):
    name: str = Field(min_length=1)
    story_text: str | None = None
    dm_notes: str | None = None
    spotify_track_uri: str | None = None


class EncounterUpdate(PatchModel):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"name", "story_text", "dm_notes"})

    name: str | None = Field(default=None, min_length=1)
    story_text: str | None = None
    dm_notes: str | None = None
    spotify_track_uri: str | None = None


class EnemyCreate(CamelModel):
    name: str = Field(min_length=1)
    hit_points: int
    armor_class: int
    challenge: str = Field(min_length=1)
    abilities: str | None = None
    image_url: str | None = None


class EnemyUpdate(PatchModel):
    non_nullable: ClassVar[frozenset[str]] = frozenset(
        {"name", "hit_points", "armor_class", "challenge", "abilities"}
    )

    name: str | None = Field(default=None, min_length=1)
    hit_points: int | None = None
    armor_class: int | None = None
    challenge: str | None = Field(default=None, min_length=1)
    abilities: str | None = None
    image_url: str | None = None


class LootCreate(CamelModel):
    name: str = Field(min_length=1)
    description: str | None = None
    quantity: int = Field(default=1, ge=1)
    rarity: Rarity = Rarity.COMMON


class LootUpdate(PatchModel):
    non_nullable: ClassVar[frozenset[str]] = frozenset(
        {"name", "description", "quantity", "rarity"}
    )

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    quantity: int | None = Field(default=None, ge=1)
    rarity: Rarity | None = None


# ---------------------------------------------------------------------------
# Drawings & Spotify
# ---------------------------------------------------------------------------
class DrawingSave(CamelModel):
    canvas_data: str = Field(min_length=1)
    thumbnail_url: str | None = None


class TrackPlay(CamelModel):
    track_uri: str = Field(min_length=1)
