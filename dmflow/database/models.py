"""
dmflow.database.models — SQLAlchemy 2.0 Data Models
====================================================

Tables:
- campaigns       — Top-level container for a DM's story
- flow_nodes      — Vertices of the campaign flowchart
- flow_edges      — Arcs between flow nodes
- encounters      — Story text, DM notes, music cue
- enemies         — Stat blocks attached to an encounter
- loot            — Treasure attached to an encounter
- drawings        — Hand-drawn area map, one per flow node
- spotify_tokens  — The single shared Spotify credential
- oauth_states    — One-time CSRF tokens for the Spotify callback
"""

from __future__ import annotations

import enum
from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _uuid() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all dmflow ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class NodeType(enum.StrEnum):
    """Kinds of vertex in the campaign flowchart."""
    START = "start"
    ENCOUNTER = "encounter"
    DECISION = "decision"
    END = "end"


class Rarity(enum.StrEnum):
    """Loot quality tiers, lowest to highest."""
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    VERY_RARE = "very_rare"
    LEGENDARY = "legendary"


# ---------------------------------------------------------------------------
# Campaign
# ---------------------------------------------------------------------------
class Campaign(Base):
    __tablename__ = "campaigns"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    spotify_playlist_id: Mapped[str | None] = mapped_column(String(100), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow,
        server_default=func.now(),
    )

    flow_nodes: Mapped[list[FlowNode]] = relationship(
        back_populates="campaign", cascade="all, delete-orphan"
    )
    flow_edges: Mapped[list[FlowEdge]] = relationship(
        back_populates="campaign", cascade="all, delete-orphan"
    )
    encounters: Mapped[list[Encounter]] = relationship(
        back_populates="campaign", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_campaigns_updated_at", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<Campaign id={self.id} name={self.name!r}>"


# ---------------------------------------------------------------------------
# FlowNode — a vertex in the branching story graph
# ---------------------------------------------------------------------------
class FlowNode(Base):
    """One step of the campaign flowchart.

    ``encounter_id`` is a plain nullable FK.  Nothing at the schema level
    stops two nodes from pointing at the same encounter; the editor only
    offers encounters that are not linked yet.
    """
    __tablename__ = "flow_nodes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    campaign_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    label: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    position_x: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    position_y: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    encounter_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("encounters.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow,
        server_default=func.now(),
    )

    campaign: Mapped[Campaign] = relationship(back_populates="flow_nodes")
    encounter: Mapped[Encounter | None] = relationship()
    drawing: Mapped[Drawing | None] = relationship(
        back_populates="flow_node", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_flow_nodes_campaign", "campaign_id"),
        Index("ix_flow_nodes_encounter", "encounter_id"),
    )

    def __repr__(self) -> str:
        return f"<FlowNode id={self.id} type={self.type!r} label={self.label!r}>"


# ---------------------------------------------------------------------------
# FlowEdge — an arc between two flow nodes
# ---------------------------------------------------------------------------
class FlowEdge(Base):
    __tablename__ = "flow_edges"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    campaign_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False
    )
    source_node_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("flow_nodes.id", ondelete="CASCADE"), nullable=False
    )
    target_node_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("flow_nodes.id", ondelete="CASCADE"), nullable=False
    )
    label: Mapped[str | None] = mapped_column(String(200), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    campaign: Mapped[Campaign] = relationship(back_populates="flow_edges")

    __table_args__ = (
        Index("ix_flow_edges_campaign", "campaign_id"),
        Index("ix_flow_edges_source", "source_node_id"),
        Index("ix_flow_edges_target", "target_node_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<FlowEdge id={self.id} "
            f"{self.source_node_id} -> {self.target_node_id}>"
        )


# ---------------------------------------------------------------------------
# Encounter — narrative bundle with enemies and loot
# ---------------------------------------------------------------------------
class Encounter(Base):
    """Player-visible story text plus private DM notes.

    Enemies and loot keep insertion order; there is no explicit sort column.
    """
    __tablename__ = "encounters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    campaign_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    story_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    dm_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    spotify_track_uri: Mapped[str | None] = mapped_column(String(200), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow,
        server_default=func.now(),
    )

    campaign: Mapped[Campaign] = relationship(back_populates="encounters")
    enemies: Mapped[list[Enemy]] = relationship(
        back_populates="encounter", cascade="all, delete-orphan",
        order_by="Enemy.created_at",
    )
    loot: Mapped[list[Loot]] = relationship(
        back_populates="encounter", cascade="all, delete-orphan",
        order_by="Loot.created_at",
    )

    __table_args__ = (
        Index("ix_encounters_campaign", "campaign_id"),
    )

    def __repr__(self) -> str:
        return f"<Encounter id={self.id} name={self.name!r}>"


# ---------------------------------------------------------------------------
# Enemy
# ---------------------------------------------------------------------------
class Enemy(Base):
    __tablename__ = "enemies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    encounter_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("encounters.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    hit_points: Mapped[int] = mapped_column(Integer, nullable=False)
    armor_class: Mapped[int] = mapped_column(Integer, nullable=False)
    challenge: Mapped[str] = mapped_column(String(20), nullable=False)  # "1/4", "5", ...
    abilities: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image_url: Mapped[str | None] = mapped_column(String(500), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    encounter: Mapped[Encounter] = relationship(back_populates="enemies")

    __table_args__ = (
        Index("ix_enemies_encounter", "encounter_id"),
    )

    def __repr__(self) -> str:
        return f"<Enemy id={self.id} name={self.name!r} cr={self.challenge!r}>"


# ---------------------------------------------------------------------------
# Loot
# ---------------------------------------------------------------------------
class Loot(Base):
    __tablename__ = "loot"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    encounter_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("encounters.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    rarity: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Rarity.COMMON.value
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    encounter: Mapped[Encounter] = relationship(back_populates="loot")

    __table_args__ = (
        Index("ix_loot_encounter", "encounter_id"),
    )

    def __repr__(self) -> str:
        return f"<Loot id={self.id} name={self.name!r} x{self.quantity}>"


# ---------------------------------------------------------------------------
# Drawing — one hand-drawn map per flow node
# ---------------------------------------------------------------------------
class Drawing(Base):
    """Serialised shape list produced by the front-end canvas.

    ``canvas_data`` is stored verbatim; the backend never parses it.
    """
    __tablename__ = "drawings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    flow_node_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("flow_nodes.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    canvas_data: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail_url: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow,
        server_default=func.now(),
    )

    flow_node: Mapped[FlowNode] = relationship(back_populates="drawing")

    def __repr__(self) -> str:
        return f"<Drawing id={self.id} node={self.flow_node_id}>"


# ---------------------------------------------------------------------------
# SpotifyToken — the single shared streaming credential
# ---------------------------------------------------------------------------
class SpotifyToken(Base):
    __tablename__ = "spotify_tokens"

    user_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<SpotifyToken user={self.user_id!r} expires={self.expires_at}>"


# ---------------------------------------------------------------------------
# OAuthState — one-time CSRF tokens for the Spotify callback
# ---------------------------------------------------------------------------
class OAuthState(Base):
    __tablename__ = "oauth_states"

    state: Mapped[str] = mapped_column(String(128), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_oauth_states_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<OAuthState state={self.state[:8]!r}...>"
