"""Initial schema: campaigns, flowchart, encounters, drawings, Spotify

Revision ID: 5c2e8a41f0d3
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5c2e8a41f0d3"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def upgrade() -> None:
    op.create_table(
        "campaigns",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("spotify_playlist_id", sa.String(100), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_campaigns_updated_at", "campaigns", ["updated_at"])

    op.create_table(
        "encounters",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "campaign_id",
            sa.String(36),
            sa.ForeignKey("campaigns.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("story_text", sa.Text(), nullable=False, server_default=""),
        sa.Column("dm_notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("spotify_track_uri", sa.String(200), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_encounters_campaign", "encounters", ["campaign_id"])

    op.create_table(
        "flow_nodes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "campaign_id",
            sa.String(36),
            sa.ForeignKey("campaigns.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("label", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("position_x", sa.Float(), nullable=False, server_default="0"),
        sa.Column("position_y", sa.Float(), nullable=False, server_default="0"),
        sa.Column(
            "encounter_id",
            sa.String(36),
            sa.ForeignKey("encounters.id", ondelete="SET NULL"),
            nullable=True,
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_flow_nodes_campaign", "flow_nodes", ["campaign_id"])
    op.create_index("ix_flow_nodes_encounter", "flow_nodes", ["encounter_id"])

    op.create_table(
        "flow_edges",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "campaign_id",
            sa.String(36),
            sa.ForeignKey("campaigns.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "source_node_id",
            sa.String(36),
            sa.ForeignKey("flow_nodes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "target_node_id",
            sa.String(36),
            sa.ForeignKey("flow_nodes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("label", sa.String(200), nullable=True),
        _timestamp("created_at"),
    )
    op.create_index("ix_flow_edges_campaign", "flow_edges", ["campaign_id"])
    op.create_index("ix_flow_edges_source", "flow_edges", ["source_node_id"])
    op.create_index("ix_flow_edges_target", "flow_edges", ["target_node_id"])

    op.create_table(
        "enemies",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "encounter_id",
            sa.String(36),
            sa.ForeignKey("encounters.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("hit_points", sa.Integer(), nullable=False),
        sa.Column("armor_class", sa.Integer(), nullable=False),
        sa.Column("challenge", sa.String(20), nullable=False),
        sa.Column("abilities", sa.Text(), nullable=False, server_default=""),
        sa.Column("image_url", sa.String(500), nullable=True),
        _timestamp("created_at"),
    )
    op.create_index("ix_enemies_encounter", "enemies", ["encounter_id"])

    op.create_table(
        "loot",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "encounter_id",
            sa.String(36),
            sa.ForeignKey("encounters.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("rarity", sa.String(20), nullable=False, server_default="common"),
        _timestamp("created_at"),
    )
    op.create_index("ix_loot_encounter", "loot", ["encounter_id"])

    op.create_table(
        "drawings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "flow_node_id",
            sa.String(36),
            sa.ForeignKey("flow_nodes.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("canvas_data", sa.Text(), nullable=False),
        sa.Column("thumbnail_url", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )

    op.create_table(
        "spotify_tokens",
        sa.Column("user_id", sa.String(50), primary_key=True),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        _timestamp("updated_at"),
    )

    op.create_table(
        "oauth_states",
        sa.Column("state", sa.String(128), primary_key=True),
        _timestamp("created_at"),
    )
    op.create_index("ix_oauth_states_created_at", "oauth_states", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_oauth_states_created_at", table_name="oauth_states")
    op.drop_table("oauth_states")
    op.drop_table("spotify_tokens")
    op.drop_table("drawings")
    op.drop_index("ix_loot_encounter", table_name="loot")
    op.drop_table("loot")
    op.drop_index("ix_enemies_encounter", table_name="enemies")
    op.drop_table("enemies")
    op.drop_index("ix_flow_edges_target", table_name="flow_edges")
    op.drop_index("ix_flow_edges_source", table_name="flow_edges")
    op.drop_index("ix_flow_edges_campaign", table_name="flow_edges")
    op.drop_table("flow_edges")
    op.drop_index("ix_flow_nodes_encounter", table_name="flow_nodes")
    op.drop_index("ix_flow_nodes_campaign", table_name="flow_nodes")
    op.drop_table("flow_nodes")
    op.drop_index("ix_encounters_campaign", table_name="encounters")
    op.drop_table("encounters")
    op.drop_index("ix_campaigns_updated_at", table_name="campaigns")
    op.drop_table("campaigns")
