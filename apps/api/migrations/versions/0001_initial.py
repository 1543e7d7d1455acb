"""characters, experience ledger, events/rsvps, achievements and settings

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "characters",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("player_name", sa.Text(), nullable=False, server_default=""),
        sa.Column("user_id", sa.Text(), nullable=True),
        sa.Column("heritage_id", sa.Text(), nullable=False),
        sa.Column("culture_id", sa.Text(), nullable=False),
        sa.Column("primary_archetype_id", sa.Text(), nullable=False),
        sa.Column("secondary_archetype_id", sa.Text(), nullable=True),
        sa.Column("body", sa.Integer(), nullable=False),
        sa.Column("stamina", sa.Integer(), nullable=False),
        sa.Column("skills_json", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("experience", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_xp_spent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_retired", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("retired_at", sa.Text(), nullable=True),
        sa.Column("retirement_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.Text(), nullable=False),
    )
    op.create_index("ix_characters_user_id", "characters", ["user_id"], unique=False)

    op.create_table(
        "events",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("event_date", sa.Text(), nullable=False),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_by", sa.Text(), nullable=True),
        sa.Column("created_at", sa.Text(), nullable=False),
    )

    op.create_table(
        "event_rsvps",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("event_id", sa.Text(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("character_id", sa.Text(), sa.ForeignKey("characters.id"), nullable=False),
        sa.Column("xp_purchases", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("xp_candle_purchases", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("attended", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.Text(), nullable=True),
        sa.Column("created_at", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.Text(), nullable=False),
    )
    op.create_index("ix_event_rsvps_event_id", "event_rsvps", ["event_id"], unique=False)
    op.create_index("ix_event_rsvps_character_id", "event_rsvps", ["character_id"], unique=False)

    op.create_table(
        "experience_entries",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("character_id", sa.Text(), sa.ForeignKey("characters.id"), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("event_id", sa.Text(), sa.ForeignKey("events.id"), nullable=True),
        sa.Column("rsvp_id", sa.Text(), sa.ForeignKey("event_rsvps.id"), nullable=True),
        sa.Column("awarded_by", sa.Text(), nullable=True),
        sa.Column("created_at", sa.Text(), nullable=False),
    )
    op.create_index("ix_experience_entries_character_id", "experience_entries", ["character_id"], unique=False)
    op.create_index("ix_experience_entries_event_id", "experience_entries", ["event_id"], unique=False)
    op.create_index("ix_experience_entries_rsvp_id", "experience_entries", ["rsvp_id"], unique=False)

    op.create_table(
        "custom_achievements",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("icon_name", sa.Text(), nullable=False),
        sa.Column("rarity", sa.Text(), nullable=False, server_default="common"),
        sa.Column("condition_type", sa.Text(), nullable=False),
        sa.Column("condition_value", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_by", sa.Text(), nullable=True),
        sa.Column("created_at", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.Text(), nullable=False),
    )

    op.create_table(
        "custom_milestones",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("threshold", sa.Integer(), nullable=False),
        sa.Column("icon_name", sa.Text(), nullable=False),
        sa.Column("color", sa.Text(), nullable=False, server_default="text-blue-600"),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_by", sa.Text(), nullable=True),
        sa.Column("created_at", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.Text(), nullable=False),
    )

    op.create_table(
        "character_achievements",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("character_id", sa.Text(), sa.ForeignKey("characters.id"), nullable=False),
        sa.Column("achievement_id", sa.Text(), nullable=False),
        sa.Column("unlocked_at", sa.Text(), nullable=False),
    )
    op.create_index("ix_character_achievements_character_id", "character_achievements", ["character_id"], unique=False)
    op.create_index("ix_character_achievements_achievement_id", "character_achievements", ["achievement_id"], unique=False)

    op.create_table(
        "static_milestone_overrides",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("milestone_index", sa.Integer(), nullable=False, unique=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("threshold", sa.Integer(), nullable=False),
        sa.Column("icon_name", sa.Text(), nullable=False),
        sa.Column("color", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.Text(), nullable=False),
    )

    op.create_table(
        "static_achievement_overrides",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("achievement_index", sa.Integer(), nullable=False, unique=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("icon_name", sa.Text(), nullable=False),
        sa.Column("rarity", sa.Text(), nullable=False),
        sa.Column("condition_type", sa.Text(), nullable=False),
        sa.Column("condition_value", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.Text(), nullable=False),
    )

    op.create_table(
        "system_settings",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("key", sa.Text(), nullable=False, unique=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.Text(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("system_settings")
    op.drop_table("static_achievement_overrides")
    op.drop_table("static_milestone_overrides")
    op.drop_index("ix_character_achievements_achievement_id", table_name="character_achievements")
    op.drop_index("ix_character_achievements_character_id", table_name="character_achievements")
    op.drop_table("character_achievements")
    op.drop_table("custom_milestones")
    op.drop_table("custom_achievements")
    op.drop_index("ix_experience_entries_rsvp_id", table_name="experience_entries")
    op.drop_index("ix_experience_entries_event_id", table_name="experience_entries")
    op.drop_index("ix_experience_entries_character_id", table_name="experience_entries")
    op.drop_table("experience_entries")
    op.drop_index("ix_event_rsvps_character_id", table_name="event_rsvps")
    op.drop_index("ix_event_rsvps_event_id", table_name="event_rsvps")
    op.drop_table("event_rsvps")
    op.drop_table("events")
    op.drop_index("ix_characters_user_id", table_name="characters")
    op.drop_table("characters")
