from __future__ import annotations

from typing import Optional
from sqlmodel import SQLModel, Field


class CustomAchievement(SQLModel, table=True):
    __tablename__ = "custom_achievements"

    id: str = Field(primary_key=True)
    title: str
    description: str
    icon_name: str
    rarity: str = Field(default="common")  # common|rare|epic|legendary
    condition_type: str  # skill_count|xp_spent|attribute_value|body|stamina|body_and_stamina|manual
    condition_value: Optional[int] = Field(default=None)
    is_active: int = Field(default=1)
    created_by: Optional[str] = Field(default=None)
    created_at: str
    updated_at: str


class CustomMilestone(SQLModel, table=True):
    __tablename__ = "custom_milestones"

    id: str = Field(primary_key=True)
    title: str
    description: str
    threshold: int
    icon_name: str
    color: str = Field(default="text-blue-600")
    is_active: int = Field(default=1)
    created_by: Optional[str] = Field(default=None)
    created_at: str
    updated_at: str


# manual unlocks; automated achievements are recomputed, never stored
class CharacterAchievement(SQLModel, table=True):
    __tablename__ = "character_achievements"

    id: str = Field(primary_key=True)
    character_id: str = Field(foreign_key="characters.id", index=True)
    achievement_id: str = Field(index=True)
    unlocked_at: str


class StaticMilestoneOverride(SQLModel, table=True):
    __tablename__ = "static_milestone_overrides"

    id: str = Field(primary_key=True)
    milestone_index: int = Field(unique=True)
    title: str
    description: str
    threshold: int
    icon_name: str
    color: str
    updated_at: str


class StaticAchievementOverride(SQLModel, table=True):
    __tablename__ = "static_achievement_overrides"

    id: str = Field(primary_key=True)
    achievement_index: int = Field(unique=True)
    title: str
    description: str
    icon_name: str
    rarity: str
    condition_type: str
    condition_value: Optional[int] = Field(default=None)
    updated_at: str


class SystemSetting(SQLModel, table=True):
    __tablename__ = "system_settings"

    id: str = Field(primary_key=True)
    key: str = Field(unique=True)
    value: str
    updated_at: str
