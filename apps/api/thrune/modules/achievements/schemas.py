from __future__ import annotations

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from thrune.rules.progression import ConditionType, Rarity


class CustomAchievementCreateIn(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    icon_name: str = "trophy"
    rarity: Rarity = "common"
    condition_type: ConditionType = "manual"
    condition_value: Optional[int] = Field(default=None, ge=0)
    is_active: bool = True
    created_by: Optional[str] = None


class CustomAchievementPatchIn(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    icon_name: Optional[str] = None
    rarity: Optional[Rarity] = None
    condition_type: Optional[ConditionType] = None
    condition_value: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class CustomAchievementOut(BaseModel):
    id: str
    title: str
    description: str = ""
    icon_name: str
    rarity: Rarity
    condition_type: str
    condition_value: Optional[int] = None
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CustomMilestoneCreateIn(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    threshold: int = Field(ge=1)
    icon_name: str = "trophy"
    color: str = "text-blue-600"
    is_active: bool = True
    created_by: Optional[str] = None


class CustomMilestonePatchIn(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    threshold: Optional[int] = Field(default=None, ge=1)
    icon_name: Optional[str] = None
    color: Optional[str] = None
    is_active: Optional[bool] = None


class CustomMilestoneOut(BaseModel):
    id: str
    title: str
    description: str = ""
    threshold: int
    icon_name: str
    color: str
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class DeleteOut(BaseModel):
    id: str
    deleted: bool = True
    unlocks_removed: int = 0


class StaticMilestoneIn(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    threshold: int = Field(ge=1)
    icon_name: str = "trophy"
    color: str = "text-blue-600"


class StaticMilestoneOut(BaseModel):
    index: int
    threshold: int
    title: str
    description: str = ""
    icon_name: str
    color: str
    overridden: bool = False


class StaticAchievementIn(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    icon_name: str = "trophy"
    rarity: Rarity = "common"
    condition_type: ConditionType
    condition_value: Optional[int] = Field(default=None, ge=0)


class StaticAchievementOut(BaseModel):
    index: int
    id: str
    title: str
    description: str = ""
    icon_name: str
    rarity: str
    condition_type: str
    condition_value: Optional[int] = None
    overridden: bool = False


class UnlockIn(BaseModel):
    achievement_id: str = Field(min_length=1)


class UnlockOut(BaseModel):
    id: str
    character_id: str
    achievement_id: str
    unlocked_at: str
    already_unlocked: bool = False


class RevokeOut(BaseModel):
    character_id: str
    achievement_id: str
    revoked: bool = True


class RaritySettings(BaseModel):
    common_threshold: float = 50
    rare_threshold: float = 25
    epic_threshold: float = 10
    legendary_threshold: float = 2
    enable_dynamic_rarity: bool = True


class RaritySettingsPatchIn(BaseModel):
    common_threshold: Optional[float] = Field(default=None, ge=0, le=100)
    rare_threshold: Optional[float] = Field(default=None, ge=0, le=100)
    epic_threshold: Optional[float] = Field(default=None, ge=0, le=100)
    legendary_threshold: Optional[float] = Field(default=None, ge=0, le=100)
    enable_dynamic_rarity: Optional[bool] = None


class RarityItemOut(BaseModel):
    id: str
    title: str
    previous_rarity: str
    rarity: str
    holders: int
    completion_percent: float


class RarityRecalcOut(BaseModel):
    enabled: bool
    characters_considered: int = 0
    items: List[RarityItemOut] = Field(default_factory=list)


class DefinitionsOut(BaseModel):
    milestones: List[Dict[str, Any]] = Field(default_factory=list)
    achievements: List[Dict[str, Any]] = Field(default_factory=list)
