from __future__ import annotations

from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from thrune.rules.ledger import MAX_ATTRIBUTE_POINTS_PER_PURCHASE

AttributeName = Literal["body", "stamina"]
# starting builds only have the creation award to spend
MAX_STARTING_ATTRIBUTE = 200


class PageOut(BaseModel):
    offset: int
    limit: int
    total: int
    has_more: bool


class CharacterCreateIn(BaseModel):
    name: str = Field(min_length=1)
    player_name: str = ""
    user_id: Optional[str] = None
    heritage_id: str = Field(min_length=1)
    culture_id: str = Field(min_length=1)
    primary_archetype_id: str = Field(min_length=1)
    secondary_archetype_id: Optional[str] = None
    # omitted -> heritage base values
    body: Optional[int] = Field(default=None, le=MAX_STARTING_ATTRIBUTE)
    stamina: Optional[int] = Field(default=None, le=MAX_STARTING_ATTRIBUTE)
    skills: List[str] = Field(default_factory=list)


class CharacterPatchIn(BaseModel):
    name: Optional[str] = None
    player_name: Optional[str] = None


class CharacterRetireIn(BaseModel):
    reason: Optional[str] = None


class CharacterOut(BaseModel):
    id: str
    name: str
    player_name: str = ""
    user_id: Optional[str] = None
    heritage_id: str
    culture_id: str
    primary_archetype_id: str
    secondary_archetype_id: Optional[str] = None
    body: int
    stamina: int
    skills: List[str] = Field(default_factory=list)
    experience: int = 0
    total_xp_spent: int = 0
    is_active: bool = True
    is_retired: bool = False
    retired_at: Optional[str] = None
    retirement_reason: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CharactersListOut(BaseModel):
    items: List[CharacterOut]
    page: PageOut


class CharacterDeleteOut(BaseModel):
    id: str
    deleted: bool = True
    experience_entries_removed: int = 0
    rsvps_removed: int = 0


class SkillPurchaseIn(BaseModel):
    skill: str = Field(min_length=1)


class AttributePurchaseIn(BaseModel):
    attribute: AttributeName
    points: int = Field(default=1, ge=1, le=MAX_ATTRIBUTE_POINTS_PER_PURCHASE)


class SecondArchetypeIn(BaseModel):
    archetype_id: str = Field(min_length=1)


class PurchaseOut(BaseModel):
    character: CharacterOut
    cost: int
    entry_ids: List[str] = Field(default_factory=list)


class SkillCostOut(BaseModel):
    skill: str
    cost: int
    tier: str
    owned: bool = False
    affordable: bool = False


class SkillCostsOut(BaseModel):
    character_id: str
    experience: int
    items: List[SkillCostOut]
    body_step_cost: int
    stamina_step_cost: int


class MilestoneOut(BaseModel):
    id: Optional[str] = None
    threshold: int
    title: str
    description: str = ""
    icon: str = "trophy"
    color: str = ""


class MilestoneProgressOut(BaseModel):
    current: Optional[MilestoneOut] = None
    next: Optional[MilestoneOut] = None
    progress_percent: float = 0.0
    xp_to_next: Optional[int] = None


class AchievementOut(BaseModel):
    id: str
    title: str
    description: str = ""
    icon: str = "trophy"
    rarity: str = "common"
    condition_type: str = "manual"
    condition_value: Optional[int] = None


class UpgradeOut(BaseModel):
    kind: str
    name: str
    cost: int
    reason: str


class ProgressionOut(BaseModel):
    character_id: str
    total_earned: int
    experience: int
    total_xp_spent: int
    spending_efficiency_percent: float
    milestones: MilestoneProgressOut
    unlocked: List[AchievementOut] = Field(default_factory=list)
    locked: List[AchievementOut] = Field(default_factory=list)
    upgrades: List[UpgradeOut] = Field(default_factory=list)


class AuditOut(BaseModel):
    character_id: str
    recorded_experience: int
    recorded_total_xp_spent: int
    ledger_experience: int
    ledger_total_xp_spent: int
    expected_total_xp_spent: int
    ledger_consistent: bool
    spend_matches_rules: bool
    unknown_skills: List[str] = Field(default_factory=list)


class SkillRepriceOut(BaseModel):
    entry_id: str
    skill: str
    previous_cost: int
    cost: int


class RecalculateOut(BaseModel):
    character: CharacterOut
    previous_total_xp_spent: int
    total_xp_spent: int
    entries_updated: List[SkillRepriceOut] = Field(default_factory=list)
