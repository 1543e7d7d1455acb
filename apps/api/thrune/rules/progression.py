"""
Progression summaries: milestones, achievements and affordable upgrades.

Everything here is recomputed from a character snapshot on every call; nothing
is cached and nothing is written back.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Literal, Optional, Sequence, Tuple, get_args

from .catalog import Catalog
from .costs import attribute_step_cost, resolve_skill_cost

log = logging.getLogger(__name__)

ConditionType = Literal["skill_count", "xp_spent", "attribute_value", "body", "stamina", "body_and_stamina", "manual"]
Rarity = Literal["common", "rare", "epic", "legendary"]
CONDITION_TYPES: Tuple[str, ...] = get_args(ConditionType)
RARITIES: Tuple[str, ...] = get_args(Rarity)


@dataclass(frozen=True)
class CharacterSnapshot:
    experience: int
    total_xp_spent: int
    skills: Tuple[str, ...] = ()
    body: int = 0
    stamina: int = 0
    heritage_id: Optional[str] = None
    primary_archetype_id: Optional[str] = None
    secondary_archetype_id: Optional[str] = None
    unlocked_achievement_ids: FrozenSet[str] = frozenset()

    @property
    def total_earned(self) -> int:
        return self.experience + self.total_xp_spent


@dataclass(frozen=True)
class Milestone:
    threshold: int
    title: str
    description: str = ""
    icon: str = "trophy"
    color: str = "text-blue-600"
    id: Optional[str] = None


@dataclass(frozen=True)
class Achievement:
    id: str
    title: str
    description: str = ""
    icon: str = "trophy"
    rarity: str = "common"
    condition_type: str = "manual"
    condition_value: Optional[int] = None

    def is_unlocked(self, snapshot: CharacterSnapshot) -> bool:
        v = self.condition_value or 0
        ct = self.condition_type
        if ct == "skill_count":
            return len(snapshot.skills) >= v
        if ct == "xp_spent":
            return snapshot.total_xp_spent >= v
        if ct == "attribute_value":
            return snapshot.body + snapshot.stamina >= v
        if ct == "body":
            return snapshot.body >= v
        if ct == "stamina":
            return snapshot.stamina >= v
        if ct == "body_and_stamina":
            return snapshot.body >= v and snapshot.stamina >= v
        # manual and anything unrecognised: only an explicit unlock counts
        return self.id in snapshot.unlocked_achievement_ids


@dataclass(frozen=True)
class MilestoneProgress:
    current: Optional[Milestone]
    next: Optional[Milestone]
    progress_percent: float
    xp_to_next: Optional[int]


@dataclass(frozen=True)
class Upgrade:
    kind: str  # skill|body|stamina
    name: str
    cost: int
    reason: str


@dataclass(frozen=True)
class ProgressionSummary:
    total_earned: int
    experience: int
    total_xp_spent: int
    spending_efficiency_percent: float
    milestones: MilestoneProgress
    unlocked: List[Achievement] = field(default_factory=list)
    locked: List[Achievement] = field(default_factory=list)
    upgrades: List[Upgrade] = field(default_factory=list)


DEFAULT_MILESTONES: Tuple[Milestone, ...] = (
    Milestone(25, "Novice Adventurer", "First steps into the world", "book", "text-green-600"),
    Milestone(50, "Seasoned Explorer", "Growing in experience", "target", "text-blue-600"),
    Milestone(100, "Skilled Warrior", "Combat prowess developing", "sword", "text-purple-600"),
    Milestone(200, "Master Tactician", "Strategic thinking", "shield", "text-orange-600"),
    Milestone(350, "Elite Champion", "Among the finest", "crown", "text-yellow-600"),
    Milestone(500, "Legendary Hero", "Legends are born", "trophy", "text-red-600"),
)

DEFAULT_ACHIEVEMENTS: Tuple[Achievement, ...] = (
    Achievement("first_skill", "First Steps", "Learn your first skill", "book", "common", "skill_count", 1),
    Achievement("skill_collector", "Skill Collector", "Learn 5 different skills", "star", "rare", "skill_count", 5),
    Achievement("skill_master", "Skill Master", "Learn 10 different skills", "trophy", "epic", "skill_count", 10),
    Achievement("skill_legend", "Skill Legend", "Learn 15+ different skills", "crown", "legendary", "skill_count", 15),
    Achievement("body_builder", "Body Builder", "Reach 15+ Body points", "heart", "rare", "body", 15),
    Achievement("stamina_runner", "Endurance Runner", "Reach 15+ Stamina points", "lightning", "rare", "stamina", 15),
    Achievement("balanced_fighter", "Balanced Fighter", "Have both Body and Stamina at 12+", "shield", "epic", "body_and_stamina", 12),
    Achievement("tank_build", "Immovable Object", "Reach 20+ Body points", "shield", "epic", "body", 20),
    Achievement("speed_demon", "Speed Demon", "Reach 20+ Stamina points", "lightning", "epic", "stamina", 20),
    Achievement("xp_spender", "Resource Manager", "Spend 100+ XP on improvements", "target", "common", "xp_spent", 100),
    Achievement("veteran_spender", "Veteran Investor", "Spend 250+ XP on improvements", "brain", "rare", "xp_spent", 250),
    Achievement("master_spender", "Master Strategist", "Spend 500+ XP on improvements", "wand", "epic", "xp_spent", 500),
    Achievement("legend_spender", "Legendary Sage", "Spend 1000+ XP on improvements", "crown", "legendary", "xp_spent", 1000),
)


def _ordered_milestones(milestones: Sequence[Milestone]) -> List[Milestone]:
    items = list(milestones)
    if any(items[i].threshold > items[i + 1].threshold for i in range(len(items) - 1)):
        log.warning("milestone thresholds not ascending; sorting %d milestones", len(items))
        items = sorted(items, key=lambda m: m.threshold)
    return items


def milestone_progress(total_earned: int, milestones: Sequence[Milestone]) -> MilestoneProgress:
    items = _ordered_milestones(milestones)
    if not items:
        return MilestoneProgress(current=None, next=None, progress_percent=0.0, xp_to_next=None)

    reached = [m for m in items if m.threshold <= total_earned]
    # below every threshold: the lowest milestone still counts as current
    current = reached[-1] if reached else items[0]
    nxt = next((m for m in items if m.threshold > total_earned), None)

    if nxt is None:
        return MilestoneProgress(current=current, next=None, progress_percent=100.0, xp_to_next=None)

    span = nxt.threshold - current.threshold
    if span <= 0:
        pct = 0.0
    else:
        pct = (total_earned - current.threshold) / span * 100.0
    pct = max(0.0, min(100.0, pct))
    return MilestoneProgress(current=current, next=nxt, progress_percent=pct, xp_to_next=nxt.threshold - total_earned)


def evaluate_achievements(
    snapshot: CharacterSnapshot, achievements: Iterable[Achievement]
) -> Tuple[List[Achievement], List[Achievement]]:
    unlocked: List[Achievement] = []
    locked: List[Achievement] = []
    for a in achievements:
        (unlocked if a.is_unlocked(snapshot) else locked).append(a)
    return unlocked, locked


def _tier_reason(cost: int) -> str:
    if cost == 5:
        return "Primary skill"
    if cost == 10:
        return "Secondary skill"
    return "General skill"


def affordable_upgrades(
    catalog: Catalog,
    snapshot: CharacterSnapshot,
    candidates: Optional[Iterable[str]] = None,
) -> List[Upgrade]:
    """
    Upgrades the character can pay for right now, cheapest first.

    `candidates` defaults to every catalog skill; ties keep candidate order
    with skills ahead of Body and Stamina.
    """
    owned = set(snapshot.skills)
    budget = snapshot.experience
    out: List[Upgrade] = []

    pool = catalog.skills if candidates is None else candidates
    for skill in pool:
        if skill in owned or not catalog.is_valid_skill(skill):
            continue
        cost = resolve_skill_cost(
            catalog,
            skill,
            snapshot.heritage_id,
            snapshot.primary_archetype_id,
            snapshot.secondary_archetype_id,
        )
        if cost <= budget:
            out.append(Upgrade(kind="skill", name=skill, cost=cost, reason=_tier_reason(cost)))

    body_cost = attribute_step_cost(snapshot.body)
    if body_cost <= budget:
        out.append(Upgrade(kind="body", name=f"Body {snapshot.body} → {snapshot.body + 1}", cost=body_cost, reason="Increases hit points"))

    stamina_cost = attribute_step_cost(snapshot.stamina)
    if stamina_cost <= budget:
        out.append(
            Upgrade(kind="stamina", name=f"Stamina {snapshot.stamina} → {snapshot.stamina + 1}", cost=stamina_cost, reason="Increases stamina pool")
        )

    out.sort(key=lambda u: u.cost)
    return out


def summarize_progression(
    catalog: Catalog,
    snapshot: CharacterSnapshot,
    milestones: Sequence[Milestone] = DEFAULT_MILESTONES,
    achievements: Sequence[Achievement] = DEFAULT_ACHIEVEMENTS,
) -> ProgressionSummary:
    earned = snapshot.total_earned
    efficiency = (snapshot.total_xp_spent / earned * 100.0) if earned > 0 else 0.0
    unlocked, locked = evaluate_achievements(snapshot, achievements)
    return ProgressionSummary(
        total_earned=earned,
        experience=snapshot.experience,
        total_xp_spent=snapshot.total_xp_spent,
        spending_efficiency_percent=efficiency,
        milestones=milestone_progress(earned, milestones),
        unlocked=unlocked,
        locked=locked,
        upgrades=affordable_upgrades(catalog, snapshot),
    )


# -------------------------
# Rarity
# -------------------------
DEFAULT_RARITY_SETTINGS: Dict[str, Any] = {
    "common_threshold": 50,
    "rare_threshold": 25,
    "epic_threshold": 10,
    "legendary_threshold": 2,
    "enable_dynamic_rarity": True,
}


def rarity_for_completion(completion_percent: float, settings: Optional[Dict[str, Any]] = None) -> str:
    s = dict(DEFAULT_RARITY_SETTINGS)
    s.update(settings or {})
    # thresholds descend; the last rarity catches everything below epic
    for rarity in RARITIES[:-1]:
        if completion_percent >= s[f"{rarity}_threshold"]:
            return rarity
    return RARITIES[-1]
