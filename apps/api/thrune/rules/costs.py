"""
XP cost rules: skill tier classification and the Body/Stamina cost curve.

Skill tiers (first match wins):
  PRIMARY   5  heritage secondary skill, or primary skill of either archetype
  SECONDARY 10 secondary skill of either archetype
  GENERAL   20 anything else

The 5/10/20 values are stored on existing character sheets; do not tune them.
"""
from __future__ import annotations

import logging
from enum import IntEnum
from typing import Optional, Sequence, Tuple

from .catalog import Archetype, Catalog, Heritage

log = logging.getLogger(__name__)


class InvalidSkillError(ValueError):
    """Skill name is not in the catalog's valid skill set."""

    def __init__(self, skill: str):
        super().__init__(f"invalid skill: {skill!r}")
        self.skill = skill


class SkillTier(IntEnum):
    PRIMARY = 5
    SECONDARY = 10
    GENERAL = 20


def _heritage_or_none(catalog: Catalog, heritage_id: Optional[str]) -> Optional[Heritage]:
    h = catalog.heritage(heritage_id)
    if h is None and heritage_id:
        log.warning("unknown heritage %r; treating as no secondary skills", heritage_id)
    return h


def _archetype_or_none(catalog: Catalog, archetype_id: Optional[str]) -> Optional[Archetype]:
    a = catalog.archetype(archetype_id)
    if a is None and archetype_id:
        log.warning("unknown archetype %r; treating as no skills", archetype_id)
    return a


def _skill_lists(
    catalog: Catalog,
    heritage_id: Optional[str],
    primary_archetype_id: Optional[str],
    secondary_archetype_id: Optional[str],
) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """Return (primary-tier skills, secondary-tier skills) for a build."""
    heritage = _heritage_or_none(catalog, heritage_id)
    archetypes = [_archetype_or_none(catalog, primary_archetype_id)]
    if secondary_archetype_id:
        archetypes.append(_archetype_or_none(catalog, secondary_archetype_id))

    primary: Tuple[str, ...] = heritage.secondary_skills if heritage is not None else ()
    secondary: Tuple[str, ...] = ()
    for a in archetypes:
        if a is None:
            continue
        primary += a.primary_skills
        secondary += a.secondary_skills
    return primary, secondary


def classify_skill(
    catalog: Catalog,
    skill: str,
    heritage_id: Optional[str],
    primary_archetype_id: Optional[str],
    secondary_archetype_id: Optional[str] = None,
) -> SkillTier:
    if not catalog.is_valid_skill(skill):
        raise InvalidSkillError(skill)

    primary, secondary = _skill_lists(catalog, heritage_id, primary_archetype_id, secondary_archetype_id)
    if skill in primary:
        return SkillTier.PRIMARY
    if skill in secondary:
        return SkillTier.SECONDARY
    return SkillTier.GENERAL


def resolve_skill_cost(
    catalog: Catalog,
    skill: str,
    heritage_id: Optional[str],
    primary_archetype_id: Optional[str],
    secondary_archetype_id: Optional[str] = None,
) -> int:
    return int(classify_skill(catalog, skill, heritage_id, primary_archetype_id, secondary_archetype_id))


# -------------------------
# Attribute curve
# -------------------------
# (exclusive upper bound, per-point cost); values at or above the last bound cost ATTRIBUTE_MAX_STEP_COST
ATTRIBUTE_BANDS: Sequence[Tuple[int, int]] = (
    (20, 1),
    (40, 2),
    (60, 3),
    (80, 4),
    (100, 5),
    (120, 6),
    (140, 7),
    (160, 8),
    (180, 9),
)
ATTRIBUTE_MAX_STEP_COST = 10


def attribute_step_cost(current_value: int) -> int:
    """XP to raise an attribute by one point from `current_value`."""
    for upper, cost in ATTRIBUTE_BANDS:
        if current_value < upper:
            return cost
    return ATTRIBUTE_MAX_STEP_COST


def attribute_purchase_cost(current_value: int, points: int = 1) -> int:
    """
    XP to buy `points` consecutive points starting at `current_value`.

    The band is looked up again at every intermediate value, so a purchase
    that crosses a band boundary pays the higher rate for the steps past it.
    """
    if points < 0:
        raise ValueError("points must be >= 0")
    return sum(attribute_step_cost(current_value + i) for i in range(points))


def attribute_cost_from_base(base_value: int, current_value: int) -> int:
    if current_value <= base_value:
        return 0
    return attribute_purchase_cost(base_value, current_value - base_value)


def heritage_attribute_cost(catalog: Catalog, heritage_id: Optional[str], body: int, stamina: int) -> int:
    """XP spent raising Body and Stamina from the heritage base to their current values."""
    base_body, base_stamina = catalog.attribute_bases(heritage_id)
    return attribute_cost_from_base(base_body, body) + attribute_cost_from_base(base_stamina, stamina)
