"""
Experience ledger rules.

A character's `experience` (unspent XP) and `total_xp_spent` are derived from
its ledger: experience is the sum of every entry, spent is the magnitude of
the negative entries.
"""
from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple

from .catalog import Catalog
from .costs import heritage_attribute_cost, resolve_skill_cost

CHARACTER_CREATION_XP = 25
SECOND_ARCHETYPE_COST = 50
MAX_XP_PURCHASES_PER_EVENT = 2
MAX_CANDLE_PURCHASES_PER_EVENT = 2
# per request; each step costs at least 1 XP
MAX_ATTRIBUTE_POINTS_PER_PURCHASE = 500

REASON_CREATION = "Character creation"
REASON_SKILL_PREFIX = "Skill purchase: "
REASON_SECOND_ARCHETYPE_PREFIX = "Second archetype: "


def skill_reason(skill: str) -> str:
    return f"{REASON_SKILL_PREFIX}{skill}"


def attribute_reason(attribute: str, value: int) -> str:
    # attribute is "body" or "stamina"; value is the level before the step
    return f"{attribute.capitalize()} increase: {value}→{value + 1}"


def second_archetype_reason(archetype_id: str) -> str:
    return f"{REASON_SECOND_ARCHETYPE_PREFIX}{archetype_id}"


def attendance_reason(base_xp: int, purchased_xp: int) -> str:
    return f"Event attendance ({base_xp} base XP + {purchased_xp} purchased XP)"


def skill_from_reason(reason: str) -> Optional[str]:
    if reason.startswith(REASON_SKILL_PREFIX):
        return reason[len(REASON_SKILL_PREFIX):]
    return None


def event_attendance_xp(events_attended: int) -> int:
    """Base XP for an attended event, given the attended count including that event."""
    if events_attended <= 10:
        return 6
    if events_attended <= 20:
        return 5
    if events_attended <= 30:
        return 4
    return 3


def ledger_totals(amounts: Iterable[int]) -> Tuple[int, int]:
    """(experience, total_xp_spent) for a sequence of signed ledger amounts."""
    experience = 0
    spent = 0
    for a in amounts:
        experience += a
        if a < 0:
            spent += -a
    return experience, spent


def expected_total_xp_spent(
    catalog: Catalog,
    *,
    skills: Sequence[str],
    body: int,
    stamina: int,
    heritage_id: Optional[str],
    primary_archetype_id: Optional[str],
    secondary_archetype_id: Optional[str] = None,
) -> int:
    """
    What a character's purchases should have cost under the current catalog.

    Skills no longer in the catalog are skipped; they cannot be priced.
    """
    total = 0
    for s in skills:
        if not catalog.is_valid_skill(s):
            continue
        total += resolve_skill_cost(catalog, s, heritage_id, primary_archetype_id, secondary_archetype_id)
    total += heritage_attribute_cost(catalog, heritage_id, body, stamina)
    if secondary_archetype_id:
        total += SECOND_ARCHETYPE_COST
    return total
