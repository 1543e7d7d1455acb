from __future__ import annotations

import pytest

from thrune.rules.catalog import default_catalog
from thrune.rules.ledger import (
    SECOND_ARCHETYPE_COST,
    attendance_reason,
    attribute_reason,
    event_attendance_xp,
    expected_total_xp_spent,
    ledger_totals,
    skill_from_reason,
    skill_reason,
)


@pytest.mark.parametrize("n,xp", [(1, 6), (10, 6), (11, 5), (20, 5), (21, 4), (30, 4), (31, 3), (90, 3)])
def test_event_attendance_tiers(n, xp):
    assert event_attendance_xp(n) == xp


def test_ledger_totals():
    assert ledger_totals([25, -5, -10, 9]) == (19, 15)
    assert ledger_totals([]) == (0, 0)


def test_reason_strings():
    assert skill_reason("First Aid") == "Skill purchase: First Aid"
    assert skill_from_reason("Skill purchase: First Aid") == "First Aid"
    assert skill_from_reason("Character creation") is None
    assert attribute_reason("body", 10) == "Body increase: 10→11"
    assert attendance_reason(6, 3) == "Event attendance (6 base XP + 3 purchased XP)"


def test_expected_spend():
    catalog = default_catalog()
    total = expected_total_xp_spent(
        catalog,
        skills=["First Aid", "Intimidation", "Gone Skill"],
        body=12,
        stamina=10,
        heritage_id="human",
        primary_archetype_id="advisor",
        secondary_archetype_id="chef",
    )
    # Intimidation is a chef primary skill, so the second archetype prices it at 5
    assert total == 5 + 5 + 2 + SECOND_ARCHETYPE_COST
