from __future__ import annotations

import pytest

from thrune.rules.catalog import default_catalog
from thrune.rules.progression import (
    DEFAULT_ACHIEVEMENTS,
    DEFAULT_MILESTONES,
    Achievement,
    CharacterSnapshot,
    Milestone,
    affordable_upgrades,
    evaluate_achievements,
    milestone_progress,
    rarity_for_completion,
    summarize_progression,
)


def _m(*thresholds):
    return [Milestone(t, f"M{t}") for t in thresholds]


def test_reaching_a_threshold_exactly_starts_the_next_band():
    p = milestone_progress(50, _m(25, 50, 100))
    assert p.current.threshold == 50
    assert p.next.threshold == 100
    assert p.progress_percent == 0.0
    assert p.xp_to_next == 50


def test_progress_between_milestones():
    p = milestone_progress(75, _m(25, 50, 100))
    assert p.progress_percent == pytest.approx(50.0)


def test_past_the_last_milestone_is_complete():
    p = milestone_progress(600, _m(25, 50, 100))
    assert p.current.threshold == 100
    assert p.next is None
    assert p.progress_percent == 100.0
    assert p.xp_to_next is None


def test_below_every_milestone_counts_lowest_as_current():
    p = milestone_progress(10, _m(25, 50))
    assert p.current.threshold == 25
    assert p.next.threshold == 25
    assert p.progress_percent == 0.0


def test_empty_milestone_table():
    p = milestone_progress(40, [])
    assert p.current is None and p.next is None
    assert p.progress_percent == 0.0


def test_unsorted_milestones_are_sorted(caplog):
    with caplog.at_level("WARNING"):
        p = milestone_progress(60, _m(100, 25, 50))
    assert (p.current.threshold, p.next.threshold) == (50, 100)
    assert "not ascending" in caplog.text


def test_duplicate_thresholds_do_not_divide_by_zero():
    p = milestone_progress(50, [Milestone(50, "a"), Milestone(50, "b"), Milestone(80, "c")])
    assert 0.0 <= p.progress_percent <= 100.0


def test_condition_types():
    snap = CharacterSnapshot(experience=0, total_xp_spent=120, skills=("A", "B"), body=12, stamina=14)
    assert Achievement("a", "t", condition_type="skill_count", condition_value=2).is_unlocked(snap)
    assert not Achievement("a", "t", condition_type="skill_count", condition_value=3).is_unlocked(snap)
    assert Achievement("a", "t", condition_type="xp_spent", condition_value=100).is_unlocked(snap)
    assert Achievement("a", "t", condition_type="attribute_value", condition_value=26).is_unlocked(snap)
    assert not Achievement("a", "t", condition_type="attribute_value", condition_value=27).is_unlocked(snap)
    assert Achievement("a", "t", condition_type="body_and_stamina", condition_value=12).is_unlocked(snap)
    assert not Achievement("a", "t", condition_type="body", condition_value=15).is_unlocked(snap)


def test_manual_and_unknown_need_explicit_unlock():
    snap = CharacterSnapshot(experience=0, total_xp_spent=0, unlocked_achievement_ids=frozenset({"hero"}))
    assert Achievement("hero", "Hero").is_unlocked(snap)
    assert not Achievement("villain", "Villain").is_unlocked(snap)
    assert not Achievement("odd", "Odd", condition_type="mystery", condition_value=1).is_unlocked(snap)


def test_default_tables():
    assert [m.threshold for m in DEFAULT_MILESTONES] == [25, 50, 100, 200, 350, 500]
    assert len(DEFAULT_ACHIEVEMENTS) == 13
    snap = CharacterSnapshot(experience=0, total_xp_spent=0, skills=("First Aid",), body=10, stamina=10)
    unlocked, locked = evaluate_achievements(snap, DEFAULT_ACHIEVEMENTS)
    assert [a.id for a in unlocked] == ["first_skill"]
    assert len(locked) == 12


def test_affordable_upgrades_are_cheapest_first():
    catalog = default_catalog()
    snap = CharacterSnapshot(
        experience=10,
        total_xp_spent=15,
        skills=("First Aid",),
        body=10,
        stamina=10,
        heritage_id="human",
        primary_archetype_id="advisor",
    )
    ups = affordable_upgrades(catalog, snap)
    costs = [u.cost for u in ups]
    assert costs == sorted(costs)
    assert all(u.cost <= 10 for u in ups)
    names = {u.name for u in ups}
    assert "First Aid" not in names
    assert "Farming" in names  # human heritage skill
    assert "Intimidation" in names  # advisor secondary
    assert ups[0].kind in ("body", "stamina")


def test_equal_cost_upgrades_keep_candidate_order():
    catalog = default_catalog()
    # 85 sits in the 5 XP band, tying Body/Stamina with primary skills
    snap = CharacterSnapshot(
        experience=100,
        total_xp_spent=0,
        body=85,
        stamina=85,
        heritage_id="human",
        primary_archetype_id="advisor",
    )
    candidates = ["Wealth", "Plead for Mercy", "Scribe", "Intimidation", "Farming", "Bard", "Meditation", "Lockpicking"]
    ups = affordable_upgrades(catalog, snap, candidates=candidates)
    assert [(u.kind, u.cost) for u in ups][:6] == [
        ("skill", 5),
        ("skill", 5),
        ("skill", 5),
        ("skill", 5),
        ("body", 5),
        ("stamina", 5),
    ]
    assert [u.name for u in ups if u.kind == "skill"] == [
        "Wealth",
        "Scribe",
        "Farming",
        "Bard",
        "Plead for Mercy",
        "Intimidation",
        "Meditation",
        "Lockpicking",
    ]
    assert [u.cost for u in ups][6:] == [10, 10, 10, 20]


def test_upgrades_skip_unknown_candidates():
    catalog = default_catalog()
    snap = CharacterSnapshot(experience=100, total_xp_spent=0, heritage_id="human", primary_archetype_id="advisor")
    ups = affordable_upgrades(catalog, snap, candidates=["Wealth", "NotARealSkill"])
    assert [u.name for u in ups if u.kind == "skill"] == ["Wealth"]


def test_summary_example():
    catalog = default_catalog()
    snap = CharacterSnapshot(experience=30, total_xp_spent=20, heritage_id="human", primary_archetype_id="advisor")
    s = summarize_progression(catalog, snap, milestones=_m(25, 50, 100), achievements=[])
    assert s.total_earned == 50
    assert s.milestones.current.threshold == 50
    assert s.milestones.next.threshold == 100
    assert s.milestones.progress_percent == 0.0
    assert s.spending_efficiency_percent == pytest.approx(40.0)


def test_summary_with_nothing_earned():
    s = summarize_progression(default_catalog(), CharacterSnapshot(experience=0, total_xp_spent=0))
    assert s.spending_efficiency_percent == 0.0
    assert s.upgrades == []


@pytest.mark.parametrize(
    "pct,rarity",
    [(100, "common"), (50, "common"), (49.9, "rare"), (25, "rare"), (10, "epic"), (9.99, "legendary"), (0, "legendary")],
)
def test_rarity_bands(pct, rarity):
    assert rarity_for_completion(pct) == rarity
