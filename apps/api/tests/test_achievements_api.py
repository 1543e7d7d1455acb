from __future__ import annotations

from thrune.rules.progression import CONDITION_TYPES, RARITIES


def _progression(client, character_id):
    r = client.get(f"/characters/{character_id}/progression")
    assert r.status_code == 200, r.text
    return r.json()


def test_custom_automatic_achievement_counts_in_progression(client, make_character):
    c = make_character()
    r = client.post(
        "/achievements",
        json={"title": "Healer's Start", "condition_type": "skill_count", "condition_value": 1, "rarity": "rare"},
    )
    assert r.status_code == 201, r.text
    aid = r.json()["id"]

    unlocked = [a["id"] for a in _progression(client, c["id"])["unlocked"]]
    assert aid in unlocked

    client.patch(f"/achievements/{aid}", json={"is_active": False})
    all_ids = [a["id"] for a in _progression(client, c["id"])["unlocked"] + _progression(client, c["id"])["locked"]]
    assert aid not in all_ids


def test_automatic_condition_needs_a_value(client):
    r = client.post("/achievements", json={"title": "Broken", "condition_type": "xp_spent"})
    assert r.status_code == 400
    assert r.json()["error"] == "bad_request"


def test_manual_unlock(client, make_character):
    c = make_character()
    aid = client.post("/achievements", json={"title": "Saved the Village"}).json()["id"]
    assert aid in [a["id"] for a in _progression(client, c["id"])["locked"]]

    r = client.post(f"/characters/{c['id']}/achievements", json={"achievement_id": aid})
    assert r.status_code == 200
    assert r.json()["already_unlocked"] is False
    again = client.post(f"/characters/{c['id']}/achievements", json={"achievement_id": aid})
    assert again.json()["already_unlocked"] is True
    assert again.json()["id"] == r.json()["id"]

    assert aid in [a["id"] for a in _progression(client, c["id"])["unlocked"]]
    assert [u["achievement_id"] for u in client.get(f"/characters/{c['id']}/achievements").json()] == [aid]

    assert client.delete(f"/characters/{c['id']}/achievements/{aid}").status_code == 200
    assert aid in [a["id"] for a in _progression(client, c["id"])["locked"]]

    missing = client.post(f"/characters/{c['id']}/achievements", json={"achievement_id": "nope"})
    assert missing.status_code == 404


def test_delete_custom_achievement_drops_unlocks(client, make_character):
    c = make_character()
    aid = client.post("/achievements", json={"title": "Saved the Village"}).json()["id"]
    client.post(f"/characters/{c['id']}/achievements", json={"achievement_id": aid})
    r = client.delete(f"/achievements/{aid}")
    assert r.json()["unlocks_removed"] == 1
    assert client.get(f"/achievements/{aid}").status_code == 404


def test_custom_milestone_joins_the_table(client, make_character):
    c = make_character()
    r = client.post("/milestones", json={"title": "Thirty", "threshold": 30})
    assert r.status_code == 201
    p = _progression(client, c["id"])
    assert p["milestones"]["next"]["title"] == "Thirty"
    assert p["milestones"]["next"]["threshold"] == 30

    client.delete(f"/milestones/{r.json()['id']}")
    assert _progression(client, c["id"])["milestones"]["next"]["threshold"] == 50


def test_static_milestone_override_and_reset(client, make_character):
    c = make_character()
    r = client.put("/static_milestones/0", json={"title": "Fresh Blood", "threshold": 20})
    assert r.status_code == 200
    assert r.json()["overridden"] is True
    assert _progression(client, c["id"])["milestones"]["current"]["title"] == "Fresh Blood"

    r = client.delete("/static_milestones/0")
    assert r.json()["title"] == "Novice Adventurer"
    assert r.json()["overridden"] is False
    assert client.put("/static_milestones/6", json={"title": "x", "threshold": 1}).status_code == 404


def test_static_achievement_override(client, make_character):
    c = make_character()
    statics = client.get("/static_achievements").json()
    assert len(statics) == 13
    assert statics[0]["id"] == "first_skill"

    r = client.put(
        "/static_achievements/0",
        json={"title": "Two Steps", "condition_type": "skill_count", "condition_value": 2},
    )
    assert r.status_code == 200
    assert r.json()["id"] == "first_skill"
    assert "first_skill" in [a["id"] for a in _progression(client, c["id"])["locked"]]


def test_rarity_settings(client):
    assert client.get("/achievement_settings").json()["common_threshold"] == 50
    r = client.patch("/achievement_settings", json={"rare_threshold": 60})
    assert r.status_code == 400
    r = client.patch("/achievement_settings", json={"common_threshold": 40})
    assert r.status_code == 200
    assert client.get("/achievement_settings").json()["common_threshold"] == 40


def test_recalculate_rarity(client, make_character):
    make_character()
    held = client.post(
        "/achievements", json={"title": "Any Skill", "condition_type": "skill_count", "condition_value": 1, "rarity": "epic"}
    ).json()
    unheld = client.post(
        "/achievements", json={"title": "Fifty Skills", "condition_type": "skill_count", "condition_value": 50}
    ).json()

    out = client.post("/achievements/recalculate_rarity").json()
    assert out["enabled"] is True
    assert out["characters_considered"] == 1
    by_id = {i["id"]: i for i in out["items"]}
    assert by_id[held["id"]]["rarity"] == "common"
    assert by_id[held["id"]]["previous_rarity"] == "epic"
    assert by_id[unheld["id"]]["rarity"] == "legendary"
    assert client.get(f"/achievements/{held['id']}").json()["rarity"] == "common"


def test_recalculate_rarity_disabled(client, make_character):
    make_character()
    client.patch("/achievement_settings", json={"enable_dynamic_rarity": False})
    out = client.post("/achievements/recalculate_rarity").json()
    assert out == {"enabled": False, "characters_considered": 0, "items": []}


def test_definitions(client):
    d = client.get("/achievements/definitions").json()
    assert [m["threshold"] for m in d["milestones"]] == [25, 50, 100, 200, 350, 500]
    assert len(d["achievements"]) == 13


def test_custom_achievement_accepts_exactly_the_rule_vocabulary(client):
    for rarity in RARITIES:
        r = client.post("/achievements", json={"title": f"R {rarity}", "rarity": rarity})
        assert r.status_code == 201, r.text
    for condition_type in CONDITION_TYPES:
        value = None if condition_type == "manual" else 1
        r = client.post("/achievements", json={"title": condition_type, "condition_type": condition_type, "condition_value": value})
        assert r.status_code == 201, r.text

    assert client.post("/achievements", json={"title": "x", "rarity": "mythic"}).status_code == 422
    assert client.post("/achievements", json={"title": "x", "condition_type": "mystery"}).status_code == 422
