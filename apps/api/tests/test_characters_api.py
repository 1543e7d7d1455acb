from __future__ import annotations

from thrune.rules.catalog import Archetype, Culture, Heritage, build_catalog


def test_create_records_creation_award_and_purchases(client, make_character):
    c = make_character(body=12)
    assert c["experience"] == 25 - 5 - 2
    assert c["total_xp_spent"] == 7
    assert c["skills"] == ["First Aid"]
    assert (c["body"], c["stamina"]) == (12, 10)

    r = client.get(f"/characters/{c['id']}/experience")
    assert r.status_code == 200
    reasons = sorted(i["reason"] for i in r.json()["items"])
    assert reasons == sorted(
        ["Character creation", "Body increase: 10→11", "Body increase: 11→12", "Skill purchase: First Aid"]
    )
    assert r.json()["total_awarded"] == 25
    assert r.json()["total_spent"] == 7


def test_create_defaults_attributes_to_heritage_base(make_character):
    c = make_character(heritage_id="stoneborn", culture_id="dargadian", skills=[])
    assert (c["body"], c["stamina"]) == (15, 5)
    assert c["experience"] == 25


def test_create_rejects_invalid_skill(client, make_character):
    r = client.post(
        "/characters",
        json={
            "name": "x",
            "heritage_id": "human",
            "culture_id": "erdanian",
            "primary_archetype_id": "advisor",
            "skills": ["NotARealSkill"],
        },
    )
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_skill"
    assert r.json()["details"] == {"skill": "NotARealSkill"}


def test_create_rejects_culture_from_other_heritage(client):
    r = client.post(
        "/characters",
        json={"name": "x", "heritage_id": "human", "culture_id": "voruk", "primary_archetype_id": "advisor"},
    )
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_culture"


def test_create_rejects_attributes_below_base(client):
    r = client.post(
        "/characters",
        json={"name": "x", "heritage_id": "human", "culture_id": "erdanian", "primary_archetype_id": "advisor", "body": 9},
    )
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_attributes"


def test_create_rejects_unaffordable_build(client):
    r = client.post(
        "/characters",
        json={
            "name": "x",
            "heritage_id": "human",
            "culture_id": "erdanian",
            "primary_archetype_id": "advisor",
            "body": 11,
            "skills": ["Lockpicking", "Wealth"],
        },
    )
    assert r.status_code == 400
    assert r.json()["error"] == "insufficient_xp"
    assert r.json()["details"] == {"cost": 26, "available": 25}
    assert client.get("/characters").json()["page"]["total"] == 0


def test_buy_skill(client, make_character):
    c = make_character()
    r = client.post(f"/characters/{c['id']}/skills", json={"skill": "Intimidation"})
    assert r.status_code == 200, r.text
    out = r.json()
    assert out["cost"] == 10
    assert out["character"]["experience"] == 10
    assert out["character"]["skills"] == ["First Aid", "Intimidation"]

    again = client.post(f"/characters/{c['id']}/skills", json={"skill": "Intimidation"})
    assert again.status_code == 409
    assert again.json()["error"] == "skill_owned"

    broke = client.post(f"/characters/{c['id']}/skills", json={"skill": "Lockpicking"})
    assert broke.status_code == 400
    assert broke.json()["error"] == "insufficient_xp"

    bad = client.post(f"/characters/{c['id']}/skills", json={"skill": "Nope"})
    assert bad.status_code == 400
    assert bad.json()["error"] == "invalid_skill"
    assert client.get(f"/characters/{c['id']}").json()["experience"] == 10


def test_refund_skill_removes_its_debit(client, make_character):
    c = make_character()
    client.post(f"/characters/{c['id']}/skills", json={"skill": "Intimidation"})
    r = client.delete(f"/characters/{c['id']}/skills/Intimidation")
    assert r.status_code == 200
    assert r.json()["cost"] == -10
    assert r.json()["character"]["experience"] == 20
    assert r.json()["character"]["skills"] == ["First Aid"]
    assert client.delete(f"/characters/{c['id']}/skills/Intimidation").status_code == 404


def test_buy_attribute_points_one_entry_per_step(client, make_character):
    c = make_character(skills=[])
    r = client.post(f"/characters/{c['id']}/attributes", json={"attribute": "stamina", "points": 3})
    assert r.status_code == 200, r.text
    assert r.json()["cost"] == 3
    assert len(r.json()["entry_ids"]) == 3
    assert r.json()["character"]["stamina"] == 13
    assert r.json()["character"]["experience"] == 22

    r = client.post(f"/characters/{c['id']}/attributes", json={"attribute": "luck", "points": 1})
    assert r.status_code == 422


def test_attribute_purchase_crossing_a_band(client, make_character, award):
    c = make_character(skills=[], body=19)
    award(c["id"], 10)
    r = client.post(f"/characters/{c['id']}/attributes", json={"attribute": "body", "points": 2})
    assert r.json()["cost"] == 3


def test_second_archetype(client, make_character, award):
    c = make_character()
    r = client.post(f"/characters/{c['id']}/second_archetype", json={"archetype_id": "chef"})
    assert r.status_code == 400
    assert r.json()["error"] == "insufficient_xp"

    award(c["id"], 50)
    r = client.post(f"/characters/{c['id']}/second_archetype", json={"archetype_id": "chef"})
    assert r.status_code == 200, r.text
    assert r.json()["character"]["secondary_archetype_id"] == "chef"
    assert r.json()["character"]["experience"] == 20

    r = client.post(f"/characters/{c['id']}/second_archetype", json={"archetype_id": "archer"})
    assert r.status_code == 409

    costs = {i["skill"]: i for i in client.get(f"/characters/{c['id']}/skill_costs").json()["items"]}
    assert costs["Herbalism"]["cost"] == 10
    assert costs["Cooking"]["tier"] == "primary"


def test_skill_costs(client, make_character):
    c = make_character()
    r = client.get(f"/characters/{c['id']}/skill_costs")
    assert r.status_code == 200
    body = r.json()
    costs = {i["skill"]: i for i in body["items"]}
    assert len(costs) == 103
    assert costs["First Aid"]["owned"] is True
    assert costs["First Aid"]["affordable"] is False
    assert costs["Intimidation"]["tier"] == "secondary"
    assert costs["Lockpicking"]["cost"] == 20
    assert body["body_step_cost"] == 1


def test_progression(client, make_character):
    c = make_character()
    r = client.get(f"/characters/{c['id']}/progression")
    assert r.status_code == 200
    p = r.json()
    assert p["total_earned"] == 25
    assert p["milestones"]["current"]["title"] == "Novice Adventurer"
    assert p["milestones"]["next"]["threshold"] == 50
    assert p["milestones"]["progress_percent"] == 0.0
    assert [a["id"] for a in p["unlocked"]] == ["first_skill"]
    assert p["upgrades"][0]["cost"] == 1


def test_audit_is_consistent_after_purchases(client, make_character):
    c = make_character(body=11)
    client.post(f"/characters/{c['id']}/skills", json={"skill": "Intimidation"})
    a = client.get(f"/characters/{c['id']}/audit").json()
    assert a["ledger_consistent"] is True
    assert a["spend_matches_rules"] is True
    assert a["expected_total_xp_spent"] == 5 + 1 + 10
    assert a["unknown_skills"] == []


def test_patch_retire_and_list(client, make_character):
    c = make_character()
    other = make_character(name="Other", user_id="user-2")

    r = client.patch(f"/characters/{c['id']}", json={"name": "Maren the Bold"})
    assert r.json()["name"] == "Maren the Bold"

    r = client.post(f"/characters/{c['id']}/retire", json={"reason": "moved away"})
    assert r.status_code == 200
    assert r.json()["is_retired"] is True
    assert r.json()["retirement_reason"] == "moved away"
    assert client.post(f"/characters/{c['id']}/retire").status_code == 409

    ids = [i["id"] for i in client.get("/characters").json()["items"]]
    assert ids == [other["id"]]
    assert client.get("/characters", params={"include_retired": True}).json()["page"]["total"] == 2
    assert client.get("/characters", params={"user_id": "user-2"}).json()["page"]["total"] == 1

    r = client.post(f"/characters/{c['id']}/skills", json={"skill": "Farming"})
    assert r.status_code == 409
    assert r.json()["error"] == "character_retired"


def test_list_paging_clamps(client, make_character):
    make_character()
    page = client.get("/characters", params={"limit": 999, "offset": -4}).json()["page"]
    assert page == {"offset": 0, "limit": 200, "total": 1, "has_more": False}


def test_delete_character(client, make_character):
    c = make_character()
    r = client.delete(f"/characters/{c['id']}")
    assert r.status_code == 200
    assert r.json()["experience_entries_removed"] == 2
    assert client.get(f"/characters/{c['id']}").status_code == 404
    assert client.get(f"/characters/{c['id']}/experience").status_code == 404


def test_oversized_attribute_requests_are_rejected_up_front(client, make_character):
    c = make_character()
    r = client.post(f"/characters/{c['id']}/attributes", json={"attribute": "body", "points": 3000000})
    assert r.status_code == 422

    r = client.post(f"/characters/{c['id']}/attributes", json={"attribute": "body", "points": 21})
    assert r.status_code == 400
    assert r.json()["error"] == "insufficient_xp"
    assert r.json()["details"] == {"min_cost": 21, "available": 20}
    assert client.get(f"/characters/{c['id']}").json()["body"] == 10


def test_oversized_starting_attributes_are_rejected_up_front(client):
    build = {"name": "x", "heritage_id": "human", "culture_id": "erdanian", "primary_archetype_id": "advisor"}
    assert client.post("/characters", json={**build, "body": 3000000}).status_code == 422

    r = client.post("/characters", json={**build, "body": 30, "stamina": 16})
    assert r.status_code == 400
    assert r.json()["error"] == "insufficient_xp"
    assert r.json()["details"] == {"min_cost": 26, "available": 25}


def _repriced_catalog(advisor_primary, human_skills):
    return build_catalog(
        skills=["First Aid", "Intimidation"],
        heritages=[Heritage("human", "Human", 10, 10, secondary_skills=human_skills)],
        cultures=[Culture("erdanian", "Erdanian", "human")],
        archetypes=[Archetype("advisor", "Advisor", primary_skills=advisor_primary)],
    )


def test_recalculate_reprices_skill_debits_after_catalog_change(app, client, make_character):
    c = make_character()
    client.post(f"/characters/{c['id']}/skills", json={"skill": "Intimidation"})

    app.state.catalog = _repriced_catalog(("Intimidation",), ("First Aid",))
    a = client.get(f"/characters/{c['id']}/audit").json()
    assert a["spend_matches_rules"] is False
    assert (a["ledger_total_xp_spent"], a["expected_total_xp_spent"]) == (15, 10)

    r = client.post(f"/characters/{c['id']}/recalculate")
    assert r.status_code == 200, r.text
    out = r.json()
    assert (out["previous_total_xp_spent"], out["total_xp_spent"]) == (15, 10)
    assert [(e["skill"], e["previous_cost"], e["cost"]) for e in out["entries_updated"]] == [("Intimidation", 10, 5)]
    assert out["character"]["experience"] == 15

    a = client.get(f"/characters/{c['id']}/audit").json()
    assert a["spend_matches_rules"] is True
    assert a["ledger_consistent"] is True

    again = client.post(f"/characters/{c['id']}/recalculate").json()
    assert again["entries_updated"] == []


def test_recalculate_refuses_to_leave_negative_experience(app, client, make_character):
    c = make_character()
    client.post(f"/characters/{c['id']}/skills", json={"skill": "Intimidation"})

    app.state.catalog = _repriced_catalog((), ())
    r = client.post(f"/characters/{c['id']}/recalculate")
    assert r.status_code == 409
    assert r.json()["error"] == "negative_experience"

    a = client.get(f"/characters/{c['id']}/audit").json()
    assert a["ledger_total_xp_spent"] == 15
    assert a["recorded_experience"] == 10
