from __future__ import annotations


def test_award_and_deduction(client, make_character, award):
    c = make_character()
    e = award(c["id"], 10, "Module reward")
    assert e["amount"] == 10
    assert e["event"] is None
    assert client.get(f"/characters/{c['id']}").json()["experience"] == 30

    r = client.post(f"/characters/{c['id']}/experience", json={"amount": -4, "reason": "Rules violation"})
    assert r.status_code == 201
    got = client.get(f"/characters/{c['id']}").json()
    assert (got["experience"], got["total_xp_spent"]) == (26, 9)


def test_ledger_never_goes_negative(client, make_character):
    c = make_character()
    r = client.post(f"/characters/{c['id']}/experience", json={"amount": -21, "reason": "Too much"})
    assert r.status_code == 409
    assert r.json()["error"] == "negative_experience"
    assert client.get(f"/characters/{c['id']}").json()["experience"] == 20
    assert len(client.get(f"/characters/{c['id']}/experience").json()["items"]) == 2


def test_reason_is_required(client, make_character):
    c = make_character()
    r = client.post(f"/characters/{c['id']}/experience", json={"amount": 5, "reason": ""})
    assert r.status_code == 422
    assert r.json()["error"] == "validation_error"
    r = client.post(f"/characters/{c['id']}/experience", json={"amount": 5, "reason": "   "})
    assert r.status_code == 400


def test_unknown_targets(client, make_character):
    c = make_character()
    assert client.post("/characters/nope/experience", json={"amount": 1, "reason": "x"}).status_code == 404
    r = client.post(f"/characters/{c['id']}/experience", json={"amount": 1, "reason": "x", "event_id": "nope"})
    assert r.status_code == 404
    assert client.patch("/experience/nope", json={"amount": 1}).status_code == 404


def test_admin_correction_recomputes_totals(client, make_character, award):
    c = make_character()
    e = award(c["id"], 10)

    r = client.patch(f"/experience/{e['id']}", json={"amount": 15, "reason": "Corrected award"})
    assert r.status_code == 200
    assert r.json()["reason"] == "Corrected award"
    assert client.get(f"/characters/{c['id']}").json()["experience"] == 35

    r = client.delete(f"/experience/{e['id']}")
    assert r.status_code == 200
    assert r.json()["experience"] == 20
    assert client.get(f"/characters/{c['id']}").json()["experience"] == 20


def test_history_is_newest_first(client, make_character, award):
    c = make_character(skills=[])
    award(c["id"], 1, "first")
    award(c["id"], 2, "second")
    items = client.get(f"/characters/{c['id']}/experience").json()["items"]
    assert [i["reason"] for i in items][:2] == ["second", "first"]
