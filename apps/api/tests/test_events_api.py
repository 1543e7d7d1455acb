from __future__ import annotations

import pytest


@pytest.fixture()
def make_event(client):
    def _make(name="Harvest Moon", event_date="2026-09-12", **extra):
        r = client.post("/events", json={"name": name, "event_date": event_date, **extra})
        assert r.status_code == 201, r.text
        return r.json()

    return _make


def _rsvp(client, event_id, character_id, xp=0, candle=0):
    r = client.post(
        f"/events/{event_id}/rsvps",
        json={"character_id": character_id, "xp_purchases": xp, "xp_candle_purchases": candle},
    )
    assert r.status_code == 201, r.text
    return r.json()


def test_event_crud(client, make_event):
    ev = make_event(location="Greywater Keep")
    assert ev["rsvp_count"] == 0
    assert client.get(f"/events/{ev['id']}").json()["location"] == "Greywater Keep"

    r = client.patch(f"/events/{ev['id']}", json={"name": "Harvest Moon II", "is_active": False})
    assert r.json()["name"] == "Harvest Moon II"
    assert client.get("/events").json()["page"]["total"] == 0
    assert client.get("/events", params={"include_inactive": True}).json()["page"]["total"] == 1

    assert client.delete(f"/events/{ev['id']}").status_code == 200
    assert client.get(f"/events/{ev['id']}").status_code == 404


def test_rsvp_rules(client, make_character, make_event):
    c = make_character()
    ev = make_event()
    rsvp = _rsvp(client, ev["id"], c["id"], xp=2, candle=1)
    assert rsvp["attended"] is None
    assert rsvp["character_name"] == "Maren Ashdown"

    dup = client.post(f"/events/{ev['id']}/rsvps", json={"character_id": c["id"]})
    assert dup.status_code == 409
    assert dup.json()["error"] == "rsvp_exists"

    too_many = client.post(f"/events/{ev['id']}/rsvps", json={"character_id": c["id"], "xp_purchases": 3})
    assert too_many.status_code == 422

    assert client.get(f"/events/{ev['id']}").json()["rsvp_count"] == 1
    assert [r["id"] for r in client.get(f"/events/{ev['id']}/rsvps").json()] == [rsvp["id"]]


def test_attendance_awards_and_is_idempotent(client, make_character, make_event):
    c = make_character()
    ev = make_event()
    rsvp = _rsvp(client, ev["id"], c["id"], xp=2, candle=1)

    r = client.post(f"/rsvps/{rsvp['id']}/attendance", json={"attended": True, "awarded_by": "gm-1"})
    assert r.status_code == 200, r.text
    first = r.json()
    assert first["xp_awarded"] == 6 + 3
    assert first["experience"] == 20 + 9
    assert first["rsvp"]["attended"] is True

    again = client.post(f"/rsvps/{rsvp['id']}/attendance", json={"attended": True}).json()
    assert again["entry_id"] == first["entry_id"]
    assert again["experience"] == 29

    entries = client.get(f"/characters/{c['id']}/experience").json()["items"]
    attendance = [e for e in entries if e["rsvp_id"] == rsvp["id"]]
    assert len(attendance) == 1
    assert attendance[0]["reason"] == "Event attendance (6 base XP + 3 purchased XP)"
    assert attendance[0]["event"]["name"] == "Harvest Moon"

    summary = client.get(f"/characters/{c['id']}/attendance_xp").json()
    assert summary["events_attended"] == 1
    assert summary["total_xp"] == 9


def test_marking_absent_removes_the_award(client, make_character, make_event):
    c = make_character()
    ev = make_event()
    rsvp = _rsvp(client, ev["id"], c["id"], xp=1)
    client.post(f"/rsvps/{rsvp['id']}/attendance", json={"attended": True})

    r = client.post(f"/rsvps/{rsvp['id']}/attendance", json={"attended": False}).json()
    assert r["xp_awarded"] == 0
    assert r["entry_id"] is None
    assert r["experience"] == 20
    assert r["rsvp"]["attended"] is False


def test_absent_is_refused_once_the_award_is_spent(client, make_character, make_event):
    c = make_character()
    ev = make_event()
    rsvp = _rsvp(client, ev["id"], c["id"])
    client.post(f"/rsvps/{rsvp['id']}/attendance", json={"attended": True})
    # 26 XP available; leave 1
    client.post(f"/characters/{c['id']}/skills", json={"skill": "Lockpicking"})
    client.post(f"/characters/{c['id']}/skills", json={"skill": "Farming"})

    r = client.post(f"/rsvps/{rsvp['id']}/attendance", json={"attended": False})
    assert r.status_code == 409
    assert r.json()["error"] == "negative_experience"
    assert client.get(f"/rsvps/{rsvp['id']}").json()["attended"] is True


def test_purchases_changed_after_attendance_update_the_award(client, make_character, make_event):
    c = make_character()
    ev = make_event()
    rsvp = _rsvp(client, ev["id"], c["id"])
    client.post(f"/rsvps/{rsvp['id']}/attendance", json={"attended": True})

    r = client.patch(f"/rsvps/{rsvp['id']}", json={"xp_candle_purchases": 2})
    assert r.status_code == 200
    assert client.get(f"/characters/{c['id']}").json()["experience"] == 20 + 6 + 2


def test_event_with_awards_cannot_be_deleted(client, make_character, make_event):
    c = make_character()
    ev = make_event()
    rsvp = _rsvp(client, ev["id"], c["id"])
    client.post(f"/rsvps/{rsvp['id']}/attendance", json={"attended": True})

    r = client.delete(f"/events/{ev['id']}")
    assert r.status_code == 409
    assert r.json()["error"] == "event_has_experience"

    client.post(f"/rsvps/{rsvp['id']}/attendance", json={"attended": False})
    r = client.delete(f"/events/{ev['id']}")
    assert r.status_code == 200
    assert r.json()["rsvps_removed"] == 1


def test_delete_rsvp_removes_linked_award(client, make_character, make_event):
    c = make_character()
    ev = make_event()
    rsvp = _rsvp(client, ev["id"], c["id"])
    client.post(f"/rsvps/{rsvp['id']}/attendance", json={"attended": True})

    r = client.delete(f"/rsvps/{rsvp['id']}")
    assert r.json()["entries_removed"] == 1
    assert client.get(f"/characters/{c['id']}").json()["experience"] == 20
