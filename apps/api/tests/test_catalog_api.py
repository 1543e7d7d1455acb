from __future__ import annotations

from thrune.rules.catalog import Archetype, Culture, Heritage, build_catalog


def test_catalog_listing(client):
    skills = client.get("/skills").json()
    assert skills["total"] == 103
    assert len(client.get("/heritages").json()) == 5
    assert len(client.get("/archetypes").json()) == 32

    human = client.get("/heritages/human").json()
    assert (human["body"], human["stamina"]) == (10, 10)
    assert [c["id"] for c in client.get("/heritages/human/cultures").json()] == [
        "erdanian",
        "khemasuri",
        "saronean",
        "vyaldur",
    ]
    assert "Cooking" in client.get("/archetypes/chef").json()["primary_skills"]


def test_catalog_misses(client):
    assert client.get("/heritages/elf").status_code == 404
    assert client.get("/heritages/elf/cultures").status_code == 404
    assert client.get("/archetypes/pirate").status_code == 404


def test_validate_skills(client):
    r = client.post("/skills/validate", json={"skills": ["First Aid", "first aid", "Flying"]})
    assert r.json() == {"valid": False, "invalid": ["first aid", "Flying"]}
    assert client.post("/skills/validate", json={"skills": ["Wealth"]}).json()["valid"] is True


def test_cost_quote(client):
    r = client.get("/skills/Cooking/cost", params={"heritage_id": "stoneborn", "primary_archetype_id": "chef"})
    assert r.json()["cost"] == 5
    assert r.json()["tier"] == "primary"

    r = client.get("/skills/NotARealSkill/cost", params={"heritage_id": "human"})
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_skill"


def test_injected_catalog(app, client):
    app.state.catalog = build_catalog(
        skills=["Lockpicking", "Stealth"],
        heritages=[Heritage("human", "Human", 10, 10)],
        cultures=[Culture("erdanian", "Erdanian", "human")],
        archetypes=[Archetype("rogue", "Rogue", primary_skills=("Stealth",), secondary_skills=("Lockpicking",))],
    )
    r = client.get("/skills/Lockpicking/cost", params={"heritage_id": "human", "primary_archetype_id": "rogue"})
    assert r.json()["cost"] == 10
    assert client.get("/skills").json()["total"] == 2

    r = client.post(
        "/characters",
        json={
            "name": "Vex",
            "heritage_id": "human",
            "culture_id": "erdanian",
            "primary_archetype_id": "rogue",
            "skills": ["Lockpicking"],
        },
    )
    assert r.status_code == 201, r.text
    assert r.json()["experience"] == 15
