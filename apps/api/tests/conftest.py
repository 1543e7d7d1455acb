from __future__ import annotations

from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient


@pytest.fixture()
def db_url(tmp_path, monkeypatch):
    url = "sqlite:///" + (tmp_path / "thrune-test.db").as_posix()
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("AUTO_CREATE_TABLES", "1")
    return url


@pytest.fixture()
def app(db_url):
    from thrune.main import app as thrune_app
    from thrune.rules.catalog import default_catalog

    thrune_app.state.catalog = default_catalog()
    yield thrune_app
    thrune_app.state.catalog = default_catalog()


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def make_character(client):
    def _make(**overrides: Any) -> Dict[str, Any]:
        body = {
            "name": "Maren Ashdown",
            "player_name": "Sam",
            "user_id": "user-1",
            "heritage_id": "human",
            "culture_id": "erdanian",
            "primary_archetype_id": "advisor",
            "skills": ["First Aid"],
        }
        body.update(overrides)
        r = client.post("/characters", json=body)
        assert r.status_code == 201, r.text
        return r.json()

    return _make


@pytest.fixture()
def award(client):
    def _award(character_id: str, amount: int, reason: str = "Bonus XP") -> Dict[str, Any]:
        r = client.post(f"/characters/{character_id}/experience", json={"amount": amount, "reason": reason})
        assert r.status_code == 201, r.text
        return r.json()

    return _award
