"""
Pain log and profile endpoint tests (in-process TestClient, temporary DuckDB).
"""


def _create(client, **payload):
    r = client.post("/logs", params={"user_id": "u1"}, json=payload)
    assert r.status_code == 201, r.text
    return r.json()


def test_root_and_health(client):
    assert client.get("/").json()["service"] == "Pain Tracker API"
    assert client.get("/health").json()["status"] == "healthy"


def test_create_and_fetch_log(client):
    log = _create(
        client,
        logged_at="2025-01-06T09:00:00",
        pain_level=7,
        pain_locations=["Lower back"],
        medications=["Ibuprofen", {"name": "Naproxen", "dosage": "250mg"}],
        functional_impact="limited",
    )
    assert log["pain_level"] == 7
    assert log["functional_impact"] == "limited"
    assert log["medications"][1]["name"] == "Naproxen"

    r = client.get(f"/logs/{log['id']}", params={"user_id": "u1"})
    assert r.status_code == 200
    assert r.json()["pain_locations"] == ["Lower back"]


def test_create_rejects_out_of_range_pain_level(client):
    r = client.post("/logs", params={"user_id": "u1"}, json={"pain_level": 11})
    assert r.status_code == 422

    r = client.post("/logs", params={"user_id": "u1"}, json={"functional_impact": "sometimes"})
    assert r.status_code == 422


def test_create_defaults_to_now_and_shows_today(client):
    log = _create(client, pain_level=4)

    r = client.get("/logs/today", params={"user_id": "u1"})
    assert r.status_code == 200
    data = r.json()
    assert data["count"] == 1
    assert data["logs"][0]["id"] == log["id"]


def test_list_custom_range(client):
    _create(client, logged_at="2025-01-06T09:00:00", pain_level=5)
    _create(client, logged_at="2025-01-08T09:00:00", pain_level=6)
    _create(client, logged_at="2025-02-01T09:00:00", pain_level=2)

    r = client.get("/logs", params={
        "user_id": "u1",
        "start": "2025-01-06T00:00:00",
        "end": "2025-01-31T23:59:59",
        "descending": True,
    })
    data = r.json()
    assert data["count"] == 2
    assert [log["pain_level"] for log in data["logs"]] == [6, 5]


def test_list_rejects_inverted_range(client):
    r = client.get("/logs", params={
        "view": "custom",
        "start": "2025-01-08T00:00:00",
        "end": "2025-01-06T00:00:00",
    })
    assert r.status_code == 400


def test_patch_and_delete(client):
    log = _create(client, logged_at="2025-01-06T09:00:00", pain_level=7, notes="before")

    r = client.patch(f"/logs/{log['id']}", params={"user_id": "u1"}, json={"pain_level": 3})
    assert r.status_code == 200
    assert r.json()["pain_level"] == 3
    assert r.json()["notes"] == "before"

    r = client.delete(f"/logs/{log['id']}", params={"user_id": "u1"})
    assert r.json()["status"] == "deleted"

    assert client.get(f"/logs/{log['id']}", params={"user_id": "u1"}).status_code == 404
    assert client.patch(f"/logs/{log['id']}", params={"user_id": "u1"}, json={"pain_level": 1}).status_code == 404
    assert client.delete(f"/logs/{log['id']}", params={"user_id": "u1"}).status_code == 404


def test_profile_and_condition_defaults(client):
    r = client.get("/profile", params={"user_id": "u1"})
    assert r.json()["diagnosis"] is None

    r = client.put("/profile", params={"user_id": "u1"}, json={
        "diagnosis": "Sciatica",
        "current_medications": [{"name": "Gabapentin", "frequency": "nightly"}],
    })
    assert r.status_code == 200
    assert r.json()["current_medications"][0]["name"] == "Gabapentin"

    r = client.get("/profile/condition-defaults", params={"diagnosis": "Sciatica"})
    data = r.json()
    assert data["condition"] == "sciatica"
    assert "Lower back" in data["pain_locations"]

    r = client.get("/profile/condition-defaults", params={"diagnosis": "something rare"})
    assert r.json()["condition"] is None
    assert r.json()["pain_locations"] == []
