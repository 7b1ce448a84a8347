from datetime import date

import pytest

from app.wowbato.db import session_scope
from app.wowbato.errors import ValidationError
from app.wowbato.identity import Identity
from app.wowbato.modules.projects import service
from app.wowbato.modules.projects.models import Project


def _login(client, email="admin@example.com", password="pw"):
    return client.post("/api/v1/user/login", json={"email": email, "password": password})


def test_add_project_defaults_to_planned(client, seeded):
    _login(client)
    r = client.post(
        f"/api/v1/project/add/{seeded['category']}",
        json={"name": "Covered Court", "description": "Roofing", "startDate": "2026-04-01", "endDate": "2026-09-30"},
    )
    assert r.status_code == 200
    assert r.json["message"] == "New Project Created"

    with session_scope(client.application) as s:
        p = s.query(Project).filter(Project.name == "Covered Court").one()
        assert p.status == "planned"
        assert p.barangay_id == seeded["barangay"]
        assert p.start_date == date(2026, 4, 1)


def test_add_project_validates_dates(client, seeded):
    _login(client)
    url = f"/api/v1/project/add/{seeded['category']}"
    r = client.post(url, json={"name": "X", "startDate": "04/01/2026", "endDate": "2026-09-30"})
    assert r.status_code == 400
    r = client.post(url, json={"name": "X", "startDate": "2026-09-30", "endDate": "2026-04-01"})
    assert r.status_code == 400
    r = client.post(url, json={"name": "X", "startDate": "2026-04-01", "endDate": "2026-09-30", "status": "paused"})
    assert r.status_code == 400


def test_add_project_into_other_barangays_category_fails(client, seeded):
    _login(client, email="admin2@example.com")
    r = client.post(
        f"/api/v1/project/add/{seeded['category']}",
        json={"name": "Sneaky", "startDate": "2026-04-01", "endDate": "2026-09-30"},
    )
    assert r.status_code == 500
    with session_scope(client.application) as s:
        assert s.query(Project).filter(Project.name == "Sneaky").count() == 0


def test_list_projects_returns_category_and_count(client, seeded):
    _login(client, email="resident@example.com")
    r = client.get(f"/api/v1/project/all/{seeded['category']}?page=1&limit=10")
    assert r.status_code == 200
    assert r.json["count"] == 1
    assert r.json["category"]["name"] == "Infrastructure"
    assert r.json["projects"][0]["name"] == "Drainage Upgrade"
    assert r.json["projects"][0]["startDate"] == "2026-01-10"


def test_list_projects_fails_when_category_is_out_of_scope(client, seeded):
    _login(client, email="resident2@example.com")
    r = client.get(f"/api/v1/project/all/{seeded['category']}")
    assert r.status_code == 500
    assert "budget category not found" in r.json["error"]


def test_status_ongoing_sets_start_date_and_completed_sets_end_date(client, seeded):
    _login(client)
    pid = seeded["project"]
    r = client.put(f"/api/v1/project/status/{pid}", json={"status": "ongoing", "flexdate": "2026-01-15"})
    assert r.status_code == 200
    r = client.get(f"/api/v1/project/{pid}")
    assert r.json["data"]["status"] == "ongoing"
    assert r.json["data"]["startDate"] == "2026-01-15"
    assert r.json["data"]["endDate"] == "2026-03-10"

    r = client.put(f"/api/v1/project/status/{pid}", json={"status": "completed", "flexdate": "2026-02-28T00:00:00Z"})
    assert r.status_code == 200
    r = client.get(f"/api/v1/project/{pid}")
    assert r.json["data"]["status"] == "completed"
    assert r.json["data"]["endDate"] == "2026-02-28"
    assert r.json["message"] == "Project Drainage Upgrade Retrieved"


def test_status_requires_valid_status_and_flexdate(client, seeded):
    _login(client)
    pid = seeded["project"]
    assert client.put(f"/api/v1/project/status/{pid}", json={"status": "done", "flexdate": "2026-01-15"}).status_code == 400
    assert client.put(f"/api/v1/project/status/{pid}", json={"status": "ongoing"}).status_code == 400


def test_update_and_delete_project(client, seeded):
    _login(client)
    pid = seeded["project"]
    r = client.put(f"/api/v1/project/update/{pid}", json={"name": "Drainage Phase 2"})
    assert r.status_code == 200
    assert client.get(f"/api/v1/project/{pid}").json["data"]["name"] == "Drainage Phase 2"

    r = client.delete(f"/api/v1/project/delete/{pid}")
    assert r.status_code == 200
    assert client.delete(f"/api/v1/project/delete/{pid}").status_code == 500


def test_service_update_rejects_blank_name(app, seeded):
    identity = Identity(user_id=seeded["admin"], role="admin", barangay_id=seeded["barangay"], barangay_name="San Roque")
    with session_scope(app) as s:
        with pytest.raises(ValidationError):
            service.update_project(s, seeded["project"], {"name": ""}, identity)
