"""Tests for Budget Category module."""
import pytest

from app.wowbato.db import session_scope
from app.wowbato.errors import RecordNotFound, ValidationError
from app.wowbato.identity import Identity
from app.wowbato.modules.budget_categories import service
from app.wowbato.modules.budget_categories.models import BudgetCategory
from app.wowbato.utils import Page


def _login(client, email="admin@example.com", password="pw"):
    return client.post("/api/v1/user/login", json={"email": email, "password": password})


def _admin(seeded, barangay="barangay", user="admin") -> Identity:
    return Identity(user_id=seeded[user], role="admin", barangay_id=seeded[barangay], barangay_name="")


def test_add_and_list_categories_with_count(client, seeded):
    _login(client)
    r = client.post("/api/v1/budgetCategory/add", json={"name": "Health", "description": "Clinic supplies"})
    assert r.status_code == 200
    assert r.json["message"] == "New Budget Category Added"

    r = client.get("/api/v1/budgetCategory/all?page=1&limit=10")
    assert r.status_code == 200
    assert r.json["count"] == 2
    names = {c["name"]: c for c in r.json["data"]}
    assert set(names) == {"Infrastructure", "Health"}
    assert names["Infrastructure"]["project_count"] == 1
    assert names["Health"]["project_count"] == 0


def test_list_is_scoped_to_session_barangay(client, seeded):
    _login(client, email="resident2@example.com")
    r = client.get("/api/v1/budgetCategory/all")
    assert r.status_code == 200
    assert r.json["data"] == []
    assert r.json["count"] == 0


def test_list_rejects_bad_pagination(client, seeded):
    _login(client)
    assert client.get("/api/v1/budgetCategory/all?page=0").status_code == 400
    assert client.get("/api/v1/budgetCategory/all?limit=abc").status_code == 400
    assert client.get("/api/v1/budgetCategory/all?limit=1000").status_code == 400
    assert client.get("/api/v1/budgetCategory/all?page=%C2%B2").status_code == 400
    assert client.get("/api/v1/budgetCategory/all?limit=%C2%B2").status_code == 400
    r = client.get("/api/v1/budgetCategory/all?page=99999999999999999999999")
    assert r.status_code == 400
    assert "page" in r.json["error"]


def test_non_ascii_digit_path_id_is_bad_request(client, seeded):
    _login(client)
    r = client.get("/api/v1/budgetCategory/%C2%B2")
    assert r.status_code == 400
    assert "error" in r.json


def test_get_single_category(client, seeded):
    _login(client, email="resident@example.com")
    r = client.get(f"/api/v1/budgetCategory/{seeded['category']}")
    assert r.status_code == 200
    assert r.json["data"]["name"] == "Infrastructure"
    assert r.json["data"]["barangay_ID"] == seeded["barangay"]


def test_category_of_other_barangay_is_not_visible(client, seeded):
    _login(client, email="resident2@example.com")
    r = client.get(f"/api/v1/budgetCategory/{seeded['category']}")
    assert r.status_code == 500
    assert "not found" in r.json["error"]


def test_update_category_read_modify_write(client, seeded):
    _login(client)
    r = client.put(f"/api/v1/budgetCategory/update/{seeded['category']}", json={"description": "Roads only"})
    assert r.status_code == 200

    with session_scope(client.application) as s:
        cat = s.get(BudgetCategory, seeded["category"])
        assert cat.name == "Infrastructure"
        assert cat.description == "Roads only"


def test_delete_category_removes_exactly_one_row(client, seeded):
    _login(client)
    with session_scope(client.application) as s:
        extra = BudgetCategory(name="Sports", barangay_id=seeded["barangay"])
        s.add(extra)
        s.flush()
        extra_id = extra.id
        before = s.query(BudgetCategory).count()

    r = client.delete(f"/api/v1/budgetCategory/delete/{extra_id}")
    assert r.status_code == 200
    assert r.json["message"] == "Budget Category Deleted"

    with session_scope(client.application) as s:
        assert s.query(BudgetCategory).count() == before - 1
        assert s.get(BudgetCategory, extra_id) is None

    # Nothing left to delete: no row affected means failure.
    r = client.delete(f"/api/v1/budgetCategory/delete/{extra_id}")
    assert r.status_code == 500
    assert "error" in r.json


def test_admin_cannot_delete_other_barangays_category(client, seeded):
    _login(client, email="admin2@example.com")
    r = client.delete(f"/api/v1/budgetCategory/delete/{seeded['category']}")
    assert r.status_code == 500

    with session_scope(client.application) as s:
        assert s.get(BudgetCategory, seeded["category"]) is not None


def test_service_create_requires_name(app, seeded):
    with session_scope(app) as s:
        with pytest.raises(ValidationError):
            service.create_category(s, {"name": "  "}, _admin(seeded))


def test_service_delete_cascades_projects(app, seeded):
    from app.wowbato.modules.projects.models import Project

    with session_scope(app) as s:
        service.delete_category(s, seeded["category"], _admin(seeded))
    with session_scope(app) as s:
        assert s.query(Project).count() == 0
        with pytest.raises(RecordNotFound):
            service.get_category(s, seeded["barangay"], seeded["category"])


def test_service_list_pagination(app, seeded):
    with session_scope(app) as s:
        for i in range(4):
            service.create_category(s, {"name": f"Cat {i}"}, _admin(seeded))
    with session_scope(app) as s:
        first = service.list_categories(s, seeded["barangay"], Page(limit=2, offset=0))
        last = service.list_categories(s, seeded["barangay"], Page(limit=2, offset=4))
        assert len(first) == 2
        assert len(last) == 1
        assert service.count_categories(s, seeded["barangay"]) == 5
