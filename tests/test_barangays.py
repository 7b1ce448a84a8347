from app.wowbato.db import session_scope
from app.wowbato.models import AuditEvent, Barangay, User


def _login(client, email="admin@example.com", password="pw"):
    return client.post("/api/v1/user/login", json={"email": email, "password": password})


def test_public_directory_and_options_need_no_session(client, seeded):
    r = client.get("/api/v1/barangay/options")
    assert r.status_code == 200
    assert [b["name"] for b in r.json["data"]] == ["Malanday", "San Roque"]
    assert set(r.json["data"][0]) == {"id", "name"}

    r = client.get("/api/v1/barangay/public")
    assert r.status_code == 200
    assert {"id", "name", "city", "region"} <= set(r.json["data"][0])


def test_all_is_paginated_with_count(client, seeded):
    _login(client, email="resident@example.com")
    r = client.get("/api/v1/barangay/all?page=1&limit=1")
    assert r.status_code == 200
    assert len(r.json["data"]) == 1
    assert r.json["count"] == 2

    r = client.get(f"/api/v1/barangay/single/{seeded['other_barangay']}")
    assert r.json["data"]["name"] == "Malanday"


def test_add_barangay_requires_fields_and_unique_name(client, seeded):
    _login(client)
    r = client.post("/api/v1/barangay/add", json={"name": "Concepcion", "city": "Marikina", "region": "NCR"})
    assert r.status_code == 200
    r = client.post("/api/v1/barangay/add", json={"name": "concepcion", "city": "Marikina", "region": "NCR"})
    assert r.status_code == 400
    r = client.post("/api/v1/barangay/add", json={"name": "Tumana", "city": "", "region": "NCR"})
    assert r.status_code == 400


def test_update_keeps_blank_fields(client, seeded):
    _login(client)
    r = client.put(f"/api/v1/barangay/update/{seeded['barangay']}", json={"name": "", "city": "Pasig", "region": ""})
    assert r.status_code == 200
    with session_scope(client.application) as s:
        b = s.get(Barangay, seeded["barangay"])
        assert (b.name, b.city, b.region) == ("San Roque", "Pasig", "NCR")


def test_admin_cannot_touch_other_barangay(client, seeded):
    _login(client)
    r = client.put(f"/api/v1/barangay/update/{seeded['other_barangay']}", json={"city": "Pasig"})
    assert r.status_code == 403
    r = client.delete(f"/api/v1/barangay/delete/{seeded['other_barangay']}")
    assert r.status_code == 403
    with session_scope(client.application) as s:
        assert s.get(Barangay, seeded["other_barangay"]) is not None


def test_delete_own_barangay_cascades_users_and_keeps_audit(client, seeded):
    _login(client)
    r = client.delete(f"/api/v1/barangay/delete/{seeded['barangay']}")
    assert r.status_code == 200
    with session_scope(client.application) as s:
        assert s.get(Barangay, seeded["barangay"]) is None
        assert s.query(User).filter(User.barangay_id == seeded["barangay"]).count() == 0
        ev = s.query(AuditEvent).filter(AuditEvent.action == "barangay.delete").one()
        assert ev.actor_user_id is None
        assert ev.entity_id == str(seeded["barangay"])
