"""Tests for project feedback and replies."""
from app.wowbato.db import session_scope
from app.wowbato.modules.feedback.models import Feedback
from app.wowbato.modules.feedback_replies.models import FeedbackReply


def _login(client, email="admin@example.com", password="pw"):
    return client.post("/api/v1/user/login", json={"email": email, "password": password})


def _post_feedback(client, project_id, content="Canal still floods"):
    r = client.post(f"/api/v1/feedback/create/{project_id}", json={"content": content})
    assert r.status_code == 200
    with session_scope(client.application) as s:
        return s.query(Feedback.id).filter(Feedback.content == content).order_by(Feedback.id.desc()).first()[0]


def test_create_and_list_feedback_with_author_names(client, seeded):
    _login(client, email="resident@example.com")
    fid = _post_feedback(client, seeded["project"])

    r = client.get(f"/api/v1/feedback/all/{seeded['project']}")
    assert r.status_code == 200
    [fb] = r.json["data"]
    assert fb["feedback_id"] == fid
    assert fb["role"] == "resident"
    assert fb["user_id"] == seeded["resident"]
    assert fb["first_name"] == "Resident"
    assert fb["last_name"] == "Dela Cruz"


def test_feedback_requires_content(client, seeded):
    _login(client, email="resident@example.com")
    r = client.post(f"/api/v1/feedback/create/{seeded['project']}", json={"content": "   "})
    assert r.status_code == 400


def test_feedback_on_other_barangays_project_fails(client, seeded):
    _login(client, email="resident2@example.com")
    r = client.post(f"/api/v1/feedback/create/{seeded['project']}", json={"content": "hello"})
    assert r.status_code == 500
    with session_scope(client.application) as s:
        assert s.query(Feedback).count() == 0


def test_only_author_can_edit_feedback(client, seeded):
    _login(client, email="resident@example.com")
    fid = _post_feedback(client, seeded["project"])

    _login(client)
    r = client.put(f"/api/v1/feedback/update/{fid}", json={"content": "edited by admin"})
    assert r.status_code == 403

    _login(client, email="resident@example.com")
    r = client.put(f"/api/v1/feedback/update/{fid}", json={"content": "Canal floods less now"})
    assert r.status_code == 200
    with session_scope(client.application) as s:
        assert s.get(Feedback, fid).content == "Canal floods less now"


def test_admin_can_delete_any_feedback_in_barangay(client, seeded):
    _login(client, email="resident@example.com")
    fid = _post_feedback(client, seeded["project"])

    _login(client, email="admin2@example.com")
    assert client.delete(f"/api/v1/feedback/delete/{fid}").status_code == 500

    _login(client)
    r = client.delete(f"/api/v1/feedback/delete/{fid}")
    assert r.status_code == 200
    with session_scope(client.application) as s:
        assert s.get(Feedback, fid) is None


def test_replies_cycle(client, seeded):
    _login(client, email="resident@example.com")
    fid = _post_feedback(client, seeded["project"])

    _login(client)
    r = client.post(f"/api/v1/feedbackReply/create/{fid}", json={"feedback_reply": "Crew scheduled for Monday"})
    assert r.status_code == 200
    assert r.json["message"] == "Reply submitted"

    r = client.get(f"/api/v1/feedbackReply/get/{fid}")
    assert r.status_code == 200
    [reply] = r.json["data"]
    assert reply["feedback_reply"] == "Crew scheduled for Monday"
    assert reply["user_ID"] == seeded["admin"]
    rid = reply["id"]

    _login(client, email="resident@example.com")
    assert client.put(f"/api/v1/feedbackReply/update/{rid}", json={"feedback_reply": "hijack"}).status_code == 403
    assert client.delete(f"/api/v1/feedbackReply/delete/{rid}").status_code == 403

    _login(client)
    r = client.put(f"/api/v1/feedbackReply/update/{rid}", json={"feedback_reply": "Crew scheduled for Tuesday"})
    assert r.status_code == 200
    r = client.delete(f"/api/v1/feedbackReply/delete/{rid}")
    assert r.status_code == 200
    with session_scope(client.application) as s:
        assert s.query(FeedbackReply).count() == 0


def test_reply_requires_body_and_cascades_with_feedback(client, seeded):
    _login(client, email="resident@example.com")
    fid = _post_feedback(client, seeded["project"])
    assert client.post(f"/api/v1/feedbackReply/create/{fid}", json={"content": "wrong key"}).status_code == 400
    assert client.post(f"/api/v1/feedbackReply/create/{fid}", json={"feedback_reply": "bump"}).status_code == 200

    assert client.delete(f"/api/v1/feedback/delete/{fid}").status_code == 200
    with session_scope(client.application) as s:
        assert s.query(FeedbackReply).count() == 0
