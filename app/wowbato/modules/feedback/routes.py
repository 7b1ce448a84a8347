from flask import Blueprint

from app.wowbato.db import db_session
from app.wowbato.identity import Identity
from app.wowbato.ids import EntityId
from app.wowbato.modules.feedback import service
from app.wowbato.rbac import require_auth
from app.wowbato.utils import json_body, ok

bp = Blueprint("feedback", __name__)


@bp.post("/create/<id:project_id>")
@require_auth
def create_feedback(project_id: EntityId, identity: Identity):
    s = db_session()
    service.create_feedback(s, project_id, json_body(), identity)
    s.commit()
    return ok("New feedback created")


@bp.get("/all/<id:project_id>")
@require_auth
def all_feedback(project_id: EntityId, identity: Identity):
    return ok("Feedbacks retrieved", service.list_feedback(db_session(), identity.barangay_id, project_id))


@bp.put("/update/<id:feedback_id>")
@require_auth
def update_feedback(feedback_id: EntityId, identity: Identity):
    s = db_session()
    service.edit_feedback(s, feedback_id, json_body(), identity)
    s.commit()
    return ok("Feedback edited")


@bp.delete("/delete/<id:feedback_id>")
@require_auth
def delete_feedback(feedback_id: EntityId, identity: Identity):
    s = db_session()
    service.delete_feedback(s, feedback_id, identity)
    s.commit()
    return ok("Feedback deleted")
