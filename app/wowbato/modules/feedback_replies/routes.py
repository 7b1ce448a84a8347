from flask import Blueprint

from app.wowbato.db import db_session
from app.wowbato.identity import Identity
from app.wowbato.ids import EntityId
from app.wowbato.modules.feedback_replies import service
from app.wowbato.rbac import require_auth
from app.wowbato.utils import json_body, ok

bp = Blueprint("feedback_reply", __name__)


@bp.post("/create/<id:feedback_id>")
@require_auth
def create_reply(feedback_id: EntityId, identity: Identity):
    s = db_session()
    service.create_reply(s, feedback_id, json_body(), identity)
    s.commit()
    return ok("Reply submitted")


@bp.get("/get/<id:feedback_id>")
@require_auth
def get_replies(feedback_id: EntityId, identity: Identity):
    return ok("Replies retrieved", service.list_replies(db_session(), identity.barangay_id, feedback_id))


@bp.put("/update/<id:reply_id>")
@require_auth
def update_reply(reply_id: EntityId, identity: Identity):
    s = db_session()
    service.edit_reply(s, reply_id, json_body(), identity)
    s.commit()
    return ok("Reply Edited")


@bp.delete("/delete/<id:reply_id>")
@require_auth
def delete_reply(reply_id: EntityId, identity: Identity):
    s = db_session()
    service.delete_reply(s, reply_id, identity)
    s.commit()
    return ok("Reply deleted")
