from flask import Blueprint, current_app

from app.wowbato.db import db_session
from app.wowbato.identity import ROLE_ADMIN, Identity
from app.wowbato.ids import EntityId
from app.wowbato.modules.barangays import service
from app.wowbato.rbac import require_auth, require_role
from app.wowbato.utils import json_body, ok, parse_pagination

bp = Blueprint("barangay", __name__)


@bp.post("/add")
@require_role(ROLE_ADMIN)
def add_barangay(identity: Identity):
    s = db_session()
    barangay = service.create_barangay(s, json_body(), identity)
    s.commit()
    current_app.logger.info("Barangay created id=%s by user_id=%s", barangay.id, identity.user_id)
    return ok("Successfully Added New Barangay")


@bp.delete("/delete/<id:barangay_id>")
@require_role(ROLE_ADMIN)
def delete_barangay(barangay_id: EntityId, identity: Identity):
    s = db_session()
    service.delete_barangay(s, barangay_id, identity)
    s.commit()
    return ok("Successfully deleted the Barangay")


@bp.put("/update/<id:barangay_id>")
@require_role(ROLE_ADMIN)
def update_barangay(barangay_id: EntityId, identity: Identity):
    s = db_session()
    service.update_barangay(s, barangay_id, json_body(), identity)
    s.commit()
    return ok("Successfully Updated Barangay")


@bp.get("/all")
@require_auth
def all_barangays(identity: Identity):
    page = parse_pagination()
    s = db_session()
    data = service.list_barangays(s, page)
    return ok("Successfully fetched Barangays", data, count=service.count_barangays(s))


@bp.get("/single/<id:barangay_id>")
@require_auth
def single_barangay(barangay_id: EntityId, identity: Identity):
    return ok("Retrieved specific barangay", service.get_barangay(db_session(), barangay_id))


@bp.get("/options")
def barangay_options():
    return ok("Barangays found", service.barangay_options(db_session()))


@bp.get("/public")
def public_barangays():
    return ok("All barangays retrieved", service.public_barangays(db_session()))
