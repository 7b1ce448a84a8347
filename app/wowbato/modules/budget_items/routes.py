from flask import Blueprint, current_app, request

from app.wowbato.db import db_session, parallel_reads
from app.wowbato.identity import ROLE_ADMIN, Identity
from app.wowbato.ids import EntityId
from app.wowbato.modules.budget_items import service
from app.wowbato.rbac import require_auth, require_role
from app.wowbato.utils import json_body, ok, parse_pagination

bp = Blueprint("budget_item", __name__)


@bp.post("/add/<id:project_id>")
@require_role(ROLE_ADMIN)
def add_item(project_id: EntityId, identity: Identity):
    s = db_session()
    item = service.create_item(s, project_id, json_body(), identity)
    s.commit()
    current_app.logger.info("Budget item created id=%s project_id=%s", item.id, project_id)
    return ok("New Budget Item Added")


@bp.get("/all/<id:project_id>")
@require_auth
def all_items(project_id: EntityId, identity: Identity):
    status = service.parse_filter(request.args.get("filter"))
    page = parse_pagination()
    items, count = parallel_reads(
        current_app._get_current_object(),  # type: ignore[attr-defined]
        lambda s: service.list_items(s, identity.barangay_id, project_id, status, page),
        lambda s: service.count_items(s, identity.barangay_id, project_id, status),
    )
    return ok("Retrieved Budget Items for project", items, count=count)


@bp.get("/<id:project_id>/<id:item_id>")
@require_auth
def single_item(project_id: EntityId, item_id: EntityId, identity: Identity):
    item = service.get_item(db_session(), identity.barangay_id, project_id, item_id)
    return ok("Retrieved Budget Item", item)


@bp.put("/update/<id:item_id>")
@require_role(ROLE_ADMIN)
def update_item(item_id: EntityId, identity: Identity):
    s = db_session()
    service.update_item(s, item_id, json_body(), identity)
    s.commit()
    return ok("Budget Item Updated")


@bp.put("/update-status/<id:item_id>")
@require_role(ROLE_ADMIN)
def update_item_status(item_id: EntityId, identity: Identity):
    s = db_session()
    item = service.update_item_status(s, item_id, json_body(), identity)
    s.commit()
    return ok(f"Budget Item status updated to {item.status}")


@bp.delete("/delete/<id:item_id>")
@require_role(ROLE_ADMIN)
def delete_item(item_id: EntityId, identity: Identity):
    s = db_session()
    service.delete_item(s, item_id, identity)
    s.commit()
    return ok("Budget Item Deleted")
