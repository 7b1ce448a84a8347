from flask import Blueprint, current_app

from app.wowbato.db import db_session, parallel_reads
from app.wowbato.identity import ROLE_ADMIN, Identity
from app.wowbato.ids import EntityId
from app.wowbato.modules.budget_categories import service
from app.wowbato.rbac import require_auth, require_role
from app.wowbato.utils import json_body, ok, parse_pagination

bp = Blueprint("budget_category", __name__)


@bp.post("/add")
@require_role(ROLE_ADMIN)
def add_category(identity: Identity):
    s = db_session()
    category = service.create_category(s, json_body(), identity)
    s.commit()
    current_app.logger.info("Budget category created id=%s barangay_id=%s", category.id, identity.barangay_id)
    return ok("New Budget Category Added")


@bp.delete("/delete/<id:category_id>")
@require_role(ROLE_ADMIN)
def delete_category(category_id: EntityId, identity: Identity):
    s = db_session()
    service.delete_category(s, category_id, identity)
    s.commit()
    return ok("Budget Category Deleted")


@bp.put("/update/<id:category_id>")
@require_role(ROLE_ADMIN)
def update_category(category_id: EntityId, identity: Identity):
    s = db_session()
    service.update_category(s, category_id, json_body(), identity)
    s.commit()
    return ok("Budget Category Updated")


@bp.get("/all")
@require_auth
def all_categories(identity: Identity):
    page = parse_pagination()
    categories, count = parallel_reads(
        current_app._get_current_object(),  # type: ignore[attr-defined]
        lambda s: service.list_categories(s, identity.barangay_id, page),
        lambda s: service.count_categories(s, identity.barangay_id),
    )
    return ok("All Budget Categories Retrieved", categories, count=count)


@bp.get("/<id:category_id>")
@require_auth
def single_category(category_id: EntityId, identity: Identity):
    return ok("A Budget Category Retrieved", service.get_category(db_session(), identity.barangay_id, category_id))
