from flask import Blueprint, current_app

from app.wowbato.db import db_session, parallel_reads
from app.wowbato.identity import ROLE_ADMIN, Identity
from app.wowbato.ids import EntityId
from app.wowbato.modules.budget_categories.service import get_category
from app.wowbato.modules.projects import service
from app.wowbato.rbac import require_auth, require_role
from app.wowbato.utils import json_body, ok, parse_pagination

bp = Blueprint("project", __name__)


@bp.post("/add/<id:category_id>")
@require_role(ROLE_ADMIN)
def add_project(category_id: EntityId, identity: Identity):
    s = db_session()
    project = service.create_project(s, category_id, json_body(), identity)
    s.commit()
    current_app.logger.info("Project created id=%s category_id=%s", project.id, category_id)
    return ok("New Project Created")


@bp.delete("/delete/<id:project_id>")
@require_role(ROLE_ADMIN)
def delete_project(project_id: EntityId, identity: Identity):
    s = db_session()
    service.delete_project(s, project_id, identity)
    s.commit()
    return ok("Project Deleted")


@bp.put("/update/<id:project_id>")
@require_role(ROLE_ADMIN)
def update_project(project_id: EntityId, identity: Identity):
    s = db_session()
    service.update_project(s, project_id, json_body(), identity)
    s.commit()
    return ok("Updated Project")


@bp.put("/status/<id:project_id>")
@require_role(ROLE_ADMIN)
def update_project_status(project_id: EntityId, identity: Identity):
    s = db_session()
    project = service.update_project_status(s, project_id, json_body(), identity)
    s.commit()
    return ok(f"Project status updated to {project.status}")


@bp.get("/all/<id:category_id>")
@require_auth
def all_projects(category_id: EntityId, identity: Identity):
    page = parse_pagination()
    projects, category, count = parallel_reads(
        current_app._get_current_object(),  # type: ignore[attr-defined]
        lambda s: service.list_projects(s, identity.barangay_id, category_id, page),
        lambda s: get_category(s, identity.barangay_id, category_id),
        lambda s: service.count_projects(s, identity.barangay_id, category_id),
    )
    return ok("Projects Retrieved", projects=projects, category=category, count=count)


@bp.get("/<id:project_id>")
@require_auth
def single_project(project_id: EntityId, identity: Identity):
    project = service.get_project(db_session(), identity.barangay_id, project_id)
    return ok(f"Project {project['name']} Retrieved", project)
