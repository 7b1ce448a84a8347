from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import func

from app.wowbato.audit import record_event
from app.wowbato.errors import RecordNotFound, ValidationError
from app.wowbato.modules.budget_categories.service import get_category_row
from app.wowbato.utils import Page, clean_str, parse_date

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.wowbato.identity import Identity
    from app.wowbato.modules.projects.models import Project


STATUS_PLANNED = "planned"
STATUS_ONGOING = "ongoing"
STATUS_COMPLETED = "completed"
VALID_STATUSES = (STATUS_PLANNED, STATUS_ONGOING, STATUS_COMPLETED)


def _parse_status(value, default: str | None = None) -> str:
    status = clean_str(value) or default
    if status not in VALID_STATUSES:
        raise ValidationError(f"invalid project status. Must be one of: {', '.join(VALID_STATUSES)}")
    return status


def validate_project_payload(payload: dict) -> list[str]:
    """Validate project creation payload. Returns list of errors."""
    errors = []
    if not clean_str(payload.get("name")):
        errors.append("project name cannot be empty")
    if not clean_str(payload.get("startDate")):
        errors.append("project start date cannot be empty")
    if not clean_str(payload.get("endDate")):
        errors.append("project end date cannot be empty")
    return errors


def create_project(s: "Session", category_id: int, payload: dict, identity: "Identity") -> "Project":
    from app.wowbato.modules.projects.models import Project

    errors = validate_project_payload(payload)
    if errors:
        raise ValidationError(errors[0])
    # The category has to belong to the caller's barangay.
    category = get_category_row(s, identity.barangay_id, category_id)

    start_date = parse_date(payload.get("startDate"), "startDate")
    end_date = parse_date(payload.get("endDate"), "endDate")
    if end_date < start_date:
        raise ValidationError("project end date cannot be before its start date")

    now = datetime.utcnow()
    project = Project(
        name=clean_str(payload.get("name")),
        description=clean_str(payload.get("description")) or None,
        start_date=start_date,
        end_date=end_date,
        status=_parse_status(payload.get("status"), STATUS_PLANNED),
        barangay_id=identity.barangay_id,
        category_id=category.id,
        created_at=now,
        updated_at=now,
    )
    s.add(project)
    s.flush()
    record_event(
        s,
        actor=identity,
        action="project.create",
        entity_type="Project",
        entity_id=project.id,
        metadata={"name": project.name, "category_id": category.id},
    )
    return project


def get_project_row(s: "Session", barangay_id: int, project_id: int) -> "Project":
    from app.wowbato.modules.projects.models import Project

    project = s.query(Project).filter(Project.id == project_id, Project.barangay_id == barangay_id).one_or_none()
    if project is None:
        raise RecordNotFound(f"project not found: project ID {project_id}")
    return project


def get_project(s: "Session", barangay_id: int, project_id: int) -> dict:
    return get_project_row(s, barangay_id, project_id).to_dict()


def update_project(s: "Session", project_id: int, payload: dict, identity: "Identity") -> "Project":
    project = get_project_row(s, identity.barangay_id, project_id)
    before = project.to_dict()

    if "name" in payload:
        name = clean_str(payload.get("name"))
        if not name:
            raise ValidationError("project name cannot be empty")
        project.name = name
    if "description" in payload:
        project.description = clean_str(payload.get("description")) or None
    project.updated_at = datetime.utcnow()

    record_event(
        s,
        actor=identity,
        action="project.update",
        entity_type="Project",
        entity_id=project.id,
        metadata={"before": before, "after": project.to_dict()},
    )
    return project


def update_project_status(s: "Session", project_id: int, payload: dict, identity: "Identity") -> "Project":
    """
    Move a project to a new status.

    ``flexdate`` is the date of the transition: it becomes the start date when
    the project goes ongoing and the end date for any other status.
    """
    status = _parse_status(payload.get("status"))
    flexdate = parse_date(payload.get("flexdate"), "flexdate")
    if flexdate is None:
        raise ValidationError("flexdate cannot be empty")

    project = get_project_row(s, identity.barangay_id, project_id)
    old_status = project.status
    project.status = status
    if status == STATUS_ONGOING:
        project.start_date = flexdate
    else:
        project.end_date = flexdate
    project.updated_at = datetime.utcnow()

    record_event(
        s,
        actor=identity,
        action="project.status_change",
        entity_type="Project",
        entity_id=project.id,
        metadata={"from": old_status, "to": status, "flexdate": flexdate.isoformat()},
    )
    return project


def delete_project(s: "Session", project_id: int, identity: "Identity") -> None:
    from app.wowbato.modules.projects.models import Project

    affected = (
        s.query(Project)
        .filter(Project.id == project_id, Project.barangay_id == identity.barangay_id)
        .delete(synchronize_session=False)
    )
    if affected != 1:
        raise RecordNotFound(f"project not found: project ID {project_id}")
    record_event(s, actor=identity, action="project.delete", entity_type="Project", entity_id=project_id)


def list_projects(s: "Session", barangay_id: int, category_id: int, page: Page) -> list[dict]:
    from app.wowbato.modules.projects.models import Project

    rows = (
        s.query(Project)
        .filter(Project.barangay_id == barangay_id, Project.category_id == category_id)
        .order_by(Project.id.asc())
        .limit(page.limit)
        .offset(page.offset)
        .all()
    )
    return [
        {
            "id": p.id,
            "name": p.name,
            "startDate": p.start_date.isoformat(),
            "endDate": p.end_date.isoformat(),
            "status": p.status,
        }
        for p in rows
    ]


def count_projects(s: "Session", barangay_id: int, category_id: int) -> int:
    from app.wowbato.modules.projects.models import Project

    return (
        s.query(func.count(Project.id))
        .filter(Project.barangay_id == barangay_id, Project.category_id == category_id)
        .scalar()
        or 0
    )
