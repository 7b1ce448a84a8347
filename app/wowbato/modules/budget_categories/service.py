from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import func

from app.wowbato.audit import record_event
from app.wowbato.errors import RecordNotFound, ValidationError
from app.wowbato.utils import Page, clean_str

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.wowbato.identity import Identity
    from app.wowbato.modules.budget_categories.models import BudgetCategory


def create_category(s: "Session", payload: dict, identity: "Identity") -> "BudgetCategory":
    """Create a budget category in the caller's barangay."""
    from app.wowbato.modules.budget_categories.models import BudgetCategory

    name = clean_str(payload.get("name"))
    if not name:
        raise ValidationError("budget category name cannot be empty")

    now = datetime.utcnow()
    category = BudgetCategory(
        name=name,
        description=clean_str(payload.get("description")) or None,
        barangay_id=identity.barangay_id,
        created_at=now,
        updated_at=now,
    )
    s.add(category)
    s.flush()
    record_event(
        s,
        actor=identity,
        action="budget_category.create",
        entity_type="BudgetCategory",
        entity_id=category.id,
        metadata={"name": name},
    )
    return category


def get_category_row(s: "Session", barangay_id: int, category_id: int) -> "BudgetCategory":
    from app.wowbato.modules.budget_categories.models import BudgetCategory

    category = (
        s.query(BudgetCategory)
        .filter(BudgetCategory.id == category_id, BudgetCategory.barangay_id == barangay_id)
        .one_or_none()
    )
    if category is None:
        raise RecordNotFound(f"budget category not found: budget category ID {category_id}")
    return category


def get_category(s: "Session", barangay_id: int, category_id: int) -> dict:
    return get_category_row(s, barangay_id, category_id).to_dict()


def update_category(s: "Session", category_id: int, payload: dict, identity: "Identity") -> "BudgetCategory":
    category = get_category_row(s, identity.barangay_id, category_id)
    before = category.to_dict()

    if "name" in payload:
        name = clean_str(payload.get("name"))
        if not name:
            raise ValidationError("budget category name cannot be empty")
        category.name = name
    if "description" in payload:
        category.description = clean_str(payload.get("description")) or None
    category.updated_at = datetime.utcnow()

    record_event(
        s,
        actor=identity,
        action="budget_category.update",
        entity_type="BudgetCategory",
        entity_id=category.id,
        metadata={"before": before, "after": category.to_dict()},
    )
    return category


def delete_category(s: "Session", category_id: int, identity: "Identity") -> None:
    """Delete exactly one category in the caller's barangay."""
    from app.wowbato.modules.budget_categories.models import BudgetCategory

    affected = (
        s.query(BudgetCategory)
        .filter(BudgetCategory.id == category_id, BudgetCategory.barangay_id == identity.barangay_id)
        .delete(synchronize_session=False)
    )
    if affected != 1:
        raise RecordNotFound(f"budget category not found: budget category ID {category_id}")
    record_event(s, actor=identity, action="budget_category.delete", entity_type="BudgetCategory", entity_id=category_id)


def list_categories(s: "Session", barangay_id: int, page: Page) -> list[dict]:
    """Categories of one barangay, each with the number of projects filed under it."""
    from app.wowbato.modules.budget_categories.models import BudgetCategory
    from app.wowbato.modules.projects.models import Project

    project_counts = (
        s.query(Project.category_id.label("category_id"), func.count(Project.id).label("project_count"))
        .group_by(Project.category_id)
        .subquery()
    )
    rows = (
        s.query(BudgetCategory, func.coalesce(project_counts.c.project_count, 0))
        .outerjoin(project_counts, project_counts.c.category_id == BudgetCategory.id)
        .filter(BudgetCategory.barangay_id == barangay_id)
        .order_by(BudgetCategory.id.asc())
        .limit(page.limit)
        .offset(page.offset)
        .all()
    )
    out = []
    for category, project_count in rows:
        d = category.to_dict()
        d["project_count"] = int(project_count)
        out.append(d)
    return out


def count_categories(s: "Session", barangay_id: int) -> int:
    from app.wowbato.modules.budget_categories.models import BudgetCategory

    return s.query(func.count(BudgetCategory.id)).filter(BudgetCategory.barangay_id == barangay_id).scalar() or 0
