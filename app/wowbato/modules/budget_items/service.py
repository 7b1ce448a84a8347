from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select

from app.wowbato.audit import record_event
from app.wowbato.errors import RecordNotFound, ValidationError
from app.wowbato.modules.projects.service import get_project_row
from app.wowbato.utils import Page, clean_str, parse_amount

if TYPE_CHECKING:
    from sqlalchemy.orm import Query, Session
    from app.wowbato.identity import Identity
    from app.wowbato.modules.budget_items.models import BudgetItem


STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
VALID_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)
FILTER_ALL = "All"


def _parse_status(value, default: str | None = None) -> str:
    status = clean_str(value) or default
    if status not in VALID_STATUSES:
        raise ValidationError(f"invalid budget item status. Must be one of: {', '.join(VALID_STATUSES)}")
    return status


def parse_filter(raw: str | None) -> str | None:
    """``All`` or nothing means no status filter."""
    value = clean_str(raw)
    if not value or value.lower() == FILTER_ALL.lower():
        return None
    return _parse_status(value)


def create_item(s: "Session", project_id: int, payload: dict, identity: "Identity") -> "BudgetItem":
    from app.wowbato.modules.budget_items.models import BudgetItem

    name = clean_str(payload.get("name"))
    if not name:
        raise ValidationError("budget item name cannot be empty")
    project = get_project_row(s, identity.barangay_id, project_id)

    status = _parse_status(payload.get("status"), STATUS_PENDING)
    now = datetime.utcnow()
    item = BudgetItem(
        name=name,
        amount_allocated=parse_amount(payload.get("amount_allocated"), "amount_allocated"),
        amount_spent=parse_amount(payload.get("amount_spent"), "amount_spent"),
        description=clean_str(payload.get("description")) or None,
        status=status,
        approval_date=now if status == STATUS_APPROVED else None,
        project_id=project.id,
        created_at=now,
        updated_at=now,
    )
    s.add(item)
    s.flush()
    record_event(
        s,
        actor=identity,
        action="budget_item.create",
        entity_type="BudgetItem",
        entity_id=item.id,
        metadata={"project_id": project.id, "amount_allocated": item.amount_allocated},
    )
    return item


def _scoped_items(s: "Session", barangay_id: int) -> "Query":
    from app.wowbato.modules.budget_items.models import BudgetItem
    from app.wowbato.modules.projects.models import Project

    return s.query(BudgetItem).join(Project, Project.id == BudgetItem.project_id).filter(Project.barangay_id == barangay_id)


def get_item_row(s: "Session", barangay_id: int, item_id: int, *, project_id: int | None = None) -> "BudgetItem":
    from app.wowbato.modules.budget_items.models import BudgetItem

    q = _scoped_items(s, barangay_id).filter(BudgetItem.id == item_id)
    if project_id is not None:
        q = q.filter(BudgetItem.project_id == project_id)
    item = q.one_or_none()
    if item is None:
        raise RecordNotFound(f"budget item not found: budget item ID {item_id}")
    return item


def get_item(s: "Session", barangay_id: int, project_id: int, item_id: int) -> dict:
    return get_item_row(s, barangay_id, item_id, project_id=project_id).to_dict()


def update_item(s: "Session", item_id: int, payload: dict, identity: "Identity") -> "BudgetItem":
    item = get_item_row(s, identity.barangay_id, item_id)
    before = item.to_dict()

    if "name" in payload:
        name = clean_str(payload.get("name"))
        if not name:
            raise ValidationError("budget item name cannot be empty")
        item.name = name
    if "amount_allocated" in payload:
        item.amount_allocated = parse_amount(payload.get("amount_allocated"), "amount_allocated")
    if "amount_spent" in payload:
        item.amount_spent = parse_amount(payload.get("amount_spent"), "amount_spent")
    if "description" in payload:
        item.description = clean_str(payload.get("description")) or None
    item.updated_at = datetime.utcnow()

    record_event(
        s,
        actor=identity,
        action="budget_item.update",
        entity_type="BudgetItem",
        entity_id=item.id,
        metadata={"before": before, "after": item.to_dict()},
    )
    return item


def update_item_status(s: "Session", item_id: int, payload: dict, identity: "Identity") -> "BudgetItem":
    """Approval stamps ``approval_date``; any other status clears it."""
    status = _parse_status(payload.get("status"))
    item = get_item_row(s, identity.barangay_id, item_id)
    old_status = item.status

    now = datetime.utcnow()
    item.status = status
    item.approval_date = now if status == STATUS_APPROVED else None
    item.updated_at = now

    record_event(
        s,
        actor=identity,
        action="budget_item.status_change",
        entity_type="BudgetItem",
        entity_id=item.id,
        metadata={"from": old_status, "to": status},
    )
    return item


def delete_item(s: "Session", item_id: int, identity: "Identity") -> None:
    from app.wowbato.modules.budget_items.models import BudgetItem
    from app.wowbato.modules.projects.models import Project

    in_tenant = select(Project.id).where(Project.barangay_id == identity.barangay_id)
    affected = (
        s.query(BudgetItem)
        .filter(BudgetItem.id == item_id, BudgetItem.project_id.in_(in_tenant))
        .delete(synchronize_session=False)
    )
    if affected != 1:
        raise RecordNotFound(f"budget item not found: budget item ID {item_id}")
    record_event(s, actor=identity, action="budget_item.delete", entity_type="BudgetItem", entity_id=item_id)


def list_items(s: "Session", barangay_id: int, project_id: int, status: str | None, page: Page) -> list[dict]:
    from app.wowbato.modules.budget_items.models import BudgetItem

    q = _scoped_items(s, barangay_id).filter(BudgetItem.project_id == project_id)
    if status is not None:
        q = q.filter(BudgetItem.status == status)
    rows = q.order_by(BudgetItem.id.asc()).limit(page.limit).offset(page.offset).all()
    return [item.to_dict() for item in rows]


def count_items(s: "Session", barangay_id: int, project_id: int, status: str | None) -> int:
    from app.wowbato.modules.budget_items.models import BudgetItem
    from app.wowbato.modules.projects.models import Project

    q = (
        s.query(func.count(BudgetItem.id))
        .join(Project, Project.id == BudgetItem.project_id)
        .filter(Project.barangay_id == barangay_id, BudgetItem.project_id == project_id)
    )
    if status is not None:
        q = q.filter(BudgetItem.status == status)
    return q.scalar() or 0
