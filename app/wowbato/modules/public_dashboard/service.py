"""
Read-only aggregates for the public transparency dashboard.

Every function takes an optional ``barangay_id``; ``None`` aggregates across
all barangays. Amounts are returned as floats rounded to centavos.
"""
from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import func

from app.wowbato.models import User
from app.wowbato.modules.budget_items.models import BudgetItem
from app.wowbato.modules.projects.models import Project
from app.wowbato.modules.projects.service import STATUS_COMPLETED

if TYPE_CHECKING:
    from sqlalchemy.orm import Query, Session


def _money(value: Decimal | float | int | None) -> float:
    return round(float(value or 0), 2)


def _scope_projects(q: "Query", barangay_id: int | None) -> "Query":
    if barangay_id is not None:
        q = q.filter(Project.barangay_id == barangay_id)
    return q


def dashboard_stats(s: "Session", barangay_id: int | None = None) -> dict:
    total_projects = _scope_projects(s.query(func.count(Project.id)), barangay_id).scalar() or 0

    users_q = s.query(func.count(User.id))
    if barangay_id is not None:
        users_q = users_q.filter(User.barangay_id == barangay_id)
    total_users = users_q.scalar() or 0

    total_items = (
        _scope_projects(s.query(func.count(BudgetItem.id)).join(Project, Project.id == BudgetItem.project_id), barangay_id)
        .scalar()
        or 0
    )

    by_status = _scope_projects(s.query(Project.status, func.count(Project.id)), barangay_id).group_by(Project.status).all()

    roles_q = s.query(User.role, func.count(User.id))
    if barangay_id is not None:
        roles_q = roles_q.filter(User.barangay_id == barangay_id)
    by_role = roles_q.group_by(User.role).all()

    budgets = (
        _scope_projects(
            s.query(Project.name, func.sum(BudgetItem.amount_allocated)).join(BudgetItem, BudgetItem.project_id == Project.id),
            barangay_id,
        )
        .group_by(Project.name)
        .order_by(Project.name.asc())
        .all()
    )

    return {
        "total_projects": total_projects,
        "total_users": total_users,
        "total_budget_items": total_items,
        "projects_by_status": {status: count for status, count in by_status},
        "users_by_role": {role: count for role, count in by_role},
        "budget_by_project": {name: _money(total) for name, total in budgets},
    }


def completion_stats(s: "Session", barangay_id: int | None = None) -> dict:
    complete = _scope_projects(s.query(func.count(Project.id)), barangay_id).filter(Project.status == STATUS_COMPLETED).scalar() or 0
    incomplete = _scope_projects(s.query(func.count(Project.id)), barangay_id).filter(Project.status != STATUS_COMPLETED).scalar() or 0
    return {"complete": complete, "incomplete": incomplete}


def average_item_cost(s: "Session", barangay_id: int | None = None) -> dict:
    """Mean allocated amount over budget items of completed projects."""
    total, count = (
        _scope_projects(
            s.query(func.sum(BudgetItem.amount_allocated), func.count(BudgetItem.id)).join(
                Project, Project.id == BudgetItem.project_id
            ),
            barangay_id,
        )
        .filter(Project.status == STATUS_COMPLETED)
        .one()
    )
    average = _money(total) / count if count else 0.0
    return {"average_item_cost": round(average, 2)}


def _completed_projects(s: "Session", barangay_id: int | None) -> list[tuple]:
    return (
        _scope_projects(
            s.query(Project.id, Project.start_date, Project.end_date, func.coalesce(func.sum(BudgetItem.amount_allocated), 0))
            .outerjoin(BudgetItem, BudgetItem.project_id == Project.id),
            barangay_id,
        )
        .filter(Project.status == STATUS_COMPLETED)
        .group_by(Project.id, Project.start_date, Project.end_date)
        .all()
    )


def cost_per_day(s: "Session", barangay_id: int | None = None) -> dict:
    """Total allocated budget over total days, counting completed projects with a positive duration."""
    total_cost = 0.0
    total_days = 0
    for _pid, start, end, cost in _completed_projects(s, barangay_id):
        days = (end - start).days
        if days > 0:
            total_cost += float(cost or 0)
            total_days += days
    return {"average_cost_per_day": round(total_cost / total_days, 2) if total_days else 0.0}


def average_duration(s: "Session", barangay_id: int | None = None) -> dict:
    durations = [(end - start).days for _pid, start, end, _cost in _completed_projects(s, barangay_id)]
    average = sum(durations) / len(durations) if durations else 0.0
    return {"average_duration_days": round(average, 2), "completed_projects": len(durations)}
