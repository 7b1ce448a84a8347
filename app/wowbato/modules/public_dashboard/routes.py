from flask import Blueprint, request

from app.wowbato.db import db_session
from app.wowbato.ids import EntityId
from app.wowbato.modules.public_dashboard import service
from app.wowbato.utils import ok

bp = Blueprint("dashboard", __name__)


def _barangay_filter() -> int | None:
    raw = request.args.get("barangay")
    if raw is None or raw.strip() == "":
        return None
    return EntityId.parse(raw, field="barangay")


@bp.get("/stats")
def stats():
    return ok("Dashboard statistics retrieved", service.dashboard_stats(db_session(), _barangay_filter()))


@bp.get("/completion")
def completion():
    return ok("Project completion retrieved", service.completion_stats(db_session(), _barangay_filter()))


@bp.get("/average-item-cost")
def average_item_cost():
    return ok("Average item cost retrieved", service.average_item_cost(db_session(), _barangay_filter()))


@bp.get("/cost-per-day")
def cost_per_day():
    return ok("Project cost per day retrieved", service.cost_per_day(db_session(), _barangay_filter()))


@bp.get("/duration")
def duration():
    return ok("Average project duration retrieved", service.average_duration(db_session(), _barangay_filter()))
