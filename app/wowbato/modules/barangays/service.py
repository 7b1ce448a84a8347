from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import func

from app.wowbato.audit import record_event
from app.wowbato.errors import PermissionDenied, RecordNotFound, ValidationError
from app.wowbato.models import Barangay
from app.wowbato.utils import Page, clean_str

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.wowbato.identity import Identity


REQUIRED_FIELDS = ("name", "city", "region")


def validate_barangay_payload(payload: dict) -> list[str]:
    """Validate barangay creation payload. Returns list of errors."""
    errors = []
    for field in REQUIRED_FIELDS:
        if not clean_str(payload.get(field)):
            errors.append(f"barangay {field} cannot be empty")
    return errors


def _ensure_name_free(s: "Session", name: str, *, exclude_id: int | None = None) -> None:
    q = s.query(Barangay.id).filter(func.lower(Barangay.name) == name.lower())
    if exclude_id is not None:
        q = q.filter(Barangay.id != exclude_id)
    if q.first() is not None:
        raise ValidationError(f"barangay {name!r} already exists")


def _ensure_own_barangay(identity: "Identity", barangay_id: int) -> None:
    if barangay_id != identity.barangay_id:
        raise PermissionDenied("Forbidden: administrators may only manage their own barangay")


def create_barangay(s: "Session", payload: dict, identity: "Identity") -> Barangay:
    errors = validate_barangay_payload(payload)
    if errors:
        raise ValidationError(errors[0])
    name = clean_str(payload.get("name"))
    _ensure_name_free(s, name)

    now = datetime.utcnow()
    barangay = Barangay(
        name=name,
        city=clean_str(payload.get("city")),
        region=clean_str(payload.get("region")),
        created_at=now,
        updated_at=now,
    )
    s.add(barangay)
    s.flush()
    record_event(s, actor=identity, action="barangay.create", entity_type="Barangay", entity_id=barangay.id, metadata={"name": name})
    return barangay


def update_barangay(s: "Session", barangay_id: int, payload: dict, identity: "Identity") -> Barangay:
    """Blank fields keep their stored value."""
    _ensure_own_barangay(identity, barangay_id)
    barangay = get_barangay_row(s, barangay_id)

    before = barangay.to_dict()
    name = clean_str(payload.get("name"))
    if name and name != barangay.name:
        _ensure_name_free(s, name, exclude_id=barangay.id)
        barangay.name = name
    barangay.city = clean_str(payload.get("city")) or barangay.city
    barangay.region = clean_str(payload.get("region")) or barangay.region
    barangay.updated_at = datetime.utcnow()

    record_event(
        s,
        actor=identity,
        action="barangay.update",
        entity_type="Barangay",
        entity_id=barangay.id,
        metadata={"before": before, "after": barangay.to_dict()},
    )
    return barangay


def delete_barangay(s: "Session", barangay_id: int, identity: "Identity") -> None:
    _ensure_own_barangay(identity, barangay_id)
    # Written first: the cascade removes the acting admin, which nulls actor_user_id.
    record_event(s, actor=identity, action="barangay.delete", entity_type="Barangay", entity_id=barangay_id)
    s.flush()
    affected = s.query(Barangay).filter(Barangay.id == barangay_id).delete(synchronize_session=False)
    if affected != 1:
        raise RecordNotFound(f"barangay not found: barangay ID {barangay_id}")


def get_barangay_row(s: "Session", barangay_id: int) -> Barangay:
    barangay = s.get(Barangay, barangay_id)
    if barangay is None:
        raise RecordNotFound(f"barangay not found: barangay ID {barangay_id}")
    return barangay


def get_barangay(s: "Session", barangay_id: int) -> dict:
    return get_barangay_row(s, barangay_id).to_dict()


def list_barangays(s: "Session", page: Page) -> list[dict]:
    rows = s.query(Barangay).order_by(Barangay.id.asc()).limit(page.limit).offset(page.offset).all()
    return [b.to_dict() for b in rows]


def count_barangays(s: "Session") -> int:
    return s.query(func.count(Barangay.id)).scalar() or 0


def barangay_options(s: "Session") -> list[dict]:
    """Id/name pairs for the registration form."""
    rows = s.query(Barangay.id, Barangay.name).order_by(Barangay.name.asc()).all()
    return [{"id": r.id, "name": r.name} for r in rows]


def public_barangays(s: "Session") -> list[dict]:
    return [b.to_dict() for b in s.query(Barangay).order_by(Barangay.name.asc()).all()]
