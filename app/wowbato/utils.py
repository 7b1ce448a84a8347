from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from flask import current_app, jsonify, request

from app.wowbato.errors import ValidationError

MAX_PAGE_LIMIT = 100
MAX_OFFSET = 2**31 - 1


def ok(message: str, data: Any = None, **extra: Any):
    """Success envelope: ``{"message": ..., "data": ...}`` plus any extra keys."""
    body: dict[str, Any] = {"message": message}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), 200


def json_body() -> dict:
    """Parse the request body as a JSON object or fail with a 400."""
    payload = request.get_json(silent=True)
    if payload is None:
        raise ValidationError("request body must be valid JSON")
    if not isinstance(payload, dict):
        raise ValidationError("request body must be a JSON object")
    return payload


def clean_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_date(s: str | None, field: str = "date") -> date | None:
    """Parse a YYYY-MM-DD date string. A full ISO timestamp is reduced to its date."""
    if not s:
        return None
    s = str(s).strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(s).date()
    except ValueError as e:
        raise ValidationError(f"invalid {field}: expected YYYY-MM-DD, got {s!r}") from e


def parse_amount(value: Any, field: str) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, bool):
        raise ValidationError(f"invalid {field}: {value!r}")
    try:
        amount = Decimal(str(value))
    except InvalidOperation as e:
        raise ValidationError(f"invalid {field}: {value!r}") from e
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{field} must be a non-negative number")
    return amount


@dataclass(frozen=True)
class Page:
    limit: int
    offset: int


def parse_pagination() -> Page:
    """Read ``page`` (1-based) and ``limit`` from the query string."""
    default_limit = int(current_app.config.get("DEFAULT_PAGE_LIMIT", 10))
    raw_page = clean_str(request.args.get("page")) or "1"
    raw_limit = clean_str(request.args.get("limit")) or str(default_limit)
    if not _is_number(raw_limit) or not 1 <= int(raw_limit) <= MAX_PAGE_LIMIT:
        raise ValidationError(f"invalid limit: {raw_limit!r} (1-{MAX_PAGE_LIMIT})")
    limit = int(raw_limit)
    if not _is_number(raw_page) or int(raw_page) < 1:
        raise ValidationError(f"invalid page: {raw_page!r}")
    offset = (int(raw_page) - 1) * limit
    if offset > MAX_OFFSET:
        raise ValidationError(f"invalid page: {raw_page!r} is out of range")
    return Page(limit=limit, offset=offset)


def _is_number(text: str) -> bool:
    return text.isascii() and text.isdigit()
