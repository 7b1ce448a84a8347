from __future__ import annotations

from werkzeug.exceptions import BadRequest
from werkzeug.routing import BaseConverter

from app.wowbato.errors import ValidationError

MAX_ID = 2**31 - 1


class EntityId(int):
    """Positive integer primary key, validated once where it enters the app."""

    @classmethod
    def parse(cls, raw: object, field: str = "id") -> "EntityId":
        if isinstance(raw, bool):
            raise ValidationError(f"invalid {field}: {raw!r}")
        if isinstance(raw, int):
            value = raw
        else:
            text = str(raw if raw is not None else "").strip()
            if not (text.isascii() and text.isdigit()):
                raise ValidationError(f"invalid {field}: {text!r}")
            value = int(text)
        if not 0 < value <= MAX_ID:
            raise ValidationError(f"invalid {field}: {value}")
        return cls(value)


class InvalidPathId(BadRequest):
    pass


class EntityIdConverter(BaseConverter):
    """URL converter ``<id:name>``; malformed ids become a 400, not a 404."""

    regex = r"[^/]+"

    def to_python(self, value: str) -> EntityId:
        try:
            return EntityId.parse(value)
        except ValidationError as e:
            raise InvalidPathId(e.message) from e

    def to_url(self, value: object) -> str:
        return str(int(value))  # type: ignore[call-overload]
