"""
Authenticated identity carried in the signed session cookie.

The cookie holds five keys (``authenticated``, ``user_id``, ``user_role``,
``barangay_id``, ``barangay_name``). Request code never reads them directly:
it receives an ``Identity`` built once per request.
"""
from __future__ import annotations

from dataclasses import dataclass

from flask import current_app, session

ROLE_RESIDENT = "resident"
ROLE_ADMIN = "admin"
ROLES = (ROLE_RESIDENT, ROLE_ADMIN)

SESSION_KEYS = ("authenticated", "user_id", "user_role", "barangay_id", "barangay_name")


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: str
    barangay_id: int
    barangay_name: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def identity_from_session() -> Identity | None:
    if session.get("authenticated") is not True:
        return None
    user_id = session.get("user_id")
    barangay_id = session.get("barangay_id")
    role = session.get("user_role")
    if not isinstance(user_id, int) or not isinstance(barangay_id, int) or not isinstance(role, str):
        return None
    return Identity(
        user_id=user_id,
        role=role,
        barangay_id=barangay_id,
        barangay_name=str(session.get("barangay_name") or ""),
    )


def write_session(identity: Identity) -> None:
    # Full overwrite: logging in again simply replaces the previous identity.
    session.clear()
    session["user_id"] = identity.user_id
    session["user_role"] = identity.role
    session["barangay_id"] = identity.barangay_id
    session["barangay_name"] = identity.barangay_name
    session["authenticated"] = True
    session.permanent = current_app.config.get("SESSION_MAX_AGE", 0) > 0


def clear_session() -> None:
    session.clear()
