from __future__ import annotations

import uuid
from datetime import datetime, timedelta

from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from app.wowbato.audit import record_event
from app.wowbato.db import db_session
from app.wowbato.errors import AuthenticationError, RateLimited, RecordNotFound, ValidationError
from app.wowbato.identity import ROLE_RESIDENT, ROLES, Identity, clear_session, identity_from_session, write_session
from app.wowbato.ids import EntityId
from app.wowbato.models import Barangay, User
from app.wowbato.rbac import current_identity, require_auth
from app.wowbato.utils import clean_str, json_body, ok

bp = Blueprint("user", __name__)
_LOGIN_RATE_WINDOW = 300  # seconds
INVALID_CREDENTIALS = "invalid email or password"


# ---------- Service ----------
def validate_registration(payload: dict) -> list[str]:
    """Validate a registration payload. Returns list of errors."""
    errors = []
    if not clean_str(payload.get("email")):
        errors.append("email cannot be empty")
    password = payload.get("password")
    if not password:
        errors.append("password cannot be empty")
    elif not isinstance(password, str):
        errors.append("password must be a string")
    if not clean_str(payload.get("firstName")):
        errors.append("first name cannot be empty")
    if not clean_str(payload.get("lastName")):
        errors.append("last name cannot be empty")
    if not clean_str(payload.get("contact")):
        errors.append("contact information cannot be empty")
    role = clean_str(payload.get("role")) or ROLE_RESIDENT
    if role not in ROLES:
        errors.append(f"invalid user role. Must be one of: {', '.join(ROLES)}")
    return errors


def register_user(s: Session, payload: dict) -> User:
    errors = validate_registration(payload)
    if errors:
        raise ValidationError(f"validation failed: {errors[0]}")

    barangay_id = EntityId.parse(payload.get("barangay"), field="barangay ID")
    if s.get(Barangay, barangay_id) is None:
        raise ValidationError(f"invalid barangay ID: {barangay_id}")

    email = clean_str(payload.get("email")).lower()
    if s.query(User.id).filter(User.email == email).first() is not None:
        raise ValidationError("email is already registered")

    now = datetime.utcnow()
    user = User(
        email=email,
        password_hash=generate_password_hash(payload["password"]),
        first_name=clean_str(payload.get("firstName")),
        last_name=clean_str(payload.get("lastName")),
        role=clean_str(payload.get("role")) or ROLE_RESIDENT,
        contact=clean_str(payload.get("contact")),
        barangay_id=barangay_id,
        created_at=now,
        updated_at=now,
    )
    s.add(user)
    s.flush()
    record_event(s, actor=None, action="user.register", entity_type="User", entity_id=user.id, metadata={"role": user.role})
    return user


def authenticate(s: Session, email: str, password: str) -> Identity:
    """Check credentials and build the identity to store in the session."""
    email = clean_str(email).lower()
    if not email:
        raise ValidationError("email cannot be empty")
    if not password:
        raise ValidationError("password cannot be empty")
    if not isinstance(password, str):
        raise ValidationError("password must be a string")

    user = s.query(User).filter(User.email == email).one_or_none()
    if user is None or not check_password_hash(user.password_hash, password):
        raise AuthenticationError(INVALID_CREDENTIALS)
    return Identity(
        user_id=user.id,
        role=user.role,
        barangay_id=user.barangay_id,
        barangay_name=user.barangay.name,
    )


def get_profile(s: Session, user_id: int) -> dict:
    user = s.get(User, user_id)
    if user is None:
        raise RecordNotFound(f"user not found: user ID {user_id}")
    return user.profile()


# ---------- Session gate ----------
def load_identity() -> None:
    """
    Resolves g.identity from the signed session cookie.
    Also assigns a simple per-request request_id (for audit/log correlation).
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    g.identity = identity_from_session()


def _login_attempts() -> dict[str, list[datetime]]:
    return current_app.extensions.setdefault("login_attempts", {})


def _check_rate_limit(ip: str) -> bool:
    attempts = _login_attempts()
    cutoff = datetime.utcnow() - timedelta(seconds=_LOGIN_RATE_WINDOW)
    for addr in list(attempts):
        recent = [t for t in attempts[addr] if t > cutoff]
        if recent:
            attempts[addr] = recent
        else:
            del attempts[addr]
    return len(attempts.get(ip, ())) >= int(current_app.config.get("LOGIN_RATE_LIMIT", 5))


def _record_failed_attempt(ip: str) -> None:
    _login_attempts().setdefault(ip, []).append(datetime.utcnow())


# ---------- Routes ----------
@bp.post("/register")
def register():
    s = db_session()
    user = register_user(s, json_body())
    s.commit()
    current_app.logger.info("Registered user id=%s barangay_id=%s", user.id, user.barangay_id)
    return ok("User registered successfully")


@bp.post("/login")
def login():
    payload = json_body()
    ip = request.remote_addr or "unknown"
    if _check_rate_limit(ip):
        raise RateLimited("Too many login attempts. Please wait 5 minutes.")

    s = db_session()
    email = clean_str(payload.get("email")).lower()
    try:
        identity = authenticate(s, email, payload.get("password") or "")
    except AuthenticationError:
        _record_failed_attempt(ip)
        record_event(
            s,
            actor=None,
            action="auth.login_failed",
            entity_type="User",
            entity_id=email,
            reason="Invalid credentials",
        )
        s.commit()
        current_app.logger.info("Failed login (email=%s request_id=%s)", email, g.request_id)
        raise

    write_session(identity)
    _login_attempts().pop(ip, None)
    record_event(s, actor=identity, action="auth.login", entity_type="User", entity_id=identity.user_id)
    s.commit()
    return ok("User logged in successfully", sessionStatus=True, role=identity.role)


@bp.post("/logout")
def logout():
    identity = current_identity()
    if identity is not None:
        s = db_session()
        record_event(s, actor=identity, action="auth.logout", entity_type="User", entity_id=identity.user_id)
        s.commit()
    clear_session()
    return ok("User logged out successfully")


@bp.get("/checkAuth")
@require_auth
def check_auth(identity: Identity):
    return jsonify(
        {
            "sessionStatus": True,
            "role": identity.role,
            "user_id": identity.user_id,
            "barangay_id": identity.barangay_id,
            "barangay_name": identity.barangay_name,
        }
    )


@bp.get("/profile")
@require_auth
def profile(identity: Identity):
    return ok("User profile fetched successfully", get_profile(db_session(), identity.user_id))
