from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import g

from app.wowbato.errors import AuthenticationError, PermissionDenied
from app.wowbato.identity import Identity


def current_identity() -> Identity | None:
    return getattr(g, "identity", None)


def require_auth(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Reject anonymous requests with a 401; hand the identity to the view as ``identity=``."""

    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        identity = current_identity()
        if identity is None:
            raise AuthenticationError("Unauthorized: Access Denied")
        return fn(*args, identity=identity, **kwargs)

    return wrapped


def require_role(role: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            identity = current_identity()
            # Unauthenticated -> 401, authenticated but wrong role -> 403
            if identity is None:
                raise AuthenticationError("Unauthorized: Access Denied")
            if identity.role != role:
                raise PermissionDenied("Forbidden: insufficient role")
            return fn(*args, identity=identity, **kwargs)

        return wrapped

    return decorator
