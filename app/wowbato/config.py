import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str

    session_cookie_name: str
    session_max_age: int
    cors_origins: tuple[str, ...]
    auto_create_schema: bool
    default_page_limit: int
    login_rate_limit: int
    log_level: str


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getint(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from e


def load_settings() -> Settings:
    origins = _getenv("CORS_ORIGINS", "http://localhost:3000")
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///wowbato.db"),
        session_cookie_name=_getenv("SESSION_COOKIE_NAME", "mysession"),
        session_max_age=_getint("SESSION_MAX_AGE", 0),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        auto_create_schema=_getenv("AUTO_CREATE_SCHEMA", "1") == "1",
        default_page_limit=_getint("DEFAULT_PAGE_LIMIT", 10),
        login_rate_limit=_getint("LOGIN_RATE_LIMIT", 5),
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
    )


def load_config() -> dict:
    s = load_settings()
    is_production = s.env in ("prod", "production")
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "CORS_ORIGINS": list(s.cors_origins),
        "AUTO_CREATE_SCHEMA": s.auto_create_schema,
        "DEFAULT_PAGE_LIMIT": s.default_page_limit,
        "LOGIN_RATE_LIMIT": s.login_rate_limit,
        "LOG_LEVEL": s.log_level,
        "SESSION_MAX_AGE": s.session_max_age,
        # security defaults
        "SESSION_COOKIE_NAME": s.session_cookie_name,
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": is_production,  # Require HTTPS in production
    }
