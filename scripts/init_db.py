import sys
from pathlib import Path
import os
from datetime import datetime

from werkzeug.security import generate_password_hash
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from contextlib import contextmanager

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.wowbato.identity import ROLE_ADMIN
from app.wowbato.models import Barangay, Base, User


@contextmanager
def _session_scope(database_url: str):
    engine = create_engine(database_url, future=True)
    sm = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False, expire_on_commit=False, future=True)
    s: Session = sm()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()


def seed_only(*, database_url: str | None = None) -> None:
    """
    Seed the first barangay and its administrator in an idempotent way.
    Does NOT overwrite an existing admin user's password.
    """
    admin_email = (os.environ.get("ADMIN_EMAIL") or "admin@wowbato.local").strip().lower()
    admin_password = os.environ.get("ADMIN_PASSWORD") or "change-me"
    barangay_name = (os.environ.get("SEED_BARANGAY") or "Poblacion").strip()
    city = (os.environ.get("SEED_CITY") or "Quezon City").strip()
    region = (os.environ.get("SEED_REGION") or "NCR").strip()

    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///wowbato.db").strip()

    # Direct engine/session so this can run during release without building the Flask app.
    with _session_scope(db_url) as s:
        now = datetime.utcnow()
        barangay = s.query(Barangay).filter(Barangay.name == barangay_name).one_or_none()
        if not barangay:
            barangay = Barangay(name=barangay_name, city=city, region=region, created_at=now, updated_at=now)
            s.add(barangay)
            s.flush()

        admin = s.query(User).filter(User.email == admin_email).one_or_none()
        if not admin:
            admin = User(
                email=admin_email,
                password_hash=generate_password_hash(admin_password),
                first_name="Barangay",
                last_name="Administrator",
                role=ROLE_ADMIN,
                contact="n/a",
                barangay_id=barangay.id,
                created_at=now,
                updated_at=now,
            )
            s.add(admin)
            print(f"Created admin user {admin_email} for barangay {barangay_name!r}", flush=True)
        elif admin.role != ROLE_ADMIN:
            admin.role = ROLE_ADMIN
            admin.updated_at = now
            print(f"Promoted existing user {admin_email} to admin", flush=True)


def main() -> None:
    db_url = (os.environ.get("DATABASE_URL") or "sqlite:///wowbato.db").strip()
    engine = create_engine(db_url, future=True)
    Base.metadata.create_all(bind=engine)
    engine.dispose()
    seed_only(database_url=db_url)
    print("Database initialized.", flush=True)


if __name__ == "__main__":
    main()
