from datetime import date, datetime
from decimal import Decimal

import pytest
from werkzeug.security import generate_password_hash

from app.wowbato import create_app
from app.wowbato.db import session_scope
from app.wowbato.models import Barangay, User
from app.wowbato.modules.budget_categories.models import BudgetCategory
from app.wowbato.modules.budget_items.models import BudgetItem
from app.wowbato.modules.projects.models import Project


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    for k in ("AUTO_CREATE_SCHEMA", "LOGIN_RATE_LIMIT", "DEFAULT_PAGE_LIMIT", "SESSION_MAX_AGE"):
        monkeypatch.delenv(k, raising=False)
    return create_app()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def seeded(app):
    """
    Two barangays. Each has one admin and one resident; the first also has a
    category, a project and a few budget items.
    """
    now = datetime.utcnow()
    ids: dict[str, int] = {}
    with session_scope(app) as s:
        b1 = Barangay(name="San Roque", city="Marikina", region="NCR")
        b2 = Barangay(name="Malanday", city="Marikina", region="NCR")
        s.add_all([b1, b2])
        s.flush()

        def _user(email: str, role: str, barangay: Barangay) -> User:
            u = User(
                email=email,
                password_hash=generate_password_hash("pw"),
                first_name=email.split("@")[0].title(),
                last_name="Dela Cruz",
                role=role,
                contact="09171234567",
                barangay_id=barangay.id,
            )
            s.add(u)
            return u

        admin = _user("admin@example.com", "admin", b1)
        resident = _user("resident@example.com", "resident", b1)
        other_admin = _user("admin2@example.com", "admin", b2)
        other_resident = _user("resident2@example.com", "resident", b2)

        cat = BudgetCategory(name="Infrastructure", description="Roads and drainage", barangay_id=b1.id)
        s.add(cat)
        s.flush()
        proj = Project(
            name="Drainage Upgrade",
            description="Main street canal",
            start_date=date(2026, 1, 10),
            end_date=date(2026, 3, 10),
            status="planned",
            barangay_id=b1.id,
            category_id=cat.id,
        )
        s.add(proj)
        s.flush()
        for i in range(7):
            s.add(
                BudgetItem(
                    name=f"Item {i}",
                    amount_allocated=Decimal("1000.00") * (i + 1),
                    amount_spent=Decimal("0"),
                    status="approved" if i % 2 == 0 else "pending",
                    approval_date=now if i % 2 == 0 else None,
                    project_id=proj.id,
                )
            )
        s.flush()
        ids.update(
            barangay=b1.id,
            other_barangay=b2.id,
            admin=admin.id,
            resident=resident.id,
            other_admin=other_admin.id,
            other_resident=other_resident.id,
            category=cat.id,
            project=proj.id,
        )
    return ids

