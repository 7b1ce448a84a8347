"""initial schema: barangays, users, budgets, projects, feedback, audit

Revision ID: 4e1a7c9b2d30
Revises:
Create Date: 2026-10-19 09:12:44.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '4e1a7c9b2d30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=False), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=False), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    insp = inspect(bind)
    existing_tables = set(insp.get_table_names())

    # AUTO_CREATE_SCHEMA may already have built some tables on a dev database.
    if "barangays" not in existing_tables:
        op.create_table(
            "barangays",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False, unique=True),
            sa.Column("city", sa.String(length=255), nullable=False),
            sa.Column("region", sa.String(length=255), nullable=False),
            *_timestamps(),
        )

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("email", sa.String(length=320), nullable=False, unique=True),
            sa.Column("password_hash", sa.String(length=255), nullable=False),
            sa.Column("first_name", sa.String(length=128), nullable=False),
            sa.Column("last_name", sa.String(length=128), nullable=False),
            sa.Column("role", sa.String(length=32), nullable=False),
            sa.Column("contact", sa.String(length=64), nullable=False),
            sa.Column("barangay_id", sa.Integer(), sa.ForeignKey("barangays.id", ondelete="CASCADE"), nullable=False),
            *_timestamps(),
        )
        op.create_index("idx_users_barangay_id", "users", ["barangay_id"])

    if "budget_categories" not in existing_tables:
        op.create_table(
            "budget_categories",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("barangay_id", sa.Integer(), sa.ForeignKey("barangays.id", ondelete="CASCADE"), nullable=False),
            *_timestamps(),
        )
        op.create_index("idx_budget_categories_barangay_id", "budget_categories", ["barangay_id"])

    if "projects" not in existing_tables:
        op.create_table(
            "projects",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("start_date", sa.Date(), nullable=False),
            sa.Column("end_date", sa.Date(), nullable=False),
            sa.Column("status", sa.String(length=32), nullable=False),
            sa.Column("barangay_id", sa.Integer(), sa.ForeignKey("barangays.id", ondelete="CASCADE"), nullable=False),
            sa.Column("category_id", sa.Integer(), sa.ForeignKey("budget_categories.id", ondelete="CASCADE"), nullable=False),
            *_timestamps(),
        )
        op.create_index("idx_projects_barangay_category", "projects", ["barangay_id", "category_id"])
        op.create_index("idx_projects_status", "projects", ["status"])

    if "budget_items" not in existing_tables:
        op.create_table(
            "budget_items",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("amount_allocated", sa.Numeric(14, 2), nullable=False),
            sa.Column("amount_spent", sa.Numeric(14, 2), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("status", sa.String(length=32), nullable=False),
            sa.Column("approval_date", sa.DateTime(timezone=False), nullable=True),
            sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
            *_timestamps(),
        )
        op.create_index("idx_budget_items_project_id", "budget_items", ["project_id"])
        op.create_index("idx_budget_items_status", "budget_items", ["status"])

    if "feedbacks" not in existing_tables:
        op.create_table(
            "feedbacks",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("role", sa.String(length=32), nullable=False),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
            sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
            *_timestamps(),
        )
        op.create_index("idx_feedbacks_project_id", "feedbacks", ["project_id"])

    if "feedback_replies" not in existing_tables:
        op.create_table(
            "feedback_replies",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("feedback_id", sa.Integer(), sa.ForeignKey("feedbacks.id", ondelete="CASCADE"), nullable=False),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
            *_timestamps(),
        )
        op.create_index("idx_feedback_replies_feedback_id", "feedback_replies", ["feedback_id"])

    if "audit_events" not in existing_tables:
        op.create_table(
            "audit_events",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=False), nullable=False),
            sa.Column("request_id", sa.String(length=64), nullable=True),
            sa.Column("actor_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("actor_role", sa.String(length=32), nullable=True),
            sa.Column("barangay_id", sa.Integer(), nullable=True),
            sa.Column("action", sa.String(length=128), nullable=False),
            sa.Column("entity_type", sa.String(length=128), nullable=True),
            sa.Column("entity_id", sa.String(length=128), nullable=True),
            sa.Column("reason", sa.String(length=512), nullable=True),
            sa.Column("metadata_json", sa.Text(), nullable=True),
            sa.Column("client_ip", sa.String(length=64), nullable=True),
        )


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        "audit_events",
        "feedback_replies",
        "feedbacks",
        "budget_items",
        "projects",
        "budget_categories",
        "users",
        "barangays",
    ):
        op.drop_table(table)
