from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.wowbato.models import Base


class BudgetItem(Base):
    __tablename__ = "budget_items"
    __table_args__ = (
        Index("idx_budget_items_project_id", "project_id"),
        Index("idx_budget_items_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount_allocated: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    amount_spent: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending")  # pending, approved, rejected
    approval_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "amount_allocated": float(self.amount_allocated or 0),
            "amount_spent": float(self.amount_spent or 0),
            "description": self.description or "",
            "status": self.status,
            "approval_date": self.approval_date.isoformat() if self.approval_date else None,
            "project_ID": self.project_id,
        }
