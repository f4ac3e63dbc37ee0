"""Budget model."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Index, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finledger.models.base import Base, TimestampMixin


class Budget(Base, TimestampMixin):
    __tablename__ = "budgets"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    budgeted_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    spent_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    # budgeted_amount - spent_amount; negative once overspent
    remaining: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    alert_triggered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    # Always the first day of the month
    month: Mapped[date] = mapped_column(Date, nullable=False)

    # Relationships
    user = relationship("User", back_populates="budgets")
    category = relationship("Category", lazy="selectin")

    # Slot uniqueness (user, category, month) is checked by the service before writes
    __table_args__ = (
        Index("idx_budgets_user_category_month", "user_id", "category_id", "month"),
    )
