"""Daily reports and their visit records.

Ownership (`employee_id`) is fixed at creation and never reassigned.
One report per employee per day.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    String,
    Text,
    Time,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nippo.core.base import Base, CreatedAtMixin, IntPrimaryKeyMixin, UpdatedAtMixin


class DailyReport(Base, IntPrimaryKeyMixin, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "daily_reports"
    __table_args__ = (
        UniqueConstraint("employee_id", "report_date", name="uq_daily_reports_employee_report_date"),
    )

    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), nullable=False, index=True)
    report_date: Mapped[date] = mapped_column(Date, nullable=False)
    problem: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    plan: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    employee = relationship("Employee")
    visit_records = relationship(
        "VisitRecord",
        back_populates="report",
        cascade="all, delete-orphan",
        order_by="VisitRecord.visit_time",
    )
    comments = relationship(
        "Comment",
        back_populates="report",
        cascade="all, delete-orphan",
        order_by="Comment.id",
    )


class VisitRecord(Base, IntPrimaryKeyMixin):
    __tablename__ = "visit_records"

    report_id: Mapped[int] = mapped_column(
        ForeignKey("daily_reports.id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"), nullable=False, index=True)
    visit_time: Mapped[time] = mapped_column(Time, nullable=False)
    visit_content: Mapped[str] = mapped_column(String(500), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    report = relationship("DailyReport", back_populates="visit_records")
    customer = relationship("Customer")
