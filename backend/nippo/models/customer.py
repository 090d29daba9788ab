"""Customer master (shared by all authenticated users)."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nippo.core.base import Base, CreatedAtMixin, IntPrimaryKeyMixin, UpdatedAtMixin


class Customer(Base, IntPrimaryKeyMixin, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "customers"

    customer_name: Mapped[str] = mapped_column(String(100), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    assigned_employee_id: Mapped[int] = mapped_column(
        ForeignKey("employees.id"), nullable=False, index=True
    )

    assigned_employee = relationship("Employee")
