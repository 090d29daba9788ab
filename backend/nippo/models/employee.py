"""Employee directory.

`manager_id` is the single hierarchy edge the authorization policy reads
(one level only). Cycles are not prevented here.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nippo.core.base import Base, CreatedAtMixin, IntPrimaryKeyMixin, UpdatedAtMixin


class Employee(Base, IntPrimaryKeyMixin, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "employees"

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    department: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[str] = mapped_column(String(100), nullable=False)

    manager_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("employees.id"), nullable=True, index=True
    )

    manager = relationship("Employee", remote_side="Employee.id", back_populates="subordinates")
    subordinates = relationship("Employee", back_populates="manager")
