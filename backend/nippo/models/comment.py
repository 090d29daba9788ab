"""Manager/admin comments on daily reports. The commenter is fixed at creation."""

from __future__ import annotations

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nippo.core.base import Base, CreatedAtMixin, IntPrimaryKeyMixin


class Comment(Base, IntPrimaryKeyMixin, CreatedAtMixin):
    __tablename__ = "comments"

    report_id: Mapped[int] = mapped_column(
        ForeignKey("daily_reports.id", ondelete="CASCADE"), nullable=False, index=True
    )
    commenter_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), nullable=False, index=True)
    comment_content: Mapped[str] = mapped_column(String(500), nullable=False)

    report = relationship("DailyReport", back_populates="comments")
    commenter = relationship("Employee")
