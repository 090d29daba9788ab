"""Comment repository."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Select, func, select

from nippo.models.comment import Comment
from nippo.models.daily_report import DailyReport
from nippo.repositories.base import BaseRepository


@dataclass(frozen=True, slots=True)
class CommentOwnership:
    comment_id: int
    report_id: int
    commenter_employee_id: int


class CommentRepository(BaseRepository[Comment]):
    async def get_ownership(self, comment_id: int) -> Optional[CommentOwnership]:
        stmt: Select = select(Comment.id, Comment.report_id, Comment.commenter_id).where(Comment.id == comment_id)
        row = (await self._execute(stmt)).first()
        if row is None:
            return None
        return CommentOwnership(comment_id=row[0], report_id=row[1], commenter_employee_id=row[2])

    async def count_on_reports_of(self, employee_id: int) -> int:
        """Comments left on the employee's own reports."""
        stmt: Select = (
            select(func.count(Comment.id))
            .select_from(Comment)
            .join(DailyReport, DailyReport.id == Comment.report_id)
            .where(DailyReport.employee_id == employee_id)
        )
        return int((await self._execute(stmt)).scalar_one())

    async def get(self, comment_id: int) -> Optional[Comment]:
        return await self._get(Comment, comment_id)

    async def create(self, *, report_id: int, commenter_id: int, content: str) -> Comment:
        return await self._add(
            Comment(report_id=report_id, commenter_id=commenter_id, comment_content=content)
        )

    async def delete(self, comment: Comment) -> None:
        await self._delete(comment)
