"""Daily report repository.

Ownership facts for the authorization policy are loaded with dedicated,
minimal queries (`get_ownership`) right before each check.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional, Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.orm import selectinload

from nippo.models.comment import Comment
from nippo.models.daily_report import DailyReport, VisitRecord
from nippo.models.employee import Employee
from nippo.repositories.base import BaseRepository


@dataclass(frozen=True, slots=True)
class ReportOwnership:
    report_id: int
    owner_employee_id: int
    owner_manager_id: Optional[int]


@dataclass(frozen=True, slots=True)
class ReportSummaryDTO:
    report_id: int
    employee_id: int
    employee_name: str
    report_date: date
    visit_count: int
    comment_count: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class VisitInput:
    customer_id: int
    visit_time: time
    visit_content: str
    visit_id: Optional[int] = None


class ReportRepository(BaseRepository[DailyReport]):
    async def get_ownership(self, report_id: int) -> Optional[ReportOwnership]:
        """Owner and owner's manager, read fresh from the employee directory."""
        stmt: Select = (
            select(DailyReport.id, DailyReport.employee_id, Employee.manager_id)
            .join(Employee, Employee.id == DailyReport.employee_id)
            .where(DailyReport.id == report_id)
        )
        row = (await self._execute(stmt)).first()
        if row is None:
            return None
        return ReportOwnership(report_id=row[0], owner_employee_id=row[1], owner_manager_id=row[2])

    async def get_detail(self, report_id: int) -> Optional[DailyReport]:
        stmt: Select = (
            select(DailyReport)
            .where(DailyReport.id == report_id)
            .options(
                selectinload(DailyReport.employee),
                selectinload(DailyReport.visit_records).selectinload(VisitRecord.customer),
                selectinload(DailyReport.comments).selectinload(Comment.commenter),
            )
        )
        return (await self._execute(stmt)).scalars().first()

    async def find_by_employee_and_date(self, employee_id: int, report_date: date) -> Optional[DailyReport]:
        stmt: Select = select(DailyReport).where(
            DailyReport.employee_id == employee_id,
            DailyReport.report_date == report_date,
        )
        return (await self._execute(stmt)).scalars().first()

    async def list_reports(
        self,
        *,
        employee_ids: Optional[frozenset[int]],
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[Sequence[ReportSummaryDTO], int]:
        """Page of report summaries, newest first, plus the total count.

        employee_ids=None means no owner restriction.
        """
        conditions = []
        if employee_ids is not None:
            conditions.append(DailyReport.employee_id.in_(sorted(employee_ids)))
        if date_from is not None:
            conditions.append(DailyReport.report_date >= date_from)
        if date_to is not None:
            conditions.append(DailyReport.report_date <= date_to)

        count_stmt: Select = select(func.count(DailyReport.id)).where(*conditions)
        total = int((await self._execute(count_stmt)).scalar_one())

        visit_counts = (
            select(VisitRecord.report_id, func.count(VisitRecord.id).label("n"))
            .group_by(VisitRecord.report_id)
            .subquery()
        )
        comment_counts = (
            select(Comment.report_id, func.count(Comment.id).label("n"))
            .group_by(Comment.report_id)
            .subquery()
        )
        stmt: Select = (
            select(
                DailyReport,
                Employee.name,
                func.coalesce(visit_counts.c.n, 0),
                func.coalesce(comment_counts.c.n, 0),
            )
            .join(Employee, Employee.id == DailyReport.employee_id)
            .outerjoin(visit_counts, visit_counts.c.report_id == DailyReport.id)
            .outerjoin(comment_counts, comment_counts.c.report_id == DailyReport.id)
            .where(*conditions)
            .order_by(DailyReport.report_date.desc(), DailyReport.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        rows = (await self._execute(stmt)).all()
        return [
            ReportSummaryDTO(
                report_id=r.id,
                employee_id=r.employee_id,
                employee_name=name,
                report_date=r.report_date,
                visit_count=int(visits),
                comment_count=int(comments),
                created_at=r.created_at,
                updated_at=r.updated_at,
            )
            for r, name, visits, comments in rows
        ], total

    async def count_by_employee(
        self,
        *,
        employee_ids: Optional[frozenset[int]],
        date_from: date,
        date_to: date,
    ) -> dict[int, int]:
        """Report counts per owner within [date_from, date_to]; owners without reports are absent."""
        stmt: Select = (
            select(DailyReport.employee_id, func.count(DailyReport.id))
            .where(DailyReport.report_date >= date_from, DailyReport.report_date <= date_to)
            .group_by(DailyReport.employee_id)
        )
        if employee_ids is not None:
            stmt = stmt.where(DailyReport.employee_id.in_(sorted(employee_ids)))
        return {int(owner): int(n) for owner, n in (await self._execute(stmt)).all()}

    async def create(
        self,
        *,
        employee_id: int,
        report_date: date,
        problem: Optional[str],
        plan: Optional[str],
        visits: Sequence[VisitInput],
    ) -> DailyReport:
        report = DailyReport(
            employee_id=employee_id,
            report_date=report_date,
            problem=problem or None,
            plan=plan or None,
        )
        report.visit_records = [
            VisitRecord(customer_id=v.customer_id, visit_time=v.visit_time, visit_content=v.visit_content)
            for v in visits
        ]
        return await self._add(report)

    async def update(
        self,
        report: DailyReport,
        *,
        report_date: date,
        problem: Optional[str],
        plan: Optional[str],
        visits: Sequence[VisitInput],
    ) -> DailyReport:
        """Replace the visit list: ids kept are updated, new ones created, the rest removed."""
        existing = {v.id: v for v in report.visit_records}
        kept: list[VisitRecord] = []
        for v in visits:
            record = existing.get(v.visit_id) if v.visit_id is not None else None
            if record is None:
                record = VisitRecord(customer_id=v.customer_id, visit_time=v.visit_time, visit_content=v.visit_content)
            else:
                record.customer_id = v.customer_id
                record.visit_time = v.visit_time
                record.visit_content = v.visit_content
            kept.append(record)

        report.visit_records = kept
        report.report_date = report_date
        report.problem = problem or None
        report.plan = plan or None
        self._session.flush()
        return report

    async def delete(self, report: DailyReport) -> None:
        await self._delete(report)
