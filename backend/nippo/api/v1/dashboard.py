"""Dashboard summary: this week's submissions and comments received.

Figures are scoped the same way as the report list: a manager sees direct
reports, an admin sees everyone, sales see only themselves.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nippo.api.deps import get_db_session, get_optional_actor, get_today
from nippo.repositories.comment_repo import CommentRepository
from nippo.repositories.employee_repo import EmployeeRepository
from nippo.repositories.report_repo import ReportRepository
from nippo.schemas.dashboard import DashboardStatsResponse, MemberReportStatus, WeeklyReportStatus
from nippo.security import policy
from nippo.security.guards import enforce, enforce_actor, enforce_employee_id
from nippo.security.policy import Actor
from nippo.security.roles import Role


router = APIRouter()


def week_bounds(today: date) -> tuple[date, date]:
    """Monday..Sunday of the week containing `today`."""
    monday = today - timedelta(days=today.weekday())
    return monday, monday + timedelta(days=6)


def business_days(start: date, end: date) -> int:
    """Monday-Friday days in [start, end]."""
    days = (end - start).days + 1
    return sum(1 for i in range(max(days, 0)) if (start + timedelta(days=i)).weekday() < 5)


def percentage(submitted: int, total: int) -> int:
    # Rounded half up.
    if total <= 0:
        return 0
    return (submitted * 200 + total) // (2 * total)


def _status(submitted: int, total: int) -> WeeklyReportStatus:
    return WeeklyReportStatus(submitted=submitted, total=total, percentage=percentage(submitted, total))


async def _team_ids(db: Session, actor: Actor, own_id: int) -> Optional[frozenset[int]]:
    """Members whose submissions the actor may see, or None for everyone."""
    subordinates: list[int] = []
    if actor.role is Role.MANAGER:
        subordinates = await EmployeeRepository(db).subordinate_ids(own_id)
    scope = policy.report_list_scope(actor, subordinates)
    enforce(scope.decision, action="dashboard_stats", actor=actor)
    if scope.employee_ids is None:
        return None
    return scope.employee_ids - {own_id}


@router.get("/dashboard/stats", response_model=DashboardStatsResponse)
async def dashboard_stats(
    actor: Optional[Actor] = Depends(get_optional_actor),
    today: date = Depends(get_today),
    db: Session = Depends(get_db_session),
) -> DashboardStatsResponse:
    actor = enforce_actor(policy.require_authenticated(actor), actor, action="dashboard_stats")
    own_id = enforce_employee_id(actor, action="dashboard_stats")

    week_start, week_end = week_bounds(today)
    total = business_days(week_start, week_end)
    reports = ReportRepository(db)

    own_counts = await reports.count_by_employee(
        employee_ids=frozenset({own_id}), date_from=week_start, date_to=week_end
    )
    response = DashboardStatsResponse(
        week_start=week_start,
        week_end=week_end,
        weekly_report_status=_status(own_counts.get(own_id, 0), total),
        unread_comments_count=await CommentRepository(db).count_on_reports_of(own_id),
    )

    if not policy.can_view_team_status(actor):
        return response

    team_ids = await _team_ids(db, actor, own_id)
    members = await EmployeeRepository(db).options(team_ids)
    counts = await reports.count_by_employee(employee_ids=team_ids, date_from=week_start, date_to=week_end)
    response.subordinates_report_status = [
        MemberReportStatus(
            employee_id=employee_id,
            employee_name=name,
            **_status(counts.get(employee_id, 0), total).model_dump(),
        )
        for employee_id, name in members
        if employee_id != own_id
    ]
    return response
