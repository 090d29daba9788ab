"""Schemas for the dashboard summary."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel


class WeeklyReportStatus(BaseModel):
    submitted: int
    total: int
    percentage: int


class MemberReportStatus(WeeklyReportStatus):
    employee_id: int
    employee_name: str


class DashboardStatsResponse(BaseModel):
    week_start: date
    week_end: date
    weekly_report_status: WeeklyReportStatus
    unread_comments_count: int
    # None for sales; managers get direct reports, admins everyone but themselves.
    subordinates_report_status: Optional[list[MemberReportStatus]] = None
