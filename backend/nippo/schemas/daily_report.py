"""Schemas for daily report endpoints."""

from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, Field, field_validator


_HHMM = re.compile(r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$")


class VisitRecordIn(BaseModel):
    visit_id: Optional[int] = None
    customer_id: int = Field(gt=0)
    visit_time: str
    visit_content: str

    @field_validator("visit_time")
    @classmethod
    def _hhmm(cls, v: str) -> str:
        if not _HHMM.match(v):
            raise ValueError("訪問時刻はHH:MM形式で入力してください")
        return v

    @field_validator("visit_content")
    @classmethod
    def _content(cls, v: str) -> str:
        if not v:
            raise ValueError("訪問内容を入力してください")
        if len(v) > 500:
            raise ValueError("訪問内容は500文字以内で入力してください")
        return v

    def parsed_time(self) -> time:
        return time.fromisoformat(self.visit_time)


class DailyReportIn(BaseModel):
    """Body for both create and update; updates match visits by visit_id."""

    report_date: date
    problem: Optional[str] = None
    plan: Optional[str] = None
    visits: list[VisitRecordIn]

    @field_validator("problem")
    @classmethod
    def _problem(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > 1000:
            raise ValueError("課題・相談は1000文字以内で入力してください")
        return v

    @field_validator("plan")
    @classmethod
    def _plan(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > 1000:
            raise ValueError("明日の予定は1000文字以内で入力してください")
        return v

    @field_validator("visits")
    @classmethod
    def _visits(cls, v: list[VisitRecordIn]) -> list[VisitRecordIn]:
        if not v:
            raise ValueError("訪問記録は最低1件必要です")
        return v


class VisitRecordResponse(BaseModel):
    visit_id: int
    customer_id: int
    customer_name: str
    visit_time: str
    visit_content: str
    created_at: datetime


class CommentResponse(BaseModel):
    comment_id: int
    report_id: int
    commenter_id: int
    commenter_name: str
    comment_content: str
    created_at: datetime


class DailyReportDetailResponse(BaseModel):
    report_id: int
    employee_id: int
    employee_name: str
    report_date: date
    problem: Optional[str] = None
    plan: Optional[str] = None
    visits: list[VisitRecordResponse] = Field(default_factory=list)
    comments: list[CommentResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class DailyReportSummaryResponse(BaseModel):
    report_id: int
    employee_id: int
    employee_name: str
    report_date: date
    visit_count: int
    comment_count: int
    created_at: datetime
    updated_at: datetime


class PageMeta(BaseModel):
    current_page: int
    total_pages: int
    total_count: int
    limit: int


class DailyReportListResponse(BaseModel):
    data: list[DailyReportSummaryResponse]
    meta: PageMeta
