"""Affordance flags for the UI.

Advisory only: every mutation endpoint re-runs the same policy check.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class MeResponse(BaseModel):
    sub: str
    role: str
    employee_id: Optional[int] = None
    manager_id: Optional[int] = None
    can_comment: bool
    can_create_report: bool
    can_access_employee_management: bool
    can_view_team_status: bool


class CommentAffordance(BaseModel):
    comment_id: int
    can_delete: bool


class ReportPermissionsResponse(BaseModel):
    report_id: int
    can_view: bool
    can_edit: bool
    can_delete: bool
    can_comment: bool
    comments: list[CommentAffordance] = Field(default_factory=list)
