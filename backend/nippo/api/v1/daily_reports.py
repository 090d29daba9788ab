"""Daily report endpoints.

Guard order for every handler: authenticate, then load ownership facts
(404 when missing), then ask the policy, then validate the body.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.orm import Session

from nippo.api.deps import get_db_session, get_optional_actor, parse_body
from nippo.core.errors import ApiError, ErrorCode, validation_error
from nippo.models.daily_report import DailyReport
from nippo.repositories.comment_repo import CommentRepository
from nippo.repositories.customer_repo import CustomerRepository
from nippo.repositories.employee_repo import EmployeeRepository
from nippo.repositories.report_repo import ReportRepository, VisitInput
from nippo.schemas.comment import CommentIn
from nippo.schemas.daily_report import (
    CommentResponse,
    DailyReportDetailResponse,
    DailyReportIn,
    DailyReportListResponse,
    DailyReportSummaryResponse,
    PageMeta,
    VisitRecordResponse,
)
from nippo.schemas.permissions import CommentAffordance, ReportPermissionsResponse
from nippo.security import policy
from nippo.security.guards import enforce, enforce_actor, enforce_employee_id
from nippo.security.policy import Actor
from nippo.security.roles import Role


router = APIRouter()

MAX_PAGE_SIZE = 100
MSG_REPORT_NOT_FOUND = "日報が見つかりません"
MSG_REPORT_EXISTS = "指定日の日報は既に作成されています"
MSG_UNKNOWN_CUSTOMER = "存在しない顧客が含まれています"


def to_detail_response(report: DailyReport) -> DailyReportDetailResponse:
    return DailyReportDetailResponse(
        report_id=report.id,
        employee_id=report.employee_id,
        employee_name=report.employee.name,
        report_date=report.report_date,
        problem=report.problem,
        plan=report.plan,
        visits=[
            VisitRecordResponse(
                visit_id=v.id,
                customer_id=v.customer_id,
                customer_name=v.customer.customer_name,
                visit_time=v.visit_time.strftime("%H:%M"),
                visit_content=v.visit_content,
                created_at=v.created_at,
            )
            for v in report.visit_records
        ],
        comments=[
            CommentResponse(
                comment_id=c.id,
                report_id=c.report_id,
                commenter_id=c.commenter_id,
                commenter_name=c.commenter.name,
                comment_content=c.comment_content,
                created_at=c.created_at,
            )
            for c in report.comments
        ],
        created_at=report.created_at,
        updated_at=report.updated_at,
    )


def _report_not_found() -> ApiError:
    return ApiError(ErrorCode.REPORT_NOT_FOUND, MSG_REPORT_NOT_FOUND)


async def _check_customers(db: Session, payload: DailyReportIn) -> None:
    missing = await CustomerRepository(db).missing_ids(v.customer_id for v in payload.visits)
    if missing:
        raise validation_error("visits", MSG_UNKNOWN_CUSTOMER)


def _visit_inputs(payload: DailyReportIn) -> list[VisitInput]:
    return [
        VisitInput(
            customer_id=v.customer_id,
            visit_time=v.parsed_time(),
            visit_content=v.visit_content,
            visit_id=v.visit_id,
        )
        for v in payload.visits
    ]


async def _reload(db: Session, report_id: int) -> DailyReport:
    db.expire_all()
    report = await ReportRepository(db).get_detail(report_id)
    if report is None:
        raise _report_not_found()
    return report


@router.get("/daily-reports", response_model=DailyReportListResponse)
async def list_daily_reports(
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    employee_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    actor: Optional[Actor] = Depends(get_optional_actor),
    db: Session = Depends(get_db_session),
) -> DailyReportListResponse:
    """Reports the actor may view, newest first."""
    actor = enforce_actor(policy.require_authenticated(actor), actor, action="list_reports")

    subordinates: list[int] = []
    if actor.role is Role.MANAGER and actor.employee_id is not None:
        subordinates = await EmployeeRepository(db).subordinate_ids(actor.employee_id)

    scope = policy.report_list_scope(actor, subordinates, employee_id)
    enforce(scope.decision, action="list_reports", actor=actor)

    limit = min(limit, MAX_PAGE_SIZE)
    rows, total = await ReportRepository(db).list_reports(
        employee_ids=scope.employee_ids,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
    )
    return DailyReportListResponse(
        data=[
            DailyReportSummaryResponse(
                report_id=r.report_id,
                employee_id=r.employee_id,
                employee_name=r.employee_name,
                report_date=r.report_date,
                visit_count=r.visit_count,
                comment_count=r.comment_count,
                created_at=r.created_at,
                updated_at=r.updated_at,
            )
            for r in rows
        ],
        meta=PageMeta(
            current_page=page,
            total_pages=math.ceil(total / limit),
            total_count=total,
            limit=limit,
        ),
    )


@router.post(
    "/daily-reports",
    response_model=DailyReportDetailResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_daily_report(
    body: Any = Body(...),
    actor: Optional[Actor] = Depends(get_optional_actor),
    db: Session = Depends(get_db_session),
) -> DailyReportDetailResponse:
    """Create the actor's own report for a date (one per day)."""
    enforce(policy.can_create_report(actor), action="create_report", actor=actor)
    author_id = enforce_employee_id(actor, action="create_report")

    payload = parse_body(DailyReportIn, body)

    repo = ReportRepository(db)
    if await repo.find_by_employee_and_date(author_id, payload.report_date) is not None:
        raise ApiError(ErrorCode.REPORT_ALREADY_EXISTS, MSG_REPORT_EXISTS)
    await _check_customers(db, payload)

    report = await repo.create(
        employee_id=author_id,
        report_date=payload.report_date,
        problem=payload.problem,
        plan=payload.plan,
        visits=_visit_inputs(payload),
    )
    db.commit()
    return to_detail_response(await _reload(db, report.id))


@router.get("/daily-reports/{report_id}", response_model=DailyReportDetailResponse)
async def get_daily_report(
    report_id: int,
    actor: Optional[Actor] = Depends(get_optional_actor),
    db: Session = Depends(get_db_session),
) -> DailyReportDetailResponse:
    enforce(policy.require_authenticated(actor), action="view_report")

    repo = ReportRepository(db)
    facts = await repo.get_ownership(report_id)
    if facts is None:
        raise _report_not_found()
    enforce(
        policy.can_view_report(actor, facts.owner_employee_id, facts.owner_manager_id),
        action="view_report",
        actor=actor,
    )

    report = await repo.get_detail(report_id)
    if report is None:
        raise _report_not_found()
    return to_detail_response(report)


@router.put("/daily-reports/{report_id}", response_model=DailyReportDetailResponse)
async def update_daily_report(
    report_id: int,
    body: Any = Body(...),
    actor: Optional[Actor] = Depends(get_optional_actor),
    db: Session = Depends(get_db_session),
) -> DailyReportDetailResponse:
    """Update the report and reconcile its visit list."""
    enforce(policy.require_authenticated(actor), action="edit_report")

    repo = ReportRepository(db)
    facts = await repo.get_ownership(report_id)
    if facts is None:
        raise _report_not_found()
    enforce(policy.can_edit_report(actor, facts.owner_employee_id), action="edit_report", actor=actor)

    payload = parse_body(DailyReportIn, body)

    report = await repo.get_detail(report_id)
    if report is None:
        raise _report_not_found()
    if payload.report_date != report.report_date:
        clash = await repo.find_by_employee_and_date(report.employee_id, payload.report_date)
        if clash is not None and clash.id != report.id:
            raise ApiError(ErrorCode.REPORT_ALREADY_EXISTS, MSG_REPORT_EXISTS)
    await _check_customers(db, payload)

    await repo.update(
        report,
        report_date=payload.report_date,
        problem=payload.problem,
        plan=payload.plan,
        visits=_visit_inputs(payload),
    )
    db.commit()
    return to_detail_response(await _reload(db, report_id))


@router.delete("/daily-reports/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_daily_report(
    report_id: int,
    actor: Optional[Actor] = Depends(get_optional_actor),
    db: Session = Depends(get_db_session),
) -> Response:
    """Delete the report with its visits and comments."""
    enforce(policy.require_authenticated(actor), action="delete_report")

    repo = ReportRepository(db)
    facts = await repo.get_ownership(report_id)
    if facts is None:
        raise _report_not_found()
    enforce(policy.can_delete_report(actor, facts.owner_employee_id), action="delete_report", actor=actor)

    report = await repo.get_detail(report_id)
    if report is not None:
        await repo.delete(report)
        db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/daily-reports/{report_id}/permissions", response_model=ReportPermissionsResponse)
async def get_report_permissions(
    report_id: int,
    actor: Optional[Actor] = Depends(get_optional_actor),
    db: Session = Depends(get_db_session),
) -> ReportPermissionsResponse:
    """UI affordances for a report, computed with the enforcing predicates."""
    enforce(policy.require_authenticated(actor), action="report_permissions")

    repo = ReportRepository(db)
    facts = await repo.get_ownership(report_id)
    if facts is None:
        raise _report_not_found()

    can_view = policy.can_view_report(actor, facts.owner_employee_id, facts.owner_manager_id)
    comments: list[CommentAffordance] = []
    if can_view:
        report = await repo.get_detail(report_id)
        for c in report.comments if report is not None else []:
            comments.append(
                CommentAffordance(
                    comment_id=c.id,
                    can_delete=bool(policy.can_delete_comment(actor, c.commenter_id)),
                )
            )

    return ReportPermissionsResponse(
        report_id=report_id,
        can_view=bool(can_view),
        can_edit=bool(policy.can_edit_report(actor, facts.owner_employee_id)),
        can_delete=bool(policy.can_delete_report(actor, facts.owner_employee_id)),
        can_comment=bool(can_view) and bool(policy.can_comment(actor)),
        comments=comments,
    )


@router.post(
    "/daily-reports/{report_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_comment(
    report_id: int,
    body: Any = Body(...),
    actor: Optional[Actor] = Depends(get_optional_actor),
    db: Session = Depends(get_db_session),
) -> CommentResponse:
    """Managers and admins comment on reports they can view."""
    enforce(policy.can_comment(actor), action="post_comment", actor=actor)
    commenter_id = enforce_employee_id(actor, action="post_comment")

    facts = await ReportRepository(db).get_ownership(report_id)
    if facts is None:
        raise _report_not_found()
    enforce(
        policy.can_view_report(actor, facts.owner_employee_id, facts.owner_manager_id),
        action="post_comment",
        actor=actor,
    )

    payload = parse_body(CommentIn, body)

    comments = CommentRepository(db)
    comment = await comments.create(
        report_id=report_id,
        commenter_id=commenter_id,
        content=payload.comment_content,
    )
    db.commit()
    db.refresh(comment)
    return CommentResponse(
        comment_id=comment.id,
        report_id=comment.report_id,
        commenter_id=comment.commenter_id,
        commenter_name=comment.commenter.name,
        comment_content=comment.comment_content,
        created_at=comment.created_at,
    )
