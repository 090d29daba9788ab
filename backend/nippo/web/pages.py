"""Server-rendered pages.

Page guards use the same policy predicates as the API, but a deny becomes a
redirect (login for anonymous visitors, /forbidden otherwise) instead of a
JSON error body.
"""

from __future__ import annotations

from html import escape
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.orm import Session

from nippo.api.deps import get_db_session, get_optional_actor
from nippo.repositories.employee_repo import EmployeeRepository
from nippo.repositories.report_repo import ReportRepository
from nippo.security import policy
from nippo.security.guards import page_redirect
from nippo.security.policy import Actor


router = APIRouter(include_in_schema=False)


def _page(title: str, body: str, *, status_code: int = 200) -> HTMLResponse:
    html = (
        "<!doctype html><html lang=\"ja\"><head><meta charset=\"utf-8\">"
        f"<title>{escape(title)}</title></head><body><h1>{escape(title)}</h1>{body}</body></html>"
    )
    return HTMLResponse(content=html, status_code=status_code)


@router.get("/forbidden", response_class=HTMLResponse)
async def forbidden_page() -> HTMLResponse:
    return _page("アクセス権限がありません", "<p>このページを表示する権限がありません。</p>", status_code=403)


@router.get("/login", response_class=HTMLResponse)
async def login_page() -> HTMLResponse:
    return _page("ログイン", "<p>セッショントークンを設定してください。</p>")


@router.get("/daily-reports/{report_id}", response_class=HTMLResponse)
async def daily_report_page(
    report_id: int,
    actor: Optional[Actor] = Depends(get_optional_actor),
    db: Session = Depends(get_db_session),
) -> Response:
    redirect = page_redirect(policy.require_authenticated(actor), action="view_report_page")
    if redirect is not None:
        return redirect

    repo = ReportRepository(db)
    facts = await repo.get_ownership(report_id)
    if facts is None:
        return _page("日報が見つかりません", "", status_code=404)

    redirect = page_redirect(
        policy.can_view_report(actor, facts.owner_employee_id, facts.owner_manager_id),
        action="view_report_page",
        actor=actor,
    )
    if redirect is not None:
        return redirect

    report = await repo.get_detail(report_id)
    if report is None:
        return _page("日報が見つかりません", "", status_code=404)

    parts = [
        f"<p>{escape(report.employee.name)} / {report.report_date.isoformat()}</p>",
        "<ul class=\"visits\">",
        *(
            f"<li>{v.visit_time.strftime('%H:%M')} {escape(v.customer.customer_name)}: "
            f"{escape(v.visit_content)}</li>"
            for v in report.visit_records
        ),
        "</ul>",
        "<ul class=\"comments\">",
        *(
            f"<li>{escape(c.commenter.name)}: {escape(c.comment_content)}"
            + (" <button data-action=\"delete-comment\">削除</button>" if policy.can_delete_comment(actor, c.commenter_id) else "")
            + "</li>"
            for c in report.comments
        ),
        "</ul>",
    ]
    if policy.can_edit_report(actor, facts.owner_employee_id):
        parts.append("<a data-action=\"edit-report\" href=\"#edit\">編集</a>")
    if policy.can_comment(actor):
        parts.append("<form data-action=\"post-comment\"><textarea name=\"comment_content\"></textarea></form>")
    return _page("日報詳細", "".join(parts))


@router.get("/employees", response_class=HTMLResponse)
async def employees_page(
    actor: Optional[Actor] = Depends(get_optional_actor),
    db: Session = Depends(get_db_session),
) -> Response:
    redirect = page_redirect(policy.can_access_employee_management(actor), action="employees_page", actor=actor)
    if redirect is not None:
        return redirect

    employees = await EmployeeRepository(db).list_employees()
    rows = "".join(
        f"<tr><td>{e.id}</td><td>{escape(e.name)}</td><td>{escape(e.department)}</td></tr>"
        for e in employees
    )
    return _page("営業マスタ", f"<table>{rows}</table>")
