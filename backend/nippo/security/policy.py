"""Authorization policy for daily reports, comments and the employee directory.

Design:
- Pure functions of (actor, ownership facts). No I/O, no ambient session,
  no logging. Callers load the facts immediately before asking.
- Every predicate returns a `Decision`; it is truthy exactly when allowed, so
  `if can_edit_report(actor, owner):` reads as a boolean check.
- A missing actor always yields UNAUTHORIZED, never FORBIDDEN.
- The same functions back API guards, page guards and UI affordances.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from nippo.core.errors import ErrorCode
from nippo.security.roles import Role, is_role_allowed


MSG_UNAUTHORIZED = "認証が必要です"
MSG_VIEW_REPORT = "この日報を閲覧する権限がありません"
MSG_EDIT_REPORT = "自分の日報のみ編集できます"
MSG_COMMENT = "コメントを投稿する権限がありません"
MSG_DELETE_COMMENT = "このコメントを削除する権限がありません"
MSG_FORBIDDEN = "この操作を実行する権限がありません"
MSG_CREATE_REPORT = "管理者は日報を作成できません"
MSG_VIEW_EMPLOYEE_REPORTS = "この社員の日報を閲覧する権限がありません"
MSG_INVALID_USER = "ユーザー情報が不正です"

COMMENTER_ROLES: frozenset[Role] = frozenset({Role.MANAGER, Role.ADMIN})
REPORT_AUTHOR_ROLES: frozenset[Role] = frozenset({Role.SALES, Role.MANAGER})
EMPLOYEE_ADMIN_ROLES: frozenset[Role] = frozenset({Role.ADMIN})
TEAM_STATUS_ROLES: frozenset[Role] = frozenset({Role.MANAGER, Role.ADMIN})


@dataclass(frozen=True, slots=True)
class Actor:
    """Authenticated caller, derived fresh from the session token per request."""

    role: Role
    employee_id: Optional[int]
    manager_id: Optional[int] = None  # informational; no rule reads it
    sub: str = ""
    token_fingerprint: str = ""


@dataclass(frozen=True, slots=True)
class Decision:
    allowed: bool
    code: Optional[ErrorCode] = None
    message: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(allowed=True)


def deny(code: ErrorCode, message: str) -> Decision:
    return Decision(allowed=False, code=code, message=message)


def _forbidden(message: str) -> Decision:
    return deny(ErrorCode.FORBIDDEN, message)


def _is_self(actor: Actor, employee_id: Optional[int]) -> bool:
    # An actor without an employee identity owns nothing.
    return actor.employee_id is not None and actor.employee_id == employee_id


def require_authenticated(actor: Optional[Actor]) -> Decision:
    if actor is None:
        return deny(ErrorCode.UNAUTHORIZED, MSG_UNAUTHORIZED)
    return ALLOW


def has_employee_identity(actor: Optional[Actor]) -> Decision:
    """Actors writing rows attributed to themselves need an employee id."""
    auth = require_authenticated(actor)
    if not auth:
        return auth
    if actor.employee_id is None:
        return deny(ErrorCode.INVALID_USER, MSG_INVALID_USER)
    return ALLOW


def can_view_report(
    actor: Optional[Actor],
    owner_employee_id: Optional[int],
    owner_manager_id: Optional[int],
) -> Decision:
    """Admins see everything, owners see their own, managers one level down."""
    auth = require_authenticated(actor)
    if not auth:
        return auth
    if actor.role is Role.ADMIN:
        return ALLOW
    if _is_self(actor, owner_employee_id):
        return ALLOW
    if actor.role is Role.MANAGER and _is_self(actor, owner_manager_id):
        return ALLOW
    return _forbidden(MSG_VIEW_REPORT)


def can_edit_report(actor: Optional[Actor], owner_employee_id: Optional[int]) -> Decision:
    """Ownership only. No role, admin included, edits someone else's report."""
    auth = require_authenticated(actor)
    if not auth:
        return auth
    if _is_self(actor, owner_employee_id):
        return ALLOW
    return _forbidden(MSG_EDIT_REPORT)


can_delete_report = can_edit_report


def can_create_report(actor: Optional[Actor]) -> Decision:
    auth = require_authenticated(actor)
    if not auth:
        return auth
    if is_role_allowed(actor.role, REPORT_AUTHOR_ROLES):
        return ALLOW
    return _forbidden(MSG_CREATE_REPORT)


def can_comment(actor: Optional[Actor]) -> Decision:
    """Managers and admins comment; report reachability is the caller's check."""
    auth = require_authenticated(actor)
    if not auth:
        return auth
    if is_role_allowed(actor.role, COMMENTER_ROLES):
        return ALLOW
    return _forbidden(MSG_COMMENT)


def can_delete_comment(actor: Optional[Actor], commenter_employee_id: Optional[int]) -> Decision:
    auth = require_authenticated(actor)
    if not auth:
        return auth
    if _is_self(actor, commenter_employee_id):
        return ALLOW
    return _forbidden(MSG_DELETE_COMMENT)


def can_access_employee_management(actor: Optional[Actor]) -> Decision:
    """Coarse gate for the whole employee directory surface."""
    auth = require_authenticated(actor)
    if not auth:
        return auth
    if is_role_allowed(actor.role, EMPLOYEE_ADMIN_ROLES):
        return ALLOW
    return _forbidden(MSG_FORBIDDEN)


def can_view_team_status(actor: Optional[Actor]) -> Decision:
    """Team submission figures on the dashboard: managers and admins.

    Which members are shown comes from `report_list_scope`, so the figures never
    cover an employee whose reports the actor could not open.
    """
    auth = require_authenticated(actor)
    if not auth:
        return auth
    if is_role_allowed(actor.role, TEAM_STATUS_ROLES):
        return ALLOW
    return _forbidden(MSG_FORBIDDEN)


@dataclass(frozen=True, slots=True)
class ReportScope:
    """Which report owners a list query may return.

    employee_ids is None for an unrestricted (admin) listing.
    """

    decision: Decision
    employee_ids: Optional[frozenset[int]] = None

    @property
    def unrestricted(self) -> bool:
        return self.decision.allowed and self.employee_ids is None


def report_list_scope(
    actor: Optional[Actor],
    subordinate_ids: Iterable[int],
    requested_employee_id: Optional[int] = None,
) -> ReportScope:
    """Scope a report listing so it only contains reports `can_view_report` allows.

    `subordinate_ids` are the direct reports of the actor (only read for managers).
    Sales ignore the requested filter and always get their own reports.
    """
    auth = require_authenticated(actor)
    if not auth:
        return ReportScope(decision=auth, employee_ids=frozenset())

    own: frozenset[int] = frozenset() if actor.employee_id is None else frozenset({actor.employee_id})

    if actor.role is Role.ADMIN:
        if requested_employee_id is None:
            return ReportScope(decision=ALLOW, employee_ids=None)
        return ReportScope(decision=ALLOW, employee_ids=frozenset({requested_employee_id}))

    if actor.role is Role.MANAGER:
        viewable = own | frozenset(subordinate_ids) if actor.employee_id is not None else frozenset()
        if requested_employee_id is None:
            return ReportScope(decision=ALLOW, employee_ids=viewable)
        if requested_employee_id in viewable:
            return ReportScope(decision=ALLOW, employee_ids=frozenset({requested_employee_id}))
        return ReportScope(decision=_forbidden(MSG_VIEW_EMPLOYEE_REPORTS), employee_ids=frozenset())

    if actor.role is Role.SALES:
        return ReportScope(decision=ALLOW, employee_ids=own)

    raise AssertionError(f"Unhandled role: {actor.role!r}")
