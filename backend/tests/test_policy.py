from __future__ import annotations

import itertools

import pytest

from nippo.core.errors import ErrorCode
from nippo.security import policy
from nippo.security.policy import Actor
from nippo.security.roles import Role


def actor(role: Role, employee_id: int | None = 1, manager_id: int | None = None) -> Actor:
    return Actor(role=role, employee_id=employee_id, manager_id=manager_id)


ALL_ROLES = list(Role)
IDS = [1, 2, 10, 20, 999]


# --- edit / delete report -------------------------------------------------


@pytest.mark.parametrize("role", ALL_ROLES)
def test_edit_report_is_ownership_only_for_every_role(role: Role):
    for actor_id, owner_id in itertools.product(IDS, IDS):
        d = policy.can_edit_report(actor(role, actor_id), owner_id)
        assert bool(d) is (actor_id == owner_id)
        if not d:
            assert d.code is ErrorCode.FORBIDDEN
            assert d.message == "自分の日報のみ編集できます"


def test_admin_cannot_edit_or_delete_someone_elses_report():
    admin = actor(Role.ADMIN, 3)
    assert not policy.can_edit_report(admin, 999)
    assert not policy.can_delete_report(admin, 999)


def test_delete_report_uses_the_edit_rule():
    assert policy.can_delete_report is policy.can_edit_report


def test_actor_without_employee_id_owns_nothing():
    ghost = actor(Role.SALES, None)
    assert not policy.can_edit_report(ghost, None)
    assert not policy.can_delete_comment(ghost, None)
    assert not policy.can_view_report(ghost, None, None)


# --- view report ----------------------------------------------------------


@pytest.mark.parametrize("owner_manager_id", [10, 11, 99, 20, None])
def test_manager_views_only_direct_reports(owner_manager_id):
    manager = actor(Role.MANAGER, 10)
    d = policy.can_view_report(manager, 20, owner_manager_id)
    assert bool(d) is (owner_manager_id == 10)


def test_manager_hierarchy_is_not_transitive():
    # 10 manages 20, 20 manages 30: 10 may not view 30's report.
    manager = actor(Role.MANAGER, 10)
    assert not policy.can_view_report(manager, 30, 20)


def test_sales_cannot_use_the_hierarchy_edge():
    # A sales actor recorded as someone's manager still gets no access.
    sales = actor(Role.SALES, 10)
    assert not policy.can_view_report(sales, 20, 10)


def test_admin_views_unrelated_report():
    assert policy.can_view_report(actor(Role.ADMIN, 3), 999, 888)


def test_admin_without_employee_id_still_views():
    assert policy.can_view_report(actor(Role.ADMIN, None), 999, None)


@pytest.mark.parametrize("role", ALL_ROLES)
def test_everyone_views_own_report(role: Role):
    assert policy.can_view_report(actor(role, 5), 5, None)


def test_view_deny_code_and_message():
    d = policy.can_view_report(actor(Role.MANAGER, 10), 20, 99)
    assert d.code is ErrorCode.FORBIDDEN
    assert d.message == "この日報を閲覧する権限がありません"


# --- comments ---------------------------------------------------------------


@pytest.mark.parametrize(
    "role,expected",
    [(Role.SALES, False), (Role.MANAGER, True), (Role.ADMIN, True)],
)
def test_can_comment_by_role(role: Role, expected: bool):
    assert bool(policy.can_comment(actor(role))) is expected


def test_sales_comment_denied_with_message():
    d = policy.can_comment(actor(Role.SALES))
    assert d.code is ErrorCode.FORBIDDEN
    assert d.message == "コメントを投稿する権限がありません"


def test_can_comment_ignores_report_ownership():
    # Reachability is the caller's check; the rule itself is role-only.
    assert policy.can_comment(actor(Role.MANAGER, 10))


@pytest.mark.parametrize("role", ALL_ROLES)
def test_delete_comment_is_ownership_only(role: Role):
    assert policy.can_delete_comment(actor(role, 7), 7)
    d = policy.can_delete_comment(actor(role, 7), 8)
    assert not d
    assert d.code is ErrorCode.FORBIDDEN
    assert d.message == "このコメントを削除する権限がありません"


# --- employee management / report creation ----------------------------------


@pytest.mark.parametrize(
    "role,expected",
    [(Role.SALES, False), (Role.MANAGER, False), (Role.ADMIN, True)],
)
def test_employee_management_is_admin_only(role: Role, expected: bool):
    d = policy.can_access_employee_management(actor(role))
    assert bool(d) is expected
    if not expected:
        assert d.code is ErrorCode.FORBIDDEN


def test_admin_cannot_author_reports():
    d = policy.can_create_report(actor(Role.ADMIN))
    assert not d
    assert d.message == "管理者は日報を作成できません"
    assert policy.can_create_report(actor(Role.SALES))
    assert policy.can_create_report(actor(Role.MANAGER))


@pytest.mark.parametrize(
    "role,expected",
    [(Role.SALES, False), (Role.MANAGER, True), (Role.ADMIN, True)],
)
def test_team_status_is_for_managers_and_admins(role: Role, expected: bool):
    d = policy.can_view_team_status(actor(role))
    assert bool(d) is expected
    if not expected:
        assert d.code is ErrorCode.FORBIDDEN


def test_employee_identity_required_for_attributed_writes():
    d = policy.has_employee_identity(actor(Role.MANAGER, None))
    assert d.code is ErrorCode.INVALID_USER
    assert policy.has_employee_identity(actor(Role.MANAGER, 1))


# --- authentication precedes everything -------------------------------------


ANON_CHECKS = [
    lambda: policy.require_authenticated(None),
    lambda: policy.can_view_report(None, 1, 2),
    lambda: policy.can_edit_report(None, 1),
    lambda: policy.can_delete_report(None, 1),
    lambda: policy.can_create_report(None),
    lambda: policy.can_comment(None),
    lambda: policy.can_delete_comment(None, 1),
    lambda: policy.can_access_employee_management(None),
    lambda: policy.has_employee_identity(None),
    lambda: policy.can_view_team_status(None),
    lambda: policy.report_list_scope(None, [], None).decision,
]


@pytest.mark.parametrize("check", ANON_CHECKS)
def test_missing_actor_is_unauthorized_never_forbidden(check):
    d = check()
    assert not d
    assert d.code is ErrorCode.UNAUTHORIZED
    assert d.message == "認証が必要です"


def test_authenticated_actor_passes_require_authenticated():
    assert policy.require_authenticated(actor(Role.SALES))


def test_predicates_are_idempotent():
    a = actor(Role.MANAGER, 10)
    assert policy.can_view_report(a, 20, 10) == policy.can_view_report(a, 20, 10)
    assert policy.can_edit_report(a, 20) == policy.can_edit_report(a, 20)
    assert policy.can_comment(a) == policy.can_comment(a)


# --- list scope ---------------------------------------------------------------


def test_sales_scope_is_own_reports_and_ignores_filter():
    s = policy.report_list_scope(actor(Role.SALES, 1), [], requested_employee_id=2)
    assert s.decision
    assert s.employee_ids == frozenset({1})


def test_manager_scope_is_self_and_direct_reports():
    s = policy.report_list_scope(actor(Role.MANAGER, 10), [20, 21])
    assert s.employee_ids == frozenset({10, 20, 21})
    narrowed = policy.report_list_scope(actor(Role.MANAGER, 10), [20, 21], requested_employee_id=21)
    assert narrowed.employee_ids == frozenset({21})


def test_manager_scope_denies_outside_employee():
    s = policy.report_list_scope(actor(Role.MANAGER, 10), [20], requested_employee_id=99)
    assert not s.decision
    assert s.decision.code is ErrorCode.FORBIDDEN
    assert s.decision.message == "この社員の日報を閲覧する権限がありません"


def test_admin_scope_is_unrestricted_unless_filtered():
    assert policy.report_list_scope(actor(Role.ADMIN, 3), []).unrestricted
    s = policy.report_list_scope(actor(Role.ADMIN, 3), [], requested_employee_id=42)
    assert s.employee_ids == frozenset({42})


def test_scope_agrees_with_view_rule():
    manager = actor(Role.MANAGER, 10)
    subordinates = [20, 21]
    scope = policy.report_list_scope(manager, subordinates)
    for owner in scope.employee_ids:
        owner_manager = None if owner == 10 else 10
        assert policy.can_view_report(manager, owner, owner_manager)


# --- end-to-end scenarios ------------------------------------------------------


def test_scenario_sales_edits_own_but_not_others():
    sales = actor(Role.SALES, 1)
    assert policy.can_edit_report(sales, 1)
    d = policy.can_edit_report(sales, 2)
    assert (d.allowed, d.code, d.message) == (False, ErrorCode.FORBIDDEN, "自分の日報のみ編集できます")


def test_scenario_manager_views_direct_report_only():
    manager = actor(Role.MANAGER, 10)
    assert policy.can_view_report(manager, 20, 10)
    d = policy.can_view_report(manager, 20, 99)
    assert d.code is ErrorCode.FORBIDDEN
