from __future__ import annotations

import asyncio
from datetime import date
from pathlib import Path

import pytest
from sqlalchemy import insert, select
from sqlalchemy.orm import Session

from nippo.models.customer import Customer
from nippo.repositories.base import BaseRepository, RepositoryMisuse
from nippo.repositories.comment_repo import CommentRepository
from nippo.repositories.customer_repo import CustomerRepository
from nippo.repositories.employee_repo import EmployeeRepository
from nippo.repositories.report_repo import ReportRepository


REPO_DIR = Path(__file__).resolve().parents[1] / "nippo" / "repositories"


def test_read_path_rejects_non_select(db_session: Session):
    repo: BaseRepository[Customer] = BaseRepository(db_session)
    with pytest.raises(RepositoryMisuse):
        asyncio.run(repo._execute(insert(Customer)))
    asyncio.run(repo._execute(select(Customer)))


def test_repositories_never_commit():
    files = list(REPO_DIR.glob("**/*.py"))
    assert files, "No repository files found."
    offenders = [str(f.name) for f in files if ".commit(" in f.read_text(encoding="utf-8")]
    assert not offenders, "Repositories must leave commits to the request handler: " + ", ".join(offenders)


def test_report_ownership_carries_owner_manager(db_session: Session, org):
    facts = asyncio.run(ReportRepository(db_session).get_ownership(org["sato_report"]))
    assert facts is not None
    assert (facts.owner_employee_id, facts.owner_manager_id) == (org["sato"], org["boss"])

    facts = asyncio.run(ReportRepository(db_session).get_ownership(org["boss_report"]))
    assert facts.owner_manager_id is None
    assert asyncio.run(ReportRepository(db_session).get_ownership(999999)) is None


def test_comment_ownership(db_session: Session, org):
    facts = asyncio.run(CommentRepository(db_session).get_ownership(org["boss_comment"]))
    assert (facts.report_id, facts.commenter_employee_id) == (org["sato_report"], org["boss"])


def test_subordinates_are_direct_reports_only(db_session: Session, org):
    repo = EmployeeRepository(db_session)
    assert sorted(asyncio.run(repo.subordinate_ids(org["boss"]))) == sorted([org["sato"], org["suzuki"]])
    assert asyncio.run(repo.subordinate_ids(org["admin"])) == []


def test_list_reports_scope_and_counts(db_session: Session, org):
    repo = ReportRepository(db_session)
    rows, total = asyncio.run(
        repo.list_reports(
            employee_ids=frozenset({org["sato"], org["boss"]}),
            date_from=None,
            date_to=None,
            page=1,
            limit=20,
        )
    )
    assert total == 2
    assert [r.employee_id for r in rows] == [org["boss"], org["sato"]]

    rows, total = asyncio.run(
        repo.list_reports(employee_ids=None, date_from=date(2026, 10, 1), date_to=date(2026, 10, 1), page=1, limit=20)
    )
    assert total == 2


def test_find_by_employee_and_date(db_session: Session, org):
    repo = ReportRepository(db_session)
    assert asyncio.run(repo.find_by_employee_and_date(org["sato"], date(2026, 10, 1))) is not None
    assert asyncio.run(repo.find_by_employee_and_date(org["sato"], date(2026, 10, 2))) is None


def test_missing_customer_ids(db_session: Session, org):
    repo = CustomerRepository(db_session)
    assert asyncio.run(repo.missing_ids([org["acme"], 999999])) == {999999}
    assert asyncio.run(repo.missing_ids([])) == set()


def test_in_use_checks(db_session: Session, org):
    assert asyncio.run(EmployeeRepository(db_session).is_in_use(org["sato"]))
    assert asyncio.run(EmployeeRepository(db_session).is_in_use(org["other_boss"]))
    assert not asyncio.run(EmployeeRepository(db_session).is_in_use(org["suzuki"]))
    assert asyncio.run(CustomerRepository(db_session).is_in_use(org["acme"]))


def test_report_counts_per_owner_within_dates(db_session: Session, org):
    repo = ReportRepository(db_session)
    counts = asyncio.run(
        repo.count_by_employee(employee_ids=None, date_from=date(2026, 10, 1), date_to=date(2026, 10, 1))
    )
    assert counts == {org["sato"]: 1, org["yamada"]: 1}

    counts = asyncio.run(
        repo.count_by_employee(
            employee_ids=frozenset({org["boss"], org["suzuki"]}),
            date_from=date(2026, 9, 28),
            date_to=date(2026, 10, 4),
        )
    )
    assert counts == {org["boss"]: 1}


def test_comments_on_own_reports(db_session: Session, org):
    repo = CommentRepository(db_session)
    assert asyncio.run(repo.count_on_reports_of(org["sato"])) == 1
    assert asyncio.run(repo.count_on_reports_of(org["boss"])) == 0


def test_options_can_be_limited_to_ids(db_session: Session, org):
    rows = asyncio.run(EmployeeRepository(db_session).options(frozenset({org["sato"], org["yamada"]})))
    assert [name for _, name in rows] == ["佐藤", "山田"]
