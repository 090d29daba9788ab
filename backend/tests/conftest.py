from __future__ import annotations

import os
import sys
from datetime import date, time
from pathlib import Path
from typing import Any, Generator, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


ROOT = Path(__file__).resolve().parents[2]

# Ensure `backend/nippo` is importable as top-level `nippo` for tests.
BACKEND_DIR = ROOT / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

# The app module builds its engine at import time; tests replace the session
# dependency, so any URL that parses will do here.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("NIPPO_JWT_SECRET", "test-secret")

from fastapi.testclient import TestClient  # noqa: E402

from nippo.api.deps import get_db_session  # noqa: E402
from nippo.core.base import Base  # noqa: E402
from nippo.main import app  # noqa: E402
from nippo.models.comment import Comment  # noqa: E402
from nippo.models.customer import Customer  # noqa: E402
from nippo.models.daily_report import DailyReport, VisitRecord  # noqa: E402
from nippo.models.employee import Employee  # noqa: E402
from nippo.security.auth import encode_jwt  # noqa: E402


@pytest.fixture(autouse=True)
def _auth_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("NIPPO_JWT_SECRET", "test-secret")


@pytest.fixture(scope="session")
def engine() -> Engine:
    eng = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture()
def db_session(engine: Engine) -> Generator[Session, None, None]:
    """Session for arranging data; tables are emptied after each test."""
    SessionLocal = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        with engine.begin() as conn:
            for table in reversed(Base.metadata.sorted_tables):
                conn.execute(table.delete())


@pytest.fixture()
def client(engine: Engine) -> Generator[TestClient, None, None]:
    SessionLocal = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False)

    def _session() -> Generator[Session, None, None]:
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db_session] = _session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db_session, None)


def make_jwt(
    role: str,
    *,
    employee_id: Optional[int] = None,
    manager_id: Optional[int] = None,
    sub: str = "test",
    exp: Optional[int] = None,
    secret: str = "test-secret",
) -> str:
    claims: dict[str, Any] = {"sub": sub, "role": role, "employee_id": employee_id, "manager_id": manager_id}
    if exp is not None:
        claims["exp"] = exp
    return encode_jwt(claims, secret=secret.encode("utf-8"))


def auth_header(role: str, employee_id: Optional[int] = None, **kwargs: Any) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_jwt(role, employee_id=employee_id, **kwargs)}"}


@pytest.fixture()
def org(db_session: Session) -> dict[str, Any]:
    """A small sales organisation.

    admin (no manager)
    boss  -> sato, suzuki
    other_boss -> yamada
    """
    admin = Employee(name="管理 太郎", email="admin@example.com", department="管理部", position="部長")
    boss = Employee(name="上長 一郎", email="boss@example.com", department="営業部", position="課長")
    other_boss = Employee(name="上長 次郎", email="boss2@example.com", department="営業二部", position="課長")
    db_session.add_all([admin, boss, other_boss])
    db_session.flush()

    sato = Employee(name="佐藤", email="sato@example.com", department="営業部", position="主任", manager_id=boss.id)
    suzuki = Employee(name="鈴木", email="suzuki@example.com", department="営業部", position="担当", manager_id=boss.id)
    yamada = Employee(
        name="山田", email="yamada@example.com", department="営業二部", position="担当", manager_id=other_boss.id
    )
    db_session.add_all([sato, suzuki, yamada])
    db_session.flush()

    acme = Customer(customer_name="株式会社ABC商事", assigned_employee_id=sato.id)
    xyz = Customer(customer_name="株式会社XYZ産業", assigned_employee_id=yamada.id)
    db_session.add_all([acme, xyz])
    db_session.flush()

    sato_report = DailyReport(employee_id=sato.id, report_date=date(2026, 10, 1), problem="課題", plan="予定")
    sato_report.visit_records = [
        VisitRecord(customer_id=acme.id, visit_time=time(10, 0), visit_content="定例訪問"),
    ]
    yamada_report = DailyReport(employee_id=yamada.id, report_date=date(2026, 10, 1))
    yamada_report.visit_records = [
        VisitRecord(customer_id=xyz.id, visit_time=time(14, 30), visit_content="提案"),
    ]
    boss_report = DailyReport(employee_id=boss.id, report_date=date(2026, 10, 2))
    boss_report.visit_records = [
        VisitRecord(customer_id=acme.id, visit_time=time(9, 15), visit_content="同行"),
    ]
    db_session.add_all([sato_report, yamada_report, boss_report])
    db_session.flush()

    boss_comment = Comment(report_id=sato_report.id, commenter_id=boss.id, comment_content="よく頑張りました")
    db_session.add(boss_comment)
    db_session.commit()

    return {
        "admin": admin.id,
        "boss": boss.id,
        "other_boss": other_boss.id,
        "sato": sato.id,
        "suzuki": suzuki.id,
        "yamada": yamada.id,
        "acme": acme.id,
        "xyz": xyz.id,
        "sato_report": sato_report.id,
        "yamada_report": yamada_report.id,
        "boss_report": boss_report.id,
        "boss_comment": boss_comment.id,
    }
