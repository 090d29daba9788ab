"""Employee directory repository."""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import Select, exists, select
from sqlalchemy.orm import selectinload

from nippo.models.comment import Comment
from nippo.models.customer import Customer
from nippo.models.daily_report import DailyReport
from nippo.models.employee import Employee
from nippo.repositories.base import BaseRepository


class EmployeeRepository(BaseRepository[Employee]):
    async def subordinate_ids(self, manager_id: int) -> list[int]:
        """Direct reports only (one hierarchy level)."""
        stmt: Select = select(Employee.id).where(Employee.manager_id == manager_id).order_by(Employee.id)
        return list((await self._execute(stmt)).scalars().all())

    async def get(self, employee_id: int) -> Optional[Employee]:
        stmt: Select = (
            select(Employee).where(Employee.id == employee_id).options(selectinload(Employee.manager))
        )
        return (await self._execute(stmt)).scalars().first()

    async def exists(self, employee_id: int) -> bool:
        stmt: Select = select(Employee.id).where(Employee.id == employee_id)
        return (await self._execute(stmt)).first() is not None

    async def find_by_email(self, email: str) -> Optional[Employee]:
        stmt: Select = select(Employee).where(Employee.email == email)
        return (await self._execute(stmt)).scalars().first()

    async def list_employees(
        self,
        *,
        name: Optional[str] = None,
        department: Optional[str] = None,
    ) -> Sequence[Employee]:
        stmt: Select = select(Employee).options(selectinload(Employee.manager)).order_by(Employee.id)
        if name:
            stmt = stmt.where(Employee.name.contains(name))
        if department:
            stmt = stmt.where(Employee.department == department)
        return (await self._execute(stmt)).scalars().all()

    async def options(self, employee_ids: Optional[frozenset[int]] = None) -> Sequence[tuple[int, str]]:
        """(id, name) pairs, optionally limited to employee_ids."""
        stmt: Select = select(Employee.id, Employee.name).order_by(Employee.id)
        if employee_ids is not None:
            stmt = stmt.where(Employee.id.in_(sorted(employee_ids)))
        return [(r[0], r[1]) for r in (await self._execute(stmt)).all()]

    async def is_in_use(self, employee_id: int) -> bool:
        """Referenced by reports, assigned customers, comments, or subordinates."""
        stmt: Select = select(
            exists().where(DailyReport.employee_id == employee_id)
            | exists().where(Customer.assigned_employee_id == employee_id)
            | exists().where(Comment.commenter_id == employee_id)
            | exists().where(Employee.manager_id == employee_id)
        )
        return bool((await self._execute(stmt)).scalar())

    async def create(
        self,
        *,
        name: str,
        email: str,
        department: str,
        position: str,
        manager_id: Optional[int],
    ) -> Employee:
        return await self._add(
            Employee(name=name, email=email, department=department, position=position, manager_id=manager_id)
        )

    async def update(self, employee: Employee, **fields: object) -> Employee:
        for k, v in fields.items():
            setattr(employee, k, v)
        self._session.flush()
        return employee

    async def delete(self, employee: Employee) -> None:
        await self._delete(employee)
