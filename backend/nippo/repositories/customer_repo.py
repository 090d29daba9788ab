"""Customer master repository."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from sqlalchemy import Select, exists, select
from sqlalchemy.orm import selectinload

from nippo.models.customer import Customer
from nippo.models.daily_report import VisitRecord
from nippo.repositories.base import BaseRepository


class CustomerRepository(BaseRepository[Customer]):
    async def get(self, customer_id: int) -> Optional[Customer]:
        stmt: Select = (
            select(Customer)
            .where(Customer.id == customer_id)
            .options(selectinload(Customer.assigned_employee))
        )
        return (await self._execute(stmt)).scalars().first()

    async def list_customers(
        self,
        *,
        customer_name: Optional[str] = None,
        assigned_employee_id: Optional[int] = None,
    ) -> Sequence[Customer]:
        stmt: Select = select(Customer).options(selectinload(Customer.assigned_employee)).order_by(Customer.id)
        if customer_name:
            stmt = stmt.where(Customer.customer_name.contains(customer_name))
        if assigned_employee_id is not None:
            stmt = stmt.where(Customer.assigned_employee_id == assigned_employee_id)
        return (await self._execute(stmt)).scalars().all()

    async def missing_ids(self, customer_ids: Iterable[int]) -> set[int]:
        wanted = set(customer_ids)
        if not wanted:
            return set()
        stmt: Select = select(Customer.id).where(Customer.id.in_(sorted(wanted)))
        found = set((await self._execute(stmt)).scalars().all())
        return wanted - found

    async def is_in_use(self, customer_id: int) -> bool:
        """Referenced by any visit record."""
        stmt: Select = select(exists().where(VisitRecord.customer_id == customer_id))
        return bool((await self._execute(stmt)).scalar())

    async def create(self, **fields: object) -> Customer:
        return await self._add(Customer(**fields))

    async def update(self, customer: Customer, **fields: object) -> Customer:
        for k, v in fields.items():
            setattr(customer, k, v)
        self._session.flush()
        return customer

    async def delete(self, customer: Customer) -> None:
        await self._delete(customer)
