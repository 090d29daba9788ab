"""Customer master endpoints (any authenticated user)."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.orm import Session

from nippo.api.deps import get_actor, get_db_session, parse_body
from nippo.core.errors import ApiError, ErrorCode, validation_error
from nippo.models.customer import Customer
from nippo.repositories.customer_repo import CustomerRepository
from nippo.repositories.employee_repo import EmployeeRepository
from nippo.schemas.customer import CustomerIn, CustomerResponse


router = APIRouter(dependencies=[Depends(get_actor)])


def to_response(c: Customer) -> CustomerResponse:
    return CustomerResponse(
        customer_id=c.id,
        customer_name=c.customer_name,
        address=c.address,
        phone=c.phone,
        email=c.email,
        assigned_employee_id=c.assigned_employee_id,
        assigned_employee_name=c.assigned_employee.name,
        created_at=c.created_at,
        updated_at=c.updated_at,
    )


async def _load(repo: CustomerRepository, customer_id: int) -> Customer:
    customer = await repo.get(customer_id)
    if customer is None:
        raise ApiError(ErrorCode.CUSTOMER_NOT_FOUND, "顧客が見つかりません")
    return customer


async def _check_assignee(db: Session, employee_id: int) -> None:
    if not await EmployeeRepository(db).exists(employee_id):
        raise validation_error("assigned_employee_id", "指定された担当営業が見つかりません")


@router.get("/customers", response_model=list[CustomerResponse])
async def list_customers(
    customer_name: Optional[str] = Query(None),
    employee_id: Optional[int] = Query(None),
    db: Session = Depends(get_db_session),
) -> list[CustomerResponse]:
    rows = await CustomerRepository(db).list_customers(
        customer_name=customer_name, assigned_employee_id=employee_id
    )
    return [to_response(c) for c in rows]


@router.post("/customers", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
async def create_customer(
    body: Any = Body(...),
    db: Session = Depends(get_db_session),
) -> CustomerResponse:
    payload = parse_body(CustomerIn, body)
    await _check_assignee(db, payload.assigned_employee_id)

    repo = CustomerRepository(db)
    customer = await repo.create(**payload.model_dump())
    db.commit()
    db.expire_all()
    return to_response(await _load(repo, customer.id))


@router.get("/customers/{customer_id}", response_model=CustomerResponse)
async def get_customer(customer_id: int, db: Session = Depends(get_db_session)) -> CustomerResponse:
    return to_response(await _load(CustomerRepository(db), customer_id))


@router.put("/customers/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: int,
    body: Any = Body(...),
    db: Session = Depends(get_db_session),
) -> CustomerResponse:
    repo = CustomerRepository(db)
    customer = await _load(repo, customer_id)
    payload = parse_body(CustomerIn, body)
    await _check_assignee(db, payload.assigned_employee_id)

    await repo.update(customer, **payload.model_dump())
    db.commit()
    db.expire_all()
    return to_response(await _load(repo, customer_id))


@router.delete("/customers/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(customer_id: int, db: Session = Depends(get_db_session)) -> Response:
    """Customers referenced by visit records cannot be deleted."""
    repo = CustomerRepository(db)
    customer = await _load(repo, customer_id)
    if await repo.is_in_use(customer_id):
        raise ApiError(ErrorCode.CUSTOMER_IN_USE, "この顧客は訪問記録で使用されているため削除できません")
    await repo.delete(customer)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
