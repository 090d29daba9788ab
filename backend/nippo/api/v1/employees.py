"""Employee directory endpoints.

The whole surface is admin-only and the gate runs before any employee row is
loaded. `/employees/options` is the exception: any authenticated user may list
names for pickers.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.orm import Session

from nippo.api.deps import get_actor, get_db_session, get_optional_actor, parse_body
from nippo.core.errors import ApiError, ErrorCode, validation_error
from nippo.models.employee import Employee
from nippo.repositories.employee_repo import EmployeeRepository
from nippo.schemas.employee import EmployeeIn, EmployeeOption, EmployeeResponse
from nippo.security import policy
from nippo.security.guards import enforce_actor
from nippo.security.policy import Actor


router = APIRouter()

MSG_EMPLOYEE_NOT_FOUND = "社員が見つかりません"


def require_employee_admin(actor: Optional[Actor] = Depends(get_optional_actor)) -> Actor:
    return enforce_actor(policy.can_access_employee_management(actor), actor, action="manage_employees")


def to_response(e: Employee) -> EmployeeResponse:
    return EmployeeResponse(
        employee_id=e.id,
        name=e.name,
        email=e.email,
        department=e.department,
        position=e.position,
        manager_id=e.manager_id,
        manager_name=e.manager.name if e.manager is not None else None,
        created_at=e.created_at,
        updated_at=e.updated_at,
    )


async def _load(repo: EmployeeRepository, employee_id: int) -> Employee:
    employee = await repo.get(employee_id)
    if employee is None:
        raise ApiError(ErrorCode.EMPLOYEE_NOT_FOUND, MSG_EMPLOYEE_NOT_FOUND)
    return employee


async def _check_manager(repo: EmployeeRepository, manager_id: Optional[int], employee_id: Optional[int]) -> None:
    if manager_id is None:
        return
    if manager_id == employee_id or not await repo.exists(manager_id):
        raise validation_error("manager_id", "指定された上長が見つかりません")


def _email_taken() -> ApiError:
    return ApiError(ErrorCode.EMAIL_ALREADY_EXISTS, "このメールアドレスは既に使用されています")


@router.get("/employees/options", response_model=list[EmployeeOption])
async def employee_options(
    _actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db_session),
) -> list[EmployeeOption]:
    rows = await EmployeeRepository(db).options()
    return [EmployeeOption(employee_id=i, name=n) for i, n in rows]


@router.get("/employees", response_model=list[EmployeeResponse])
async def list_employees(
    name: Optional[str] = Query(None),
    department: Optional[str] = Query(None),
    _admin: Actor = Depends(require_employee_admin),
    db: Session = Depends(get_db_session),
) -> list[EmployeeResponse]:
    employees = await EmployeeRepository(db).list_employees(name=name, department=department)
    return [to_response(e) for e in employees]


@router.post("/employees", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(
    body: Any = Body(...),
    _admin: Actor = Depends(require_employee_admin),
    db: Session = Depends(get_db_session),
) -> EmployeeResponse:
    payload = parse_body(EmployeeIn, body)
    repo = EmployeeRepository(db)
    if await repo.find_by_email(payload.email) is not None:
        raise _email_taken()
    await _check_manager(repo, payload.manager_id, None)

    employee = await repo.create(
        name=payload.name,
        email=payload.email,
        department=payload.department,
        position=payload.position,
        manager_id=payload.manager_id,
    )
    db.commit()
    db.expire_all()
    return to_response(await _load(repo, employee.id))


@router.get("/employees/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: int,
    _admin: Actor = Depends(require_employee_admin),
    db: Session = Depends(get_db_session),
) -> EmployeeResponse:
    return to_response(await _load(EmployeeRepository(db), employee_id))


@router.put("/employees/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: int,
    body: Any = Body(...),
    _admin: Actor = Depends(require_employee_admin),
    db: Session = Depends(get_db_session),
) -> EmployeeResponse:
    """Reassigning manager_id changes who may view this employee's reports from the next request on."""
    repo = EmployeeRepository(db)
    employee = await _load(repo, employee_id)
    payload = parse_body(EmployeeIn, body)

    if payload.email != employee.email:
        other = await repo.find_by_email(payload.email)
        if other is not None and other.id != employee.id:
            raise _email_taken()
    await _check_manager(repo, payload.manager_id, employee.id)

    await repo.update(
        employee,
        name=payload.name,
        email=payload.email,
        department=payload.department,
        position=payload.position,
        manager_id=payload.manager_id,
    )
    db.commit()
    db.expire_all()
    return to_response(await _load(repo, employee_id))


@router.delete("/employees/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(
    employee_id: int,
    _admin: Actor = Depends(require_employee_admin),
    db: Session = Depends(get_db_session),
) -> Response:
    repo = EmployeeRepository(db)
    employee = await _load(repo, employee_id)
    if await repo.is_in_use(employee_id):
        raise ApiError(ErrorCode.EMPLOYEE_IN_USE, "この社員は日報や顧客で使用されているため削除できません")
    await repo.delete(employee)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
