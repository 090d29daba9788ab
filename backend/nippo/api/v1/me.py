"""Current actor and global UI affordances."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from nippo.api.deps import get_actor
from nippo.schemas.permissions import MeResponse
from nippo.security import policy
from nippo.security.policy import Actor


router = APIRouter()


@router.get("/me", response_model=MeResponse)
async def get_me(actor: Actor = Depends(get_actor)) -> MeResponse:
    return MeResponse(
        sub=actor.sub,
        role=actor.role.value,
        employee_id=actor.employee_id,
        manager_id=actor.manager_id,
        can_comment=bool(policy.can_comment(actor)),
        can_create_report=bool(policy.can_create_report(actor)),
        can_access_employee_management=bool(policy.can_access_employee_management(actor)),
        can_view_team_status=bool(policy.can_view_team_status(actor)),
    )
