"""Enforcement adapters around the policy.

The policy decides; these helpers translate a deny for each call site:
- API handlers raise `ApiError` (401/403/400 JSON body).
- Page handlers redirect to /login or /forbidden.
Denials are logged here, never inside the policy.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import status
from fastapi.responses import RedirectResponse

from nippo.core.errors import ApiError, ErrorCode
from nippo.security.policy import (
    MSG_INVALID_USER,
    MSG_UNAUTHORIZED,
    Actor,
    Decision,
    has_employee_identity,
)


logger = logging.getLogger("nippo")

LOGIN_PATH = "/login"
FORBIDDEN_PATH = "/forbidden"


def _log_denied(decision: Decision, action: str, actor: Optional[Actor]) -> None:
    logger.info(
        json.dumps(
            {
                "event": "authz_denied",
                "action": action,
                "code": decision.code.value if decision.code else None,
                "role": actor.role.name if actor else None,
                "token_fingerprint": actor.token_fingerprint if actor else None,
            }
        )
    )


def enforce(decision: Decision, *, action: str, actor: Optional[Actor] = None) -> None:
    """Raise the decision's error when it denies."""
    if decision:
        return
    _log_denied(decision, action, actor)
    raise ApiError(decision.code or ErrorCode.FORBIDDEN, decision.message or "")


def page_redirect(
    decision: Decision, *, action: str, actor: Optional[Actor] = None
) -> Optional[RedirectResponse]:
    """None on allow, else a redirect: unauthenticated to login, the rest to forbidden."""
    if decision:
        return None
    _log_denied(decision, action, actor)
    target = LOGIN_PATH if decision.code is ErrorCode.UNAUTHORIZED else FORBIDDEN_PATH
    return RedirectResponse(url=target, status_code=status.HTTP_303_SEE_OTHER)


def enforce_actor(decision: Decision, actor: Optional[Actor], *, action: str) -> Actor:
    """`enforce` a decision that implies authentication and return the actor."""
    enforce(decision, action=action, actor=actor)
    if actor is None:
        raise ApiError(ErrorCode.UNAUTHORIZED, MSG_UNAUTHORIZED)
    return actor


def enforce_employee_id(actor: Optional[Actor], *, action: str) -> int:
    """Employee id for rows attributed to the actor; INVALID_USER when missing."""
    enforce(has_employee_identity(actor), action=action, actor=actor)
    if actor is None or actor.employee_id is None:
        raise ApiError(ErrorCode.INVALID_USER, MSG_INVALID_USER)
    return actor.employee_id
