"""API dependencies.

- One database session per request.
- The actor is resolved but NOT required here: handlers pass it (possibly None)
  to the policy, which owns the UNAUTHORIZED decision.
"""

from __future__ import annotations

from collections.abc import Generator
from datetime import date
from typing import Any, Optional, TypeVar

from fastapi import Depends, Request
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from nippo.core.db import SessionLocal
from nippo.core.errors import invalid_input
from nippo.security.auth import maybe_get_actor
from nippo.security.guards import enforce_actor
from nippo.security.policy import Actor, require_authenticated


def get_db_session() -> Generator[Session, None, None]:
    session: Session = SessionLocal()
    try:
        session.autoflush = False
        yield session
    finally:
        session.close()


def get_today() -> date:
    """Reference date for week-based figures; overridable in tests."""
    return date.today()


def get_optional_actor(request: Request) -> Optional[Actor]:
    return maybe_get_actor(request)


def get_actor(actor: Optional[Actor] = Depends(get_optional_actor)) -> Actor:
    """Authenticated actor; 401 otherwise."""
    return enforce_actor(require_authenticated(actor), actor, action="authenticate")


M = TypeVar("M", bound=BaseModel)


def parse_body(model: type[M], body: Any) -> M:
    """Validate a request body after authorization has run."""
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise invalid_input(e.errors()) from e
