"""Comment endpoints (deletion; posting lives under daily reports)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from nippo.api.deps import get_db_session, get_optional_actor
from nippo.core.errors import ApiError, ErrorCode
from nippo.repositories.comment_repo import CommentRepository
from nippo.security import policy
from nippo.security.guards import enforce
from nippo.security.policy import Actor


router = APIRouter()


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: int,
    actor: Optional[Actor] = Depends(get_optional_actor),
    db: Session = Depends(get_db_session),
) -> Response:
    """Only the commenter deletes a comment; no role overrides this."""
    enforce(policy.require_authenticated(actor), action="delete_comment")

    repo = CommentRepository(db)
    facts = await repo.get_ownership(comment_id)
    if facts is None:
        raise ApiError(ErrorCode.COMMENT_NOT_FOUND, "コメントが見つかりません")
    enforce(
        policy.can_delete_comment(actor, facts.commenter_employee_id),
        action="delete_comment",
        actor=actor,
    )

    comment = await repo.get(comment_id)
    if comment is not None:
        await repo.delete(comment)
        db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
