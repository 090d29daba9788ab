"""Schemas for comment endpoints."""

from __future__ import annotations

from pydantic import BaseModel, field_validator


class CommentIn(BaseModel):
    comment_content: str

    @field_validator("comment_content")
    @classmethod
    def _content(cls, v: str) -> str:
        if not v:
            raise ValueError("コメント内容は必須です")
        if len(v) > 500:
            raise ValueError("コメント内容は500文字以内で入力してください")
        return v
