"""Schemas for employee directory endpoints (admin only)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class EmployeeIn(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    department: str = Field(min_length=1, max_length=100)
    position: str = Field(min_length=1, max_length=100)
    manager_id: Optional[int] = None


class EmployeeResponse(BaseModel):
    employee_id: int
    name: str
    email: str
    department: str
    position: str
    manager_id: Optional[int] = None
    manager_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class EmployeeOption(BaseModel):
    employee_id: int
    name: str
