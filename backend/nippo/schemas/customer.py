"""Schemas for customer master endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from nippo.schemas.employee import EMAIL_PATTERN


class CustomerIn(BaseModel):
    customer_name: str = Field(min_length=1, max_length=100)
    address: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20, pattern=r"^[0-9-]*$")
    email: Optional[str] = Field(default=None, max_length=255, pattern=EMAIL_PATTERN)
    assigned_employee_id: int = Field(gt=0)


class CustomerResponse(BaseModel):
    customer_id: int
    customer_name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    assigned_employee_id: int
    assigned_employee_name: str
    created_at: datetime
    updated_at: datetime
