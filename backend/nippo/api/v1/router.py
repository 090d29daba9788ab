"""API v1 root router."""

from __future__ import annotations

from fastapi import APIRouter

from nippo.api.v1.comments import router as comments_router
from nippo.api.v1.customers import router as customers_router
from nippo.api.v1.dashboard import router as dashboard_router
from nippo.api.v1.daily_reports import router as daily_reports_router
from nippo.api.v1.employees import router as employees_router
from nippo.api.v1.me import router as me_router


router = APIRouter()
router.include_router(daily_reports_router, tags=["daily-reports"])
router.include_router(comments_router, tags=["comments"])
router.include_router(employees_router, tags=["employees"])
router.include_router(customers_router, tags=["customers"])
router.include_router(me_router, tags=["me"])
router.include_router(dashboard_router, tags=["dashboard"])
