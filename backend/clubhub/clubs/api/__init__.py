"""FastAPI routers for the clubs workflow."""

from __future__ import annotations

from fastapi import APIRouter

from clubhub.clubs.api import admin, announcements, clubs, dashboard, events, me

router = APIRouter(prefix="/api/v1")

router.include_router(clubs.router)
router.include_router(events.router)
router.include_router(announcements.router)
router.include_router(admin.router)
router.include_router(dashboard.router)
router.include_router(me.router)
