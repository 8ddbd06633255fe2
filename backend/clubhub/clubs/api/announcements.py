"""Announcement feed routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from clubhub.clubs.api._errors import to_http_error
from clubhub.clubs.domain.announcements_service import AnnouncementsService
from clubhub.clubs.schemas import dto
from clubhub.infra.auth import Actor, get_current_user

router = APIRouter(tags=["announcements"])
_service = AnnouncementsService()


@router.get("/announcements", response_model=dto.AnnouncementListResponse)
async def list_announcements_endpoint(
	limit: Optional[int] = None,
	actor: Actor = Depends(get_current_user),
) -> dto.AnnouncementListResponse:
	try:
		return await _service.list_recent(actor, limit=limit)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/announcements", response_model=dto.AnnouncementResponse, status_code=201)
async def post_announcement_endpoint(
	payload: dto.AnnouncementCreateRequest,
	actor: Actor = Depends(get_current_user),
) -> dto.AnnouncementResponse:
	try:
		return await _service.post_announcement(actor, payload)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc
