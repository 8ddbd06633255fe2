"""Admin approval routes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Response

from clubhub.clubs.api._errors import to_http_error
from clubhub.clubs.domain.approvals_service import ApprovalsService
from clubhub.clubs.schemas import dto
from clubhub.infra.auth import Actor, get_current_user

router = APIRouter(prefix="/admin", tags=["admin"])
_service = ApprovalsService()


@router.get("/pending/clubs", response_model=dto.PendingClubsResponse)
async def pending_clubs_endpoint(actor: Actor = Depends(get_current_user)) -> dto.PendingClubsResponse:
	try:
		return await _service.list_pending_clubs(actor)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/pending/events", response_model=dto.PendingEventsResponse)
async def pending_events_endpoint(actor: Actor = Depends(get_current_user)) -> dto.PendingEventsResponse:
	try:
		return await _service.list_pending_events(actor)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/clubs/{club_id}/approve", response_model=dto.ClubResponse)
async def approve_club_endpoint(club_id: UUID, actor: Actor = Depends(get_current_user)) -> dto.ClubResponse:
	try:
		return await _service.approve_club(actor, club_id)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.delete(
	"/clubs/{club_id}",
	status_code=204,
	response_class=Response,
	response_model=None,
)
async def reject_club_endpoint(club_id: UUID, actor: Actor = Depends(get_current_user)) -> None:
	try:
		await _service.reject_club(actor, club_id)
		return None
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/events/{event_id}/approve", response_model=dto.EventResponse)
async def approve_event_endpoint(event_id: UUID, actor: Actor = Depends(get_current_user)) -> dto.EventResponse:
	try:
		return await _service.approve_event(actor, event_id)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.delete(
	"/events/{event_id}",
	status_code=204,
	response_class=Response,
	response_model=None,
)
async def reject_event_endpoint(event_id: UUID, actor: Actor = Depends(get_current_user)) -> None:
	try:
		await _service.reject_event(actor, event_id)
		return None
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc
