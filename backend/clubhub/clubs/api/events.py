"""Event listing, submission and registration routes."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from clubhub.clubs.api._errors import to_http_error
from clubhub.clubs.domain.events_service import EventsService
from clubhub.clubs.schemas import dto
from clubhub.infra.auth import Actor, get_current_user

router = APIRouter(tags=["events"])
_service = EventsService()


@router.get("/events", response_model=dto.EventListResponse)
async def list_events_endpoint(
	limit: Optional[int] = None,
	actor: Actor = Depends(get_current_user),
) -> dto.EventListResponse:
	try:
		return await _service.list_upcoming_events(actor, limit=limit)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/events/upcoming", response_model=dto.EventListResponse)
async def list_home_events_endpoint(actor: Actor = Depends(get_current_user)) -> dto.EventListResponse:
	try:
		return await _service.list_home_events(actor)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/events", response_model=dto.EventResponse, status_code=201)
async def create_event_endpoint(
	payload: dto.EventCreateRequest,
	actor: Actor = Depends(get_current_user),
) -> dto.EventResponse:
	try:
		return await _service.create_event(actor, payload)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/events/{event_id}/registration/toggle", response_model=dto.RegistrationStateResponse)
async def toggle_registration_endpoint(
	event_id: UUID,
	actor: Actor = Depends(get_current_user),
) -> dto.RegistrationStateResponse:
	try:
		return await _service.toggle_registration(actor, event_id)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.put("/events/{event_id}/registration", response_model=dto.RegistrationStateResponse)
async def register_endpoint(
	event_id: UUID,
	actor: Actor = Depends(get_current_user),
) -> dto.RegistrationStateResponse:
	try:
		return await _service.register(actor, event_id)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.delete("/events/{event_id}/registration", response_model=dto.RegistrationStateResponse)
async def cancel_registration_endpoint(
	event_id: UUID,
	actor: Actor = Depends(get_current_user),
) -> dto.RegistrationStateResponse:
	try:
		return await _service.cancel(actor, event_id)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc
