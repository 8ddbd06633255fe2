"""Club listing, submission and membership routes."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from clubhub.clubs.api._errors import to_http_error
from clubhub.clubs.domain.models import ClubCategory
from clubhub.clubs.domain.services import ClubsService
from clubhub.clubs.schemas import dto
from clubhub.infra.auth import Actor, get_current_user

router = APIRouter(tags=["clubs"])
_service = ClubsService()


@router.get("/clubs", response_model=dto.ClubListResponse)
async def list_clubs_endpoint(
	category: Optional[ClubCategory] = None,
	q: Optional[str] = Query(default=None, max_length=120),
	actor: Actor = Depends(get_current_user),
) -> dto.ClubListResponse:
	try:
		return await _service.list_approved_clubs(actor, category=category, search=q)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/clubs/featured", response_model=dto.ClubListResponse)
async def featured_clubs_endpoint(
	limit: Optional[int] = None,
	actor: Actor = Depends(get_current_user),
) -> dto.ClubListResponse:
	try:
		return await _service.list_featured_clubs(actor, limit=limit)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/clubs", response_model=dto.ClubResponse, status_code=201)
async def create_club_endpoint(
	payload: dto.ClubCreateRequest,
	actor: Actor = Depends(get_current_user),
) -> dto.ClubResponse:
	try:
		return await _service.create_club(actor, payload)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/clubs/{club_id}", response_model=dto.ClubProfileResponse)
async def club_profile_endpoint(
	club_id: UUID,
	actor: Actor = Depends(get_current_user),
) -> dto.ClubProfileResponse:
	try:
		return await _service.get_club_profile(actor, club_id)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/clubs/{club_id}/membership/toggle", response_model=dto.MembershipStateResponse)
async def toggle_membership_endpoint(
	club_id: UUID,
	actor: Actor = Depends(get_current_user),
) -> dto.MembershipStateResponse:
	try:
		return await _service.toggle_membership(actor, club_id)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.put("/clubs/{club_id}/membership", response_model=dto.MembershipStateResponse)
async def join_club_endpoint(
	club_id: UUID,
	actor: Actor = Depends(get_current_user),
) -> dto.MembershipStateResponse:
	try:
		return await _service.join_club(actor, club_id)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.delete("/clubs/{club_id}/membership", response_model=dto.MembershipStateResponse)
async def leave_club_endpoint(
	club_id: UUID,
	actor: Actor = Depends(get_current_user),
) -> dto.MembershipStateResponse:
	try:
		return await _service.leave_club(actor, club_id)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc
