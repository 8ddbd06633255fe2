"""Routes for the caller's own profile and capability set."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from clubhub.clubs.api._errors import to_http_error
from clubhub.clubs.domain.profiles_service import ProfilesService
from clubhub.clubs.schemas import dto
from clubhub.infra.auth import Actor, get_current_user

router = APIRouter(prefix="/me", tags=["me"])
_service = ProfilesService()


@router.get("", response_model=dto.ProfileResponse)
async def get_me_endpoint(actor: Actor = Depends(get_current_user)) -> dto.ProfileResponse:
	try:
		return await _service.get_profile(actor)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.put("", response_model=dto.ProfileResponse)
async def sync_me_endpoint(
	payload: dto.ProfileSyncRequest,
	actor: Actor = Depends(get_current_user),
) -> dto.ProfileResponse:
	try:
		return await _service.sync_profile(actor, payload)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/capabilities", response_model=dto.CapabilitiesResponse)
async def capabilities_endpoint(actor: Actor = Depends(get_current_user)) -> dto.CapabilitiesResponse:
	return _service.capabilities(actor)
