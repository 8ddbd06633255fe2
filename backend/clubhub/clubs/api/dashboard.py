"""Club head dashboard route."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from clubhub.clubs.api._errors import to_http_error
from clubhub.clubs.domain.dashboard_service import DashboardService
from clubhub.clubs.schemas import dto
from clubhub.infra.auth import Actor, get_current_user

router = APIRouter(tags=["dashboard"])
_service = DashboardService()


@router.get("/dashboard", response_model=dto.DashboardResponse)
async def dashboard_endpoint(actor: Actor = Depends(get_current_user)) -> dto.DashboardResponse:
	try:
		return await _service.get_dashboard(actor)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc
