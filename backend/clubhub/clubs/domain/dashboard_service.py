"""Club head dashboard."""

from __future__ import annotations

from clubhub.clubs.domain import policies, repo as repo_module
from clubhub.clubs.domain.policies import Capability
from clubhub.clubs.domain.services import club_to_response, event_to_response
from clubhub.clubs.schemas import dto
from clubhub.infra.auth import Actor


class DashboardService:
	def __init__(self, repository: repo_module.ClubsRepository | None = None) -> None:
		self.repo = repository or repo_module.ClubsRepository()

	async def get_dashboard(self, actor: Actor) -> dto.DashboardResponse:
		"""Clubs the actor heads, in any approval state, and every event they organize."""
		policies.require_capability(actor, Capability.OPEN_DASHBOARD)
		clubs = await self.repo.list_headed_clubs(actor.user_id)
		by_id = {club.id: club for club in clubs}
		events = await self.repo.list_events_for_clubs(list(by_id))
		return dto.DashboardResponse(
			clubs=[club_to_response(club) for club in clubs],
			events=[event_to_response(event, club=by_id.get(event.organizer_club)) for event in events],
		)
