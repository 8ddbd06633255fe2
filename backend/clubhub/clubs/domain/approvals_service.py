"""Admin review of pending clubs and events."""

from __future__ import annotations

from uuid import UUID

from clubhub.clubs.domain import policies, repo as repo_module
from clubhub.clubs.domain.exceptions import NotFoundError
from clubhub.clubs.domain.services import club_to_response, event_to_response
from clubhub.clubs.schemas import dto
from clubhub.infra.auth import Actor
from clubhub.obs import audit
from clubhub.obs import metrics as obs_metrics


class ApprovalsService:
	"""Approve or reject submissions. Every operation is admin only."""

	def __init__(self, repository: repo_module.ClubsRepository | None = None) -> None:
		self.repo = repository or repo_module.ClubsRepository()

	async def list_pending_clubs(self, actor: Actor) -> dto.PendingClubsResponse:
		policies.require_admin(actor)
		clubs = await self.repo.list_pending_clubs()
		return dto.PendingClubsResponse(items=[club_to_response(club) for club in clubs])

	async def list_pending_events(self, actor: Actor) -> dto.PendingEventsResponse:
		policies.require_admin(actor)
		events = await self.repo.list_pending_events()
		clubs = await self.repo.get_clubs(event.organizer_club for event in events)
		return dto.PendingEventsResponse(
			items=[event_to_response(event, club=clubs.get(event.organizer_club)) for event in events]
		)

	async def approve_club(self, actor: Actor, club_id: UUID) -> dto.ClubResponse:
		policies.require_admin(actor)
		club = await self.repo.approve_club(club_id)
		if club is None:
			raise NotFoundError("club_not_found")
		obs_metrics.inc_approval_decision("club", "approve")
		await audit.log_event(actor, "club.approved", meta={"club_id": str(club_id)})
		return club_to_response(club)

	async def reject_club(self, actor: Actor, club_id: UUID) -> None:
		"""Delete the club together with its members, events and announcements."""
		policies.require_admin(actor)
		if not await self.repo.delete_club(club_id):
			raise NotFoundError("club_not_found")
		obs_metrics.inc_approval_decision("club", "reject")
		await audit.log_event(actor, "club.rejected", meta={"club_id": str(club_id)})

	async def approve_event(self, actor: Actor, event_id: UUID) -> dto.EventResponse:
		policies.require_admin(actor)
		event = await self.repo.approve_event(event_id)
		if event is None:
			raise NotFoundError("event_not_found")
		obs_metrics.inc_approval_decision("event", "approve")
		await audit.log_event(actor, "event.approved", meta={"event_id": str(event_id)})
		return event_to_response(event)

	async def reject_event(self, actor: Actor, event_id: UUID) -> None:
		policies.require_admin(actor)
		if not await self.repo.delete_event(event_id):
			raise NotFoundError("event_not_found")
		obs_metrics.inc_approval_decision("event", "reject")
		await audit.log_event(actor, "event.rejected", meta={"event_id": str(event_id)})
