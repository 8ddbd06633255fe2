"""Event submission, listing and registration."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from clubhub.clubs.domain import models, policies, repo as repo_module
from clubhub.clubs.domain.policies import Capability
from clubhub.clubs.domain.repo import ToggleMode
from clubhub.clubs.domain.services import event_to_response
from clubhub.clubs.schemas import dto
from clubhub.infra.auth import Actor
from clubhub.obs import audit
from clubhub.obs import metrics as obs_metrics
from clubhub.settings import settings


class EventsService:
	def __init__(self, repository: repo_module.ClubsRepository | None = None) -> None:
		self.repo = repository or repo_module.ClubsRepository()

	async def _ensure_event_visible(self, actor: Actor, event_id: UUID) -> models.Event:
		event = await self.repo.get_event(event_id)
		club = membership = None
		if event is not None:
			club = await self.repo.get_club(event.organizer_club)
			membership = await self.repo.get_member(event.organizer_club, actor.user_id)
		return policies.require_visible_event(actor, event, club, membership)

	async def create_event(self, actor: Actor, payload: dto.EventCreateRequest) -> dto.EventResponse:
		"""Submit an event for approval on behalf of its organizer club.

		The organizer club must exist and be visible to the actor. With
		``EVENTS_REQUIRE_CLUB_HEAD`` enabled (the default) only the club's head
		or an admin may submit.
		"""
		policies.require_capability(actor, Capability.CREATE_EVENT)
		club = await self.repo.get_club(payload.organizer_club)
		membership = await self.repo.get_member(payload.organizer_club, actor.user_id) if club else None
		club = policies.require_visible_club(actor, club, membership)
		if settings.events_require_club_head:
			policies.assert_club_head(actor, membership)
		event = await self.repo.create_event(
			title=payload.title.strip(),
			description=payload.description,
			date=payload.date,
			venue=payload.venue.strip(),
			organizer_club=club.id,
			banner_url=payload.banner_url,
		)
		obs_metrics.inc_event_created()
		await audit.log_event(
			actor,
			"event.submitted",
			meta={"event_id": str(event.id), "club_id": str(club.id)},
		)
		return event_to_response(event, club=club)

	async def list_upcoming_events(
		self,
		actor: Actor,
		*,
		limit: Optional[int] = None,
		now: Optional[datetime] = None,
	) -> dto.EventListResponse:
		policies.require_capability(actor, Capability.BROWSE)
		if limit is not None:
			policies.ensure_list_limit(limit, settings.max_list_limit)
		events = await self.repo.list_upcoming_events(now=now or datetime.now(timezone.utc), limit=limit)
		clubs = await self.repo.get_clubs(event.organizer_club for event in events)
		registered = await self.repo.registered_event_ids(actor.user_id, [event.id for event in events])
		return dto.EventListResponse(
			items=[
				event_to_response(
					event,
					club=clubs.get(event.organizer_club),
					is_registered=event.id in registered,
				)
				for event in events
			]
		)

	async def list_home_events(self, actor: Actor, *, now: Optional[datetime] = None) -> dto.EventListResponse:
		"""Short upcoming list for the home page, capped by ``UPCOMING_EVENTS_LIMIT``."""
		return await self.list_upcoming_events(actor, limit=settings.upcoming_events_limit, now=now)

	async def toggle_registration(self, actor: Actor, event_id: UUID) -> dto.RegistrationStateResponse:
		return await self._change_registration(actor, event_id, mode="toggle")

	async def register(self, actor: Actor, event_id: UUID) -> dto.RegistrationStateResponse:
		return await self._change_registration(actor, event_id, mode="add")

	async def cancel(self, actor: Actor, event_id: UUID) -> dto.RegistrationStateResponse:
		return await self._change_registration(actor, event_id, mode="remove")

	async def _change_registration(
		self,
		actor: Actor,
		event_id: UUID,
		*,
		mode: ToggleMode,
	) -> dto.RegistrationStateResponse:
		policies.require_capability(actor, Capability.REGISTER_EVENT)
		await self._ensure_event_visible(actor, event_id)
		change = await self.repo.change_registration(event_id, actor.user_id, mode=mode)
		if change.changed:
			action = "register" if change.is_registered else "cancel"
			obs_metrics.inc_registration_change(action)
			await audit.log_event(
				actor,
				f"event.registration.{action}",
				meta={"event_id": str(event_id), "participant_count": change.participant_count},
			)
		return dto.RegistrationStateResponse(
			event_id=event_id,
			is_registered=change.is_registered,
			participant_count=change.participant_count,
		)
