"""Service layer for club browsing, submission and membership."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from clubhub.clubs.domain import models, policies, repo as repo_module
from clubhub.clubs.domain.policies import Capability
from clubhub.clubs.domain.repo import ToggleMode
from clubhub.clubs.schemas import dto
from clubhub.infra.auth import Actor
from clubhub.obs import audit
from clubhub.obs import metrics as obs_metrics
from clubhub.settings import settings


def club_to_response(club: models.Club) -> dto.ClubResponse:
	return dto.ClubResponse(**club.model_dump())


def club_summary(club: models.Club | None) -> dto.ClubSummary | None:
	if club is None:
		return None
	return dto.ClubSummary(id=club.id, name=club.name, category=club.category, logo_url=club.logo_url)


def event_to_response(
	event: models.Event,
	*,
	club: models.Club | None = None,
	is_registered: bool | None = None,
) -> dto.EventResponse:
	return dto.EventResponse(**event.model_dump(), club=club_summary(club), is_registered=is_registered)


class ClubsService:
	"""Club listings, submission and membership toggles."""

	def __init__(self, repository: repo_module.ClubsRepository | None = None) -> None:
		self.repo = repository or repo_module.ClubsRepository()

	async def _ensure_club_visible(
		self,
		actor: Actor,
		club_id: UUID,
	) -> tuple[models.Club, models.ClubMember | None]:
		club = await self.repo.get_club(club_id)
		membership = await self.repo.get_member(club_id, actor.user_id) if club else None
		club = policies.require_visible_club(actor, club, membership)
		return club, membership

	# ------------------------------------------------------------------
	# Listings

	async def list_approved_clubs(
		self,
		actor: Actor,
		*,
		category: Optional[str] = None,
		search: Optional[str] = None,
	) -> dto.ClubListResponse:
		policies.require_capability(actor, Capability.BROWSE)
		clubs = await self.repo.list_approved_clubs(category=category, search=search or None)
		return dto.ClubListResponse(items=[club_to_response(club) for club in clubs])

	async def list_featured_clubs(self, actor: Actor, *, limit: Optional[int] = None) -> dto.ClubListResponse:
		policies.require_capability(actor, Capability.BROWSE)
		if limit is None:
			limit = settings.featured_clubs_limit
		policies.ensure_list_limit(limit, settings.max_list_limit)
		clubs = await self.repo.list_recent_approved_clubs(limit=limit)
		return dto.ClubListResponse(items=[club_to_response(club) for club in clubs])

	async def get_club_profile(self, actor: Actor, club_id: UUID) -> dto.ClubProfileResponse:
		policies.require_capability(actor, Capability.BROWSE)
		club, membership = await self._ensure_club_visible(actor, club_id)
		events = await self.repo.list_club_events(club.id)
		registered = await self.repo.registered_event_ids(actor.user_id, [event.id for event in events])
		member_count = await self.repo.count_members(club.id)
		return dto.ClubProfileResponse(
			club=club_to_response(club),
			events=[event_to_response(event, club=club, is_registered=event.id in registered) for event in events],
			member_count=member_count,
			is_member=membership is not None,
			role_in_club=membership.role_in_club if membership else None,
		)

	# ------------------------------------------------------------------
	# Submission

	async def create_club(self, actor: Actor, payload: dto.ClubCreateRequest) -> dto.ClubResponse:
		policies.require_capability(actor, Capability.CREATE_CLUB)
		club = await self.repo.create_club_with_head(
			name=payload.name.strip(),
			category=payload.category,
			description=payload.description,
			faculty_advisor=payload.faculty_advisor.strip(),
			logo_url=payload.logo_url,
			whatsapp_link=payload.whatsapp_link,
			created_by=actor.user_id,
		)
		obs_metrics.inc_club_created()
		await audit.log_event(actor, "club.submitted", meta={"club_id": str(club.id), "category": club.category})
		return club_to_response(club)

	# ------------------------------------------------------------------
	# Membership

	async def toggle_membership(self, actor: Actor, club_id: UUID) -> dto.MembershipStateResponse:
		return await self._change_membership(actor, club_id, mode="toggle")

	async def join_club(self, actor: Actor, club_id: UUID) -> dto.MembershipStateResponse:
		return await self._change_membership(actor, club_id, mode="add")

	async def leave_club(self, actor: Actor, club_id: UUID) -> dto.MembershipStateResponse:
		return await self._change_membership(actor, club_id, mode="remove")

	async def _change_membership(self, actor: Actor, club_id: UUID, *, mode: ToggleMode) -> dto.MembershipStateResponse:
		policies.require_capability(actor, Capability.JOIN_CLUB)
		await self._ensure_club_visible(actor, club_id)
		change = await self.repo.change_membership(club_id, actor.user_id, mode=mode)
		if change.changed:
			action = "join" if change.is_member else "leave"
			obs_metrics.inc_membership_change(action)
			await audit.log_event(
				actor,
				f"club.member.{action}",
				meta={"club_id": str(club_id), "member_count": change.member_count},
			)
		return dto.MembershipStateResponse(
			club_id=club_id,
			is_member=change.is_member,
			role_in_club=change.role_in_club,
			member_count=change.member_count,
		)
