"""Announcements posted by clubs and the public feed."""

from __future__ import annotations

from typing import Optional

from clubhub.clubs.domain import models, policies, repo as repo_module
from clubhub.clubs.domain.policies import Capability
from clubhub.clubs.domain.services import club_summary
from clubhub.clubs.schemas import dto
from clubhub.infra.auth import Actor
from clubhub.obs import audit
from clubhub.obs import metrics as obs_metrics
from clubhub.settings import settings


def _to_response(
	announcement: models.Announcement,
	*,
	club: models.Club | None,
	author: models.Profile | None,
) -> dto.AnnouncementResponse:
	return dto.AnnouncementResponse(
		**announcement.model_dump(),
		club=club_summary(club),
		author=dto.AuthorSummary(id=author.id, name=author.name) if author else None,
	)


class AnnouncementsService:
	def __init__(self, repository: repo_module.ClubsRepository | None = None) -> None:
		self.repo = repository or repo_module.ClubsRepository()

	async def post_announcement(self, actor: Actor, payload: dto.AnnouncementCreateRequest) -> dto.AnnouncementResponse:
		policies.require_capability(actor, Capability.POST_ANNOUNCEMENT)
		message = policies.ensure_message(payload.message)
		club = await self.repo.get_club(payload.club_id)
		membership = await self.repo.get_member(payload.club_id, actor.user_id) if club else None
		club = policies.require_visible_club(actor, club, membership)
		if settings.announcements_require_club_head:
			policies.assert_club_head(actor, membership)
		announcement = await self.repo.create_announcement(
			club_id=club.id,
			message=message,
			created_by=actor.user_id,
		)
		obs_metrics.inc_announcement_posted()
		await audit.log_event(
			actor,
			"announcement.posted",
			meta={"announcement_id": str(announcement.id), "club_id": str(club.id)},
		)
		author = await self.repo.get_profile(actor.user_id)
		return _to_response(announcement, club=club, author=author)

	async def list_recent(self, actor: Actor, *, limit: Optional[int] = None) -> dto.AnnouncementListResponse:
		"""Newest announcements first, hydrated with club and author."""
		policies.require_capability(actor, Capability.BROWSE)
		if limit is None:
			limit = settings.announcements_feed_limit
		policies.ensure_list_limit(limit, settings.max_list_limit)
		announcements = await self.repo.list_recent_announcements(limit=limit)
		clubs = await self.repo.get_clubs(item.club_id for item in announcements)
		authors = await self.repo.get_profiles(item.created_by for item in announcements if item.created_by)
		return dto.AnnouncementListResponse(
			items=[
				_to_response(
					item,
					club=clubs.get(item.club_id),
					author=authors.get(item.created_by) if item.created_by else None,
				)
				for item in announcements
			]
		)
