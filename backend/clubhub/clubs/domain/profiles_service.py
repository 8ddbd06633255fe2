"""Local mirror of identity-provider profiles."""

from __future__ import annotations

from clubhub.clubs.domain import policies, repo as repo_module
from clubhub.clubs.domain.exceptions import NotFoundError
from clubhub.clubs.schemas import dto
from clubhub.infra.auth import Actor


class ProfilesService:
	def __init__(self, repository: repo_module.ClubsRepository | None = None) -> None:
		self.repo = repository or repo_module.ClubsRepository()

	async def get_profile(self, actor: Actor) -> dto.ProfileResponse:
		profile = await self.repo.get_profile(actor.user_id)
		if profile is None:
			raise NotFoundError("profile_not_found")
		return dto.ProfileResponse(**profile.model_dump())

	async def sync_profile(self, actor: Actor, payload: dto.ProfileSyncRequest) -> dto.ProfileResponse:
		# role always comes from the verified token
		profile = await self.repo.upsert_profile(
			user_id=actor.user_id,
			name=payload.name.strip(),
			email=payload.email.strip().lower(),
			role=actor.role,
		)
		return dto.ProfileResponse(**profile.model_dump())

	@staticmethod
	def capabilities(actor: Actor) -> dto.CapabilitiesResponse:
		caps = policies.capabilities_for(actor.role)
		return dto.CapabilitiesResponse(role=actor.role, capabilities=sorted(cap.value for cap in caps))
