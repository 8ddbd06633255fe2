"""Authorization policies for the clubs workflow.

Everything here is a pure function of the actor and the records the caller
already loaded, so routers and services share one allow/deny decision.
"""

from __future__ import annotations

from enum import Enum

from clubhub.clubs.domain import models
from clubhub.clubs.domain.exceptions import (
	NotFoundError,
	PermissionDeniedError,
	ValidationError,
)
from clubhub.infra.auth import Actor


class Capability(str, Enum):
	BROWSE = "browse"
	JOIN_CLUB = "join_club"
	REGISTER_EVENT = "register_event"
	CREATE_CLUB = "create_club"
	CREATE_EVENT = "create_event"
	POST_ANNOUNCEMENT = "post_announcement"
	OPEN_DASHBOARD = "open_dashboard"
	REVIEW_PENDING = "review_pending"


_MEMBER_CAPABILITIES = frozenset(
	{
		Capability.BROWSE,
		Capability.JOIN_CLUB,
		Capability.REGISTER_EVENT,
		Capability.CREATE_CLUB,
		Capability.CREATE_EVENT,
		Capability.POST_ANNOUNCEMENT,
	}
)

ROLE_CAPABILITIES: dict[str, frozenset[Capability]] = {
	"student": _MEMBER_CAPABILITIES,
	"club_head": _MEMBER_CAPABILITIES | {Capability.OPEN_DASHBOARD},
	"admin": _MEMBER_CAPABILITIES | {Capability.OPEN_DASHBOARD, Capability.REVIEW_PENDING},
}

_DENIAL_DETAILS = {
	Capability.REVIEW_PENDING: "admin_role_required",
}


def capabilities_for(role: str) -> frozenset[Capability]:
	return ROLE_CAPABILITIES.get(role, frozenset())


def require_capability(actor: Actor, capability: Capability) -> None:
	if capability not in capabilities_for(actor.role):
		raise PermissionDeniedError(_DENIAL_DETAILS.get(capability, f"{capability.value}_not_allowed"))


def require_admin(actor: Actor) -> None:
	require_capability(actor, Capability.REVIEW_PENDING)


def is_club_head(membership: models.ClubMember | None) -> bool:
	return membership is not None and membership.is_head


def can_view_club(actor: Actor, club: models.Club, membership: models.ClubMember | None) -> bool:
	"""Approved clubs are public; pending ones only to admins and their own head."""
	if club.approved:
		return True
	return actor.is_admin or is_club_head(membership)


def require_visible_club(
	actor: Actor,
	club: models.Club | None,
	membership: models.ClubMember | None,
) -> models.Club:
	if club is None or not can_view_club(actor, club, membership):
		raise NotFoundError("club_not_found")
	return club


def require_visible_event(
	actor: Actor,
	event: models.Event | None,
	organizer: models.Club | None,
	organizer_membership: models.ClubMember | None,
) -> models.Event:
	"""Listed events need both the event and its organizer club approved."""
	if event is None:
		raise NotFoundError("event_not_found")
	if actor.is_admin or is_club_head(organizer_membership):
		return event
	if event.approved and organizer is not None and organizer.approved:
		return event
	raise NotFoundError("event_not_found")


def assert_club_head(actor: Actor, membership: models.ClubMember | None) -> None:
	"""Club-scoped management right: head of this club, or a global admin."""
	if actor.is_admin or is_club_head(membership):
		return
	raise PermissionDeniedError("club_head_required")


def ensure_message(message: str) -> str:
	if not message.strip():
		raise ValidationError("message_empty")
	return message


def ensure_list_limit(limit: int, maximum: int) -> int:
	if limit < 1 or limit > maximum:
		raise ValidationError("limit_out_of_range")
	return limit
