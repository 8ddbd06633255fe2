"""Domain models for clubs, events, announcements and their relations."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

GlobalRole = Literal["student", "club_head", "admin"]
ClubCategory = Literal["Cultural", "Technical", "Literary", "Sports"]
ClubRole = Literal["member", "head"]


class Profile(BaseModel):
	"""Mirror of an identity-provider account."""

	id: UUID
	name: str
	email: str
	role: GlobalRole
	created_at: datetime
	updated_at: datetime

	model_config = ConfigDict(from_attributes=True)


class Club(BaseModel):
	"""A student club. Hidden from listings until an admin approves it."""

	id: UUID
	name: str
	category: ClubCategory
	description: str
	faculty_advisor: str
	logo_url: Optional[str] = None
	whatsapp_link: Optional[str] = None
	created_by: Optional[UUID] = None
	approved: bool = False
	created_at: datetime
	updated_at: datetime

	model_config = ConfigDict(from_attributes=True)


class ClubMember(BaseModel):
	"""Membership row keyed on (club_id, user_id)."""

	id: UUID
	club_id: UUID
	user_id: UUID
	role_in_club: ClubRole
	joined_at: datetime

	model_config = ConfigDict(from_attributes=True)

	@property
	def is_head(self) -> bool:
		return self.role_in_club == "head"


class Event(BaseModel):
	"""An event organized by a club, gated by approval like clubs."""

	id: UUID
	title: str
	description: str
	date: datetime
	venue: str
	organizer_club: UUID
	banner_url: Optional[str] = None
	approved: bool = False
	created_at: datetime
	updated_at: datetime

	model_config = ConfigDict(from_attributes=True)


class Announcement(BaseModel):
	"""Immutable club announcement."""

	id: UUID
	club_id: UUID
	message: str
	created_by: Optional[UUID] = None
	created_at: datetime

	model_config = ConfigDict(from_attributes=True)


class MembershipChange(BaseModel):
	"""Outcome of a membership write: the resulting state and whether it changed."""

	is_member: bool
	role_in_club: Optional[ClubRole] = None
	changed: bool
	member_count: int


class RegistrationChange(BaseModel):
	is_registered: bool
	changed: bool
	participant_count: int
