"""Pydantic schemas for the clubs API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from clubhub.clubs.domain.models import ClubCategory, ClubRole, GlobalRole


class ClubCreateRequest(BaseModel):
	name: str = Field(..., min_length=1, max_length=120)
	category: ClubCategory
	description: str = Field(..., min_length=1, max_length=4000)
	faculty_advisor: str = Field(..., min_length=1, max_length=120)
	logo_url: Optional[str] = Field(default=None, max_length=2048)
	whatsapp_link: Optional[str] = Field(default=None, max_length=2048)


class ClubResponse(BaseModel):
	id: UUID
	name: str
	category: ClubCategory
	description: str
	faculty_advisor: str
	logo_url: Optional[str] = None
	whatsapp_link: Optional[str] = None
	created_by: Optional[UUID] = None
	approved: bool
	created_at: datetime
	updated_at: datetime


class ClubListResponse(BaseModel):
	items: List[ClubResponse]


class ClubSummary(BaseModel):
	id: UUID
	name: str
	category: ClubCategory
	logo_url: Optional[str] = None


class MembershipStateResponse(BaseModel):
	club_id: UUID
	is_member: bool
	role_in_club: Optional[ClubRole] = None
	member_count: int


class EventCreateRequest(BaseModel):
	title: str = Field(..., min_length=1, max_length=160)
	description: str = Field(..., min_length=1, max_length=4000)
	date: datetime
	venue: str = Field(..., min_length=1, max_length=200)
	organizer_club: UUID
	banner_url: Optional[str] = Field(default=None, max_length=2048)


class EventResponse(BaseModel):
	id: UUID
	title: str
	description: str
	date: datetime
	venue: str
	organizer_club: UUID
	banner_url: Optional[str] = None
	approved: bool
	created_at: datetime
	updated_at: datetime
	club: Optional[ClubSummary] = None
	is_registered: Optional[bool] = None


class EventListResponse(BaseModel):
	items: List[EventResponse]


class RegistrationStateResponse(BaseModel):
	event_id: UUID
	is_registered: bool
	participant_count: int


class ClubProfileResponse(BaseModel):
	club: ClubResponse
	events: List[EventResponse]
	member_count: int
	is_member: bool
	role_in_club: Optional[ClubRole] = None


class AnnouncementCreateRequest(BaseModel):
	club_id: UUID
	message: str = Field(..., min_length=1, max_length=4000)


class AuthorSummary(BaseModel):
	id: UUID
	name: str


class AnnouncementResponse(BaseModel):
	id: UUID
	club_id: UUID
	message: str
	created_by: Optional[UUID] = None
	created_at: datetime
	club: Optional[ClubSummary] = None
	author: Optional[AuthorSummary] = None


class AnnouncementListResponse(BaseModel):
	items: List[AnnouncementResponse]


class PendingClubsResponse(BaseModel):
	items: List[ClubResponse]


class PendingEventsResponse(BaseModel):
	items: List[EventResponse]


class DashboardResponse(BaseModel):
	clubs: List[ClubResponse]
	events: List[EventResponse]


class ProfileSyncRequest(BaseModel):
	name: str = Field(..., min_length=1, max_length=120)
	email: str = Field(..., min_length=3, max_length=320)


class ProfileResponse(BaseModel):
	id: UUID
	name: str
	email: str
	role: GlobalRole
	created_at: datetime
	updated_at: datetime


class CapabilitiesResponse(BaseModel):
	role: GlobalRole
	capabilities: List[str]
