import asyncio
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Optional, Sequence
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from fakeredis.aioredis import FakeRedis

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")

from clubhub.clubs.domain import models
from clubhub.clubs.domain.exceptions import NotFoundError
from clubhub.infra import postgres
from clubhub.main import app
from clubhub.settings import settings


@pytest.fixture(autouse=True)
def fake_redis():
	from clubhub.infra.redis import redis_client, set_redis_client

	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop():
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)


@pytest.fixture(autouse=True)
def force_test_settings():
	"""Ensure a consistent test environment.

	API tests authenticate via X-User-Id/X-User-Role headers, which are only
	accepted in dev mode.
	"""
	original_env = settings.environment
	original_events = settings.events_require_club_head
	original_announcements = settings.announcements_require_club_head
	settings.environment = "dev"
	settings.events_require_club_head = True
	settings.announcements_require_club_head = False
	try:
		yield
	finally:
		settings.environment = original_env
		settings.events_require_club_head = original_events
		settings.announcements_require_club_head = original_announcements


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client


class InMemoryClubsRepository:
	"""Dict-backed stand-in for ClubsRepository with the same write semantics.

	Membership and registration changes hold a per-pair asyncio lock and yield
	between read and write, so concurrent callers actually interleave.
	"""

	def __init__(self) -> None:
		self._clock = datetime.now(timezone.utc).replace(microsecond=0)
		self.profiles: dict[UUID, models.Profile] = {}
		self.clubs: dict[UUID, models.Club] = {}
		self.members: dict[tuple[UUID, UUID], models.ClubMember] = {}
		self.events: dict[UUID, models.Event] = {}
		self.participants: set[tuple[UUID, UUID]] = set()
		self.announcements: list[models.Announcement] = []
		self._locks: dict[tuple, asyncio.Lock] = {}

	def _now(self) -> datetime:
		self._clock += timedelta(seconds=1)
		return self._clock

	def _lock(self, *key) -> asyncio.Lock:
		return self._locks.setdefault(key, asyncio.Lock())

	# seeding helpers -----------------------------------------------------

	def add_club(self, *, name: str = "Chess Club", approved: bool = True, head: UUID | None = None, **fields) -> models.Club:
		now = self._now()
		values = {
			"id": uuid4(),
			"name": name,
			"category": "Technical",
			"description": f"{name} description",
			"faculty_advisor": "Dr. Rao",
			"created_by": head,
			"approved": approved,
			"created_at": now,
			"updated_at": now,
		}
		values.update(fields)
		club = models.Club(**values)
		self.clubs[club.id] = club
		if head is not None:
			self.members[(club.id, head)] = models.ClubMember(
				id=uuid4(), club_id=club.id, user_id=head, role_in_club="head", joined_at=now
			)
		return club

	def add_event(self, club_id: UUID, *, title: str = "Meetup", date: datetime | None = None, approved: bool = True) -> models.Event:
		now = self._now()
		event = models.Event(
			id=uuid4(),
			title=title,
			description=f"{title} description",
			date=date or now + timedelta(days=7),
			venue="Main Hall",
			organizer_club=club_id,
			approved=approved,
			created_at=now,
			updated_at=now,
		)
		self.events[event.id] = event
		return event

	def add_profile(self, user_id: UUID, *, name: str = "Asha", role: str = "student") -> models.Profile:
		now = self._now()
		profile = models.Profile(
			id=user_id, name=name, email=f"{user_id.hex[:8]}@campus.edu", role=role, created_at=now, updated_at=now
		)
		self.profiles[user_id] = profile
		return profile

	def members_of(self, club_id: UUID) -> list[models.ClubMember]:
		return [m for key, m in self.members.items() if key[0] == club_id]

	# profiles ------------------------------------------------------------

	async def get_profile(self, user_id: UUID) -> models.Profile | None:
		return self.profiles.get(user_id)

	async def get_profiles(self, user_ids: Iterable[UUID]) -> dict[UUID, models.Profile]:
		return {uid: self.profiles[uid] for uid in set(user_ids) if uid in self.profiles}

	async def upsert_profile(self, *, user_id: UUID, name: str, email: str, role: str) -> models.Profile:
		now = self._now()
		existing = self.profiles.get(user_id)
		profile = models.Profile(
			id=user_id,
			name=name,
			email=email,
			role=role,
			created_at=existing.created_at if existing else now,
			updated_at=now,
		)
		self.profiles[user_id] = profile
		return profile

	# clubs ---------------------------------------------------------------

	async def create_club_with_head(self, *, created_by: UUID, **fields) -> models.Club:
		return self.add_club(head=created_by, approved=False, **fields)

	async def get_club(self, club_id: UUID) -> models.Club | None:
		return self.clubs.get(club_id)

	async def get_clubs(self, club_ids: Iterable[UUID]) -> dict[UUID, models.Club]:
		return {cid: self.clubs[cid] for cid in set(club_ids) if cid in self.clubs}

	async def list_approved_clubs(self, *, category: Optional[str] = None, search: Optional[str] = None) -> list[models.Club]:
		needle = search.lower() if search else None
		clubs = [
			club
			for club in self.clubs.values()
			if club.approved
			and (category is None or club.category == category)
			and (needle is None or needle in club.name.lower() or needle in club.description.lower())
		]
		return sorted(clubs, key=lambda club: (club.name, str(club.id)))

	async def list_recent_approved_clubs(self, *, limit: int) -> list[models.Club]:
		clubs = [club for club in self.clubs.values() if club.approved]
		return sorted(clubs, key=lambda club: club.created_at, reverse=True)[:limit]

	async def list_pending_clubs(self) -> list[models.Club]:
		return sorted((c for c in self.clubs.values() if not c.approved), key=lambda c: c.created_at)

	async def list_headed_clubs(self, user_id: UUID) -> list[models.Club]:
		ids = [m.club_id for m in self.members.values() if m.user_id == user_id and m.is_head]
		return sorted((self.clubs[cid] for cid in ids), key=lambda club: club.name)

	async def approve_club(self, club_id: UUID) -> models.Club | None:
		club = self.clubs.get(club_id)
		if club is None:
			return None
		if not club.approved:
			club = club.model_copy(update={"approved": True, "updated_at": self._now()})
			self.clubs[club_id] = club
		return club

	async def delete_club(self, club_id: UUID) -> bool:
		if club_id not in self.clubs:
			return False
		event_ids = {eid for eid, event in self.events.items() if event.organizer_club == club_id}
		self.participants = {pair for pair in self.participants if pair[0] not in event_ids}
		for eid in event_ids:
			del self.events[eid]
		self.announcements = [a for a in self.announcements if a.club_id != club_id]
		self.members = {key: m for key, m in self.members.items() if key[0] != club_id}
		del self.clubs[club_id]
		return True

	# memberships ---------------------------------------------------------

	async def get_member(self, club_id: UUID, user_id: UUID) -> models.ClubMember | None:
		return self.members.get((club_id, user_id))

	async def count_members(self, club_id: UUID) -> int:
		return sum(1 for key in self.members if key[0] == club_id)

	async def change_membership(self, club_id: UUID, user_id: UUID, *, mode: str) -> models.MembershipChange:
		async with self._lock("club_members", club_id, user_id):
			existing = self.members.get((club_id, user_id))
			await asyncio.sleep(0)
			changed = False
			if existing is None and mode in ("toggle", "add"):
				if club_id not in self.clubs:
					raise NotFoundError("club_not_found")
				existing = models.ClubMember(
					id=uuid4(), club_id=club_id, user_id=user_id, role_in_club="member", joined_at=self._now()
				)
				self.members[(club_id, user_id)] = existing
				changed = True
			elif existing is not None and mode in ("toggle", "remove"):
				del self.members[(club_id, user_id)]
				existing = None
				changed = True
			return models.MembershipChange(
				is_member=existing is not None,
				role_in_club=existing.role_in_club if existing else None,
				changed=changed,
				member_count=await self.count_members(club_id),
			)

	# events --------------------------------------------------------------

	async def create_event(self, *, organizer_club: UUID, title: str, date: datetime, **fields) -> models.Event:
		if organizer_club not in self.clubs:
			raise NotFoundError("club_not_found")
		event = self.add_event(organizer_club, title=title, date=date, approved=False)
		event = event.model_copy(update=fields)
		self.events[event.id] = event
		return event

	async def get_event(self, event_id: UUID) -> models.Event | None:
		return self.events.get(event_id)

	async def list_upcoming_events(self, *, now: datetime, limit: Optional[int] = None) -> list[models.Event]:
		events = sorted(
			(e for e in self.events.values() if e.approved and self.clubs[e.organizer_club].approved and e.date >= now),
			key=lambda e: e.date,
		)
		return events[:limit] if limit is not None else events

	async def list_club_events(self, club_id: UUID) -> list[models.Event]:
		return sorted(
			(e for e in self.events.values() if e.organizer_club == club_id and e.approved),
			key=lambda e: e.date,
		)

	async def list_events_for_clubs(self, club_ids: Sequence[UUID]) -> list[models.Event]:
		wanted = set(club_ids)
		return sorted((e for e in self.events.values() if e.organizer_club in wanted), key=lambda e: e.date, reverse=True)

	async def list_pending_events(self) -> list[models.Event]:
		return sorted((e for e in self.events.values() if not e.approved), key=lambda e: e.created_at)

	async def approve_event(self, event_id: UUID) -> models.Event | None:
		event = self.events.get(event_id)
		if event is None:
			return None
		if not event.approved:
			event = event.model_copy(update={"approved": True, "updated_at": self._now()})
			self.events[event_id] = event
		return event

	async def delete_event(self, event_id: UUID) -> bool:
		if event_id not in self.events:
			return False
		self.participants = {pair for pair in self.participants if pair[0] != event_id}
		del self.events[event_id]
		return True

	async def registered_event_ids(self, user_id: UUID, event_ids: Sequence[UUID]) -> set[UUID]:
		return {eid for eid in event_ids if (eid, user_id) in self.participants}

	async def change_registration(self, event_id: UUID, user_id: UUID, *, mode: str) -> models.RegistrationChange:
		async with self._lock("event_participants", event_id, user_id):
			registered = (event_id, user_id) in self.participants
			await asyncio.sleep(0)
			changed = False
			if not registered and mode in ("toggle", "add"):
				if event_id not in self.events:
					raise NotFoundError("event_not_found")
				self.participants.add((event_id, user_id))
				registered = changed = True
			elif registered and mode in ("toggle", "remove"):
				self.participants.discard((event_id, user_id))
				registered = False
				changed = True
			count = sum(1 for pair in self.participants if pair[0] == event_id)
			return models.RegistrationChange(is_registered=registered, changed=changed, participant_count=count)

	# announcements -------------------------------------------------------

	async def create_announcement(self, *, club_id: UUID, message: str, created_by: UUID) -> models.Announcement:
		if club_id not in self.clubs:
			raise NotFoundError("club_not_found")
		announcement = models.Announcement(
			id=uuid4(), club_id=club_id, message=message, created_by=created_by, created_at=self._now()
		)
		self.announcements.append(announcement)
		return announcement

	async def list_recent_announcements(self, *, limit: int) -> list[models.Announcement]:
		visible = [a for a in self.announcements if a.club_id in self.clubs and self.clubs[a.club_id].approved]
		return sorted(visible, key=lambda a: a.created_at, reverse=True)[:limit]


@pytest.fixture
def memory_repo() -> InMemoryClubsRepository:
	return InMemoryClubsRepository()
