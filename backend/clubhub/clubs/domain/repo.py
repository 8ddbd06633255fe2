"""Async repository helpers for the clubs domain."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Iterable, Literal, Optional, Sequence
from uuid import UUID, uuid4

import asyncpg

from clubhub.clubs.domain import models
from clubhub.clubs.domain.exceptions import ConflictError, NotFoundError, UnavailableError
from clubhub.infra.postgres import get_pool

ToggleMode = Literal["toggle", "add", "remove"]

_UNAVAILABLE_ERRORS = (
	OSError,
	asyncio.TimeoutError,
	asyncpg.PostgresConnectionError,
	asyncpg.CannotConnectNowError,
	asyncpg.InterfaceError,
)


def like_pattern(text: str) -> str:
	"""Case-insensitive substring pattern with LIKE wildcards matched literally."""
	escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
	return f"%{escaped}%"


@asynccontextmanager
async def _connection() -> AsyncIterator[asyncpg.Connection]:
	try:
		pool = await get_pool()
		async with pool.acquire() as conn:
			yield conn
	except _UNAVAILABLE_ERRORS as exc:
		raise UnavailableError("store_unavailable") from exc


async def _advisory_lock(conn: asyncpg.Connection, *parts: object) -> None:
	"""Serialize writers on one (parent, user) pair for the rest of the transaction."""
	key = ":".join(str(part) for part in parts)
	await conn.execute("SELECT pg_advisory_xact_lock(hashtextextended($1, 0))", key)


class ClubsRepository:
	"""Thin data-access layer around asyncpg."""

	# --- Profiles ---------------------------------------------------------

	async def get_profile(self, user_id: UUID) -> models.Profile | None:
		async with _connection() as conn:
			record = await conn.fetchrow("SELECT * FROM profiles WHERE id=$1", user_id)
		return models.Profile.model_validate(dict(record)) if record else None

	async def get_profiles(self, user_ids: Iterable[UUID]) -> dict[UUID, models.Profile]:
		ids = list({uid for uid in user_ids})
		if not ids:
			return {}
		async with _connection() as conn:
			rows = await conn.fetch("SELECT * FROM profiles WHERE id = ANY($1::uuid[])", ids)
		profiles = [models.Profile.model_validate(dict(row)) for row in rows]
		return {profile.id: profile for profile in profiles}

	async def upsert_profile(self, *, user_id: UUID, name: str, email: str, role: str) -> models.Profile:
		async with _connection() as conn:
			try:
				record = await conn.fetchrow(
					"""
					INSERT INTO profiles (id, name, email, role)
					VALUES ($1, $2, $3, $4)
					ON CONFLICT (id) DO UPDATE
					SET name = EXCLUDED.name, email = EXCLUDED.email, role = EXCLUDED.role, updated_at = NOW()
					RETURNING *
					""",
					user_id,
					name,
					email,
					role,
				)
			except asyncpg.UniqueViolationError as exc:
				raise ConflictError("email_in_use") from exc
		return models.Profile.model_validate(dict(record))

	# --- Clubs ------------------------------------------------------------

	async def create_club_with_head(
		self,
		*,
		name: str,
		category: str,
		description: str,
		faculty_advisor: str,
		logo_url: str | None,
		whatsapp_link: str | None,
		created_by: UUID,
	) -> models.Club:
		"""Insert the club and its head membership as one unit."""
		async with _connection() as conn:
			async with conn.transaction():
				record = await conn.fetchrow(
					"""
					INSERT INTO clubs (id, name, category, description, faculty_advisor, logo_url,
						whatsapp_link, created_by, approved)
					VALUES ($1, $2, $3, $4, $5, $6, $7, $8, FALSE)
					RETURNING *
					""",
					uuid4(),
					name,
					category,
					description,
					faculty_advisor,
					logo_url,
					whatsapp_link,
					created_by,
				)
				try:
					await conn.execute(
						"""
						INSERT INTO club_members (id, club_id, user_id, role_in_club)
						VALUES ($1, $2, $3, 'head')
						""",
						uuid4(),
						record["id"],
						created_by,
					)
				except asyncpg.UniqueViolationError as exc:
					raise ConflictError("head_membership_exists") from exc
		return models.Club.model_validate(dict(record))

	async def get_club(self, club_id: UUID) -> models.Club | None:
		async with _connection() as conn:
			record = await conn.fetchrow("SELECT * FROM clubs WHERE id=$1", club_id)
		return models.Club.model_validate(dict(record)) if record else None

	async def get_clubs(self, club_ids: Iterable[UUID]) -> dict[UUID, models.Club]:
		ids = list({cid for cid in club_ids})
		if not ids:
			return {}
		async with _connection() as conn:
			rows = await conn.fetch("SELECT * FROM clubs WHERE id = ANY($1::uuid[])", ids)
		clubs = [models.Club.model_validate(dict(row)) for row in rows]
		return {club.id: club for club in clubs}

	async def list_approved_clubs(
		self,
		*,
		category: Optional[str] = None,
		search: Optional[str] = None,
	) -> list[models.Club]:
		clauses = ["approved = TRUE"]
		values: list[object] = []
		if category is not None:
			values.append(category)
			clauses.append("category = $%d" % len(values))
		if search:
			values.append(like_pattern(search))
			clauses.append("(name ILIKE $%d OR description ILIKE $%d)" % (len(values), len(values)))
		query = f"SELECT * FROM clubs WHERE {' AND '.join(clauses)} ORDER BY name ASC, id ASC"
		async with _connection() as conn:
			rows = await conn.fetch(query, *values)
		return [models.Club.model_validate(dict(row)) for row in rows]

	async def list_recent_approved_clubs(self, *, limit: int) -> list[models.Club]:
		async with _connection() as conn:
			rows = await conn.fetch(
				"""
				SELECT * FROM clubs
				WHERE approved = TRUE
				ORDER BY created_at DESC
				LIMIT $1
				""",
				limit,
			)
		return [models.Club.model_validate(dict(row)) for row in rows]

	async def list_pending_clubs(self) -> list[models.Club]:
		async with _connection() as conn:
			rows = await conn.fetch(
				"SELECT * FROM clubs WHERE approved = FALSE ORDER BY created_at ASC, id ASC"
			)
		return [models.Club.model_validate(dict(row)) for row in rows]

	async def list_headed_clubs(self, user_id: UUID) -> list[models.Club]:
		async with _connection() as conn:
			rows = await conn.fetch(
				"""
				SELECT c.* FROM clubs c
				JOIN club_members cm ON cm.club_id = c.id
				WHERE cm.user_id = $1 AND cm.role_in_club = 'head'
				ORDER BY c.name ASC
				""",
				user_id,
			)
		return [models.Club.model_validate(dict(row)) for row in rows]

	async def approve_club(self, club_id: UUID) -> models.Club | None:
		async with _connection() as conn:
			record = await conn.fetchrow(
				"""
				UPDATE clubs
				SET approved = TRUE,
					updated_at = CASE WHEN approved THEN updated_at ELSE NOW() END
				WHERE id = $1
				RETURNING *
				""",
				club_id,
			)
		return models.Club.model_validate(dict(record)) if record else None

	async def delete_club(self, club_id: UUID) -> bool:
		"""Remove a club and every row hanging off it in one transaction."""
		async with _connection() as conn:
			async with conn.transaction():
				exists = await conn.fetchval("SELECT 1 FROM clubs WHERE id=$1 FOR UPDATE", club_id)
				if not exists:
					return False
				await conn.execute(
					"""
					DELETE FROM event_participants
					WHERE event_id IN (SELECT id FROM events WHERE organizer_club = $1)
					""",
					club_id,
				)
				await conn.execute("DELETE FROM events WHERE organizer_club = $1", club_id)
				await conn.execute("DELETE FROM announcements WHERE club_id = $1", club_id)
				await conn.execute("DELETE FROM club_members WHERE club_id = $1", club_id)
				await conn.execute("DELETE FROM clubs WHERE id = $1", club_id)
		return True

	# --- Memberships ------------------------------------------------------

	async def get_member(self, club_id: UUID, user_id: UUID) -> models.ClubMember | None:
		async with _connection() as conn:
			record = await conn.fetchrow(
				"SELECT * FROM club_members WHERE club_id=$1 AND user_id=$2",
				club_id,
				user_id,
			)
		return models.ClubMember.model_validate(dict(record)) if record else None

	async def count_members(self, club_id: UUID) -> int:
		async with _connection() as conn:
			count = await conn.fetchval("SELECT COUNT(*) FROM club_members WHERE club_id=$1", club_id)
		return int(count or 0)

	async def change_membership(self, club_id: UUID, user_id: UUID, *, mode: ToggleMode) -> models.MembershipChange:
		"""Insert-if-absent / delete-if-present under a per-pair lock.

		Any existing row is deleted on toggle or remove, head rows included.
		"""
		async with _connection() as conn:
			async with conn.transaction():
				await _advisory_lock(conn, "club_members", club_id, user_id)
				existing = await conn.fetchval(
					"SELECT role_in_club FROM club_members WHERE club_id=$1 AND user_id=$2",
					club_id,
					user_id,
				)
				role: str | None = existing
				changed = False
				if existing is None and mode in ("toggle", "add"):
					try:
						role = await conn.fetchval(
							"""
							INSERT INTO club_members (id, club_id, user_id, role_in_club)
							VALUES ($1, $2, $3, 'member')
							ON CONFLICT (club_id, user_id) DO NOTHING
							RETURNING role_in_club
							""",
							uuid4(),
							club_id,
							user_id,
						)
					except asyncpg.ForeignKeyViolationError as exc:
						raise NotFoundError("club_not_found") from exc
					changed = role is not None
				elif existing is not None and mode in ("toggle", "remove"):
					await conn.execute(
						"DELETE FROM club_members WHERE club_id=$1 AND user_id=$2",
						club_id,
						user_id,
					)
					role = None
					changed = True
				count = await conn.fetchval("SELECT COUNT(*) FROM club_members WHERE club_id=$1", club_id)
		return models.MembershipChange(
			is_member=role is not None,
			role_in_club=role,
			changed=changed,
			member_count=int(count or 0),
		)

	# --- Events -----------------------------------------------------------

	async def create_event(
		self,
		*,
		title: str,
		description: str,
		date: datetime,
		venue: str,
		organizer_club: UUID,
		banner_url: str | None,
	) -> models.Event:
		async with _connection() as conn:
			try:
				record = await conn.fetchrow(
					"""
					INSERT INTO events (id, title, description, date, venue, organizer_club, banner_url, approved)
					VALUES ($1, $2, $3, $4, $5, $6, $7, FALSE)
					RETURNING *
					""",
					uuid4(),
					title,
					description,
					date,
					venue,
					organizer_club,
					banner_url,
				)
			except asyncpg.ForeignKeyViolationError as exc:
				raise NotFoundError("club_not_found") from exc
		return models.Event.model_validate(dict(record))

	async def get_event(self, event_id: UUID) -> models.Event | None:
		async with _connection() as conn:
			record = await conn.fetchrow("SELECT * FROM events WHERE id=$1", event_id)
		return models.Event.model_validate(dict(record)) if record else None

	async def list_upcoming_events(self, *, now: datetime, limit: Optional[int] = None) -> list[models.Event]:
		async with _connection() as conn:
			rows = await conn.fetch(
				"""
				SELECT e.* FROM events e
				JOIN clubs c ON c.id = e.organizer_club
				WHERE e.approved = TRUE AND c.approved = TRUE AND e.date >= $1
				ORDER BY e.date ASC
				LIMIT $2
				""",
				now,
				limit,
			)
		return [models.Event.model_validate(dict(row)) for row in rows]

	async def list_club_events(self, club_id: UUID) -> list[models.Event]:
		async with _connection() as conn:
			rows = await conn.fetch(
				"""
				SELECT * FROM events
				WHERE organizer_club = $1 AND approved = TRUE
				ORDER BY date ASC
				""",
				club_id,
			)
		return [models.Event.model_validate(dict(row)) for row in rows]

	async def list_events_for_clubs(self, club_ids: Sequence[UUID]) -> list[models.Event]:
		if not club_ids:
			return []
		async with _connection() as conn:
			rows = await conn.fetch(
				"""
				SELECT * FROM events
				WHERE organizer_club = ANY($1::uuid[])
				ORDER BY date DESC
				""",
				list(club_ids),
			)
		return [models.Event.model_validate(dict(row)) for row in rows]

	async def list_pending_events(self) -> list[models.Event]:
		async with _connection() as conn:
			rows = await conn.fetch(
				"SELECT * FROM events WHERE approved = FALSE ORDER BY created_at ASC, id ASC"
			)
		return [models.Event.model_validate(dict(row)) for row in rows]

	async def approve_event(self, event_id: UUID) -> models.Event | None:
		async with _connection() as conn:
			record = await conn.fetchrow(
				"""
				UPDATE events
				SET approved = TRUE,
					updated_at = CASE WHEN approved THEN updated_at ELSE NOW() END
				WHERE id = $1
				RETURNING *
				""",
				event_id,
			)
		return models.Event.model_validate(dict(record)) if record else None

	async def delete_event(self, event_id: UUID) -> bool:
		async with _connection() as conn:
			async with conn.transaction():
				await conn.execute("DELETE FROM event_participants WHERE event_id=$1", event_id)
				result = await conn.execute("DELETE FROM events WHERE id=$1", event_id)
		return result.split()[-1] != "0"

	async def registered_event_ids(self, user_id: UUID, event_ids: Sequence[UUID]) -> set[UUID]:
		if not event_ids:
			return set()
		async with _connection() as conn:
			rows = await conn.fetch(
				"""
				SELECT event_id FROM event_participants
				WHERE user_id = $1 AND event_id = ANY($2::uuid[])
				""",
				user_id,
				list(event_ids),
			)
		return {row["event_id"] for row in rows}

	async def change_registration(self, event_id: UUID, user_id: UUID, *, mode: ToggleMode) -> models.RegistrationChange:
		async with _connection() as conn:
			async with conn.transaction():
				await _advisory_lock(conn, "event_participants", event_id, user_id)
				registered = bool(
					await conn.fetchval(
						"SELECT 1 FROM event_participants WHERE event_id=$1 AND user_id=$2",
						event_id,
						user_id,
					)
				)
				changed = False
				if not registered and mode in ("toggle", "add"):
					try:
						inserted = await conn.fetchval(
							"""
							INSERT INTO event_participants (id, event_id, user_id)
							VALUES ($1, $2, $3)
							ON CONFLICT (event_id, user_id) DO NOTHING
							RETURNING id
							""",
							uuid4(),
							event_id,
							user_id,
						)
					except asyncpg.ForeignKeyViolationError as exc:
						raise NotFoundError("event_not_found") from exc
					registered = inserted is not None
					changed = registered
				elif registered and mode in ("toggle", "remove"):
					await conn.execute(
						"DELETE FROM event_participants WHERE event_id=$1 AND user_id=$2",
						event_id,
						user_id,
					)
					registered = False
					changed = True
				count = await conn.fetchval(
					"SELECT COUNT(*) FROM event_participants WHERE event_id=$1",
					event_id,
				)
		return models.RegistrationChange(
			is_registered=registered,
			changed=changed,
			participant_count=int(count or 0),
		)

	# --- Announcements ----------------------------------------------------

	async def create_announcement(self, *, club_id: UUID, message: str, created_by: UUID) -> models.Announcement:
		async with _connection() as conn:
			try:
				record = await conn.fetchrow(
					"""
					INSERT INTO announcements (id, club_id, message, created_by)
					VALUES ($1, $2, $3, $4)
					RETURNING *
					""",
					uuid4(),
					club_id,
					message,
					created_by,
				)
			except asyncpg.ForeignKeyViolationError as exc:
				raise NotFoundError("club_not_found") from exc
		return models.Announcement.model_validate(dict(record))

	async def list_recent_announcements(self, *, limit: int) -> list[models.Announcement]:
		async with _connection() as conn:
			rows = await conn.fetch(
				"""
				SELECT a.* FROM announcements a
				JOIN clubs c ON c.id = a.club_id
				WHERE c.approved = TRUE
				ORDER BY a.created_at DESC
				LIMIT $1
				""",
				limit,
			)
		return [models.Announcement.model_validate(dict(row)) for row in rows]
