from __future__ import annotations

from uuid import uuid4

import pytest

from clubhub.clubs.domain.approvals_service import ApprovalsService
from clubhub.clubs.domain.exceptions import NotFoundError, PermissionDeniedError
from clubhub.clubs.domain.services import ClubsService
from clubhub.clubs.schemas import dto
from clubhub.infra.auth import Actor


def _actor(role: str = "student") -> Actor:
	return Actor(id=str(uuid4()), role=role)


@pytest.fixture
def admin() -> Actor:
	return _actor("admin")


@pytest.fixture
def approvals(memory_repo):
	return ApprovalsService(repository=memory_repo)


@pytest.fixture
def clubs(memory_repo):
	return ClubsService(repository=memory_repo)


async def _submit(clubs: ClubsService, name: str) -> dto.ClubResponse:
	payload = dto.ClubCreateRequest(name=name, category="Cultural", description="d", faculty_advisor="f")
	return await clubs.create_club(_actor(), payload)


@pytest.mark.asyncio
async def test_pending_is_fifo_and_approve_moves_club(approvals, clubs, admin):
	a = await _submit(clubs, "A")
	b = await _submit(clubs, "B")

	pending = await approvals.list_pending_clubs(admin)
	assert [club.id for club in pending.items] == [a.id, b.id]

	approved = await approvals.approve_club(admin, a.id)
	assert approved.approved is True

	pending = await approvals.list_pending_clubs(admin)
	assert [club.id for club in pending.items] == [b.id]
	listed = await clubs.list_approved_clubs(_actor())
	assert [club.id for club in listed.items] == [a.id]


@pytest.mark.asyncio
async def test_approve_is_idempotent(approvals, memory_repo, admin):
	club = memory_repo.add_club(approved=False)

	first = await approvals.approve_club(admin, club.id)
	second = await approvals.approve_club(admin, club.id)

	assert first.approved and second.approved
	assert first.updated_at == second.updated_at


@pytest.mark.asyncio
async def test_reject_cascades_to_dependents(approvals, memory_repo, admin):
	head = uuid4()
	club = memory_repo.add_club(head=head, approved=False)
	other = memory_repo.add_club(name="Other")
	event = memory_repo.add_event(club.id)
	kept_event = memory_repo.add_event(other.id)
	memory_repo.participants.update({(event.id, uuid4()), (kept_event.id, uuid4())})
	await memory_repo.create_announcement(club_id=club.id, message="hello", created_by=head)

	await approvals.reject_club(admin, club.id)

	assert await memory_repo.get_club(club.id) is None
	assert memory_repo.members_of(club.id) == []
	assert await memory_repo.get_event(event.id) is None
	assert all(pair[0] != event.id for pair in memory_repo.participants)
	assert memory_repo.announcements == []
	assert await memory_repo.get_event(kept_event.id) is not None
	assert len(memory_repo.participants) == 1


@pytest.mark.asyncio
async def test_unknown_ids_are_not_found(approvals, admin):
	with pytest.raises(NotFoundError):
		await approvals.approve_club(admin, uuid4())
	with pytest.raises(NotFoundError):
		await approvals.reject_club(admin, uuid4())
	with pytest.raises(NotFoundError) as excinfo:
		await approvals.approve_event(admin, uuid4())
	assert excinfo.value.detail == "event_not_found"


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["student", "club_head"])
async def test_non_admin_cannot_review(approvals, memory_repo, role):
	club = memory_repo.add_club(approved=False)
	actor = _actor(role)

	with pytest.raises(PermissionDeniedError):
		await approvals.list_pending_clubs(actor)
	with pytest.raises(PermissionDeniedError):
		await approvals.list_pending_events(actor)
	with pytest.raises(PermissionDeniedError):
		await approvals.approve_club(actor, club.id)
	with pytest.raises(PermissionDeniedError):
		await approvals.reject_club(actor, club.id)
	assert (await memory_repo.get_club(club.id)).approved is False


@pytest.mark.asyncio
async def test_event_review_cycle(approvals, memory_repo, admin):
	club = memory_repo.add_club()
	first = memory_repo.add_event(club.id, title="First", approved=False)
	second = memory_repo.add_event(club.id, title="Second", approved=False)

	pending = await approvals.list_pending_events(admin)
	assert [event.id for event in pending.items] == [first.id, second.id]
	assert pending.items[0].club.name == club.name

	await approvals.approve_event(admin, first.id)
	await approvals.reject_event(admin, second.id)

	assert (await approvals.list_pending_events(admin)).items == []
	assert (await memory_repo.get_event(first.id)).approved is True
	assert await memory_repo.get_event(second.id) is None
