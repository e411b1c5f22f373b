import os
import sys
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Mapping, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from fakeredis.aioredis import FakeRedis

# Settings are read at import time and SECRET_KEY is required
os.environ.setdefault("SECRET_KEY", "campushub-test-secret-key-0123456789abcdef")
os.environ.setdefault("ENV", "dev")

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from campushub.api import admin as admin_api
from campushub.api import clubs as clubs_api
from campushub.api import leaderboard as leaderboard_api
from campushub.api import members as members_api
from campushub.api import registration as registration_api
from campushub.domain.errors import StoreError
from campushub.domain.members.models import Institution, Member, Role
from campushub.infra import postgres
from campushub.main import app
from campushub.settings import settings


class InMemoryMemberRepository:
	"""Test double for MemberRepository honouring the schema's uniqueness rules."""

	def __init__(self) -> None:
		self.institutions: dict[str, Institution] = {}
		self.members: dict[str, Member] = {}
		self.approvals: set[tuple[str, str]] = set()
		self.admins: set[tuple[str, str]] = set()
		self.clubs: dict[str, list[str]] = {}
		self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

	# seeding helpers
	def add_institution(self, institution_id: str, domain: str, name: Optional[str] = None) -> Institution:
		institution = Institution(id=institution_id, domain=domain, name=name)
		self.institutions[institution_id] = institution
		return institution

	def add_admin(self, institution_id: str, email: str) -> None:
		self.admins.add((institution_id, email))

	def add_member(self, member: Member) -> Member:
		self._clock += timedelta(seconds=1)
		member.created_at = member.created_at or self._clock
		self.members[member.id] = member
		self.clubs.setdefault(member.id, list(member.clubs))
		return member

	def _copy(self, member: Member) -> Member:
		return replace(member, clubs=list(self.clubs.get(member.id, [])))

	# MemberRepository surface
	async def get_institution(self, institution_id: str) -> Optional[Institution]:
		return self.institutions.get(institution_id)

	async def get_member(self, member_id: str) -> Optional[Member]:
		member = self.members.get(member_id)
		return self._copy(member) if member else None

	async def find_member_by_email(self, email: str) -> Optional[Member]:
		for member in self.members.values():
			if member.email == email:
				return self._copy(member)
		return None

	async def email_taken(self, email: str, *, exclude_member_id: Optional[str] = None) -> bool:
		return any(m.email == email and m.id != exclude_member_id for m in self.members.values())

	async def approval_exists(self, institution_id: str, external_student_id: str) -> bool:
		return (institution_id, external_student_id) in self.approvals

	async def insert_member(self, member: Member) -> Member:
		if any(existing.email == member.email for existing in self.members.values()):
			raise StoreError("store_conflict")
		stored = replace(member, clubs=[])
		self.add_member(stored)
		return self._copy(stored)

	async def is_admin(self, institution_id: str, email: str) -> bool:
		return (institution_id, email) in self.admins

	async def insert_approval(self, institution_id: str, external_student_id: str, *, approved_by: Optional[str] = None) -> bool:
		key = (institution_id, external_student_id)
		if key in self.approvals:
			return False
		self.approvals.add(key)
		return True

	async def set_role_for_student(self, institution_id: str, external_student_id: str, role: Role) -> int:
		count = 0
		for member in self.members.values():
			if member.institution_id == institution_id and member.external_student_id == external_student_id:
				member.role = role
				count += 1
		return count

	async def list_students(self, institution_id: str) -> list[Member]:
		students = [
			m for m in self.members.values() if m.institution_id == institution_id and m.role is Role.STUDENT
		]
		students.sort(key=lambda m: (m.created_at, m.id))
		return [self._copy(m) for m in students]

	async def update_member(
		self,
		member_id: str,
		changes: Mapping[str, object],
		*,
		clubs: Optional[Iterable[str]] = None,
	) -> Optional[Member]:
		member = self.members.get(member_id)
		if member is None:
			return None
		new_email = changes.get("email")
		if new_email and any(m.email == new_email and m.id != member_id for m in self.members.values()):
			raise StoreError("store_conflict")
		for key, value in changes.items():
			setattr(member, key, value)
		if clubs is not None:
			self.clubs[member_id] = list(dict.fromkeys(clubs))
		return self._copy(member)

	async def update_password_hash(self, member_id: str, password_hash: str) -> None:
		self.members[member_id].password_hash = password_hash

	async def has_club_membership(self, member_id: str, club_id: str) -> bool:
		return club_id in self.clubs.get(member_id, [])


def make_member(
	member_id: str,
	*,
	institution_id: str = "123",
	role: Role = Role.STUDENT,
	academic: int = 0,
	sports: int = 0,
	email: Optional[str] = None,
	external_student_id: Optional[str] = None,
) -> Member:
	return Member(
		id=member_id,
		name=f"Member {member_id}",
		email=email or f"{member_id.lower()}@college.edu",
		institution_id=institution_id,
		external_student_id=external_student_id or f"S-{member_id}",
		role=role,
		academic_score=academic,
		sports_score=sports,
	)


@pytest.fixture
def member_factory():
	return make_member


@pytest.fixture
def repo() -> InMemoryMemberRepository:
	repository = InMemoryMemberRepository()
	repository.add_institution("123", "college.edu", "Demo College")
	repository.add_institution("456", "university.com", "Demo University")
	repository.add_admin("123", "admin@college.edu")
	repository.approvals.add(("123", "S1001"))
	return repository


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from campushub.infra.redis import redis_client, set_redis_client
	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop():
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)


@pytest.fixture(autouse=True)
def force_test_settings():
	"""Dev mode relaxes the registration and login rate limits."""
	original_env = settings.environment
	settings.environment = "dev"
	try:
		yield
	finally:
		settings.environment = original_env


@pytest.fixture
def wired_repo(repo, monkeypatch):
	"""Point every router's service at the in-memory repository."""
	for service in (
		registration_api._service,
		registration_api._members,
		admin_api._service,
		leaderboard_api._service,
		members_api._service,
		clubs_api._service,
	):
		monkeypatch.setattr(service, "_repo", repo)
	return repo


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client
