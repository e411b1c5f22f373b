"""Postgres repository for institutions, members, approvals and club memberships.

Every query goes through the shared asyncpg pool. Uniqueness is enforced by
the schema (see ``infra/migrations``); a write that loses a race surfaces as
``StoreError("store_conflict")``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable, Mapping, Optional

import asyncpg

from campushub.domain.errors import StoreError
from campushub.domain.members.models import Institution, Member, Role
from campushub.infra.postgres import get_pool

_UPDATABLE_COLUMNS = {
	"name": "name",
	"avatar_tag": "avatar_tag",
	"academic_score": "academic_score",
	"sports_score": "sports_score",
	"email": "email",
}


@asynccontextmanager
async def _connection() -> AsyncIterator[asyncpg.Connection]:
	try:
		pool = await get_pool()
		async with pool.acquire() as conn:
			yield conn
	except asyncpg.UniqueViolationError as exc:  # type: ignore[attr-defined]
		raise StoreError("store_conflict") from exc
	except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
		raise StoreError("store_unavailable") from exc


async def _fetch_clubs(conn: asyncpg.Connection, member_id: str) -> list[str]:
	"""Club ids in the order the member last submitted them."""
	rows = await conn.fetch(
		"SELECT club_id FROM member_clubs WHERE member_id = $1 ORDER BY position ASC, club_id ASC",
		member_id,
	)
	return [row["club_id"] for row in rows]


class MemberRepository:
	"""Data access for the registration, approval and leaderboard flows."""

	async def get_institution(self, institution_id: str) -> Optional[Institution]:
		async with _connection() as conn:
			row = await conn.fetchrow(
				"SELECT id, name, domain FROM institutions WHERE id = $1",
				institution_id,
			)
		return Institution.from_record(row) if row else None

	async def get_member(self, member_id: str) -> Optional[Member]:
		async with _connection() as conn:
			row = await conn.fetchrow("SELECT * FROM members WHERE id = $1", member_id)
			if not row:
				return None
			clubs = await _fetch_clubs(conn, member_id)
		return Member.from_record(row, clubs=clubs)

	async def find_member_by_email(self, email: str) -> Optional[Member]:
		async with _connection() as conn:
			row = await conn.fetchrow("SELECT * FROM members WHERE email = $1", email)
			if not row:
				return None
			clubs = await _fetch_clubs(conn, str(row["id"]))
		return Member.from_record(row, clubs=clubs)

	async def email_taken(self, email: str, *, exclude_member_id: Optional[str] = None) -> bool:
		async with _connection() as conn:
			if exclude_member_id:
				found = await conn.fetchval(
					"SELECT 1 FROM members WHERE email = $1 AND id <> $2",
					email,
					exclude_member_id,
				)
			else:
				found = await conn.fetchval("SELECT 1 FROM members WHERE email = $1", email)
		return bool(found)

	async def approval_exists(self, institution_id: str, external_student_id: str) -> bool:
		async with _connection() as conn:
			found = await conn.fetchval(
				"SELECT 1 FROM approvals WHERE institution_id = $1 AND external_student_id = $2",
				institution_id,
				external_student_id,
			)
		return bool(found)

	async def insert_member(self, member: Member) -> Member:
		async with _connection() as conn:
			row = await conn.fetchrow(
				"""
				INSERT INTO members (
					id, name, email, institution_id, external_student_id, role,
					academic_score, sports_score, avatar_tag, auth_provider,
					password_hash, provider_subject
				)
				VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12)
				RETURNING *
				""",
				member.id,
				member.name,
				member.email,
				member.institution_id,
				member.external_student_id,
				member.role.value,
				member.academic_score,
				member.sports_score,
				member.avatar_tag,
				member.auth_provider,
				member.password_hash,
				member.provider_subject,
			)
		return Member.from_record(row)

	async def is_admin(self, institution_id: str, email: str) -> bool:
		async with _connection() as conn:
			found = await conn.fetchval(
				"SELECT 1 FROM admins WHERE institution_id = $1 AND email = $2",
				institution_id,
				email,
			)
		return bool(found)

	async def insert_approval(
		self,
		institution_id: str,
		external_student_id: str,
		*,
		approved_by: Optional[str] = None,
	) -> bool:
		"""Insert an approval record; returns False when it already existed."""

		async with _connection() as conn:
			inserted = await conn.fetchval(
				"""
				INSERT INTO approvals (institution_id, external_student_id, approved_by)
				VALUES ($1, $2, $3)
				ON CONFLICT (institution_id, external_student_id) DO NOTHING
				RETURNING 1
				""",
				institution_id,
				external_student_id,
				approved_by,
			)
		return bool(inserted)

	async def set_role_for_student(self, institution_id: str, external_student_id: str, role: Role) -> int:
		"""Set the role of every member holding this student id; returns the row count."""

		async with _connection() as conn:
			rows = await conn.fetch(
				"""
				UPDATE members
				SET role = $3, updated_at = NOW()
				WHERE institution_id = $1 AND external_student_id = $2
				RETURNING id
				""",
				institution_id,
				external_student_id,
				role.value,
			)
		return len(rows)

	async def list_students(self, institution_id: str) -> list[Member]:
		"""Students of an institution in insertion order."""

		async with _connection() as conn:
			rows = await conn.fetch(
				"""
				SELECT * FROM members
				WHERE institution_id = $1 AND role = $2
				ORDER BY created_at ASC, id ASC
				""",
				institution_id,
				Role.STUDENT.value,
			)
		return [Member.from_record(row) for row in rows]

	async def update_member(
		self,
		member_id: str,
		changes: Mapping[str, object],
		*,
		clubs: Optional[Iterable[str]] = None,
	) -> Optional[Member]:
		"""Apply column changes and optionally replace club memberships atomically."""

		assignments: list[str] = []
		args: list[object] = []
		for key, value in changes.items():
			column = _UPDATABLE_COLUMNS[key]
			args.append(value)
			assignments.append(f"{column} = ${len(args)}")

		async with _connection() as conn:
			async with conn.transaction():
				if assignments:
					args.append(member_id)
					row = await conn.fetchrow(
						f"""
						UPDATE members
						SET {", ".join(assignments)}, updated_at = NOW()
						WHERE id = ${len(args)}
						RETURNING *
						""",
						*args,
					)
				else:
					row = await conn.fetchrow("SELECT * FROM members WHERE id = $1", member_id)
				if not row:
					return None
				if clubs is not None:
					await conn.execute("DELETE FROM member_clubs WHERE member_id = $1", member_id)
					unique_clubs = list(dict.fromkeys(clubs))
					if unique_clubs:
						await conn.executemany(
							"INSERT INTO member_clubs (member_id, club_id, position) VALUES ($1, $2, $3)",
							[(member_id, club_id, position) for position, club_id in enumerate(unique_clubs)],
						)
				current_clubs = await _fetch_clubs(conn, member_id)
		return Member.from_record(row, clubs=current_clubs)

	async def update_password_hash(self, member_id: str, password_hash: str) -> None:
		async with _connection() as conn:
			await conn.execute(
				"UPDATE members SET password_hash = $1, updated_at = NOW() WHERE id = $2",
				password_hash,
				member_id,
			)

	async def has_club_membership(self, member_id: str, club_id: str) -> bool:
		async with _connection() as conn:
			found = await conn.fetchval(
				"SELECT 1 FROM member_clubs WHERE member_id = $1 AND club_id = $2",
				member_id,
				club_id,
			)
		return bool(found)
