"""Domain models for institutions and members."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

RecordLike = Mapping[str, Any]

CLUB_ID_SEPARATOR = "::"


class Role(str, Enum):
	"""Member roles. Only students are ranked."""

	PENDING = "pending"
	STUDENT = "student"
	MODERATOR = "moderator"
	ADMIN = "admin"


class AuthProvider(str, Enum):
	PASSWORD = "password"


@dataclass(slots=True)
class Institution:
	id: str
	domain: str
	name: Optional[str] = None

	@classmethod
	def from_record(cls, record: RecordLike) -> "Institution":
		return cls(
			id=str(record["id"]),
			domain=str(record["domain"]),
			name=record.get("name"),
		)


@dataclass(slots=True)
class Member:
	id: str
	name: str
	email: str
	institution_id: str
	external_student_id: str
	role: Role
	academic_score: int = 0
	sports_score: int = 0
	avatar_tag: str = "🏅"
	auth_provider: str = AuthProvider.PASSWORD.value
	password_hash: Optional[str] = None
	provider_subject: Optional[str] = None
	created_at: Optional[datetime] = None
	clubs: list[str] = field(default_factory=list)

	@property
	def combined_score(self) -> int:
		return self.academic_score + self.sports_score

	@classmethod
	def from_record(cls, record: RecordLike, *, clubs: Optional[list[str]] = None) -> "Member":
		return cls(
			id=str(record["id"]),
			name=record["name"],
			email=record["email"],
			institution_id=str(record["institution_id"]),
			external_student_id=record["external_student_id"],
			role=Role(record["role"]),
			academic_score=int(record.get("academic_score") or 0),
			sports_score=int(record.get("sports_score") or 0),
			avatar_tag=record.get("avatar_tag") or "🏅",
			auth_provider=record.get("auth_provider") or AuthProvider.PASSWORD.value,
			password_hash=record.get("password_hash"),
			provider_subject=record.get("provider_subject"),
			created_at=record.get("created_at"),
			clubs=list(clubs or []),
		)


def club_institution(club_id: str) -> str:
	"""Return the institution prefix of a club id (``"<institution>::<name>"``)."""

	return club_id.split(CLUB_ID_SEPARATOR, 1)[0]
