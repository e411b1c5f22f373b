"""Pydantic schemas for member APIs."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from campushub.domain.members.models import Member, Role


class CamelModel(BaseModel):
	"""Base schema speaking camelCase on the wire and accepting snake_case input."""

	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def coerce_identifier(value: Any) -> Any:
	"""Numeric identifiers arrive from some clients as JSON numbers; keep them as text."""
	if isinstance(value, int) and not isinstance(value, bool):
		return str(value)
	return value


class MemberOut(CamelModel):
	id: str
	name: str
	email: str
	institution_id: str
	external_student_id: str
	role: Role
	academic_score: int
	sports_score: int
	avatar_tag: str
	auth_provider: str
	clubs: list[str] = Field(default_factory=list)

	@classmethod
	def from_member(cls, member: Member) -> "MemberOut":
		return cls(
			id=member.id,
			name=member.name,
			email=member.email,
			institution_id=member.institution_id,
			external_student_id=member.external_student_id,
			role=member.role,
			academic_score=member.academic_score,
			sports_score=member.sports_score,
			avatar_tag=member.avatar_tag,
			auth_provider=member.auth_provider,
			clubs=list(member.clubs),
		)


class MemberEnvelope(CamelModel):
	member: MemberOut


class UpdateMemberRequest(CamelModel):
	member_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("memberId", "member_id", "userId"))
	fields: Optional[Dict[str, Any]] = Field(default=None, validation_alias=AliasChoices("fields", "updates"))

	@field_validator("member_id", mode="before")
	def _ids_as_text(cls, value: Any) -> Any:
		return coerce_identifier(value)


class ClubAccessRequest(CamelModel):
	member_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("memberId", "member_id", "userId"))
	club_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("clubId", "club_id"))

	@field_validator("member_id", "club_id", mode="before")
	def _ids_as_text(cls, value: Any) -> Any:
		return coerce_identifier(value)


class ClubAccessResponse(CamelModel):
	has_access: bool
