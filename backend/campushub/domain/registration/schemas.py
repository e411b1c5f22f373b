"""Pydantic schemas for registration, approval and login APIs."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import AliasChoices, Field, field_validator

from campushub.domain.members.models import Role
from campushub.domain.members.schemas import CamelModel, MemberOut, coerce_identifier

_INSTITUTION_ALIASES = AliasChoices("institutionId", "institution_id", "collegeId")
_STUDENT_ALIASES = AliasChoices("externalStudentId", "external_student_id", "studentId")


class _RegistrationBase(CamelModel):
	name: Optional[str] = None
	email: Optional[str] = None
	institution_id: Optional[str] = Field(default=None, validation_alias=_INSTITUTION_ALIASES)
	external_student_id: Optional[str] = Field(default=None, validation_alias=_STUDENT_ALIASES)
	avatar_tag: Optional[str] = Field(default=None, validation_alias=AliasChoices("avatarTag", "avatar_tag", "emojiTag"))

	@field_validator("institution_id", "external_student_id", mode="before")
	def _ids_as_text(cls, value: Any) -> Any:
		return coerce_identifier(value)


class DirectRegistration(_RegistrationBase):
	"""Password-based registration."""

	kind: Literal["direct"] = "direct"
	password: Optional[str] = None


class FederatedRegistration(_RegistrationBase):
	"""Registration backed by an identity the external auth provider already verified."""

	kind: Literal["federated"] = "federated"
	provider: Optional[str] = None
	provider_subject: Optional[str] = Field(default=None, validation_alias=AliasChoices("providerSubject", "provider_subject"))


RegistrationRequest = Annotated[Union[DirectRegistration, FederatedRegistration], Field(discriminator="kind")]


class RegisterResponse(CamelModel):
	member_id: str
	role: Role


class ApproveRequest(CamelModel):
	admin_email: Optional[str] = Field(default=None, validation_alias=AliasChoices("adminEmail", "admin_email"))
	institution_id: Optional[str] = Field(default=None, validation_alias=_INSTITUTION_ALIASES)
	external_student_id: Optional[str] = Field(default=None, validation_alias=_STUDENT_ALIASES)

	@field_validator("institution_id", "external_student_id", mode="before")
	def _ids_as_text(cls, value: Any) -> Any:
		return coerce_identifier(value)


class ApproveResponse(CamelModel):
	success: bool = True


class LoginRequest(CamelModel):
	email: Optional[str] = None
	password: Optional[str] = None


class LoginResponse(CamelModel):
	access_token: str
	token_type: Literal["bearer"] = "bearer"
	expires_in: int
	member: MemberOut
