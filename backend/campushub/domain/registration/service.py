"""Registration, admin approval and password login workflows."""

from __future__ import annotations

import logging
from typing import Optional
from uuid import uuid4

from campushub.domain.errors import AuthenticationError, AuthorizationError, ConflictError, NotFoundError
from campushub.domain.members.models import AuthProvider, Member, Role
from campushub.domain.members.repo import MemberRepository
from campushub.domain.members.schemas import MemberOut
from campushub.domain.registration import policy
from campushub.domain.registration.schemas import (
	ApproveRequest,
	ApproveResponse,
	FederatedRegistration,
	LoginRequest,
	LoginResponse,
	RegisterResponse,
	RegistrationRequest,
)
from campushub.infra import jwt as jwt_helper
from campushub.infra.password import check_needs_rehash, hash_password, verify_password
from campushub.obs import audit
from campushub.obs import metrics as obs_metrics
from campushub.settings import settings

log = logging.getLogger(__name__)


class RegistrationService:
	"""Admits members into institutions and issues their sessions."""

	def __init__(self, repository: Optional[MemberRepository] = None) -> None:
		self._repo = repository or MemberRepository()

	async def register(
		self,
		request: RegistrationRequest,
		*,
		ip_address: Optional[str] = None,
	) -> RegisterResponse:
		"""Validate a join request and persist the member as pending or student.

		Checks run in a fixed order: required fields, institution, email domain,
		email uniqueness, then the approval allow-list decides the role.
		"""

		required = {
			"name": request.name,
			"email": request.email,
			"institution_id": request.institution_id,
			"external_student_id": request.external_student_id,
		}
		if isinstance(request, FederatedRegistration):
			required["provider"] = request.provider
			required["provider_subject"] = request.provider_subject
		else:
			required["password"] = request.password
		policy.require_fields(required)

		await policy.enforce_register_rate(ip_address or "unknown")

		email = policy.normalise_email(request.email)
		institution_id = request.institution_id.strip()
		external_student_id = request.external_student_id.strip()

		institution = await self._repo.get_institution(institution_id)
		if institution is None:
			raise NotFoundError("institution_not_found")
		policy.guard_email_domain(email, institution)

		if await self._repo.email_taken(email):
			raise ConflictError("email_taken")

		approved = await self._repo.approval_exists(institution_id, external_student_id)
		role = Role.STUDENT if approved else Role.PENDING

		if isinstance(request, FederatedRegistration):
			auth_provider = request.provider.strip().lower()
			password_hash = None
			provider_subject = request.provider_subject
		else:
			auth_provider = AuthProvider.PASSWORD.value
			password_hash = hash_password(request.password)
			provider_subject = None

		member = Member(
			id=str(uuid4()),
			name=request.name.strip(),
			email=email,
			institution_id=institution_id,
			external_student_id=external_student_id,
			role=role,
			avatar_tag=(request.avatar_tag or "").strip() or settings.default_avatar_tag,
			auth_provider=auth_provider,
			password_hash=password_hash,
			provider_subject=provider_subject,
		)
		created = await self._repo.insert_member(member)
		obs_metrics.inc_registration(created.role.value, request.kind)
		log.info(
			"member_registered",
			extra={
				"member_id": created.id,
				"institution_id": institution_id,
				"role": created.role.value,
				"kind": request.kind,
			},
		)
		return RegisterResponse(member_id=created.id, role=created.role)

	async def approve(self, request: ApproveRequest) -> ApproveResponse:
		"""Record an approval and promote any existing member holding the student id."""

		policy.require_fields(
			{
				"admin_email": request.admin_email,
				"institution_id": request.institution_id,
				"external_student_id": request.external_student_id,
			}
		)
		admin_email = policy.normalise_email(request.admin_email)
		institution_id = request.institution_id.strip()
		external_student_id = request.external_student_id.strip()

		if not await self._repo.is_admin(institution_id, admin_email):
			audit.log_admin_event(
				"student_approve",
				actor=admin_email,
				institution_id=institution_id,
				outcome="denied",
				extra={"external_student_id": external_student_id},
			)
			obs_metrics.inc_approval("denied")
			raise AuthorizationError("not_admin")

		inserted = await self._repo.insert_approval(
			institution_id,
			external_student_id,
			approved_by=admin_email,
		)
		promoted = await self._repo.set_role_for_student(institution_id, external_student_id, Role.STUDENT)
		audit.log_admin_event(
			"student_approve",
			actor=admin_email,
			institution_id=institution_id,
			outcome="granted",
			extra={
				"external_student_id": external_student_id,
				"new_record": inserted,
				"members_promoted": promoted,
			},
		)
		obs_metrics.inc_approval("granted" if inserted else "duplicate")
		return ApproveResponse()

	async def login(self, request: LoginRequest) -> LoginResponse:
		policy.require_fields({"email": request.email, "password": request.password})
		email = policy.normalise_email(request.email)
		await policy.enforce_login_rate(email)

		member = await self._repo.find_member_by_email(email)
		# Federated members carry no password hash and never pass this check.
		if member is None or not member.password_hash or not verify_password(member.password_hash, request.password):
			obs_metrics.inc_login("failed")
			raise AuthenticationError("invalid_credentials")

		if check_needs_rehash(member.password_hash):
			member.password_hash = hash_password(request.password)
			await self._repo.update_password_hash(member.id, member.password_hash)

		ttl_seconds = settings.access_ttl_minutes * 60
		token = jwt_helper.encode_access(
			{
				"sub": member.id,
				"institution_id": member.institution_id,
				"role": member.role.value,
			},
			ttl_seconds=ttl_seconds,
		)
		obs_metrics.inc_login("ok")
		log.info("member_login", extra={"member_id": member.id})
		return LoginResponse(
			access_token=token,
			expires_in=ttl_seconds,
			member=MemberOut.from_member(member),
		)
