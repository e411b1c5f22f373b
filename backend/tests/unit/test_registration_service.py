import logging

import pytest

from campushub.domain.errors import (
	AuthorizationError,
	ConflictError,
	DomainMismatchError,
	NotFoundError,
	StoreError,
	ValidationError,
)
from campushub.domain.members.models import Role
from campushub.domain.registration.schemas import ApproveRequest, DirectRegistration, FederatedRegistration
from campushub.domain.registration.service import RegistrationService
from campushub.infra.password import verify_password


def _direct(**overrides) -> DirectRegistration:
	payload = {
		"name": "Alice",
		"email": "alice@college.edu",
		"institutionId": "123",
		"externalStudentId": "S2002",
		"password": "pw",
	}
	payload.update(overrides)
	return DirectRegistration.model_validate(payload)


@pytest.fixture
def service(repo):
	return RegistrationService(repository=repo)


@pytest.mark.asyncio
async def test_register_without_approval_is_pending(service, repo):
	result = await service.register(_direct())
	assert result.role is Role.PENDING
	stored = repo.members[result.member_id]
	assert stored.email == "alice@college.edu"
	assert stored.avatar_tag == "🏅"
	assert stored.auth_provider == "password"
	assert verify_password(stored.password_hash, "pw")


@pytest.mark.asyncio
async def test_register_with_approval_is_student(service):
	result = await service.register(_direct(externalStudentId="S1001"))
	assert result.role is Role.STUDENT


@pytest.mark.asyncio
async def test_register_accepts_legacy_aliases(service):
	request = DirectRegistration.model_validate(
		{
			"name": "Alice",
			"email": "alice@college.edu",
			"collegeId": "123",
			"studentId": "S1001",
			"password": "pw",
			"emojiTag": "🎾",
		}
	)
	result = await service.register(request)
	assert result.role is Role.STUDENT


@pytest.mark.asyncio
async def test_register_domain_mismatch_persists_nothing(service, repo):
	with pytest.raises(DomainMismatchError):
		await service.register(_direct(email="x@wrong.com"))
	assert repo.members == {}


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["name", "email", "institutionId", "externalStudentId", "password"])
async def test_register_requires_every_field(service, missing):
	with pytest.raises(ValidationError) as exc:
		await service.register(_direct(**{missing: ""}))
	assert exc.value.detail == "missing_fields"


@pytest.mark.asyncio
async def test_register_unknown_institution(service):
	with pytest.raises(NotFoundError) as exc:
		await service.register(_direct(institutionId="999"))
	assert exc.value.detail == "institution_not_found"


@pytest.mark.asyncio
async def test_register_duplicate_email_conflicts_and_keeps_first(service, repo):
	first = await service.register(_direct())
	before = repo.members[first.member_id]
	snapshot = (before.name, before.role, before.password_hash, before.external_student_id)

	with pytest.raises(ConflictError) as exc:
		await service.register(_direct(name="Mallory", email="ALICE@college.edu", externalStudentId="S1001"))
	assert exc.value.detail == "email_taken"
	assert len(repo.members) == 1
	after = repo.members[first.member_id]
	assert (after.name, after.role, after.password_hash, after.external_student_id) == snapshot


@pytest.mark.asyncio
async def test_register_race_on_email_surfaces_retriable_store_error(service, repo, monkeypatch):
	await service.register(_direct())

	async def _stale_check(email, *, exclude_member_id=None):
		return False

	monkeypatch.setattr(repo, "email_taken", _stale_check)
	with pytest.raises(StoreError) as exc:
		await service.register(_direct())
	assert exc.value.retriable is True
	assert exc.value.status_code == 503


@pytest.mark.asyncio
async def test_federated_registration_has_no_password(service, repo):
	request = FederatedRegistration.model_validate(
		{
			"kind": "federated",
			"name": "Bob",
			"email": "bob@college.edu",
			"institutionId": "123",
			"externalStudentId": "S1001",
			"provider": "Google",
			"providerSubject": "google-oauth2|42",
		}
	)
	result = await service.register(request)
	stored = repo.members[result.member_id]
	assert result.role is Role.STUDENT
	assert stored.password_hash is None
	assert stored.auth_provider == "google"
	assert stored.provider_subject == "google-oauth2|42"


@pytest.mark.asyncio
async def test_federated_registration_requires_subject(service):
	request = FederatedRegistration(
		name="Bob",
		email="bob@college.edu",
		institution_id="123",
		external_student_id="S1",
		provider="google",
	)
	with pytest.raises(ValidationError):
		await service.register(request)


@pytest.mark.asyncio
async def test_approve_rejects_non_admin_and_audits(service, repo, caplog):
	request = ApproveRequest(admin_email="eve@college.edu", institution_id="123", external_student_id="S2002")
	with caplog.at_level(logging.WARNING, logger="campushub.audit.admin"):
		with pytest.raises(AuthorizationError) as exc:
			await service.approve(request)
	assert exc.value.detail == "not_admin"
	assert ("123", "S2002") not in repo.approvals
	denied = [record for record in caplog.records if record.name == "campushub.audit.admin"]
	assert denied and denied[0].outcome == "denied"


@pytest.mark.asyncio
async def test_approve_requires_all_fields(service):
	with pytest.raises(ValidationError):
		await service.approve(ApproveRequest(admin_email="admin@college.edu", institution_id="123"))


@pytest.mark.asyncio
async def test_approve_twice_is_idempotent(service, repo):
	request = ApproveRequest(admin_email="Admin@College.edu", institution_id="123", external_student_id="S3003")
	first = await service.approve(request)
	second = await service.approve(request)
	assert first.success and second.success
	assert [key for key in repo.approvals if key == ("123", "S3003")] == [("123", "S3003")]


@pytest.mark.asyncio
async def test_approve_before_registration_grants_student_on_join(service):
	await service.approve(
		ApproveRequest(admin_email="admin@college.edu", institution_id="123", external_student_id="S4004")
	)
	result = await service.register(_direct(externalStudentId="S4004"))
	assert result.role is Role.STUDENT


@pytest.mark.asyncio
async def test_register_then_approve_promotes_alice(service, repo):
	repo.approvals.clear()
	registered = await service.register(
		_direct(name="Alice", email="alice@college.edu", institutionId="123", externalStudentId="S1001", password="pw")
	)
	assert registered.role is Role.PENDING

	request = ApproveRequest.model_validate(
		{"adminEmail": "admin@college.edu", "institutionId": "123", "studentId": "S1001"}
	)
	result = await service.approve(request)
	assert result.success is True
	assert repo.members[registered.member_id].role is Role.STUDENT
