import pytest
from argon2 import PasswordHasher

from campushub.domain.errors import AuthenticationError, ValidationError
from campushub.domain.registration.schemas import DirectRegistration, FederatedRegistration, LoginRequest
from campushub.domain.registration.service import RegistrationService
from campushub.infra import jwt as jwt_helper
from campushub.infra.password import check_needs_rehash
from campushub.settings import settings


@pytest.fixture
def service(repo):
	return RegistrationService(repository=repo)


async def _register_alice(service) -> str:
	result = await service.register(
		DirectRegistration(
			name="Alice",
			email="alice@college.edu",
			institution_id="123",
			external_student_id="S1001",
			password="correct horse",
		)
	)
	return result.member_id


@pytest.mark.asyncio
async def test_login_issues_token_with_member_claims(service):
	member_id = await _register_alice(service)
	response = await service.login(LoginRequest(email="Alice@College.edu", password="correct horse"))

	assert response.token_type == "bearer"
	assert response.expires_in == settings.access_ttl_minutes * 60
	assert response.member.id == member_id
	claims = jwt_helper.decode_access(response.access_token)
	assert claims["sub"] == member_id
	assert claims["institution_id"] == "123"
	assert claims["role"] == "student"
	assert claims["iss"] == jwt_helper.ISSUER
	assert claims["aud"] == jwt_helper.AUDIENCE
	assert claims["exp"] - claims["iat"] == settings.access_ttl_minutes * 60


@pytest.mark.asyncio
@pytest.mark.parametrize(
	"email,password",
	[("alice@college.edu", "wrong"), ("nobody@college.edu", "correct horse")],
)
async def test_login_failures_are_indistinguishable(service, email, password):
	await _register_alice(service)
	with pytest.raises(AuthenticationError) as exc:
		await service.login(LoginRequest(email=email, password=password))
	assert exc.value.detail == "invalid_credentials"
	assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_federated_member_cannot_password_login(service):
	await service.register(
		FederatedRegistration(
			name="Bob",
			email="bob@college.edu",
			institution_id="123",
			external_student_id="S7",
			provider="google",
			provider_subject="sub-7",
		)
	)
	with pytest.raises(AuthenticationError):
		await service.login(LoginRequest(email="bob@college.edu", password="anything"))


@pytest.mark.asyncio
async def test_login_requires_both_fields(service):
	with pytest.raises(ValidationError):
		await service.login(LoginRequest(email="alice@college.edu"))


@pytest.mark.asyncio
async def test_login_upgrades_outdated_hash(service, repo):
	member_id = await _register_alice(service)
	weak = PasswordHasher(time_cost=1, memory_cost=8192, parallelism=1)
	repo.members[member_id].password_hash = weak.hash("correct horse")
	assert check_needs_rehash(repo.members[member_id].password_hash)

	await service.login(LoginRequest(email="alice@college.edu", password="correct horse"))
	assert not check_needs_rehash(repo.members[member_id].password_hash)
