"""Registration, login and session endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from campushub.domain.members.schemas import MemberEnvelope, MemberOut
from campushub.domain.members.service import MemberService
from campushub.domain.registration.schemas import (
	DirectRegistration,
	FederatedRegistration,
	LoginRequest,
	LoginResponse,
	RegisterResponse,
)
from campushub.domain.registration.service import RegistrationService
from campushub.infra.auth import AuthenticatedMember, get_current_member

router = APIRouter(tags=["registration"])

_service = RegistrationService()
_members = MemberService()


def _client_ip(request: Request) -> str:
	client = request.client
	return client.host if client else "unknown"


@router.post("/register", response_model=RegisterResponse)
async def register_endpoint(payload: DirectRegistration, request: Request) -> RegisterResponse:
	return await _service.register(payload, ip_address=_client_ip(request))


@router.post("/register/federated", response_model=RegisterResponse)
async def register_federated_endpoint(payload: FederatedRegistration, request: Request) -> RegisterResponse:
	return await _service.register(payload, ip_address=_client_ip(request))


@router.post("/login", response_model=LoginResponse)
async def login_endpoint(payload: LoginRequest) -> LoginResponse:
	return await _service.login(payload)


@router.get("/me", response_model=MemberEnvelope)
async def me_endpoint(auth_member: AuthenticatedMember = Depends(get_current_member)) -> MemberEnvelope:
	member = await _members.get_member(auth_member.id)
	return MemberEnvelope(member=MemberOut.from_member(member))
