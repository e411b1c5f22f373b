"""Club access endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from campushub.domain.members.schemas import ClubAccessRequest, ClubAccessResponse
from campushub.domain.members.service import MemberService

router = APIRouter(prefix="/clubs", tags=["clubs"])

_service = MemberService()


@router.post("/has-access", response_model=ClubAccessResponse)
async def has_access_endpoint(payload: ClubAccessRequest) -> ClubAccessResponse:
	allowed = await _service.has_club_access(payload.member_id, payload.club_id)
	return ClubAccessResponse(has_access=allowed)
