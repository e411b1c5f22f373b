"""Member self-service endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query

from campushub.domain.members.schemas import MemberEnvelope, MemberOut, UpdateMemberRequest
from campushub.domain.members.service import MemberService

router = APIRouter(prefix="/member", tags=["members"])

_service = MemberService()


@router.get("", response_model=MemberEnvelope)
async def get_member_endpoint(
	member_id: Optional[str] = Query(default=None, alias="memberId"),
) -> MemberEnvelope:
	member = await _service.get_member(member_id)
	return MemberEnvelope(member=MemberOut.from_member(member))


@router.post("/update", response_model=MemberEnvelope)
async def update_member_endpoint(payload: UpdateMemberRequest) -> MemberEnvelope:
	member = await _service.update_member(payload.member_id, payload.fields)
	return MemberEnvelope(member=MemberOut.from_member(member))
