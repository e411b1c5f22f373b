"""Admin endpoints for the student approval allow-list."""

from __future__ import annotations

from fastapi import APIRouter

from campushub.domain.registration.schemas import ApproveRequest, ApproveResponse
from campushub.domain.registration.service import RegistrationService

router = APIRouter(prefix="/admin", tags=["admin"])

_service = RegistrationService()


@router.post("/approve", response_model=ApproveResponse)
async def approve_endpoint(payload: ApproveRequest) -> ApproveResponse:
	return await _service.approve(payload)
