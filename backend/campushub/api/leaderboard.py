"""FastAPI routes for institution leaderboards."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query

from campushub.domain.leaderboard.schemas import LeaderboardResponse
from campushub.domain.leaderboard.service import LeaderboardService

router = APIRouter(tags=["leaderboard"])

_service = LeaderboardService()


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard_endpoint(
	institution_id: Optional[str] = Query(default=None, alias="institutionId", description="Institution identifier"),
	college_id: Optional[str] = Query(default=None, alias="collegeId", include_in_schema=False),
	limit: Optional[str] = Query(default=None, description="Entries per view"),
) -> LeaderboardResponse:
	return await _service.compute_leaderboard(institution_id or college_id, limit)
