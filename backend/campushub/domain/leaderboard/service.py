"""Service computing per-institution leaderboards from member scores."""

from __future__ import annotations

import logging
from typing import Optional, Union

from campushub.domain.errors import ValidationError
from campushub.domain.leaderboard import ranking
from campushub.domain.leaderboard.schemas import LeaderboardEntry, LeaderboardResponse
from campushub.domain.members.models import Role
from campushub.domain.members.repo import MemberRepository
from campushub.obs import metrics as obs_metrics
from campushub.settings import settings

log = logging.getLogger(__name__)


class LeaderboardService:
	"""Read-only ranking over an institution's students."""

	def __init__(self, repository: Optional[MemberRepository] = None) -> None:
		self._repo = repository or MemberRepository()

	def _resolve_limit(self, limit: Union[int, str, None]) -> int:
		if isinstance(limit, str):
			limit = limit.strip()
			if not limit:
				return settings.leaderboard_default_limit
			try:
				limit = int(limit)
			except ValueError:
				raise ValidationError("invalid_limit") from None
		elif limit is None:
			return settings.leaderboard_default_limit
		elif isinstance(limit, bool) or not isinstance(limit, int):
			raise ValidationError("invalid_limit")
		if limit < 1 or limit > settings.leaderboard_max_limit:
			raise ValidationError("invalid_limit")
		return limit

	async def compute_leaderboard(
		self,
		institution_id: Optional[str],
		limit: Union[int, str, None] = None,
	) -> LeaderboardResponse:
		if not institution_id or not institution_id.strip():
			raise ValidationError("institution_id_required")
		institution_id = institution_id.strip()
		size = self._resolve_limit(limit)

		students = [
			member for member in await self._repo.list_students(institution_id) if member.role is Role.STUDENT
		]
		views = ranking.compute_views(students, size)
		obs_metrics.inc_leaderboard(len(students))
		log.debug("leaderboard_computed", extra={"institution_id": institution_id, "students": len(students)})
		return LeaderboardResponse(
			institution_id=institution_id,
			limit=size,
			academic_top=[LeaderboardEntry.from_ranked(entry) for entry in views["academic_top"]],
			sports_top=[LeaderboardEntry.from_ranked(entry) for entry in views["sports_top"]],
			combined_top=[LeaderboardEntry.from_ranked(entry) for entry in views["combined_top"]],
		)
