"""Response schemas for leaderboard endpoints."""

from __future__ import annotations

from typing import List

from pydantic import Field

from campushub.domain.leaderboard.ranking import RankedEntry
from campushub.domain.members.schemas import CamelModel


class LeaderboardEntry(CamelModel):
	rank: int
	member_id: str
	name: str
	avatar_tag: str
	academic_score: int
	sports_score: int
	score: int

	@classmethod
	def from_ranked(cls, entry: RankedEntry) -> "LeaderboardEntry":
		member = entry.member
		return cls(
			rank=entry.rank,
			member_id=member.id,
			name=member.name,
			avatar_tag=member.avatar_tag,
			academic_score=member.academic_score,
			sports_score=member.sports_score,
			score=entry.score,
		)


class LeaderboardResponse(CamelModel):
	institution_id: str
	limit: int
	academic_top: List[LeaderboardEntry] = Field(default_factory=list)
	sports_top: List[LeaderboardEntry] = Field(default_factory=list)
	combined_top: List[LeaderboardEntry] = Field(default_factory=list)
