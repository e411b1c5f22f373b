"""Pure ranking helpers for institution leaderboards."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from campushub.domain.members.models import Member

ScoreKey = Callable[[Member], int]


@dataclass(slots=True, frozen=True)
class RankedEntry:
	rank: int
	member: Member
	score: int


def academic_key(member: Member) -> int:
	return member.academic_score


def sports_key(member: Member) -> int:
	return member.sports_score


def combined_key(member: Member) -> int:
	return member.combined_score


def rank_by(members: Sequence[Member], key: ScoreKey, limit: int) -> list[RankedEntry]:
	"""Highest score first, truncated to ``limit``.

	``sorted`` is stable, so members with equal scores keep their input order.
	"""

	ordered = sorted(members, key=key, reverse=True)[:limit]
	return [RankedEntry(rank=idx, member=member, score=key(member)) for idx, member in enumerate(ordered, start=1)]


def compute_views(members: Sequence[Member], limit: int) -> dict[str, list[RankedEntry]]:
	return {
		"academic_top": rank_by(members, academic_key, limit),
		"sports_top": rank_by(members, sports_key, limit),
		"combined_top": rank_by(members, combined_key, limit),
	}
