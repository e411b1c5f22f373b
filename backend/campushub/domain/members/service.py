"""Member self-service: profile updates, lookup and club access."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from campushub.domain.errors import ConflictError, NotFoundError, ValidationError
from campushub.domain.members.models import Member, club_institution
from campushub.domain.members.repo import MemberRepository
from campushub.domain.registration import policy
from campushub.obs import metrics as obs_metrics

log = logging.getLogger(__name__)

# Wire key -> model attribute. Anything else in an update payload is ignored.
ALLOWED_UPDATE_FIELDS: dict[str, str] = {
	"name": "name",
	"avatarTag": "avatar_tag",
	"avatar_tag": "avatar_tag",
	"emojiTag": "avatar_tag",
	"academicScore": "academic_score",
	"academic_score": "academic_score",
	"sportsScore": "sports_score",
	"sports_score": "sports_score",
	"clubs": "clubs",
	"email": "email",
}

_SCORE_FIELDS = {"academic_score", "sports_score"}
# Score columns are Postgres INTEGER.
MAX_SCORE = 2_147_483_647
_TEXT_FIELDS = {"name", "avatar_tag", "email"}


def _coerce_score(value: Any) -> int:
	if isinstance(value, bool) or not isinstance(value, int) or value < 0 or value > MAX_SCORE:
		raise ValidationError("invalid_score")
	return value


def _coerce_text(value: Any) -> str:
	if not isinstance(value, str) or not value.strip():
		raise ValidationError("invalid_field")
	return value.strip()


def _coerce_clubs(value: Any) -> list[str]:
	if not isinstance(value, (list, tuple)):
		raise ValidationError("invalid_clubs")
	clubs: list[str] = []
	for item in value:
		if not isinstance(item, str) or not item.strip():
			raise ValidationError("invalid_clubs")
		clubs.append(item.strip())
	return clubs


def parse_update_fields(fields: Mapping[str, Any]) -> tuple[dict[str, Any], Optional[list[str]]]:
	"""Split a raw update payload into column changes and a club replacement set."""

	changes: dict[str, Any] = {}
	clubs: Optional[list[str]] = None
	for key, value in fields.items():
		attr = ALLOWED_UPDATE_FIELDS.get(key)
		if attr is None:
			log.debug("member_update_field_ignored", extra={"field": key})
			continue
		if attr == "clubs":
			clubs = _coerce_clubs(value)
		elif attr in _SCORE_FIELDS:
			changes[attr] = _coerce_score(value)
		elif attr == "email":
			changes[attr] = policy.normalise_email(_coerce_text(value))
		elif attr in _TEXT_FIELDS:
			changes[attr] = _coerce_text(value)
	return changes, clubs


class MemberService:
	def __init__(self, repository: Optional[MemberRepository] = None) -> None:
		self._repo = repository or MemberRepository()

	async def get_member(self, member_id: Optional[str]) -> Member:
		if not member_id:
			raise ValidationError("member_id_required")
		member = await self._repo.get_member(member_id)
		if member is None:
			raise NotFoundError("member_not_found")
		return member

	async def update_member(self, member_id: Optional[str], fields: Optional[Mapping[str, Any]]) -> Member:
		"""Apply an allow-listed partial update; clubs are replaced wholesale."""

		if not member_id or fields is None:
			raise ValidationError("missing_fields")
		changes, clubs = parse_update_fields(fields)

		existing = await self._repo.get_member(member_id)
		if existing is None:
			raise NotFoundError("member_not_found")
		new_email = changes.get("email")
		if new_email and new_email != existing.email:
			if await self._repo.email_taken(new_email, exclude_member_id=member_id):
				raise ConflictError("email_taken")

		updated = await self._repo.update_member(member_id, changes, clubs=clubs)
		if updated is None:
			raise NotFoundError("member_not_found")
		obs_metrics.inc_member_update()
		log.info(
			"member_updated",
			extra={"member_id": member_id, "changed": sorted(changes), "clubs_replaced": clubs is not None},
		)
		return updated

	async def has_club_access(self, member_id: Optional[str], club_id: Optional[str]) -> bool:
		if not member_id or not club_id:
			raise ValidationError("missing_fields")
		member = await self._repo.get_member(member_id)
		if member is None:
			raise NotFoundError("member_not_found")
		if club_institution(club_id) != member.institution_id:
			return False
		return await self._repo.has_club_membership(member_id, club_id)
