"""Policy guards, rate limits, and validation helpers for registration flows."""

from __future__ import annotations

import time
from typing import Mapping, Optional

from campushub.domain.errors import DomainMismatchError, RateLimitedError, ValidationError
from campushub.domain.members.models import Institution
from campushub.infra import rate_limit
from campushub.settings import settings

REGISTER_PER_HOUR = 20
LOGIN_PER_MINUTE = 12
DEV_RATE_LIMIT = 1000


def normalise_email(email: str) -> str:
	return email.strip().lower()


def require_fields(values: Mapping[str, Optional[str]]) -> None:
	"""Every value must be a non-empty string."""

	missing = [name for name, value in values.items() if not isinstance(value, str) or not value.strip()]
	if missing:
		raise ValidationError("missing_fields")


def email_domain(email: str) -> str:
	"""Return the part after the ``@``; empty unless there is exactly one."""

	local, sep, domain = email.partition("@")
	if not sep or not local or "@" in domain:
		return ""
	return domain


def guard_email_domain(email: str, institution: Institution) -> None:
	"""The email domain must end with the institution's configured domain suffix."""

	domain = email_domain(email).lower()
	suffix = institution.domain.strip().lower()
	if not domain or not suffix or not domain.endswith(suffix):
		raise DomainMismatchError("email_domain_mismatch")


async def _bucketed_limit(key: str, ttl: int, limit: int, reason: str) -> None:
	count = await rate_limit.hit(key, ttl_seconds=ttl)
	if count > limit:
		raise RateLimitedError(reason)


async def enforce_register_rate(ip: str, *, now: float | None = None) -> None:
	now = now or time.time()
	bucket = time.strftime("%Y%m%d%H", time.gmtime(now))
	limit = DEV_RATE_LIMIT if settings.is_dev() else REGISTER_PER_HOUR
	await _bucketed_limit(f"rl:auth:register:{ip}:{bucket}", 3600, limit, "register_rate")


async def enforce_login_rate(email: str, *, now: float | None = None) -> None:
	now = now or time.time()
	bucket = time.strftime("%Y%m%d%H%M", time.gmtime(now))
	limit = DEV_RATE_LIMIT if settings.is_dev() else LOGIN_PER_MINUTE
	await _bucketed_limit(f"rl:auth:login:{email}:{bucket}", 60, limit, "login_rate")
