"""Error taxonomy shared by the registration, member and leaderboard services."""

from __future__ import annotations

from fastapi import status


class CampusHubError(Exception):
	"""Base class for domain errors carrying an HTTP mapping."""

	status_code: int = status.HTTP_400_BAD_REQUEST
	detail: str = "campushub_error"
	retriable: bool = False

	def __init__(self, detail: str | None = None) -> None:
		super().__init__(detail or self.detail)
		if detail:
			self.detail = detail


class ValidationError(CampusHubError):
	"""Malformed or missing input."""

	status_code = status.HTTP_400_BAD_REQUEST
	detail = "validation_error"


class NotFoundError(CampusHubError):
	"""Referenced entity does not exist."""

	status_code = status.HTTP_404_NOT_FOUND
	detail = "not_found"


class DomainMismatchError(CampusHubError):
	"""Email domain does not belong to the institution."""

	status_code = status.HTTP_403_FORBIDDEN
	detail = "email_domain_mismatch"


class ConflictError(CampusHubError):
	"""Uniqueness violation detected before writing."""

	status_code = status.HTTP_409_CONFLICT
	detail = "conflict"


class AuthorizationError(CampusHubError):
	"""Caller lacks the privilege for the operation."""

	status_code = status.HTTP_403_FORBIDDEN
	detail = "forbidden"


class AuthenticationError(CampusHubError):
	"""Credentials or token could not be verified."""

	status_code = status.HTTP_401_UNAUTHORIZED
	detail = "invalid_credentials"


class RateLimitedError(CampusHubError):
	status_code = status.HTTP_429_TOO_MANY_REQUESTS
	detail = "rate_limited"


class StoreError(CampusHubError):
	"""Backing store failure (connection loss, constraint race).

	The only retriable error; callers retry it once.
	"""

	status_code = status.HTTP_503_SERVICE_UNAVAILABLE
	detail = "store_unavailable"
	retriable = True
