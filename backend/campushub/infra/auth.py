"""Authentication helpers for FastAPI endpoints.

Bearer access tokens are verified with ``infra.jwt`` (HS256, settings.secret_key).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from campushub.domain.errors import AuthenticationError
from campushub.infra import jwt as jwt_helper


@dataclass(slots=True)
class AuthenticatedMember:
	id: str
	institution_id: str
	role: Optional[str] = None


_bearer_scheme = HTTPBearer(auto_error=False)


def verify_access_jwt(token: str) -> AuthenticatedMember:
	try:
		payload = jwt_helper.decode_access(token)
	except Exception:
		# Normalise all decode failures to invalid_token for the API surface
		raise AuthenticationError("invalid_token")

	role = payload.get("role")
	return AuthenticatedMember(
		id=str(payload["sub"]).strip(),
		institution_id=str(payload["institution_id"]).strip(),
		role=str(role) if role is not None else None,
	)


async def get_current_member(
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedMember:
	if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
		raise AuthenticationError("missing_token")
	return verify_access_jwt(credentials.credentials)
