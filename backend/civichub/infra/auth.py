"""Authentication helpers for FastAPI endpoints.

The identity provider issues HS256 access JWTs; this module only resolves a
credential to an identity. Roles and capabilities are looked up from the
profile store (see `civichub.api.deps`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from civichub.infra import jwt as jwt_helper
from civichub.obs import logging as obs_logging
from civichub.settings import settings


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	email: Optional[str] = None
	display_name: Optional[str] = None
	session_id: Optional[str] = None

	@property
	def uuid(self) -> UUID:
		return UUID(self.id)


bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized() -> HTTPException:
	return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unauthorized")


def _valid_uuid(value: str) -> bool:
	try:
		UUID(value)
	except ValueError:
		return False
	return True


def verify_access_jwt(token: str) -> AuthenticatedUser:
	"""Decode and validate an access JWT and return an AuthenticatedUser."""
	try:
		payload = jwt_helper.decode_access(token)
	except Exception:
		# Normalise all decode failures for the API surface
		raise _unauthorized()

	sub = str(payload.get("sub") or "").strip()
	if not sub or not _valid_uuid(sub):
		raise _unauthorized()
	email = payload.get("email")
	display_name = payload.get("name") or payload.get("display_name")
	session_id = payload.get("sid") or payload.get("session_id")
	return AuthenticatedUser(
		id=sub,
		email=str(email) if email is not None else None,
		display_name=str(display_name) if display_name is not None else None,
		session_id=str(session_id) if session_id is not None else None,
	)


async def get_current_user(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedUser:
	"""Resolve the authenticated user.

	In development we allow a plain `X-User-Id` header. In all other
	environments a valid Bearer JWT is required.
	"""
	if credentials and credentials.scheme.lower() == "bearer":
		user = verify_access_jwt(credentials.credentials)
		obs_logging.bind_context(user_id=user.id)
		return user

	if settings.is_dev() and x_user_id and _valid_uuid(x_user_id.strip()):
		user = AuthenticatedUser(id=x_user_id.strip())
		obs_logging.bind_context(user_id=user.id)
		return user

	raise _unauthorized()
