"""Authentication helpers for FastAPI endpoints.

The identity provider issues HS256 access tokens carrying the actor id and
global role. The resolved `Actor` is passed explicitly into every service
call; nothing about the session is kept in module state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from clubhub.infra import jwt as jwt_helper
from clubhub.settings import settings

ROLES = ("student", "club_head", "admin")


@dataclass(slots=True, frozen=True)
class Actor:
	id: str
	role: str
	name: Optional[str] = None
	email: Optional[str] = None
	session_id: Optional[str] = None

	@property
	def user_id(self) -> UUID:
		return UUID(self.id)

	@property
	def is_admin(self) -> bool:
		return self.role == "admin"


_bearer_scheme = HTTPBearer(auto_error=False)


def _invalid_token() -> HTTPException:
	return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")


def _validated_id(raw: object) -> str:
	value = str(raw or "").strip()
	try:
		return str(UUID(value))
	except ValueError:
		raise _invalid_token() from None


def verify_access_jwt(token: str) -> Actor:
	"""Decode and validate an access JWT and return an Actor.

	Requirements:
	- issuer="clubhub-api", audience="clubhub-web"
	- required claims: sub (uuid), role (one of ROLES), exp, iat
	"""
	try:
		payload = jwt_helper.decode_access(token)
	except Exception:
		# Normalise all decode failures to invalid_token for the API surface
		raise _invalid_token() from None

	actor_id = _validated_id(payload.get("sub"))
	role = str(payload.get("role") or "").strip()
	if role not in ROLES:
		raise _invalid_token()
	name = payload.get("name")
	email = payload.get("email")
	session_id = payload.get("sid")
	return Actor(
		id=actor_id,
		role=role,
		name=str(name) if name is not None else None,
		email=str(email) if email is not None else None,
		session_id=str(session_id).strip() if session_id is not None else None,
	)


async def get_current_user(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	x_user_role: Optional[str] = Header(default=None, alias="X-User-Role"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Actor:
	"""Resolve the authenticated actor.

	In development we allow simple headers. In all other environments, headers are
	ignored and a valid Bearer JWT is required.
	"""
	if credentials and credentials.scheme.lower() == "bearer":
		return verify_access_jwt(credentials.credentials)

	if settings.is_dev() and x_user_id:
		role = (x_user_role or "student").strip()
		if role not in ROLES:
			raise _invalid_token()
		return Actor(id=_validated_id(x_user_id), role=role)

	raise _invalid_token()
