"""Custom exceptions for the clubs workflow."""

from __future__ import annotations

from fastapi import status

if hasattr(status, "HTTP_422_UNPROCESSABLE_CONTENT"):
	_HTTP_422 = status.HTTP_422_UNPROCESSABLE_CONTENT
else:  # pragma: no cover - older Starlette builds
	_HTTP_422 = status.HTTP_422_UNPROCESSABLE_ENTITY


class ClubsError(Exception):
	"""Base class for workflow errors."""

	status_code: int = status.HTTP_400_BAD_REQUEST
	detail: str = "clubs_error"

	def __init__(self, detail: str | None = None) -> None:
		super().__init__(detail or self.detail)
		if detail:
			self.detail = detail


class PermissionDeniedError(ClubsError):
	"""Raised when a role or ownership precondition fails."""

	status_code = status.HTTP_403_FORBIDDEN
	detail = "permission_denied"


class NotFoundError(ClubsError):
	"""Thrown when a referenced record is missing or not visible to the actor."""

	status_code = status.HTTP_404_NOT_FOUND
	detail = "not_found"


class ConflictError(ClubsError):
	"""Raised when a uniqueness or state invariant would be violated."""

	status_code = status.HTTP_409_CONFLICT
	detail = "conflict"


class UnavailableError(ClubsError):
	"""Raised when the store cannot be reached."""

	status_code = status.HTTP_503_SERVICE_UNAVAILABLE
	detail = "store_unavailable"


class ValidationError(ClubsError):
	"""Raised for validation errors not covered by FastAPI schema validation."""

	status_code = _HTTP_422
	detail = "validation_error"
