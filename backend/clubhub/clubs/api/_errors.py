"""Error translation helpers for the clubs API."""

from __future__ import annotations

from fastapi import HTTPException, status

from clubhub.clubs.domain import exceptions
from clubhub.obs import metrics as obs_metrics


def to_http_error(exc: Exception) -> HTTPException:
	"""Translate domain exceptions to FastAPI HTTP errors."""
	if isinstance(exc, HTTPException):
		return exc
	if isinstance(exc, exceptions.PermissionDeniedError):
		obs_metrics.inc_permission_denied(exc.detail)
	if isinstance(exc, exceptions.ClubsError):
		return HTTPException(status_code=exc.status_code, detail=exc.detail)
	return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
