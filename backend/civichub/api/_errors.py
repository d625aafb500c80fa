"""Error translation helpers for the civic API."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from civichub.domain import exceptions

logger = logging.getLogger(__name__)


def to_http_error(exc: Exception) -> HTTPException:
	"""Translate domain exceptions to FastAPI HTTP errors."""
	if isinstance(exc, HTTPException):
		return exc
	if isinstance(exc, exceptions.UpstreamError):
		logger.error("upstream_failure", extra={"reason": exc.detail}, exc_info=exc)
		return HTTPException(status_code=exc.status_code, detail="internal_error")
	if isinstance(exc, exceptions.CivicError):
		return HTTPException(status_code=exc.status_code, detail=exc.detail)
	logger.error("unhandled_error", extra={"error_type": type(exc).__name__}, exc_info=exc)
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="internal_error")
