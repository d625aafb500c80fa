"""Custom exceptions for civic domain services."""

from __future__ import annotations

from fastapi import status


class CivicError(Exception):
	"""Base class for civic domain errors."""

	status_code: int = status.HTTP_400_BAD_REQUEST
	detail: str = "civic_error"

	def __init__(self, detail: str | None = None) -> None:
		super().__init__(detail or self.detail)
		if detail:
			self.detail = detail


class ForbiddenError(CivicError):
	"""Raised when authorization fails."""

	status_code = status.HTTP_403_FORBIDDEN
	detail = "forbidden"


class NotFoundError(CivicError):
	"""Thrown when a resource is missing."""

	status_code = status.HTTP_404_NOT_FOUND
	detail = "not_found"


class ValidationError(CivicError):
	"""Raised for business-rule violations not covered by request schema validation."""

	status_code = status.HTTP_400_BAD_REQUEST
	detail = "validation_error"


class ConflictError(CivicError):
	"""Raised for duplicate unique values (e.g., category names)."""

	status_code = status.HTTP_409_CONFLICT
	detail = "conflict"


class RateLimitedError(CivicError):
	status_code = status.HTTP_429_TOO_MANY_REQUESTS
	detail = "rate_limited"


class UpstreamError(CivicError):
	"""Raised when the store or the hosted LLM fails; detail is logged, never returned."""

	status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
	detail = "upstream_error"
