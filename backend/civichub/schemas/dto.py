"""Pydantic schemas for the civic API."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_PRIORITY_PATTERN = "^(low|medium|high|urgent)$"
_STATUS_PATTERN = "^(open|in_progress|resolved|closed)$"
_ATTENDANCE_PATTERN = "^(attending|maybe|not_attending)$"
_ROLE_PATTERN = "^(user|admin)$"


def _strip_required(value: str) -> str:
	text = value.strip()
	if not text:
		raise ValueError("must not be blank")
	return text


def _strip_optional(value: Optional[str]) -> Optional[str]:
	if value is None:
		return None
	return _strip_required(value)


class Pagination(BaseModel):
	page: int
	limit: int
	total: int
	total_pages: int = Field(serialization_alias="totalPages")

	@classmethod
	def build(cls, *, page: int, limit: int, total: int) -> "Pagination":
		return cls(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit) if limit else 0)

	def as_dict(self) -> dict[str, int]:
		return self.model_dump(by_alias=True)


# --- Issues -----------------------------------------------------------------


class IssueCreateRequest(BaseModel):
	title: str = Field(..., max_length=200)
	description: str = Field(..., max_length=10000)
	category_id: Optional[UUID] = None
	priority: str = Field(default="medium", pattern=_PRIORITY_PATTERN)
	location_address: Optional[str] = Field(default=None, max_length=500)
	latitude: Optional[float] = Field(default=None, ge=-90, le=90)
	longitude: Optional[float] = Field(default=None, ge=-180, le=180)
	image_urls: List[str] = Field(default_factory=list, max_length=10)
	is_anonymous: bool = False

	@field_validator("title", "description")
	@classmethod
	def _strip_title(cls, value):
		return _strip_required(value)


class IssueUpdateRequest(BaseModel):
	title: Optional[str] = Field(default=None, max_length=200)
	description: Optional[str] = Field(default=None, max_length=10000)
	category_id: Optional[UUID] = None
	priority: Optional[str] = Field(default=None, pattern=_PRIORITY_PATTERN)
	status: Optional[str] = Field(default=None, pattern=_STATUS_PATTERN)
	location_address: Optional[str] = Field(default=None, max_length=500)
	latitude: Optional[float] = Field(default=None, ge=-90, le=90)
	longitude: Optional[float] = Field(default=None, ge=-180, le=180)
	image_urls: Optional[List[str]] = Field(default=None, max_length=10)
	is_anonymous: Optional[bool] = None
	admin_notes: Optional[str] = Field(default=None, max_length=4000)

	@field_validator("title", "description")
	@classmethod
	def _strip_title(cls, value):
		return _strip_optional(value)


class StatusChangeRequest(BaseModel):
	# enum membership is checked by the service so it surfaces as `invalid_status`
	status: str
	admin_notes: Optional[str] = Field(default=None, max_length=4000)


class VoteRequest(BaseModel):
	vote_type: str


class VoteResult(BaseModel):
	action: str
	vote: Optional[str] = None
	tally: Dict[str, int]


class CommentCreateRequest(BaseModel):
	content: str = Field(..., max_length=5000)
	parent_comment_id: Optional[UUID] = None


class CategoryCreateRequest(BaseModel):
	name: str = Field(..., max_length=80)
	description: Optional[str] = Field(default=None, max_length=1000)
	icon: Optional[str] = Field(default=None, max_length=80)
	color: Optional[str] = Field(default=None, max_length=32)

	@field_validator("name")
	@classmethod
	def _strip_name(cls, value):
		return _strip_required(value)


# --- Events -----------------------------------------------------------------


class EventCreateRequest(BaseModel):
	title: str = Field(..., max_length=200)
	description: Optional[str] = Field(default=None, max_length=10000)
	event_date: datetime
	location_address: Optional[str] = Field(default=None, max_length=500)
	latitude: Optional[float] = Field(default=None, ge=-90, le=90)
	longitude: Optional[float] = Field(default=None, ge=-180, le=180)
	max_attendees: Optional[int] = Field(default=None, ge=1)
	is_public: bool = True
	image_url: Optional[str] = Field(default=None, max_length=1000)

	@field_validator("title")
	@classmethod
	def _strip_title(cls, value):
		return _strip_required(value)


class EventUpdateRequest(BaseModel):
	title: Optional[str] = Field(default=None, max_length=200)
	description: Optional[str] = Field(default=None, max_length=10000)
	event_date: Optional[datetime] = None
	location_address: Optional[str] = Field(default=None, max_length=500)
	latitude: Optional[float] = Field(default=None, ge=-90, le=90)
	longitude: Optional[float] = Field(default=None, ge=-180, le=180)
	max_attendees: Optional[int] = Field(default=None, ge=1)
	is_public: Optional[bool] = None
	image_url: Optional[str] = Field(default=None, max_length=1000)

	@field_validator("title")
	@classmethod
	def _strip_title(cls, value):
		return _strip_optional(value)


class AttendRequest(BaseModel):
	status: str = Field(default="attending", pattern=_ATTENDANCE_PATTERN)


# --- Profiles & notifications ----------------------------------------------


class ProfileUpdateRequest(BaseModel):
	first_name: Optional[str] = Field(default=None, max_length=100)
	last_name: Optional[str] = Field(default=None, max_length=100)
	display_name: Optional[str] = Field(default=None, max_length=100)
	avatar_url: Optional[str] = Field(default=None, max_length=1000)
	bio: Optional[str] = Field(default=None, max_length=2000)
	phone: Optional[str] = Field(default=None, max_length=40)
	address: Optional[str] = Field(default=None, max_length=500)
	city: Optional[str] = Field(default=None, max_length=100)
	state: Optional[str] = Field(default=None, max_length=100)
	zip_code: Optional[str] = Field(default=None, max_length=20)

	model_config = ConfigDict(extra="ignore")


class NotificationCreateRequest(BaseModel):
	user_id: UUID
	title: str = Field(..., max_length=200)
	message: str = Field(..., max_length=2000)
	type: str = Field(default="general", max_length=64)
	related_id: Optional[UUID] = None

	@field_validator("title", "message")
	@classmethod
	def _strip_text(cls, value):
		return _strip_required(value)


# --- Admin ------------------------------------------------------------------


class AdminUserUpdateRequest(BaseModel):
	role: Optional[str] = Field(default=None, pattern=_ROLE_PATTERN)
	is_active: Optional[bool] = None

	@model_validator(mode="after")
	def _require_field(self) -> "AdminUserUpdateRequest":
		if self.role is None and self.is_active is None:
			raise ValueError("role or is_active is required")
		return self


# --- AI ---------------------------------------------------------------------


class CategorizeRequest(BaseModel):
	title: str = Field(..., max_length=200)
	description: str = Field(..., max_length=10000)

	@field_validator("title", "description")
	@classmethod
	def _strip_text(cls, value):
		return _strip_required(value)


class ModerateRequest(BaseModel):
	content: str = Field(..., max_length=10000)

	@field_validator("content")
	@classmethod
	def _strip_content(cls, value):
		return _strip_required(value)


class IssueReferenceRequest(BaseModel):
	issue_id: UUID


class CategorizeResult(BaseModel):
	category: str
	priority: str
	tags: List[str] = Field(default_factory=list)
	confidence: float


class ModerationResult(BaseModel):
	is_appropriate: bool
	reason: Optional[str] = None
	suggested_edit: Optional[str] = None


class SolutionsResult(BaseModel):
	solutions: List[str]


class SummaryResult(BaseModel):
	summary: str


class AnalyticsResult(BaseModel):
	insights: str = ""
	trends: List[str] = Field(default_factory=list)
	recommendations: List[str] = Field(default_factory=list)
