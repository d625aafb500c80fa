"""Domain models for civic entities."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

ISSUE_PRIORITIES = ("low", "medium", "high", "urgent")
ISSUE_STATUSES = ("open", "in_progress", "resolved", "closed")
VOTE_TYPES = ("up", "down")
ATTENDANCE_STATUSES = ("attending", "maybe", "not_attending")
PROFILE_ROLES = ("user", "admin")


def as_utc(value: datetime) -> datetime:
	"""Naive timestamps are taken as UTC."""
	if value.tzinfo is None:
		return value.replace(tzinfo=timezone.utc)
	return value


class Profile(BaseModel):
	"""Represents a citizen profile keyed by identity id."""

	id: UUID
	email: Optional[str] = None
	first_name: Optional[str] = None
	last_name: Optional[str] = None
	display_name: Optional[str] = None
	avatar_url: Optional[str] = None
	bio: Optional[str] = None
	phone: Optional[str] = None
	address: Optional[str] = None
	city: Optional[str] = None
	state: Optional[str] = None
	zip_code: Optional[str] = None
	role: str = "user"
	is_active: bool = True
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)


class Category(BaseModel):
	id: UUID
	name: str
	description: Optional[str] = None
	icon: Optional[str] = None
	color: Optional[str] = None
	created_at: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)


class Issue(BaseModel):
	"""Represents a reported civic issue.

	Joined columns (category, reporter, tallies) are populated by the list and
	detail queries and left at their defaults for plain row reads.
	"""

	id: UUID
	title: str
	description: str
	category_id: Optional[UUID] = None
	priority: str = "medium"
	status: str = "open"
	reporter_id: UUID
	assigned_to: Optional[UUID] = None
	location_address: Optional[str] = None
	latitude: Optional[float] = None
	longitude: Optional[float] = None
	image_urls: list[str] = Field(default_factory=list)
	is_anonymous: bool = False
	view_count: int = 0
	admin_notes: Optional[str] = None
	created_at: datetime
	updated_at: datetime

	category_name: Optional[str] = None
	category_icon: Optional[str] = None
	category_color: Optional[str] = None
	reporter_first_name: Optional[str] = None
	reporter_last_name: Optional[str] = None
	reporter_display_name: Optional[str] = None
	reporter_avatar_url: Optional[str] = None
	upvotes: int = 0
	downvotes: int = 0
	comment_count: int = 0

	model_config = ConfigDict(from_attributes=True)


class IssueUpdate(BaseModel):
	"""Audit row recorded when an issue changes status."""

	id: UUID
	issue_id: UUID
	updated_by: UUID
	update_type: str
	old_value: Optional[str] = None
	new_value: Optional[str] = None
	message: Optional[str] = None
	created_at: datetime

	model_config = ConfigDict(from_attributes=True)


class Vote(BaseModel):
	id: UUID
	issue_id: UUID
	user_id: UUID
	vote_type: str
	created_at: datetime

	model_config = ConfigDict(from_attributes=True)


class VoteTally(BaseModel):
	up: int = 0
	down: int = 0


class Comment(BaseModel):
	id: UUID
	issue_id: UUID
	user_id: UUID
	content: str
	parent_comment_id: Optional[UUID] = None
	is_official: bool = False
	created_at: datetime
	updated_at: datetime

	author_first_name: Optional[str] = None
	author_last_name: Optional[str] = None
	author_display_name: Optional[str] = None
	author_avatar_url: Optional[str] = None

	model_config = ConfigDict(from_attributes=True)


class Event(BaseModel):
	"""Represents a community event; `current_attendees` is computed at read time."""

	id: UUID
	title: str
	description: Optional[str] = None
	organizer_id: UUID
	event_date: datetime
	location_address: Optional[str] = None
	latitude: Optional[float] = None
	longitude: Optional[float] = None
	max_attendees: Optional[int] = None
	is_public: bool = True
	image_url: Optional[str] = None
	created_at: datetime
	updated_at: datetime

	current_attendees: int = 0
	organizer_first_name: Optional[str] = None
	organizer_last_name: Optional[str] = None
	organizer_display_name: Optional[str] = None
	organizer_avatar_url: Optional[str] = None

	model_config = ConfigDict(from_attributes=True)


class Attendance(BaseModel):
	id: UUID
	event_id: UUID
	user_id: UUID
	status: str
	created_at: datetime
	updated_at: Optional[datetime] = None

	user_first_name: Optional[str] = None
	user_last_name: Optional[str] = None
	user_display_name: Optional[str] = None
	user_avatar_url: Optional[str] = None

	model_config = ConfigDict(from_attributes=True)


class Notification(BaseModel):
	id: UUID
	user_id: UUID
	title: str
	message: str
	type: str
	related_id: Optional[UUID] = None
	is_read: bool = False
	created_at: datetime

	model_config = ConfigDict(from_attributes=True)


class IssueFilters(BaseModel):
	"""Filter set shared by issue list and count queries."""

	category_id: Optional[UUID] = None
	status: Optional[str] = None
	priority: Optional[str] = None
	reporter_id: Optional[UUID] = None
	created_from: Optional[datetime] = None
	created_to: Optional[datetime] = None


class ProfileFilters(BaseModel):
	search: Optional[str] = None
	role: Optional[str] = None
	active_only: bool = False
