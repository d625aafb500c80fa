"""In-memory stand-ins for the repository and LLM client used across the test suite."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional
from uuid import UUID, uuid4

from civichub.domain import models
from civichub.domain.exceptions import ConflictError
from civichub.domain.repo import (
	EVENT_UPDATABLE_COLUMNS,
	ISSUE_UPDATABLE_COLUMNS,
	PROFILE_UPDATABLE_COLUMNS,
)

_PRIORITY_RANK = {"low": 1, "medium": 2, "high": 3, "urgent": 4}


class ForeignKeyViolation(Exception):
	"""Raised where Postgres would reject a row pointing at a missing profile."""


def _now() -> datetime:
	return datetime.now(timezone.utc)


class _Clock:
	"""Monotonic timestamps so ordering by created_at is stable within a test."""

	def __init__(self) -> None:
		self._current = _now()

	def tick(self) -> datetime:
		self._current = self._current + timedelta(milliseconds=1)
		return self._current


class FakeCivicRepository:
	def __init__(self) -> None:
		self.clock = _Clock()
		self.profiles: dict[UUID, models.Profile] = {}
		self.categories: dict[UUID, models.Category] = {}
		self.issues: dict[UUID, models.Issue] = {}
		self.issue_updates: list[models.IssueUpdate] = []
		self.votes: dict[tuple[UUID, UUID], models.Vote] = {}
		self.comments: dict[UUID, models.Comment] = {}
		self.events: dict[UUID, models.Event] = {}
		self.attendance: dict[tuple[UUID, UUID], models.Attendance] = {}
		self.notifications: dict[UUID, models.Notification] = {}
		self.fail_notifications = False
		self.fail_issue_updates = False
		self.transactions = 0

	# --- Seeding helpers ----------------------------------------------------

	def add_profile(self, *, role: str = "user", is_active: bool = True, **fields: Any) -> models.Profile:
		profile_id = fields.pop("id", None) or uuid4()
		now = self.clock.tick()
		profile = models.Profile(
			id=profile_id,
			role=role,
			is_active=is_active,
			created_at=now,
			updated_at=now,
			**fields,
		)
		self.profiles[profile.id] = profile
		return profile

	def add_category(self, name: str, **fields: Any) -> models.Category:
		category = models.Category(id=uuid4(), name=name, created_at=self.clock.tick(), **fields)
		self.categories[category.id] = category
		return category

	def add_issue(self, *, reporter_id: UUID, title: str = "Pothole on Main St", **fields: Any) -> models.Issue:
		now = self.clock.tick()
		issue = models.Issue(
			id=uuid4(),
			title=title,
			description=fields.pop("description", "Deep pothole near the crosswalk"),
			reporter_id=reporter_id,
			created_at=fields.pop("created_at", now),
			updated_at=now,
			**fields,
		)
		self.issues[issue.id] = issue
		return issue

	def add_event(self, *, organizer_id: UUID, title: str = "Park cleanup", **fields: Any) -> models.Event:
		now = self.clock.tick()
		event = models.Event(
			id=uuid4(),
			title=title,
			organizer_id=organizer_id,
			event_date=fields.pop("event_date", now + timedelta(days=7)),
			created_at=now,
			updated_at=now,
			**fields,
		)
		self.events[event.id] = event
		return event

	def add_attendance(self, *, event_id: UUID, user_id: UUID, status: str = "attending") -> models.Attendance:
		row = models.Attendance(
			id=uuid4(),
			event_id=event_id,
			user_id=user_id,
			status=status,
			created_at=self.clock.tick(),
		)
		self.attendance[(event_id, user_id)] = row
		return row

	@asynccontextmanager
	async def transaction(self):
		self.transactions += 1
		yield object()

	# --- Profiles -----------------------------------------------------------

	async def get_profile(self, user_id: UUID, *, conn: Any = None) -> models.Profile | None:
		return self.profiles.get(user_id)

	def _require_profile(self, user_id: UUID) -> None:
		if user_id not in self.profiles:
			raise ForeignKeyViolation(f"profile {user_id} does not exist")

	async def ensure_profile(
		self,
		user_id: UUID,
		*,
		email: Optional[str] = None,
		display_name: Optional[str] = None,
	) -> models.Profile:
		existing = self.profiles.get(user_id)
		if existing is not None:
			return existing
		if email is not None and any(row.email == email for row in self.profiles.values()):
			email = None
		return self.add_profile(id=user_id, email=email, display_name=display_name)

	def _matching_profiles(self, filters: models.ProfileFilters) -> list[models.Profile]:
		rows = list(self.profiles.values())
		if filters.active_only:
			rows = [row for row in rows if row.is_active]
		if filters.role is not None:
			rows = [row for row in rows if row.role == filters.role]
		if filters.search:
			term = filters.search.lower()
			rows = [
				row
				for row in rows
				if any(term in (value or "").lower() for value in (row.first_name, row.last_name, row.display_name, row.city))
			]
		return rows

	async def list_profiles(self, filters: models.ProfileFilters, *, limit: int, offset: int = 0) -> list[models.Profile]:
		rows = sorted(self._matching_profiles(filters), key=lambda row: row.created_at, reverse=True)
		return rows[offset : offset + limit]

	async def count_profiles(self, filters: models.ProfileFilters | None = None) -> int:
		return len(self._matching_profiles(filters or models.ProfileFilters()))

	async def update_profile(self, user_id: UUID, fields: Mapping[str, Any]) -> models.Profile | None:
		profile = self.profiles.get(user_id)
		if profile is None:
			return None
		changes = {key: value for key, value in fields.items() if key in PROFILE_UPDATABLE_COLUMNS}
		profile = profile.model_copy(update={**changes, "updated_at": self.clock.tick()})
		self.profiles[user_id] = profile
		return profile

	async def set_profile_flags(
		self,
		user_id: UUID,
		*,
		role: Optional[str] = None,
		is_active: Optional[bool] = None,
	) -> models.Profile | None:
		profile = self.profiles.get(user_id)
		if profile is None:
			return None
		changes: dict[str, Any] = {"updated_at": self.clock.tick()}
		if role is not None:
			changes["role"] = role
		if is_active is not None:
			changes["is_active"] = is_active
		profile = profile.model_copy(update=changes)
		self.profiles[user_id] = profile
		return profile

	async def user_engagement(self, *, limit: int = 100) -> list[dict[str, Any]]:
		rows = sorted(self.profiles.values(), key=lambda row: row.created_at, reverse=True)[:limit]
		return [
			{
				"user_id": row.id,
				"display_name": row.display_name,
				"first_name": row.first_name,
				"last_name": row.last_name,
				"joined_at": row.created_at,
				"issues_created": sum(1 for issue in self.issues.values() if issue.reporter_id == row.id),
				"comments_posted": sum(1 for comment in self.comments.values() if comment.user_id == row.id),
				"votes_given": sum(1 for vote in self.votes.values() if vote.user_id == row.id),
				"events_organized": sum(1 for event in self.events.values() if event.organizer_id == row.id),
			}
			for row in rows
		]

	# --- Categories ---------------------------------------------------------

	async def list_categories(self) -> list[models.Category]:
		return sorted(self.categories.values(), key=lambda row: row.name)

	async def get_category(self, category_id: UUID) -> models.Category | None:
		return self.categories.get(category_id)

	async def create_category(self, *, name: str, description: str | None, icon: str | None, color: str | None) -> models.Category:
		if any(row.name == name for row in self.categories.values()):
			raise ConflictError("category_exists")
		return self.add_category(name, description=description, icon=icon, color=color)

	# --- Issues -------------------------------------------------------------

	def _issue_detail(self, issue: models.Issue) -> models.Issue:
		category = self.categories.get(issue.category_id) if issue.category_id else None
		reporter = self.profiles.get(issue.reporter_id)
		tally = self._tally(issue.id)
		return issue.model_copy(
			update={
				"category_name": category.name if category else None,
				"category_icon": category.icon if category else None,
				"category_color": category.color if category else None,
				"reporter_first_name": reporter.first_name if reporter else None,
				"reporter_last_name": reporter.last_name if reporter else None,
				"reporter_display_name": reporter.display_name if reporter else None,
				"reporter_avatar_url": reporter.avatar_url if reporter else None,
				"upvotes": tally.up,
				"downvotes": tally.down,
				"comment_count": sum(1 for row in self.comments.values() if row.issue_id == issue.id),
			}
		)

	def _matching_issues(self, filters: models.IssueFilters) -> list[models.Issue]:
		rows = list(self.issues.values())
		if filters.category_id is not None:
			rows = [row for row in rows if row.category_id == filters.category_id]
		if filters.status is not None:
			rows = [row for row in rows if row.status == filters.status]
		if filters.priority is not None:
			rows = [row for row in rows if row.priority == filters.priority]
		if filters.reporter_id is not None:
			rows = [row for row in rows if row.reporter_id == filters.reporter_id]
		if filters.created_from is not None:
			rows = [row for row in rows if row.created_at >= filters.created_from]
		if filters.created_to is not None:
			rows = [row for row in rows if row.created_at <= filters.created_to]
		return rows

	async def list_issues(
		self,
		filters: models.IssueFilters,
		*,
		sort_by: str = "created_at",
		sort_order: str = "desc",
		limit: int,
		offset: int = 0,
	) -> list[models.Issue]:
		def key(row: models.Issue) -> Any:
			if sort_by == "priority":
				return _PRIORITY_RANK[row.priority]
			return getattr(row, sort_by)

		rows = sorted(self._matching_issues(filters), key=key, reverse=sort_order == "desc")
		return [self._issue_detail(row) for row in rows[offset : offset + limit]]

	async def count_issues(self, filters: models.IssueFilters | None = None) -> int:
		return len(self._matching_issues(filters or models.IssueFilters()))

	async def count_issues_by(self, dimension: str, filters: models.IssueFilters | None = None) -> dict[str, int]:
		counts: dict[str, int] = {}
		for row in self._matching_issues(filters or models.IssueFilters()):
			if dimension == "category":
				category = self.categories.get(row.category_id) if row.category_id else None
				bucket = category.name if category else "Uncategorized"
			else:
				bucket = getattr(row, dimension)
			counts[bucket] = counts.get(bucket, 0) + 1
		return counts

	async def monthly_issue_counts(self, filters: models.IssueFilters | None = None) -> dict[str, int]:
		counts: dict[str, int] = {}
		for row in self._matching_issues(filters or models.IssueFilters()):
			key = row.created_at.strftime("%Y-%m")
			counts[key] = counts.get(key, 0) + 1
		return counts

	async def create_issue(self, *, reporter_id: UUID, fields: Mapping[str, Any]) -> models.Issue:
		self._require_profile(reporter_id)
		return self.add_issue(
			reporter_id=reporter_id,
			title=fields["title"],
			description=fields["description"],
			category_id=fields.get("category_id"),
			priority=fields.get("priority") or "medium",
			location_address=fields.get("location_address"),
			latitude=fields.get("latitude"),
			longitude=fields.get("longitude"),
			image_urls=list(fields.get("image_urls") or []),
			is_anonymous=bool(fields.get("is_anonymous", False)),
		)

	async def get_issue(self, issue_id: UUID, *, conn: Any = None, for_update: bool = False) -> models.Issue | None:
		return self.issues.get(issue_id)

	async def get_issue_detail(self, issue_id: UUID) -> models.Issue | None:
		issue = self.issues.get(issue_id)
		return self._issue_detail(issue) if issue else None

	async def increment_issue_views(self, issue_id: UUID) -> None:
		issue = self.issues.get(issue_id)
		if issue is not None:
			self.issues[issue_id] = issue.model_copy(update={"view_count": issue.view_count + 1})

	async def update_issue(self, issue_id: UUID, fields: Mapping[str, Any], *, conn: Any = None) -> models.Issue | None:
		issue = self.issues.get(issue_id)
		if issue is None:
			return None
		changes = {key: value for key, value in fields.items() if key in ISSUE_UPDATABLE_COLUMNS}
		issue = issue.model_copy(update={**changes, "updated_at": self.clock.tick()})
		self.issues[issue_id] = issue
		return issue

	async def delete_issue(self, issue_id: UUID) -> bool:
		if self.issues.pop(issue_id, None) is None:
			return False
		self.votes = {key: row for key, row in self.votes.items() if row.issue_id != issue_id}
		self.comments = {key: row for key, row in self.comments.items() if row.issue_id != issue_id}
		return True

	async def insert_issue_update(
		self,
		*,
		issue_id: UUID,
		updated_by: UUID,
		update_type: str,
		old_value: str | None,
		new_value: str | None,
		message: str | None,
	) -> models.IssueUpdate:
		if self.fail_issue_updates:
			raise RuntimeError("issue_updates unavailable")
		row = models.IssueUpdate(
			id=uuid4(),
			issue_id=issue_id,
			updated_by=updated_by,
			update_type=update_type,
			old_value=old_value,
			new_value=new_value,
			message=message,
			created_at=self.clock.tick(),
		)
		self.issue_updates.append(row)
		return row

	async def list_issue_updates(self, issue_id: UUID) -> list[models.IssueUpdate]:
		return [row for row in self.issue_updates if row.issue_id == issue_id]

	# --- Votes --------------------------------------------------------------

	async def get_vote(self, issue_id: UUID, user_id: UUID, *, conn: Any = None, for_update: bool = False) -> models.Vote | None:
		return self.votes.get((issue_id, user_id))

	async def upsert_vote(self, *, conn: Any, issue_id: UUID, user_id: UUID, vote_type: str) -> models.Vote:
		self._require_profile(user_id)
		existing = self.votes.get((issue_id, user_id))
		if existing is not None:
			vote = existing.model_copy(update={"vote_type": vote_type})
		else:
			vote = models.Vote(
				id=uuid4(),
				issue_id=issue_id,
				user_id=user_id,
				vote_type=vote_type,
				created_at=self.clock.tick(),
			)
		self.votes[(issue_id, user_id)] = vote
		return vote

	async def delete_vote(self, *, conn: Any, issue_id: UUID, user_id: UUID) -> None:
		self.votes.pop((issue_id, user_id), None)

	def _tally(self, issue_id: UUID) -> models.VoteTally:
		rows = [row for row in self.votes.values() if row.issue_id == issue_id]
		return models.VoteTally(
			up=sum(1 for row in rows if row.vote_type == "up"),
			down=sum(1 for row in rows if row.vote_type == "down"),
		)

	async def vote_tally(self, issue_id: UUID, *, conn: Any = None) -> models.VoteTally:
		return self._tally(issue_id)

	async def count_votes(self) -> int:
		return len(self.votes)

	# --- Comments -----------------------------------------------------------

	async def list_comments(self, issue_id: UUID) -> list[models.Comment]:
		rows = sorted((row for row in self.comments.values() if row.issue_id == issue_id), key=lambda row: row.created_at)
		result = []
		for row in rows:
			author = self.profiles.get(row.user_id)
			result.append(
				row.model_copy(
					update={
						"author_first_name": author.first_name if author else None,
						"author_last_name": author.last_name if author else None,
						"author_display_name": author.display_name if author else None,
						"author_avatar_url": author.avatar_url if author else None,
					}
				)
			)
		return result

	async def get_comment(self, comment_id: UUID) -> models.Comment | None:
		return self.comments.get(comment_id)

	async def create_comment(
		self,
		*,
		issue_id: UUID,
		user_id: UUID,
		content: str,
		parent_comment_id: UUID | None,
		is_official: bool,
	) -> models.Comment:
		self._require_profile(user_id)
		now = self.clock.tick()
		comment = models.Comment(
			id=uuid4(),
			issue_id=issue_id,
			user_id=user_id,
			content=content,
			parent_comment_id=parent_comment_id,
			is_official=is_official,
			created_at=now,
			updated_at=now,
		)
		self.comments[comment.id] = comment
		return comment

	async def count_comments(self, *, user_id: UUID | None = None) -> int:
		if user_id is None:
			return len(self.comments)
		return sum(1 for row in self.comments.values() if row.user_id == user_id)

	# --- Events -------------------------------------------------------------

	def _event_detail(self, event: models.Event) -> models.Event:
		organizer = self.profiles.get(event.organizer_id)
		return event.model_copy(
			update={
				"current_attendees": self._attending(event.id),
				"organizer_first_name": organizer.first_name if organizer else None,
				"organizer_last_name": organizer.last_name if organizer else None,
				"organizer_display_name": organizer.display_name if organizer else None,
				"organizer_avatar_url": organizer.avatar_url if organizer else None,
			}
		)

	def _matching_events(self, *, public_only: bool, starts_after: datetime | None) -> list[models.Event]:
		rows = list(self.events.values())
		if public_only:
			rows = [row for row in rows if row.is_public]
		if starts_after is not None:
			rows = [row for row in rows if row.event_date >= starts_after]
		return rows

	async def list_events(
		self,
		*,
		public_only: bool = True,
		starts_after: datetime | None = None,
		sort_by: str = "event_date",
		sort_order: str = "asc",
		limit: int,
		offset: int = 0,
	) -> list[models.Event]:
		rows = sorted(
			self._matching_events(public_only=public_only, starts_after=starts_after),
			key=lambda row: getattr(row, sort_by),
			reverse=sort_order == "desc",
		)
		return [self._event_detail(row) for row in rows[offset : offset + limit]]

	async def count_events(self, *, public_only: bool = False, starts_after: datetime | None = None) -> int:
		return len(self._matching_events(public_only=public_only, starts_after=starts_after))

	async def count_events_by_organizer(self, organizer_id: UUID) -> int:
		return sum(1 for row in self.events.values() if row.organizer_id == organizer_id)

	async def create_event(self, *, organizer_id: UUID, fields: Mapping[str, Any]) -> models.Event:
		self._require_profile(organizer_id)
		return self.add_event(
			organizer_id=organizer_id,
			title=fields["title"],
			event_date=fields["event_date"],
			description=fields.get("description"),
			location_address=fields.get("location_address"),
			latitude=fields.get("latitude"),
			longitude=fields.get("longitude"),
			max_attendees=fields.get("max_attendees"),
			is_public=bool(fields.get("is_public", True)),
			image_url=fields.get("image_url"),
		)

	async def get_event(self, event_id: UUID, *, conn: Any = None, for_update: bool = False) -> models.Event | None:
		event = self.events.get(event_id)
		if event is None:
			return None
		return event if for_update else self._event_detail(event)

	async def update_event(self, event_id: UUID, fields: Mapping[str, Any]) -> models.Event | None:
		event = self.events.get(event_id)
		if event is None:
			return None
		changes = {key: value for key, value in fields.items() if key in EVENT_UPDATABLE_COLUMNS}
		self.events[event_id] = event.model_copy(update={**changes, "updated_at": self.clock.tick()})
		return await self.get_event(event_id)

	async def delete_event(self, event_id: UUID) -> bool:
		if self.events.pop(event_id, None) is None:
			return False
		self.attendance = {key: row for key, row in self.attendance.items() if row.event_id != event_id}
		return True

	# --- Attendance ---------------------------------------------------------

	def _attending(self, event_id: UUID) -> int:
		return sum(1 for row in self.attendance.values() if row.event_id == event_id and row.status == "attending")

	async def count_attending(self, event_id: UUID, *, conn: Any = None) -> int:
		return self._attending(event_id)

	async def get_attendance(self, event_id: UUID, user_id: UUID, *, conn: Any = None) -> models.Attendance | None:
		return self.attendance.get((event_id, user_id))

	async def upsert_attendance(self, *, conn: Any, event_id: UUID, user_id: UUID, status: str) -> models.Attendance:
		self._require_profile(user_id)
		existing = self.attendance.get((event_id, user_id))
		if existing is None:
			return self.add_attendance(event_id=event_id, user_id=user_id, status=status)
		row = existing.model_copy(update={"status": status, "updated_at": self.clock.tick()})
		self.attendance[(event_id, user_id)] = row
		return row

	async def list_attendees(self, event_id: UUID) -> list[models.Attendance]:
		rows = sorted((row for row in self.attendance.values() if row.event_id == event_id), key=lambda row: row.created_at)
		return rows

	# --- Notifications ------------------------------------------------------

	async def create_notification(
		self,
		*,
		user_id: UUID,
		title: str,
		message: str,
		type: str,
		related_id: UUID | None = None,
	) -> models.Notification:
		if self.fail_notifications:
			raise RuntimeError("notifications unavailable")
		notification = models.Notification(
			id=uuid4(),
			user_id=user_id,
			title=title,
			message=message,
			type=type,
			related_id=related_id,
			created_at=self.clock.tick(),
		)
		self.notifications[notification.id] = notification
		return notification

	def notifications_for(self, user_id: UUID, *, unread_only: bool = False) -> list[models.Notification]:
		rows = [row for row in self.notifications.values() if row.user_id == user_id]
		if unread_only:
			rows = [row for row in rows if not row.is_read]
		return sorted(rows, key=lambda row: row.created_at, reverse=True)

	async def list_notifications(
		self,
		user_id: UUID,
		*,
		unread_only: bool = False,
		limit: int,
		offset: int = 0,
	) -> list[models.Notification]:
		return self.notifications_for(user_id, unread_only=unread_only)[offset : offset + limit]

	async def count_notifications(self, user_id: UUID, *, unread_only: bool = False) -> int:
		return len(self.notifications_for(user_id, unread_only=unread_only))

	async def mark_notification_read(self, notification_id: UUID, user_id: UUID) -> models.Notification | None:
		notification = self.notifications.get(notification_id)
		if notification is None or notification.user_id != user_id:
			return None
		notification = notification.model_copy(update={"is_read": True})
		self.notifications[notification_id] = notification
		return notification


class FakeLLM:
	"""Returns queued responses and records prompts."""

	def __init__(self, *, json_responses: list[dict[str, Any]] | None = None, text_responses: list[str] | None = None) -> None:
		self.json_responses = list(json_responses or [])
		self.text_responses = list(text_responses or [])
		self.calls: list[tuple[str, str]] = []

	async def complete_text(self, prompt: str, *, operation: str, system: str | None = None) -> str:
		self.calls.append((operation, prompt))
		return self.text_responses.pop(0)

	async def complete_json(self, prompt: str, *, operation: str, system: str | None = None) -> dict[str, Any]:
		self.calls.append((operation, prompt))
		return dict(self.json_responses.pop(0))
