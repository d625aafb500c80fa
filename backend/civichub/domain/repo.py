"""Async repository helpers for the civic domain."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Mapping, Optional
from uuid import UUID

import asyncpg

from civichub.domain import models
from civichub.domain.exceptions import ConflictError
from civichub.infra.postgres import get_pool

ISSUE_SORT_COLUMNS = {
	"created_at": "i.created_at",
	"updated_at": "i.updated_at",
	"priority": "CASE i.priority WHEN 'low' THEN 1 WHEN 'medium' THEN 2 WHEN 'high' THEN 3 WHEN 'urgent' THEN 4 END",
	"status": "i.status",
	"title": "i.title",
	"view_count": "i.view_count",
}

EVENT_SORT_COLUMNS = {
	"event_date": "e.event_date",
	"created_at": "e.created_at",
	"title": "e.title",
}

ISSUE_UPDATABLE_COLUMNS = (
	"title",
	"description",
	"category_id",
	"priority",
	"status",
	"assigned_to",
	"location_address",
	"latitude",
	"longitude",
	"image_urls",
	"is_anonymous",
	"admin_notes",
)

EVENT_UPDATABLE_COLUMNS = (
	"title",
	"description",
	"event_date",
	"location_address",
	"latitude",
	"longitude",
	"max_attendees",
	"is_public",
	"image_url",
)

PROFILE_UPDATABLE_COLUMNS = (
	"first_name",
	"last_name",
	"display_name",
	"avatar_url",
	"bio",
	"phone",
	"address",
	"city",
	"state",
	"zip_code",
)

_ISSUE_BREAKDOWN_COLUMNS = {
	"status": "i.status",
	"priority": "i.priority",
	"category": "COALESCE(c.name, 'Uncategorized')",
}

_ISSUE_SELECT = """
	SELECT i.*,
		c.name AS category_name,
		c.icon AS category_icon,
		c.color AS category_color,
		p.first_name AS reporter_first_name,
		p.last_name AS reporter_last_name,
		p.display_name AS reporter_display_name,
		p.avatar_url AS reporter_avatar_url,
		COALESCE(v.upvotes, 0) AS upvotes,
		COALESCE(v.downvotes, 0) AS downvotes,
		COALESCE(cc.comment_count, 0) AS comment_count
	FROM civic_issues i
	LEFT JOIN issue_categories c ON c.id = i.category_id
	LEFT JOIN profiles p ON p.id = i.reporter_id
	LEFT JOIN LATERAL (
		SELECT COUNT(*) FILTER (WHERE vote_type = 'up') AS upvotes,
			COUNT(*) FILTER (WHERE vote_type = 'down') AS downvotes
		FROM issue_votes WHERE issue_id = i.id
	) v ON TRUE
	LEFT JOIN LATERAL (
		SELECT COUNT(*) AS comment_count FROM issue_comments WHERE issue_id = i.id
	) cc ON TRUE
"""

_EVENT_SELECT = """
	SELECT e.*,
		COALESCE(a.current_attendees, 0) AS current_attendees,
		p.first_name AS organizer_first_name,
		p.last_name AS organizer_last_name,
		p.display_name AS organizer_display_name,
		p.avatar_url AS organizer_avatar_url
	FROM community_events e
	LEFT JOIN profiles p ON p.id = e.organizer_id
	LEFT JOIN LATERAL (
		SELECT COUNT(*) AS current_attendees
		FROM event_attendees WHERE event_id = e.id AND status = 'attending'
	) a ON TRUE
"""


def _bind(values: list[object], value: object) -> str:
	values.append(value)
	return "$%d" % len(values)


def _issue_where(filters: models.IssueFilters, values: list[object]) -> str:
	clauses: list[str] = []
	if filters.category_id is not None:
		clauses.append("i.category_id = %s" % _bind(values, str(filters.category_id)))
	if filters.status is not None:
		clauses.append("i.status = %s" % _bind(values, filters.status))
	if filters.priority is not None:
		clauses.append("i.priority = %s" % _bind(values, filters.priority))
	if filters.reporter_id is not None:
		clauses.append("i.reporter_id = %s" % _bind(values, str(filters.reporter_id)))
	if filters.created_from is not None:
		clauses.append("i.created_at >= %s" % _bind(values, filters.created_from))
	if filters.created_to is not None:
		clauses.append("i.created_at <= %s" % _bind(values, filters.created_to))
	return f"WHERE {' AND '.join(clauses)}" if clauses else ""


def _event_where(*, public_only: bool, starts_after: datetime | None, values: list[object]) -> str:
	clauses: list[str] = []
	if public_only:
		clauses.append("e.is_public = TRUE")
	if starts_after is not None:
		clauses.append("e.event_date >= %s" % _bind(values, starts_after))
	return f"WHERE {' AND '.join(clauses)}" if clauses else ""


def _profile_where(filters: models.ProfileFilters, values: list[object]) -> str:
	clauses: list[str] = []
	if filters.active_only:
		clauses.append("pr.is_active = TRUE")
	if filters.role is not None:
		clauses.append("pr.role = %s" % _bind(values, filters.role))
	if filters.search:
		pattern = _bind(values, f"%{filters.search}%")
		clauses.append(
			f"(pr.first_name ILIKE {pattern} OR pr.last_name ILIKE {pattern}"
			f" OR pr.display_name ILIKE {pattern} OR pr.city ILIKE {pattern})"
		)
	return f"WHERE {' AND '.join(clauses)}" if clauses else ""


def _set_clause(fields: Mapping[str, Any], allowed: tuple[str, ...], values: list[object]) -> list[str]:
	assignments: list[str] = []
	for column in allowed:
		if column not in fields:
			continue
		value = fields[column]
		if isinstance(value, UUID):
			value = str(value)
		assignments.append(f"{column} = {_bind(values, value)}")
	return assignments


def _order(direction: str) -> str:
	return "ASC" if direction.lower() == "asc" else "DESC"


class CivicRepository:
	"""Thin data-access layer around an asyncpg pool.

	Every method acquires its own pooled connection unless `conn` is passed,
	so independent reads may run concurrently with `asyncio.gather`. Use
	`transaction()` to run several statements on one locked connection.
	"""

	def __init__(self, pool: asyncpg.pool.Pool | None = None) -> None:
		self._pool = pool

	async def _get_pool(self) -> asyncpg.pool.Pool:
		if self._pool is None:
			self._pool = await get_pool()
		return self._pool

	@asynccontextmanager
	async def _connection(self, conn: asyncpg.Connection | None = None) -> AsyncIterator[asyncpg.Connection]:
		if conn is not None:
			yield conn
			return
		pool = await self._get_pool()
		async with pool.acquire() as pooled_conn:
			yield pooled_conn

	@asynccontextmanager
	async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				yield conn

	# --- Profiles -----------------------------------------------------------

	async def get_profile(self, user_id: UUID, *, conn: asyncpg.Connection | None = None) -> models.Profile | None:
		async with self._connection(conn) as connection:
			record = await connection.fetchrow("SELECT * FROM profiles WHERE id=$1", str(user_id))
		return models.Profile.model_validate(dict(record)) if record else None

	async def ensure_profile(
		self,
		user_id: UUID,
		*,
		email: Optional[str] = None,
		display_name: Optional[str] = None,
	) -> models.Profile:
		"""Create a bare `user` profile for an identity on first sight; existing rows are left untouched."""
		async with self._connection() as conn:
			await conn.execute(
				"""
				INSERT INTO profiles (id, email, display_name)
				VALUES ($1, $2, $3)
				ON CONFLICT DO NOTHING
				""",
				str(user_id),
				email,
				display_name,
			)
			record = await conn.fetchrow("SELECT * FROM profiles WHERE id=$1", str(user_id))
			if record is None:
				# email already claimed by another profile
				record = await conn.fetchrow(
					"""
					INSERT INTO profiles (id, display_name)
					VALUES ($1, $2)
					ON CONFLICT (id) DO UPDATE SET id = EXCLUDED.id
					RETURNING *
					""",
					str(user_id),
					display_name,
				)
		return models.Profile.model_validate(dict(record))

	async def list_profiles(
		self,
		filters: models.ProfileFilters,
		*,
		limit: int,
		offset: int = 0,
	) -> list[models.Profile]:
		values: list[object] = []
		where = _profile_where(filters, values)
		limit_ph = _bind(values, limit)
		offset_ph = _bind(values, offset)
		async with self._connection() as conn:
			rows = await conn.fetch(
				f"SELECT pr.* FROM profiles pr {where} ORDER BY pr.created_at DESC LIMIT {limit_ph} OFFSET {offset_ph}",
				*values,
			)
		return [models.Profile.model_validate(dict(row)) for row in rows]

	async def count_profiles(self, filters: models.ProfileFilters | None = None) -> int:
		values: list[object] = []
		where = _profile_where(filters or models.ProfileFilters(), values)
		async with self._connection() as conn:
			total = await conn.fetchval(f"SELECT COUNT(*) FROM profiles pr {where}", *values)
		return int(total or 0)

	async def update_profile(self, user_id: UUID, fields: Mapping[str, Any]) -> models.Profile | None:
		values: list[object] = [str(user_id)]
		assignments = _set_clause(fields, PROFILE_UPDATABLE_COLUMNS, values)
		if not assignments:
			return await self.get_profile(user_id)
		assignments.append("updated_at = NOW()")
		async with self._connection() as conn:
			record = await conn.fetchrow(
				f"UPDATE profiles SET {', '.join(assignments)} WHERE id=$1 RETURNING *",
				*values,
			)
		return models.Profile.model_validate(dict(record)) if record else None

	async def set_profile_flags(
		self,
		user_id: UUID,
		*,
		role: Optional[str] = None,
		is_active: Optional[bool] = None,
	) -> models.Profile | None:
		values: list[object] = [str(user_id)]
		assignments: list[str] = []
		if role is not None:
			assignments.append(f"role = {_bind(values, role)}")
		if is_active is not None:
			assignments.append(f"is_active = {_bind(values, is_active)}")
		if not assignments:
			return await self.get_profile(user_id)
		assignments.append("updated_at = NOW()")
		async with self._connection() as conn:
			record = await conn.fetchrow(
				f"UPDATE profiles SET {', '.join(assignments)} WHERE id=$1 RETURNING *",
				*values,
			)
		return models.Profile.model_validate(dict(record)) if record else None

	async def user_engagement(self, *, limit: int = 100) -> list[dict[str, Any]]:
		async with self._connection() as conn:
			rows = await conn.fetch(
				"""
				SELECT pr.id AS user_id,
					pr.display_name,
					pr.first_name,
					pr.last_name,
					pr.created_at AS joined_at,
					(SELECT COUNT(*) FROM civic_issues WHERE reporter_id = pr.id) AS issues_created,
					(SELECT COUNT(*) FROM issue_comments WHERE user_id = pr.id) AS comments_posted,
					(SELECT COUNT(*) FROM issue_votes WHERE user_id = pr.id) AS votes_given,
					(SELECT COUNT(*) FROM community_events WHERE organizer_id = pr.id) AS events_organized
				FROM profiles pr
				ORDER BY pr.created_at DESC
				LIMIT $1
				""",
				limit,
			)
		return [dict(row) for row in rows]

	# --- Categories ---------------------------------------------------------

	async def list_categories(self) -> list[models.Category]:
		async with self._connection() as conn:
			rows = await conn.fetch("SELECT * FROM issue_categories ORDER BY name ASC")
		return [models.Category.model_validate(dict(row)) for row in rows]

	async def get_category(self, category_id: UUID) -> models.Category | None:
		async with self._connection() as conn:
			record = await conn.fetchrow("SELECT * FROM issue_categories WHERE id=$1", str(category_id))
		return models.Category.model_validate(dict(record)) if record else None

	async def create_category(
		self,
		*,
		name: str,
		description: str | None,
		icon: str | None,
		color: str | None,
	) -> models.Category:
		async with self._connection() as conn:
			try:
				record = await conn.fetchrow(
					"""
					INSERT INTO issue_categories (name, description, icon, color)
					VALUES ($1, $2, $3, $4)
					RETURNING *
					""",
					name,
					description,
					icon,
					color,
				)
			except asyncpg.UniqueViolationError as exc:  # type: ignore[attr-defined]
				raise ConflictError("category_exists") from exc
		return models.Category.model_validate(dict(record))

	# --- Issues -------------------------------------------------------------

	async def list_issues(
		self,
		filters: models.IssueFilters,
		*,
		sort_by: str = "created_at",
		sort_order: str = "desc",
		limit: int,
		offset: int = 0,
	) -> list[models.Issue]:
		values: list[object] = []
		where = _issue_where(filters, values)
		order_column = ISSUE_SORT_COLUMNS[sort_by]
		limit_ph = _bind(values, limit)
		offset_ph = _bind(values, offset)
		async with self._connection() as conn:
			rows = await conn.fetch(
				f"{_ISSUE_SELECT} {where} ORDER BY {order_column} {_order(sort_order)}, i.id "
				f"LIMIT {limit_ph} OFFSET {offset_ph}",
				*values,
			)
		return [models.Issue.model_validate(dict(row)) for row in rows]

	async def count_issues(self, filters: models.IssueFilters | None = None) -> int:
		values: list[object] = []
		where = _issue_where(filters or models.IssueFilters(), values)
		async with self._connection() as conn:
			total = await conn.fetchval(f"SELECT COUNT(*) FROM civic_issues i {where}", *values)
		return int(total or 0)

	async def count_issues_by(
		self,
		dimension: str,
		filters: models.IssueFilters | None = None,
	) -> dict[str, int]:
		column = _ISSUE_BREAKDOWN_COLUMNS[dimension]
		values: list[object] = []
		where = _issue_where(filters or models.IssueFilters(), values)
		async with self._connection() as conn:
			rows = await conn.fetch(
				f"""
				SELECT {column} AS bucket, COUNT(*) AS total
				FROM civic_issues i
				LEFT JOIN issue_categories c ON c.id = i.category_id
				{where}
				GROUP BY bucket
				ORDER BY total DESC, bucket ASC
				""",
				*values,
			)
		return {str(row["bucket"]): int(row["total"]) for row in rows}

	async def monthly_issue_counts(self, filters: models.IssueFilters | None = None) -> dict[str, int]:
		values: list[object] = []
		where = _issue_where(filters or models.IssueFilters(), values)
		async with self._connection() as conn:
			rows = await conn.fetch(
				f"""
				SELECT to_char(date_trunc('month', i.created_at), 'YYYY-MM') AS month, COUNT(*) AS total
				FROM civic_issues i
				{where}
				GROUP BY month
				ORDER BY month ASC
				""",
				*values,
			)
		return {row["month"]: int(row["total"]) for row in rows}

	async def create_issue(self, *, reporter_id: UUID, fields: Mapping[str, Any]) -> models.Issue:
		category_id = fields.get("category_id")
		async with self._connection() as conn:
			record = await conn.fetchrow(
				"""
				INSERT INTO civic_issues (title, description, category_id, priority, status, reporter_id,
					location_address, latitude, longitude, image_urls, is_anonymous)
				VALUES ($1, $2, $3, $4, 'open', $5, $6, $7, $8, $9, $10)
				RETURNING *
				""",
				fields["title"],
				fields["description"],
				str(category_id) if category_id else None,
				fields.get("priority") or "medium",
				str(reporter_id),
				fields.get("location_address"),
				fields.get("latitude"),
				fields.get("longitude"),
				list(fields.get("image_urls") or []),
				bool(fields.get("is_anonymous", False)),
			)
		return models.Issue.model_validate(dict(record))

	async def get_issue(
		self,
		issue_id: UUID,
		*,
		conn: asyncpg.Connection | None = None,
		for_update: bool = False,
	) -> models.Issue | None:
		query = "SELECT * FROM civic_issues WHERE id=$1"
		if for_update:
			query += " FOR UPDATE"
		async with self._connection(conn) as connection:
			record = await connection.fetchrow(query, str(issue_id))
		return models.Issue.model_validate(dict(record)) if record else None

	async def get_issue_detail(self, issue_id: UUID) -> models.Issue | None:
		async with self._connection() as conn:
			record = await conn.fetchrow(f"{_ISSUE_SELECT} WHERE i.id = $1", str(issue_id))
		return models.Issue.model_validate(dict(record)) if record else None

	async def increment_issue_views(self, issue_id: UUID) -> None:
		async with self._connection() as conn:
			await conn.execute("UPDATE civic_issues SET view_count = view_count + 1 WHERE id=$1", str(issue_id))

	async def update_issue(
		self,
		issue_id: UUID,
		fields: Mapping[str, Any],
		*,
		conn: asyncpg.Connection | None = None,
	) -> models.Issue | None:
		values: list[object] = [str(issue_id)]
		assignments = _set_clause(fields, ISSUE_UPDATABLE_COLUMNS, values)
		if not assignments:
			return await self.get_issue(issue_id, conn=conn)
		assignments.append("updated_at = NOW()")
		async with self._connection(conn) as connection:
			record = await connection.fetchrow(
				f"UPDATE civic_issues SET {', '.join(assignments)} WHERE id=$1 RETURNING *",
				*values,
			)
		return models.Issue.model_validate(dict(record)) if record else None

	async def delete_issue(self, issue_id: UUID) -> bool:
		async with self._connection() as conn:
			deleted = await conn.fetchval("DELETE FROM civic_issues WHERE id=$1 RETURNING id", str(issue_id))
		return deleted is not None

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
		async with self._connection() as conn:
			record = await conn.fetchrow(
				"""
				INSERT INTO issue_updates (issue_id, updated_by, update_type, old_value, new_value, message)
				VALUES ($1, $2, $3, $4, $5, $6)
				RETURNING *
				""",
				str(issue_id),
				str(updated_by),
				update_type,
				old_value,
				new_value,
				message,
			)
		return models.IssueUpdate.model_validate(dict(record))

	async def list_issue_updates(self, issue_id: UUID) -> list[models.IssueUpdate]:
		async with self._connection() as conn:
			rows = await conn.fetch(
				"SELECT * FROM issue_updates WHERE issue_id=$1 ORDER BY created_at ASC",
				str(issue_id),
			)
		return [models.IssueUpdate.model_validate(dict(row)) for row in rows]

	# --- Votes --------------------------------------------------------------

	async def get_vote(
		self,
		issue_id: UUID,
		user_id: UUID,
		*,
		conn: asyncpg.Connection | None = None,
		for_update: bool = False,
	) -> models.Vote | None:
		query = "SELECT * FROM issue_votes WHERE issue_id=$1 AND user_id=$2"
		if for_update:
			query += " FOR UPDATE"
		async with self._connection(conn) as connection:
			record = await connection.fetchrow(query, str(issue_id), str(user_id))
		return models.Vote.model_validate(dict(record)) if record else None

	async def upsert_vote(
		self,
		*,
		conn: asyncpg.Connection,
		issue_id: UUID,
		user_id: UUID,
		vote_type: str,
	) -> models.Vote:
		record = await conn.fetchrow(
			"""
			INSERT INTO issue_votes (issue_id, user_id, vote_type)
			VALUES ($1, $2, $3)
			ON CONFLICT (issue_id, user_id)
			DO UPDATE SET vote_type = EXCLUDED.vote_type
			RETURNING *
			""",
			str(issue_id),
			str(user_id),
			vote_type,
		)
		return models.Vote.model_validate(dict(record))

	async def delete_vote(self, *, conn: asyncpg.Connection, issue_id: UUID, user_id: UUID) -> None:
		await conn.execute(
			"DELETE FROM issue_votes WHERE issue_id=$1 AND user_id=$2",
			str(issue_id),
			str(user_id),
		)

	async def vote_tally(self, issue_id: UUID, *, conn: asyncpg.Connection | None = None) -> models.VoteTally:
		async with self._connection(conn) as connection:
			record = await connection.fetchrow(
				"""
				SELECT COUNT(*) FILTER (WHERE vote_type = 'up') AS up,
					COUNT(*) FILTER (WHERE vote_type = 'down') AS down
				FROM issue_votes WHERE issue_id=$1
				""",
				str(issue_id),
			)
		return models.VoteTally(up=int(record["up"] or 0), down=int(record["down"] or 0))

	async def count_votes(self) -> int:
		async with self._connection() as conn:
			total = await conn.fetchval("SELECT COUNT(*) FROM issue_votes")
		return int(total or 0)

	# --- Comments -----------------------------------------------------------

	async def list_comments(self, issue_id: UUID) -> list[models.Comment]:
		async with self._connection() as conn:
			rows = await conn.fetch(
				"""
				SELECT ic.*,
					p.first_name AS author_first_name,
					p.last_name AS author_last_name,
					p.display_name AS author_display_name,
					p.avatar_url AS author_avatar_url
				FROM issue_comments ic
				LEFT JOIN profiles p ON p.id = ic.user_id
				WHERE ic.issue_id = $1
				ORDER BY ic.created_at ASC, ic.id ASC
				""",
				str(issue_id),
			)
		return [models.Comment.model_validate(dict(row)) for row in rows]

	async def get_comment(self, comment_id: UUID) -> models.Comment | None:
		async with self._connection() as conn:
			record = await conn.fetchrow("SELECT * FROM issue_comments WHERE id=$1", str(comment_id))
		return models.Comment.model_validate(dict(record)) if record else None

	async def create_comment(
		self,
		*,
		issue_id: UUID,
		user_id: UUID,
		content: str,
		parent_comment_id: UUID | None,
		is_official: bool,
	) -> models.Comment:
		async with self._connection() as conn:
			record = await conn.fetchrow(
				"""
				INSERT INTO issue_comments (issue_id, user_id, content, parent_comment_id, is_official)
				VALUES ($1, $2, $3, $4, $5)
				RETURNING *
				""",
				str(issue_id),
				str(user_id),
				content,
				str(parent_comment_id) if parent_comment_id else None,
				is_official,
			)
		return models.Comment.model_validate(dict(record))

	async def count_comments(self, *, user_id: UUID | None = None) -> int:
		async with self._connection() as conn:
			if user_id is None:
				total = await conn.fetchval("SELECT COUNT(*) FROM issue_comments")
			else:
				total = await conn.fetchval("SELECT COUNT(*) FROM issue_comments WHERE user_id=$1", str(user_id))
		return int(total or 0)

	# --- Events -------------------------------------------------------------

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
		values: list[object] = []
		where = _event_where(public_only=public_only, starts_after=starts_after, values=values)
		order_column = EVENT_SORT_COLUMNS[sort_by]
		limit_ph = _bind(values, limit)
		offset_ph = _bind(values, offset)
		async with self._connection() as conn:
			rows = await conn.fetch(
				f"{_EVENT_SELECT} {where} ORDER BY {order_column} {_order(sort_order)}, e.id "
				f"LIMIT {limit_ph} OFFSET {offset_ph}",
				*values,
			)
		return [models.Event.model_validate(dict(row)) for row in rows]

	async def count_events(self, *, public_only: bool = False, starts_after: datetime | None = None) -> int:
		values: list[object] = []
		where = _event_where(public_only=public_only, starts_after=starts_after, values=values)
		async with self._connection() as conn:
			total = await conn.fetchval(f"SELECT COUNT(*) FROM community_events e {where}", *values)
		return int(total or 0)

	async def count_events_by_organizer(self, organizer_id: UUID) -> int:
		async with self._connection() as conn:
			total = await conn.fetchval(
				"SELECT COUNT(*) FROM community_events WHERE organizer_id=$1",
				str(organizer_id),
			)
		return int(total or 0)

	async def create_event(self, *, organizer_id: UUID, fields: Mapping[str, Any]) -> models.Event:
		async with self._connection() as conn:
			record = await conn.fetchrow(
				"""
				INSERT INTO community_events (title, description, organizer_id, event_date, location_address,
					latitude, longitude, max_attendees, is_public, image_url)
				VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
				RETURNING *
				""",
				fields["title"],
				fields.get("description"),
				str(organizer_id),
				fields["event_date"],
				fields.get("location_address"),
				fields.get("latitude"),
				fields.get("longitude"),
				fields.get("max_attendees"),
				bool(fields.get("is_public", True)),
				fields.get("image_url"),
			)
		return models.Event.model_validate(dict(record))

	async def get_event(
		self,
		event_id: UUID,
		*,
		conn: asyncpg.Connection | None = None,
		for_update: bool = False,
	) -> models.Event | None:
		"""Load an event; the locking variant returns the bare row without attendee counts."""
		if for_update:
			query = "SELECT * FROM community_events WHERE id=$1 FOR UPDATE"
		else:
			query = f"{_EVENT_SELECT} WHERE e.id = $1"
		async with self._connection(conn) as connection:
			record = await connection.fetchrow(query, str(event_id))
		return models.Event.model_validate(dict(record)) if record else None

	async def update_event(self, event_id: UUID, fields: Mapping[str, Any]) -> models.Event | None:
		values: list[object] = [str(event_id)]
		assignments = _set_clause(fields, EVENT_UPDATABLE_COLUMNS, values)
		if assignments:
			assignments.append("updated_at = NOW()")
			async with self._connection() as conn:
				updated = await conn.fetchval(
					f"UPDATE community_events SET {', '.join(assignments)} WHERE id=$1 RETURNING id",
					*values,
				)
			if updated is None:
				return None
		return await self.get_event(event_id)

	async def delete_event(self, event_id: UUID) -> bool:
		async with self._connection() as conn:
			deleted = await conn.fetchval("DELETE FROM community_events WHERE id=$1 RETURNING id", str(event_id))
		return deleted is not None

	# --- Attendance ---------------------------------------------------------

	async def count_attending(self, event_id: UUID, *, conn: asyncpg.Connection | None = None) -> int:
		async with self._connection(conn) as connection:
			total = await connection.fetchval(
				"SELECT COUNT(*) FROM event_attendees WHERE event_id=$1 AND status='attending'",
				str(event_id),
			)
		return int(total or 0)

	async def get_attendance(
		self,
		event_id: UUID,
		user_id: UUID,
		*,
		conn: asyncpg.Connection | None = None,
	) -> models.Attendance | None:
		async with self._connection(conn) as connection:
			record = await connection.fetchrow(
				"SELECT * FROM event_attendees WHERE event_id=$1 AND user_id=$2",
				str(event_id),
				str(user_id),
			)
		return models.Attendance.model_validate(dict(record)) if record else None

	async def upsert_attendance(
		self,
		*,
		conn: asyncpg.Connection,
		event_id: UUID,
		user_id: UUID,
		status: str,
	) -> models.Attendance:
		record = await conn.fetchrow(
			"""
			INSERT INTO event_attendees (event_id, user_id, status)
			VALUES ($1, $2, $3)
			ON CONFLICT (event_id, user_id)
			DO UPDATE SET status = EXCLUDED.status, updated_at = NOW()
			RETURNING *
			""",
			str(event_id),
			str(user_id),
			status,
		)
		return models.Attendance.model_validate(dict(record))

	async def list_attendees(self, event_id: UUID) -> list[models.Attendance]:
		async with self._connection() as conn:
			rows = await conn.fetch(
				"""
				SELECT ea.*,
					p.first_name AS user_first_name,
					p.last_name AS user_last_name,
					p.display_name AS user_display_name,
					p.avatar_url AS user_avatar_url
				FROM event_attendees ea
				LEFT JOIN profiles p ON p.id = ea.user_id
				WHERE ea.event_id = $1
				ORDER BY ea.created_at ASC
				""",
				str(event_id),
			)
		return [models.Attendance.model_validate(dict(row)) for row in rows]

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
		async with self._connection() as conn:
			record = await conn.fetchrow(
				"""
				INSERT INTO notifications (user_id, title, message, type, related_id)
				VALUES ($1, $2, $3, $4, $5)
				RETURNING *
				""",
				str(user_id),
				title,
				message,
				type,
				str(related_id) if related_id else None,
			)
		return models.Notification.model_validate(dict(record))

	async def list_notifications(
		self,
		user_id: UUID,
		*,
		unread_only: bool = False,
		limit: int,
		offset: int = 0,
	) -> list[models.Notification]:
		query = "SELECT * FROM notifications WHERE user_id=$1"
		if unread_only:
			query += " AND is_read = FALSE"
		query += " ORDER BY created_at DESC, id DESC LIMIT $2 OFFSET $3"
		async with self._connection() as conn:
			rows = await conn.fetch(query, str(user_id), limit, offset)
		return [models.Notification.model_validate(dict(row)) for row in rows]

	async def count_notifications(self, user_id: UUID, *, unread_only: bool = False) -> int:
		query = "SELECT COUNT(*) FROM notifications WHERE user_id=$1"
		if unread_only:
			query += " AND is_read = FALSE"
		async with self._connection() as conn:
			total = await conn.fetchval(query, str(user_id))
		return int(total or 0)

	async def mark_notification_read(self, notification_id: UUID, user_id: UUID) -> models.Notification | None:
		async with self._connection() as conn:
			record = await conn.fetchrow(
				"UPDATE notifications SET is_read = TRUE WHERE id=$1 AND user_id=$2 RETURNING *",
				str(notification_id),
				str(user_id),
			)
		return models.Notification.model_validate(dict(record)) if record else None
