from __future__ import annotations

import re
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from uuid import uuid4

import pytest

from civichub.domain import models
from civichub.domain.repo import CivicRepository

_PLACEHOLDER = re.compile(r"\$(\d+)")


class RecordingConnection:
	def __init__(self, rows: list | None = None) -> None:
		self.statements: list[tuple[str, tuple]] = []
		self._rows = list(rows or [])

	async def fetch(self, sql, *args):
		self.statements.append((sql, args))
		return []

	async def fetchrow(self, sql, *args):
		self.statements.append((sql, args))
		return self._rows.pop(0) if self._rows else None

	async def fetchval(self, sql, *args):
		self.statements.append((sql, args))
		return 0

	async def execute(self, sql, *args):
		self.statements.append((sql, args))
		return "OK"


class RecordingPool:
	def __init__(self, conn: RecordingConnection) -> None:
		self.conn = conn

	@asynccontextmanager
	async def _acquire(self):
		yield self.conn

	def acquire(self):
		return self._acquire()


def _repository(rows: list | None = None) -> tuple[CivicRepository, RecordingConnection]:
	conn = RecordingConnection(rows)
	return CivicRepository(pool=RecordingPool(conn)), conn


def assert_placeholders_match(sql: str, args: tuple) -> None:
	numbers = sorted({int(found) for found in _PLACEHOLDER.findall(sql)})
	assert numbers == list(range(1, len(args) + 1)), sql


def _full_issue_filters() -> models.IssueFilters:
	return models.IssueFilters(
		category_id=uuid4(),
		status="open",
		priority="high",
		reporter_id=uuid4(),
		created_from=datetime(2024, 1, 1, tzinfo=timezone.utc),
		created_to=datetime(2024, 2, 1, tzinfo=timezone.utc),
	)


@pytest.mark.asyncio
async def test_issue_queries_number_placeholders_in_order():
	repository, conn = _repository()
	filters = _full_issue_filters()

	await repository.list_issues(filters, sort_by="priority", sort_order="asc", limit=20, offset=40)
	await repository.count_issues(filters)
	await repository.count_issues_by("category", filters)
	await repository.monthly_issue_counts(filters)
	await repository.update_issue(uuid4(), {"title": "New title", "status": "resolved", "assigned_to": uuid4()})

	assert len(conn.statements) == 5
	for sql, args in conn.statements:
		assert_placeholders_match(sql, args)
	list_sql, list_args = conn.statements[0]
	assert list_args[-2:] == (20, 40)
	assert "ASC" in list_sql


@pytest.mark.asyncio
async def test_profile_and_event_queries_number_placeholders_in_order():
	repository, conn = _repository()

	await repository.list_profiles(models.ProfileFilters(search="ada", role="user", active_only=True), limit=10)
	await repository.count_profiles(models.ProfileFilters(search="ada"))
	await repository.list_events(starts_after=datetime(2024, 1, 1, tzinfo=timezone.utc), limit=5, offset=5)
	await repository.count_events(public_only=True)
	await repository.set_profile_flags(uuid4(), role="admin", is_active=False)

	for sql, args in conn.statements:
		assert_placeholders_match(sql, args)
	_, search_args = conn.statements[0]
	assert "%ada%" in search_args


@pytest.mark.asyncio
async def test_unknown_update_columns_never_reach_sql():
	repository, conn = _repository()
	issue_id = uuid4()

	await repository.update_issue(issue_id, {"reporter_id": uuid4(), "view_count": 99})

	[(sql, args)] = conn.statements
	assert sql.startswith("SELECT * FROM civic_issues")
	assert args == (str(issue_id),)


@pytest.mark.asyncio
async def test_ensure_profile_retries_without_a_claimed_email():
	user_id = uuid4()
	repository, conn = _repository(rows=[None, {"id": user_id, "display_name": "newcomer"}])

	profile = await repository.ensure_profile(user_id, email="taken@example.com", display_name="newcomer")

	assert profile.id == user_id
	assert profile.email is None
	assert profile.role == "user"
	for sql, args in conn.statements:
		assert_placeholders_match(sql, args)
	assert conn.statements[-1][1] == (str(user_id), "newcomer")
