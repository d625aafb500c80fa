from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from civichub.domain.admin_service import AdminService, month_keys
from civichub.domain.exceptions import NotFoundError, ValidationError
from civichub.domain.reports_service import ReportsService
from civichub.schemas import dto


def test_month_keys_cross_year_boundary():
	assert month_keys(datetime(2031, 2, 14, tzinfo=timezone.utc)) == [
		"2030-09",
		"2030-10",
		"2030-11",
		"2030-12",
		"2031-01",
		"2031-02",
	]


@pytest.mark.asyncio
async def test_dashboard_counts_and_trends(repo, citizen, admin):
	now = datetime.now(timezone.utc)
	parks = repo.add_category("Parks")
	repo.add_issue(reporter_id=citizen.id, category_id=parks.id)
	repo.add_issue(reporter_id=citizen.id, status="resolved")
	repo.add_issue(reporter_id=citizen.id, status="in_progress")
	repo.add_event(organizer_id=admin.id, is_public=False)

	dashboard = await AdminService(repo).dashboard(now=now)

	assert dashboard["stats"] == {
		"total_users": 2,
		"total_issues": 3,
		"total_events": 1,
		"open_issues": 1,
		"resolved_issues": 1,
		"in_progress_issues": 1,
	}
	assert len(dashboard["recent_issues"]) == 3
	assert len(dashboard["recent_events"]) == 1
	assert dashboard["category_breakdown"] == {"Parks": 1, "Uncategorized": 2}
	assert len(dashboard["monthly_trends"]) == 6
	assert dashboard["monthly_trends"][-1] == {"month": now.strftime("%Y-%m"), "count": 3}


@pytest.mark.asyncio
async def test_admin_issue_list_uses_same_filters_for_total(repo, citizen, neighbour):
	for _ in range(3):
		repo.add_issue(reporter_id=citizen.id, priority="high")
	repo.add_issue(reporter_id=neighbour.id, priority="low")

	result = await AdminService(repo).list_issues(priority="high", limit=2)

	assert result["pagination"]["total"] == 3
	assert result["pagination"]["totalPages"] == 2
	assert len(result["issues"]) == 2
	assert "upvotes" in result["issues"][0]


@pytest.mark.asyncio
async def test_list_users_filters_by_role_and_search(repo, citizen, neighbour, admin):
	admins = await AdminService(repo).list_users(role="admin")
	searched = await AdminService(repo).list_users(search="shelby")

	assert [row["id"] for row in admins["users"]] == [admin.id]
	assert admins["pagination"]["total"] == 1
	assert [row["id"] for row in searched["users"]] == [neighbour.id]


@pytest.mark.asyncio
async def test_list_users_rejects_unknown_role(repo):
	with pytest.raises(ValidationError):
		await AdminService(repo).list_users(role="moderator")


@pytest.mark.asyncio
async def test_deactivating_keeps_role(repo, admin, as_actor):
	other_admin = repo.add_profile(role="admin", display_name="dee")

	result = await AdminService(repo).update_user(as_actor(admin), other_admin.id, dto.AdminUserUpdateRequest(is_active=False))

	assert result["user"]["role"] == "admin"
	assert result["user"]["is_active"] is False
	assert repo.profiles[other_admin.id].role == "admin"


@pytest.mark.asyncio
async def test_promote_leaves_activity_unchanged(repo, neighbour, admin, as_actor):
	result = await AdminService(repo).update_user(as_actor(admin), neighbour.id, dto.AdminUserUpdateRequest(role="admin"))

	assert result["user"]["role"] == "admin"
	assert result["user"]["is_active"] is True


@pytest.mark.asyncio
async def test_admin_cannot_deactivate_self(repo, admin, as_actor):
	service = AdminService(repo)

	with pytest.raises(ValidationError):
		await service.deactivate_user(as_actor(admin), admin.id)
	with pytest.raises(ValidationError):
		await service.update_user(as_actor(admin), admin.id, dto.AdminUserUpdateRequest(is_active=False))
	assert repo.profiles[admin.id].is_active


@pytest.mark.asyncio
async def test_deactivate_unknown_user_is_not_found(repo, admin, as_actor):
	with pytest.raises(NotFoundError):
		await AdminService(repo).deactivate_user(as_actor(admin), uuid4())


@pytest.mark.asyncio
async def test_summary_report_bounds_issue_counts(repo, citizen):
	now = datetime.now(timezone.utc)
	repo.add_issue(reporter_id=citizen.id, created_at=now - timedelta(days=90))
	repo.add_issue(reporter_id=citizen.id)

	report = await ReportsService(repo).generate("summary", start_date=now - timedelta(days=7))

	assert report["summary"]["total_issues"] == 1
	assert report["summary"]["total_users"] == 1


@pytest.mark.asyncio
async def test_user_engagement_report(repo, citizen, neighbour):
	issue = repo.add_issue(reporter_id=citizen.id)
	await repo.create_comment(issue_id=issue.id, user_id=neighbour.id, content="+1", parent_comment_id=None, is_official=False)

	report = await ReportsService(repo).generate("user_engagement")

	rows = {row["user_id"]: row for row in report["user_engagement"]}
	assert rows[citizen.id]["issues_created"] == 1
	assert rows[neighbour.id]["comments_posted"] == 1


@pytest.mark.asyncio
async def test_issue_analytics_report(repo, citizen):
	repo.add_issue(reporter_id=citizen.id, priority="urgent")
	repo.add_issue(reporter_id=citizen.id, priority="urgent", status="closed")

	report = await ReportsService(repo).generate("issue_analytics")

	analytics = report["issue_analytics"]
	assert analytics["total_issues"] == 2
	assert analytics["priority_breakdown"] == {"urgent": 2}
	assert analytics["status_breakdown"] == {"open": 1, "closed": 1}


@pytest.mark.asyncio
async def test_report_parameter_validation(repo):
	now = datetime.now(timezone.utc)

	with pytest.raises(ValidationError) as unknown:
		await ReportsService(repo).generate("finance")
	with pytest.raises(ValidationError) as inverted:
		await ReportsService(repo).generate("summary", start_date=now, end_date=now - timedelta(days=1))

	assert unknown.value.detail == "invalid_report_type"
	assert inverted.value.detail == "invalid_date_range"
