"""Admin dashboards, issue moderation lists and user management."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from civichub.domain import models, repo as repo_module, shaping
from civichub.domain.exceptions import NotFoundError, ValidationError
from civichub.domain.issues_service import validate_issue_filters
from civichub.domain.policies import Actor
from civichub.obs import metrics as obs_metrics
from civichub.schemas import dto

TREND_MONTHS = 6


def month_keys(now: datetime, months: int = TREND_MONTHS) -> list[str]:
	"""Return `YYYY-MM` keys for the trailing `months` months, oldest first."""
	keys: list[str] = []
	year, month = now.year, now.month
	for _ in range(months):
		keys.append(f"{year:04d}-{month:02d}")
		month -= 1
		if month == 0:
			month = 12
			year -= 1
	return list(reversed(keys))


def _month_start(key: str) -> datetime:
	year, month = key.split("-")
	return datetime(int(year), int(month), 1, tzinfo=timezone.utc)


class AdminService:
	def __init__(self, repository: repo_module.CivicRepository | None = None) -> None:
		self.repo = repository or repo_module.CivicRepository()

	async def dashboard(self, *, now: datetime | None = None) -> dict[str, Any]:
		now = now or datetime.now(timezone.utc)
		months = month_keys(now)
		trend_filters = models.IssueFilters(created_from=_month_start(months[0]))
		(
			total_users,
			total_issues,
			total_events,
			open_issues,
			resolved_issues,
			in_progress_issues,
			recent_issues,
			recent_events,
			category_breakdown,
			monthly,
		) = await asyncio.gather(
			self.repo.count_profiles(),
			self.repo.count_issues(),
			self.repo.count_events(),
			self.repo.count_issues(models.IssueFilters(status="open")),
			self.repo.count_issues(models.IssueFilters(status="resolved")),
			self.repo.count_issues(models.IssueFilters(status="in_progress")),
			self.repo.list_issues(models.IssueFilters(), sort_by="created_at", sort_order="desc", limit=10),
			self.repo.list_events(public_only=False, sort_by="created_at", sort_order="desc", limit=5),
			self.repo.count_issues_by("category"),
			self.repo.monthly_issue_counts(trend_filters),
		)
		return {
			"stats": {
				"total_users": total_users,
				"total_issues": total_issues,
				"total_events": total_events,
				"open_issues": open_issues,
				"resolved_issues": resolved_issues,
				"in_progress_issues": in_progress_issues,
			},
			"recent_issues": shaping.shape_many("admin_issue", recent_issues),
			"recent_events": shaping.shape_many("event", recent_events),
			"category_breakdown": category_breakdown,
			"monthly_trends": [{"month": key, "count": monthly.get(key, 0)} for key in months],
		}

	async def list_issues(
		self,
		*,
		status: Optional[str] = None,
		category_id: Optional[UUID] = None,
		priority: Optional[str] = None,
		page: int = 1,
		limit: int = 20,
	) -> dict[str, Any]:
		validate_issue_filters(status, priority)
		filters = models.IssueFilters(status=status, category_id=category_id, priority=priority)
		issues, total = await asyncio.gather(
			self.repo.list_issues(filters, sort_by="created_at", sort_order="desc", limit=limit, offset=(page - 1) * limit),
			self.repo.count_issues(filters),
		)
		return {
			"issues": shaping.shape_many("admin_issue", issues),
			"pagination": dto.Pagination.build(page=page, limit=limit, total=total).as_dict(),
		}

	async def list_users(
		self,
		*,
		search: Optional[str] = None,
		role: Optional[str] = None,
		page: int = 1,
		limit: int = 20,
	) -> dict[str, Any]:
		if role is not None and role not in models.PROFILE_ROLES:
			raise ValidationError("invalid_role")
		term = search.strip() if search else None
		filters = models.ProfileFilters(search=term or None, role=role)
		users, total = await asyncio.gather(
			self.repo.list_profiles(filters, limit=limit, offset=(page - 1) * limit),
			self.repo.count_profiles(filters),
		)
		return {
			"users": shaping.shape_many("profile_full", users),
			"pagination": dto.Pagination.build(page=page, limit=limit, total=total).as_dict(),
		}

	async def update_user(self, actor: Actor, user_id: UUID, payload: dto.AdminUserUpdateRequest) -> dict[str, Any]:
		if user_id == actor.id and payload.is_active is False:
			raise ValidationError("cannot_deactivate_self")
		profile = await self.repo.set_profile_flags(user_id, role=payload.role, is_active=payload.is_active)
		if profile is None:
			raise NotFoundError("user_not_found")
		if payload.role is not None:
			obs_metrics.inc_admin_user_update("role")
		if payload.is_active is not None:
			obs_metrics.inc_admin_user_update("activate" if payload.is_active else "deactivate")
		return {"user": shaping.shape_profile_full(profile)}

	async def deactivate_user(self, actor: Actor, user_id: UUID) -> dict[str, Any]:
		if user_id == actor.id:
			raise ValidationError("cannot_deactivate_self")
		profile = await self.repo.set_profile_flags(user_id, is_active=False)
		if profile is None:
			raise NotFoundError("user_not_found")
		obs_metrics.inc_admin_user_update("deactivate")
		return {"message": "User deactivated successfully", "user": shaping.shape_profile_full(profile)}
