"""Issue reporting, editing and status-change orchestration."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import UUID

from civichub.domain import models, policies, repo as repo_module, shaping
from civichub.domain.exceptions import ForbiddenError, NotFoundError, ValidationError
from civichub.domain.notifier import ISSUE_STATUS_UPDATE, Notifier, best_effort
from civichub.domain.policies import Actor
from civichub.obs import metrics as obs_metrics
from civichub.schemas import dto

SORT_ORDERS = ("asc", "desc")


def validate_issue_filters(status: str | None, priority: str | None) -> None:
	if status is not None and status not in models.ISSUE_STATUSES:
		raise ValidationError("invalid_status")
	if priority is not None and priority not in models.ISSUE_PRIORITIES:
		raise ValidationError("invalid_priority")


def validate_sort(sort_by: str, sort_order: str, allowed: dict[str, str]) -> None:
	if sort_by not in allowed:
		raise ValidationError("invalid_sort_by")
	if sort_order not in SORT_ORDERS:
		raise ValidationError("invalid_sort_order")


class IssuesService:
	"""Issue CRUD plus the audited, notifying status-change path."""

	def __init__(
		self,
		repository: repo_module.CivicRepository | None = None,
		*,
		notifier: Notifier | None = None,
	) -> None:
		self.repo = repository or repo_module.CivicRepository()
		self.notifier = notifier or Notifier(self.repo)

	async def list_issues(
		self,
		*,
		category_id: UUID | None = None,
		status: str | None = None,
		priority: str | None = None,
		sort_by: str = "created_at",
		sort_order: str = "desc",
		page: int = 1,
		limit: int = 10,
	) -> dict[str, Any]:
		validate_issue_filters(status, priority)
		validate_sort(sort_by, sort_order, repo_module.ISSUE_SORT_COLUMNS)
		filters = models.IssueFilters(category_id=category_id, status=status, priority=priority)
		issues, total = await asyncio.gather(
			self.repo.list_issues(
				filters,
				sort_by=sort_by,
				sort_order=sort_order,
				limit=limit,
				offset=(page - 1) * limit,
			),
			self.repo.count_issues(filters),
		)
		return {
			"issues": shaping.shape_many("issue", issues),
			"pagination": dto.Pagination.build(page=page, limit=limit, total=total).as_dict(),
		}

	async def create_issue(self, actor: Actor, payload: dto.IssueCreateRequest) -> dict[str, Any]:
		category = None
		if payload.category_id is not None:
			category = await self.repo.get_category(payload.category_id)
			if category is None:
				raise ValidationError("invalid_category")
		issue = await self.repo.create_issue(reporter_id=actor.id, fields=payload.model_dump())
		obs_metrics.inc_issue_created(category.name if category else None)
		detail = await self.repo.get_issue_detail(issue.id)
		return {"issue": shaping.shape_issue(detail or issue)}

	async def get_issue(self, issue_id: UUID) -> dict[str, Any]:
		await self.repo.increment_issue_views(issue_id)
		issue = await self.repo.get_issue_detail(issue_id)
		if issue is None:
			raise NotFoundError("issue_not_found")
		return {"issue": shaping.shape_issue(issue)}

	async def _load(self, issue_id: UUID) -> models.Issue:
		issue = await self.repo.get_issue(issue_id)
		if issue is None:
			raise NotFoundError("issue_not_found")
		return issue

	async def update_issue(self, actor: Actor, issue_id: UUID, payload: dto.IssueUpdateRequest) -> dict[str, Any]:
		existing = await self._load(issue_id)
		policies.require_owner_or(actor, existing.reporter_id, policies.MANAGE_ISSUES)
		fields = payload.model_dump(exclude_unset=True)
		for column in ("title", "description", "priority", "status", "is_anonymous", "image_urls"):
			if column in fields and fields[column] is None:
				fields.pop(column)
		if "admin_notes" in fields and not actor.can(policies.MANAGE_ISSUES):
			raise ForbiddenError(f"missing_capability:{policies.MANAGE_ISSUES}")
		if fields.get("category_id") is not None:
			if await self.repo.get_category(fields["category_id"]) is None:
				raise ValidationError("invalid_category")
		updated = await self.repo.update_issue(issue_id, fields)
		if updated is None:
			raise NotFoundError("issue_not_found")
		if "status" in fields:
			await self._after_status_change(actor, existing, updated, note=fields.get("admin_notes"))
		detail = await self.repo.get_issue_detail(issue_id)
		return {"issue": shaping.shape_issue(detail or updated)}

	async def delete_issue(self, actor: Actor, issue_id: UUID) -> dict[str, Any]:
		existing = await self._load(issue_id)
		policies.require_owner_or(actor, existing.reporter_id, policies.MANAGE_ISSUES)
		if not await self.repo.delete_issue(issue_id):
			raise NotFoundError("issue_not_found")
		return {"message": "Issue deleted successfully"}

	async def change_status(
		self,
		actor: Actor,
		issue_id: UUID,
		status: str,
		*,
		admin_notes: Optional[str] = None,
	) -> dict[str, Any]:
		"""Load, authorize, validate, write; then audit and notify after the write commits."""
		existing = await self._load(issue_id)
		policies.require_owner_or(actor, existing.reporter_id, policies.MANAGE_ISSUES)
		if status not in models.ISSUE_STATUSES:
			raise ValidationError("invalid_status")
		fields: dict[str, Any] = {"status": status}
		if admin_notes:
			fields["admin_notes"] = admin_notes
		updated = await self.repo.update_issue(issue_id, fields)
		if updated is None:
			raise NotFoundError("issue_not_found")
		await self._after_status_change(actor, existing, updated, note=admin_notes)
		detail = await self.repo.get_issue_detail(issue_id)
		return {"issue": shaping.shape_issue(detail or updated)}

	async def _after_status_change(
		self,
		actor: Actor,
		previous: models.Issue,
		updated: models.Issue,
		*,
		note: Optional[str],
	) -> None:
		if previous.status != updated.status:
			obs_metrics.inc_issue_status_change(updated.status)
			await best_effort(
				"issue_audit",
				self.repo.insert_issue_update(
					issue_id=updated.id,
					updated_by=actor.id,
					update_type="status_change",
					old_value=previous.status,
					new_value=updated.status,
					message=note or f"Status changed from {previous.status} to {updated.status}",
				),
				issue_id=str(updated.id),
			)
		await self.notifier.notify(
			user_id=updated.reporter_id,
			actor_id=actor.id,
			title="Issue Status Updated",
			message=f'Your issue "{updated.title}" status has been updated to {updated.status}',
			type=ISSUE_STATUS_UPDATE,
			related_id=updated.id,
		)

	async def list_updates(self, issue_id: UUID) -> dict[str, Any]:
		await self._load(issue_id)
		updates = await self.repo.list_issue_updates(issue_id)
		return {"updates": shaping.shape_many("issue_update", updates)}

	async def stats(self, *, now: datetime | None = None) -> dict[str, Any]:
		now = now or datetime.now(timezone.utc)
		recent = models.IssueFilters(created_from=now - timedelta(days=30))
		total, recent_total, by_status, by_category = await asyncio.gather(
			self.repo.count_issues(),
			self.repo.count_issues(recent),
			self.repo.count_issues_by("status"),
			self.repo.count_issues_by("category"),
		)
		return {
			"total_issues": total,
			"recent_issues": recent_total,
			"status_stats": by_status,
			"category_stats": by_category,
		}
