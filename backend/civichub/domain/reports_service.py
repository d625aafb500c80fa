"""Admin reports over issues, users and engagement."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Optional

from civichub.domain import models, repo as repo_module
from civichub.domain.exceptions import ValidationError
from civichub.obs import metrics as obs_metrics

REPORT_TYPES = ("summary", "user_engagement", "issue_analytics")
ENGAGEMENT_LIMIT = 100


class ReportsService:
	def __init__(self, repository: repo_module.CivicRepository | None = None) -> None:
		self.repo = repository or repo_module.CivicRepository()

	async def generate(
		self,
		report_type: str = "summary",
		*,
		start_date: Optional[datetime] = None,
		end_date: Optional[datetime] = None,
	) -> dict[str, Any]:
		if report_type not in REPORT_TYPES:
			raise ValidationError("invalid_report_type")
		if start_date is not None:
			start_date = models.as_utc(start_date)
		if end_date is not None:
			end_date = models.as_utc(end_date)
		if start_date is not None and end_date is not None and start_date > end_date:
			raise ValidationError("invalid_date_range")
		filters = models.IssueFilters(created_from=start_date, created_to=end_date)
		if report_type == "user_engagement":
			result = await self._user_engagement()
		elif report_type == "issue_analytics":
			result = await self._issue_analytics(filters)
		else:
			result = await self._summary(filters)
		obs_metrics.inc_report_generated(report_type)
		return result

	async def _summary(self, filters: models.IssueFilters) -> dict[str, Any]:
		users, issues, events, comments, votes = await asyncio.gather(
			self.repo.count_profiles(),
			self.repo.count_issues(filters),
			self.repo.count_events(),
			self.repo.count_comments(),
			self.repo.count_votes(),
		)
		return {
			"summary": {
				"total_users": users,
				"total_issues": issues,
				"total_events": events,
				"total_comments": comments,
				"total_votes": votes,
				"start_date": filters.created_from,
				"end_date": filters.created_to,
				"generated_at": datetime.now(timezone.utc),
			}
		}

	async def _user_engagement(self) -> dict[str, Any]:
		rows = await self.repo.user_engagement(limit=ENGAGEMENT_LIMIT)
		return {
			"user_engagement": [
				{
					"user_id": row["user_id"],
					"display_name": row.get("display_name"),
					"first_name": row.get("first_name"),
					"last_name": row.get("last_name"),
					"joined_at": row.get("joined_at"),
					"issues_created": int(row.get("issues_created") or 0),
					"comments_posted": int(row.get("comments_posted") or 0),
					"votes_given": int(row.get("votes_given") or 0),
					"events_organized": int(row.get("events_organized") or 0),
				}
				for row in rows
			]
		}

	async def _issue_analytics(self, filters: models.IssueFilters) -> dict[str, Any]:
		total, by_category, by_status, by_priority, monthly = await asyncio.gather(
			self.repo.count_issues(filters),
			self.repo.count_issues_by("category", filters),
			self.repo.count_issues_by("status", filters),
			self.repo.count_issues_by("priority", filters),
			self.repo.monthly_issue_counts(filters),
		)
		return {
			"issue_analytics": {
				"total_issues": total,
				"category_breakdown": by_category,
				"status_breakdown": by_status,
				"priority_breakdown": by_priority,
				"monthly_trends": monthly,
			}
		}
