"""AI assist facade: prompt building, LLM calls and typed parsing."""

from __future__ import annotations

import logging
import math
import re
from typing import Any, TypeVar
from uuid import UUID

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from civichub.ai import prompts
from civichub.ai.client import LLMClient
from civichub.domain import models, policies, repo as repo_module
from civichub.domain.exceptions import NotFoundError, RateLimitedError, UpstreamError
from civichub.domain.policies import Actor
from civichub.infra import rate_limit
from civichub.schemas import dto
from civichub.settings import settings

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

MAX_SOLUTIONS = 5
ANALYTICS_SAMPLE = 50

_LIST_MARKER = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")


def clamp_confidence(value: Any) -> float:
	try:
		number = float(value)
	except (TypeError, ValueError):
		return 0.0
	if math.isnan(number):
		return 0.0
	return max(0.0, min(1.0, number))


def split_solutions(text: str, *, limit: int = MAX_SOLUTIONS) -> list[str]:
	"""Split free text into at most `limit` non-empty lines, dropping list markers."""
	solutions: list[str] = []
	for line in text.splitlines():
		cleaned = _LIST_MARKER.sub("", line).strip()
		if not cleaned:
			continue
		solutions.append(cleaned)
		if len(solutions) >= limit:
			break
	return solutions


def _parse(model: type[ModelT], payload: dict[str, Any], *, operation: str) -> ModelT:
	try:
		return model.model_validate(payload)
	except PydanticValidationError as exc:
		logger.warning("ai_unparseable_output", extra={"operation": operation, "errors": exc.errors()})
		raise UpstreamError("ai_invalid_response") from exc


class AIService:
	"""Never called from write paths; each operation has its own endpoint."""

	def __init__(self, repository: repo_module.CivicRepository | None = None, *, llm: LLMClient) -> None:
		self.repo = repository or repo_module.CivicRepository()
		self.llm = llm

	async def _check_budget(self, actor: Actor) -> None:
		budget = await rate_limit.consume(
			"ai",
			str(actor.id),
			limit=settings.ai_rate_limit_per_minute,
			window_seconds=60,
		)
		if not budget.allowed:
			logger.info("ai_budget_exhausted", extra={"user_id": str(actor.id), "reset_after": budget.reset_after})
			raise RateLimitedError("ai_rate_limited")

	async def categorize(self, actor: Actor, payload: dto.CategorizeRequest) -> dto.CategorizeResult:
		await self._check_budget(actor)
		raw = await self.llm.complete_json(
			prompts.categorize(payload.title, payload.description),
			operation="categorize",
			system=prompts.SYSTEM_PROMPT,
		)
		category = str(raw.get("category") or "other").lower()
		if category not in prompts.ISSUE_CATEGORIES:
			category = "other"
		priority = str(raw.get("priority") or "medium").lower()
		if priority not in models.ISSUE_PRIORITIES:
			priority = "medium"
		tags = raw.get("tags") or []
		if not isinstance(tags, list):
			tags = []
		return dto.CategorizeResult(
			category=category,
			priority=priority,
			tags=[str(tag).strip() for tag in tags if str(tag).strip()],
			confidence=clamp_confidence(raw.get("confidence")),
		)

	async def moderate(self, actor: Actor, payload: dto.ModerateRequest) -> dto.ModerationResult:
		await self._check_budget(actor)
		raw = await self.llm.complete_json(
			prompts.moderate(payload.content),
			operation="moderate",
			system=prompts.SYSTEM_PROMPT,
		)
		# models sometimes answer in camelCase
		if "is_appropriate" not in raw and "isAppropriate" in raw:
			raw["is_appropriate"] = raw.pop("isAppropriate")
		if "suggested_edit" not in raw and "suggestedEdit" in raw:
			raw["suggested_edit"] = raw.pop("suggestedEdit")
		result = _parse(dto.ModerationResult, raw, operation="moderate")
		if result.is_appropriate:
			return dto.ModerationResult(is_appropriate=True)
		return result

	async def _issue(self, issue_id: UUID) -> models.Issue:
		issue = await self.repo.get_issue_detail(issue_id)
		if issue is None:
			raise NotFoundError("issue_not_found")
		return issue

	async def solutions(self, actor: Actor, issue_id: UUID) -> dto.SolutionsResult:
		issue = await self._issue(issue_id)
		await self._check_budget(actor)
		text = await self.llm.complete_text(
			prompts.solutions(issue.title, issue.description, issue.category_name or "other"),
			operation="solutions",
			system=prompts.SYSTEM_PROMPT,
		)
		return dto.SolutionsResult(solutions=split_solutions(text))

	async def summarize(self, actor: Actor, issue_id: UUID) -> dto.SummaryResult:
		policies.require_capability(actor, policies.USE_AI_ADMIN)
		issue = await self._issue(issue_id)
		await self._check_budget(actor)
		comments = await self.repo.list_comments(issue_id)
		text = await self.llm.complete_text(
			prompts.summarize(
				issue.title,
				issue.description,
				upvotes=issue.upvotes,
				comments=[comment.content for comment in comments],
			),
			operation="summarize",
			system=prompts.SYSTEM_PROMPT,
		)
		summary = text.strip()
		if not summary:
			raise UpstreamError("ai_empty_response")
		return dto.SummaryResult(summary=summary)

	async def analytics(self, actor: Actor) -> dto.AnalyticsResult:
		policies.require_capability(actor, policies.USE_AI_ADMIN)
		await self._check_budget(actor)
		issues = await self.repo.list_issues(
			models.IssueFilters(),
			sort_by="created_at",
			sort_order="desc",
			limit=ANALYTICS_SAMPLE,
		)
		sample = [
			{
				"title": issue.title,
				"category": issue.category_name or "uncategorized",
				"votes": issue.upvotes + issue.downvotes,
				"comments": issue.comment_count,
				"created_at": issue.created_at.isoformat(),
			}
			for issue in issues
		]
		raw = await self.llm.complete_json(
			prompts.engagement(sample),
			operation="analytics",
			system=prompts.SYSTEM_PROMPT,
		)
		insights = raw.get("insights")
		if isinstance(insights, list):
			raw["insights"] = " ".join(str(item) for item in insights)
		return _parse(dto.AnalyticsResult, raw, operation="analytics")
