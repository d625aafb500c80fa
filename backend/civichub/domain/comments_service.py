"""Threaded comments on issues."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from civichub.domain import policies, repo as repo_module, shaping
from civichub.domain.exceptions import NotFoundError, ValidationError
from civichub.domain.notifier import ISSUE_COMMENT, Notifier
from civichub.domain.policies import Actor
from civichub.obs import metrics as obs_metrics
from civichub.schemas import dto


class CommentsService:
	def __init__(
		self,
		repository: repo_module.CivicRepository | None = None,
		*,
		notifier: Notifier | None = None,
	) -> None:
		self.repo = repository or repo_module.CivicRepository()
		self.notifier = notifier or Notifier(self.repo)

	async def list_comments(self, issue_id: UUID) -> dict[str, Any]:
		if await self.repo.get_issue(issue_id) is None:
			raise NotFoundError("issue_not_found")
		comments = await self.repo.list_comments(issue_id)
		return {"comments": shaping.shape_many("comment", comments)}

	async def create_comment(
		self,
		actor: Actor,
		issue_id: UUID,
		payload: dto.CommentCreateRequest,
	) -> dict[str, Any]:
		content = payload.content.strip()
		if not content:
			raise ValidationError("content_required")
		issue = await self.repo.get_issue(issue_id)
		if issue is None:
			raise NotFoundError("issue_not_found")
		if payload.parent_comment_id is not None:
			parent = await self.repo.get_comment(payload.parent_comment_id)
			if parent is None or parent.issue_id != issue_id:
				raise ValidationError("invalid_parent_comment")
		comment = await self.repo.create_comment(
			issue_id=issue_id,
			user_id=actor.id,
			content=content,
			parent_comment_id=payload.parent_comment_id,
			is_official=actor.can(policies.MANAGE_ISSUES),
		)
		obs_metrics.inc_comment_created()
		await self.notifier.notify(
			user_id=issue.reporter_id,
			actor_id=actor.id,
			title="New Comment",
			message=f'Someone commented on your issue "{issue.title}"',
			type=ISSUE_COMMENT,
			related_id=issue.id,
		)
		return {"comment": shaping.shape_comment(comment)}
