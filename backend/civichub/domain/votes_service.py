"""Vote toggle state machine for issues."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from civichub.domain import models, repo as repo_module
from civichub.domain.exceptions import NotFoundError, ValidationError
from civichub.domain.policies import Actor
from civichub.obs import metrics as obs_metrics
from civichub.schemas import dto


class VotesService:
	"""Per (issue, voter): no-vote -> x inserts, x -> x deletes, x -> y overwrites.

	The read-branch-write runs in one transaction with the existing row locked,
	and the insert path is an upsert on (issue_id, user_id), so racing first
	votes collapse into a single row.
	"""

	def __init__(self, repository: repo_module.CivicRepository | None = None) -> None:
		self.repo = repository or repo_module.CivicRepository()

	async def toggle_vote(self, actor: Actor, issue_id: UUID, vote_type: str) -> dto.VoteResult:
		if vote_type not in models.VOTE_TYPES:
			raise ValidationError("invalid_vote_type")
		async with self.repo.transaction() as conn:
			issue = await self.repo.get_issue(issue_id, conn=conn)
			if issue is None:
				raise NotFoundError("issue_not_found")
			existing = await self.repo.get_vote(issue_id, actor.id, conn=conn, for_update=True)
			if existing is not None and existing.vote_type == vote_type:
				await self.repo.delete_vote(conn=conn, issue_id=issue_id, user_id=actor.id)
				action = "removed"
				current = None
			else:
				await self.repo.upsert_vote(conn=conn, issue_id=issue_id, user_id=actor.id, vote_type=vote_type)
				action = "updated" if existing is not None else "created"
				current = vote_type
			tally = await self.repo.vote_tally(issue_id, conn=conn)
		obs_metrics.inc_vote_toggle(action)
		return dto.VoteResult(action=action, vote=current, tally=tally.model_dump())

	async def get_vote(self, actor: Actor, issue_id: UUID) -> dict[str, Any]:
		if await self.repo.get_issue(issue_id) is None:
			raise NotFoundError("issue_not_found")
		vote = await self.repo.get_vote(issue_id, actor.id)
		return {"vote": vote.vote_type if vote else None}
