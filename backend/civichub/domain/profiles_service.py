"""Profile search, detail and self-service edits."""

from __future__ import annotations

import asyncio
from typing import Any, Optional
from uuid import UUID

from civichub.domain import models, policies, repo as repo_module, shaping
from civichub.domain.exceptions import NotFoundError
from civichub.domain.policies import Actor
from civichub.schemas import dto


class ProfilesService:
	def __init__(self, repository: repo_module.CivicRepository | None = None) -> None:
		self.repo = repository or repo_module.CivicRepository()

	async def search_profiles(self, *, search: Optional[str] = None, page: int = 1, limit: int = 10) -> dict[str, Any]:
		term = search.strip() if search else None
		filters = models.ProfileFilters(search=term or None, active_only=True)
		profiles, total = await asyncio.gather(
			self.repo.list_profiles(filters, limit=limit, offset=(page - 1) * limit),
			self.repo.count_profiles(filters),
		)
		return {
			"profiles": shaping.shape_many("profile", profiles),
			"pagination": dto.Pagination.build(page=page, limit=limit, total=total).as_dict(),
		}

	async def get_profile(self, viewer: Actor | None, profile_id: UUID) -> dict[str, Any]:
		profile = await self.repo.get_profile(profile_id)
		privileged = viewer is not None and (viewer.id == profile_id or viewer.can(policies.MANAGE_USERS))
		if profile is None or (not profile.is_active and not privileged):
			raise NotFoundError("profile_not_found")
		issues_reported, events_organized, comments_posted = await asyncio.gather(
			self.repo.count_issues(models.IssueFilters(reporter_id=profile_id)),
			self.repo.count_events_by_organizer(profile_id),
			self.repo.count_comments(user_id=profile_id),
		)
		shaped = shaping.shape_profile_full(profile) if privileged else shaping.shape_profile_public(profile)
		shaped["stats"] = {
			"issues_reported": issues_reported,
			"events_organized": events_organized,
			"comments_posted": comments_posted,
		}
		return {"profile": shaped}

	async def update_profile(self, actor: Actor, profile_id: UUID, payload: dto.ProfileUpdateRequest) -> dict[str, Any]:
		policies.require_owner_or(actor, profile_id, policies.MANAGE_USERS)
		profile = await self.repo.update_profile(profile_id, payload.model_dump(exclude_unset=True))
		if profile is None:
			raise NotFoundError("profile_not_found")
		return {"profile": shaping.shape_profile_full(profile)}
