"""Issue category catalogue."""

from __future__ import annotations

from typing import Any

from civichub.domain import policies, repo as repo_module, shaping
from civichub.domain.policies import Actor
from civichub.schemas import dto


class CategoriesService:
	def __init__(self, repository: repo_module.CivicRepository | None = None) -> None:
		self.repo = repository or repo_module.CivicRepository()

	async def list_categories(self) -> dict[str, Any]:
		categories = await self.repo.list_categories()
		return {"categories": shaping.shape_many("category", categories)}

	async def create_category(self, actor: Actor, payload: dto.CategoryCreateRequest) -> dict[str, Any]:
		policies.require_capability(actor, policies.MANAGE_CATEGORIES)
		category = await self.repo.create_category(
			name=payload.name,
			description=payload.description,
			icon=payload.icon,
			color=payload.color,
		)
		return {"category": shaping.shape_category(category)}
