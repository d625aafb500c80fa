"""Service helpers for user notifications."""

from __future__ import annotations

import asyncio
from typing import Any
from uuid import UUID

from civichub.domain import policies, repo as repo_module, shaping
from civichub.domain.exceptions import NotFoundError
from civichub.domain.policies import Actor
from civichub.obs import metrics as obs_metrics
from civichub.schemas import dto


class NotificationsService:
	"""Inbox queries plus explicit sends by staff."""

	def __init__(self, repository: repo_module.CivicRepository | None = None) -> None:
		self.repo = repository or repo_module.CivicRepository()

	async def list_notifications(
		self,
		actor: Actor,
		*,
		unread_only: bool = False,
		page: int = 1,
		limit: int = 20,
	) -> dict[str, Any]:
		items, total, unread = await asyncio.gather(
			self.repo.list_notifications(actor.id, unread_only=unread_only, limit=limit, offset=(page - 1) * limit),
			self.repo.count_notifications(actor.id, unread_only=unread_only),
			self.repo.count_notifications(actor.id, unread_only=True),
		)
		return {
			"notifications": shaping.shape_many("notification", items),
			"unread_count": unread,
			"pagination": dto.Pagination.build(page=page, limit=limit, total=total).as_dict(),
		}

	async def create_notification(self, actor: Actor, payload: dto.NotificationCreateRequest) -> dict[str, Any]:
		policies.require_capability(actor, policies.SEND_NOTIFICATIONS)
		if await self.repo.get_profile(payload.user_id) is None:
			raise NotFoundError("user_not_found")
		notification = await self.repo.create_notification(
			user_id=payload.user_id,
			title=payload.title,
			message=payload.message,
			type=payload.type,
			related_id=payload.related_id,
		)
		obs_metrics.inc_notification_sent(payload.type)
		return {"notification": shaping.shape_notification(notification)}

	async def mark_read(self, actor: Actor, notification_id: UUID) -> dict[str, Any]:
		notification = await self.repo.mark_notification_read(notification_id, actor.id)
		if notification is None:
			raise NotFoundError("notification_not_found")
		return {"notification": shaping.shape_notification(notification)}
