"""Best-effort notifications and post-commit side effects."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Optional, TypeVar
from uuid import UUID

from civichub.domain import models, repo as repo_module
from civichub.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

T = TypeVar("T")

ISSUE_STATUS_UPDATE = "issue_status_update"
ISSUE_COMMENT = "issue_comment"
EVENT_ATTENDANCE = "event_attendance"


async def best_effort(kind: str, awaitable: Awaitable[T], **context: Any) -> Optional[T]:
	"""Await a side effect whose failure is logged and counted but never raised."""
	try:
		return await awaitable
	except Exception:
		obs_metrics.inc_side_effect_failure(kind)
		logger.warning("side_effect_failed", extra={"kind": kind, **context}, exc_info=True)
		return None


class Notifier:
	"""Creates notification rows for users affected by someone else's action."""

	def __init__(self, repository: repo_module.CivicRepository | None = None) -> None:
		self.repo = repository or repo_module.CivicRepository()

	async def notify(
		self,
		*,
		user_id: UUID,
		title: str,
		message: str,
		type: str,
		related_id: UUID | None = None,
		actor_id: UUID | None = None,
	) -> models.Notification | None:
		if actor_id is not None and actor_id == user_id:
			return None
		notification = await best_effort(
			"notification",
			self.repo.create_notification(
				user_id=user_id,
				title=title,
				message=message,
				type=type,
				related_id=related_id,
			),
			notification_type=type,
			target_user_id=str(user_id),
		)
		if notification is not None:
			obs_metrics.inc_notification_sent(type)
		return notification
