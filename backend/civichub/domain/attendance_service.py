"""Event attendance with capacity enforcement."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from civichub.domain import models, repo as repo_module, shaping
from civichub.domain.exceptions import NotFoundError, ValidationError
from civichub.domain.notifier import EVENT_ATTENDANCE, Notifier
from civichub.domain.policies import Actor
from civichub.obs import metrics as obs_metrics


class AttendanceService:
	"""Upserts one attendance row per (event, attendee).

	The event row is locked for the duration of the capacity check and the
	write, so concurrent attends on one event serialize and the live count is
	re-validated at write time.
	"""

	def __init__(
		self,
		repository: repo_module.CivicRepository | None = None,
		*,
		notifier: Notifier | None = None,
	) -> None:
		self.repo = repository or repo_module.CivicRepository()
		self.notifier = notifier or Notifier(self.repo)

	async def attend(self, actor: Actor, event_id: UUID, status: str = "attending") -> dict[str, Any]:
		if status not in models.ATTENDANCE_STATUSES:
			raise ValidationError("invalid_status")
		async with self.repo.transaction() as conn:
			event = await self.repo.get_event(event_id, conn=conn, for_update=True)
			if event is None:
				raise NotFoundError("event_not_found")
			previous = await self.repo.get_attendance(event_id, actor.id, conn=conn)
			if status == "attending" and event.max_attendees is not None:
				attending = await self.repo.count_attending(event_id, conn=conn)
				if attending >= event.max_attendees:
					obs_metrics.inc_attendance_reject("event_full")
					raise ValidationError("event_full")
			attendance = await self.repo.upsert_attendance(
				conn=conn,
				event_id=event_id,
				user_id=actor.id,
				status=status,
			)
			current = await self.repo.count_attending(event_id, conn=conn)
		obs_metrics.inc_attendance_update(status)
		if status == "attending" and (previous is None or previous.status != "attending"):
			await self.notifier.notify(
				user_id=event.organizer_id,
				actor_id=actor.id,
				title="New Attendee",
				message=f'Someone is attending your event "{event.title}"',
				type=EVENT_ATTENDANCE,
				related_id=event.id,
			)
		return {
			"message": "Attendance updated" if previous is not None else "Attendance created",
			"attendance": shaping.shape_attendance(attendance),
			"current_attendees": current,
		}

	async def get_attendance(self, actor: Actor, event_id: UUID) -> dict[str, Any]:
		if await self.repo.get_event(event_id) is None:
			raise NotFoundError("event_not_found")
		attendance = await self.repo.get_attendance(event_id, actor.id)
		return {"status": attendance.status if attendance else None}
