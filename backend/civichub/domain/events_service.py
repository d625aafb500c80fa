"""Community event lifecycle."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from civichub.domain import models, policies, repo as repo_module, shaping
from civichub.domain.exceptions import NotFoundError, ValidationError
from civichub.domain.issues_service import validate_sort
from civichub.domain.policies import Actor
from civichub.obs import metrics as obs_metrics
from civichub.schemas import dto


def ensure_future(event_date: datetime, *, now: datetime | None = None) -> datetime:
	event_date = models.as_utc(event_date)
	if event_date <= (now or datetime.now(timezone.utc)):
		raise ValidationError("event_date_must_be_future")
	return event_date


class EventsService:
	def __init__(self, repository: repo_module.CivicRepository | None = None) -> None:
		self.repo = repository or repo_module.CivicRepository()

	async def list_events(
		self,
		*,
		upcoming: bool = False,
		sort_by: str = "event_date",
		sort_order: str = "asc",
		page: int = 1,
		limit: int = 10,
		now: datetime | None = None,
	) -> dict[str, Any]:
		validate_sort(sort_by, sort_order, repo_module.EVENT_SORT_COLUMNS)
		starts_after = (now or datetime.now(timezone.utc)) if upcoming else None
		events, total = await asyncio.gather(
			self.repo.list_events(
				public_only=True,
				starts_after=starts_after,
				sort_by=sort_by,
				sort_order=sort_order,
				limit=limit,
				offset=(page - 1) * limit,
			),
			self.repo.count_events(public_only=True, starts_after=starts_after),
		)
		return {
			"events": shaping.shape_many("event", events),
			"pagination": dto.Pagination.build(page=page, limit=limit, total=total).as_dict(),
		}

	async def create_event(self, actor: Actor, payload: dto.EventCreateRequest) -> dict[str, Any]:
		fields = payload.model_dump()
		fields["event_date"] = ensure_future(payload.event_date)
		event = await self.repo.create_event(organizer_id=actor.id, fields=fields)
		obs_metrics.inc_event_created()
		detail = await self.repo.get_event(event.id)
		return {"event": shaping.shape_event(detail or event)}

	async def _load(self, event_id: UUID) -> models.Event:
		event = await self.repo.get_event(event_id)
		if event is None:
			raise NotFoundError("event_not_found")
		return event

	async def get_event(self, event_id: UUID) -> dict[str, Any]:
		event = await self._load(event_id)
		attendees = await self.repo.list_attendees(event_id)
		return {
			"event": shaping.shape_event(event),
			"attendees": shaping.shape_many("attendance", attendees),
		}

	async def update_event(self, actor: Actor, event_id: UUID, payload: dto.EventUpdateRequest) -> dict[str, Any]:
		existing = await self._load(event_id)
		policies.require_owner_or(actor, existing.organizer_id, policies.MANAGE_EVENTS)
		fields = payload.model_dump(exclude_unset=True)
		for column in ("title", "event_date", "is_public"):
			if column in fields and fields[column] is None:
				fields.pop(column)
		if "event_date" in fields:
			fields["event_date"] = ensure_future(fields["event_date"])
		updated = await self.repo.update_event(event_id, fields)
		if updated is None:
			raise NotFoundError("event_not_found")
		return {"event": shaping.shape_event(updated)}

	async def delete_event(self, actor: Actor, event_id: UUID) -> dict[str, Any]:
		existing = await self._load(event_id)
		policies.require_owner_or(actor, existing.organizer_id, policies.MANAGE_EVENTS)
		if not await self.repo.delete_event(event_id):
			raise NotFoundError("event_not_found")
		return {"message": "Event deleted successfully"}
