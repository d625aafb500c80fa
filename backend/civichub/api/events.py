"""Community event endpoints."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from civichub.api._errors import to_http_error
from civichub.api.deps import get_actor, get_events_service
from civichub.api.pagination import PageParams, page_params
from civichub.domain.events_service import EventsService
from civichub.domain.policies import Actor
from civichub.schemas import dto

router = APIRouter(tags=["events"])


@router.get("/events")
async def list_events_endpoint(
	upcoming: bool = Query(default=False),
	sort_by: str = Query(default="event_date"),
	sort_order: str = Query(default="asc"),
	paging: PageParams = Depends(page_params(10)),
	service: EventsService = Depends(get_events_service),
) -> dict[str, Any]:
	try:
		return await service.list_events(
			upcoming=upcoming,
			sort_by=sort_by,
			sort_order=sort_order,
			page=paging.page,
			limit=paging.limit,
		)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.post("/events", status_code=201)
async def create_event_endpoint(
	payload: dto.EventCreateRequest,
	actor: Actor = Depends(get_actor),
	service: EventsService = Depends(get_events_service),
) -> dict[str, Any]:
	try:
		return await service.create_event(actor, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/events/{event_id}")
async def get_event_endpoint(
	event_id: UUID,
	service: EventsService = Depends(get_events_service),
) -> dict[str, Any]:
	try:
		return await service.get_event(event_id)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.put("/events/{event_id}")
async def update_event_endpoint(
	event_id: UUID,
	payload: dto.EventUpdateRequest,
	actor: Actor = Depends(get_actor),
	service: EventsService = Depends(get_events_service),
) -> dict[str, Any]:
	try:
		return await service.update_event(actor, event_id, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.delete("/events/{event_id}")
async def delete_event_endpoint(
	event_id: UUID,
	actor: Actor = Depends(get_actor),
	service: EventsService = Depends(get_events_service),
) -> dict[str, Any]:
	try:
		return await service.delete_event(actor, event_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
