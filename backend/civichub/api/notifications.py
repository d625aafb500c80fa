"""Notification inbox endpoints."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from civichub.api._errors import to_http_error
from civichub.api.deps import get_actor, get_notifications_service
from civichub.api.pagination import PageParams, page_params
from civichub.domain.notifications_service import NotificationsService
from civichub.domain.policies import Actor
from civichub.schemas import dto

router = APIRouter(tags=["notifications"])


@router.get("/notifications")
async def list_notifications_endpoint(
	unread: bool = Query(default=False),
	paging: PageParams = Depends(page_params(20)),
	actor: Actor = Depends(get_actor),
	service: NotificationsService = Depends(get_notifications_service),
) -> dict[str, Any]:
	try:
		return await service.list_notifications(actor, unread_only=unread, page=paging.page, limit=paging.limit)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.post("/notifications", status_code=201)
async def create_notification_endpoint(
	payload: dto.NotificationCreateRequest,
	actor: Actor = Depends(get_actor),
	service: NotificationsService = Depends(get_notifications_service),
) -> dict[str, Any]:
	try:
		return await service.create_notification(actor, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.put("/notifications/{notification_id}/read")
async def mark_notification_read_endpoint(
	notification_id: UUID,
	actor: Actor = Depends(get_actor),
	service: NotificationsService = Depends(get_notifications_service),
) -> dict[str, Any]:
	try:
		return await service.mark_read(actor, notification_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
