"""Event attendance endpoints."""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from civichub.api._errors import to_http_error
from civichub.api.deps import get_actor, get_attendance_service
from civichub.domain.attendance_service import AttendanceService
from civichub.domain.policies import Actor
from civichub.schemas import dto

router = APIRouter(tags=["attendance"])


@router.post("/events/{event_id}/attend")
async def attend_event_endpoint(
	event_id: UUID,
	payload: Optional[dto.AttendRequest] = None,
	actor: Actor = Depends(get_actor),
	service: AttendanceService = Depends(get_attendance_service),
) -> dict[str, Any]:
	status = payload.status if payload is not None else "attending"
	try:
		return await service.attend(actor, event_id, status)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/events/{event_id}/attend")
async def get_attendance_endpoint(
	event_id: UUID,
	actor: Actor = Depends(get_actor),
	service: AttendanceService = Depends(get_attendance_service),
) -> dict[str, Any]:
	try:
		return await service.get_attendance(actor, event_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
