"""Admin console endpoints: dashboard, moderation, user management and reports."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from civichub.api._errors import to_http_error
from civichub.api.deps import (
	get_admin_actor,
	get_admin_service,
	get_issues_service,
	get_reports_service,
)
from civichub.api.pagination import PageParams, page_params
from civichub.domain.admin_service import AdminService
from civichub.domain.issues_service import IssuesService
from civichub.domain.policies import Actor
from civichub.domain.reports_service import ReportsService
from civichub.schemas import dto

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(get_admin_actor)])


@router.get("/dashboard")
async def dashboard_endpoint(service: AdminService = Depends(get_admin_service)) -> dict[str, Any]:
	try:
		return await service.dashboard()
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/issues")
async def list_admin_issues_endpoint(
	status: Optional[str] = Query(default=None),
	category: Optional[UUID] = Query(default=None),
	priority: Optional[str] = Query(default=None),
	paging: PageParams = Depends(page_params(20)),
	service: AdminService = Depends(get_admin_service),
) -> dict[str, Any]:
	try:
		return await service.list_issues(
			status=status,
			category_id=category,
			priority=priority,
			page=paging.page,
			limit=paging.limit,
		)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.patch("/issues/{issue_id}/status")
async def change_issue_status_endpoint(
	issue_id: UUID,
	payload: dto.StatusChangeRequest,
	actor: Actor = Depends(get_admin_actor),
	service: IssuesService = Depends(get_issues_service),
) -> dict[str, Any]:
	try:
		return await service.change_status(actor, issue_id, payload.status, admin_notes=payload.admin_notes)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/users")
async def list_users_endpoint(
	search: Optional[str] = Query(default=None, max_length=100),
	role: Optional[str] = Query(default=None),
	paging: PageParams = Depends(page_params(20)),
	service: AdminService = Depends(get_admin_service),
) -> dict[str, Any]:
	try:
		return await service.list_users(search=search, role=role, page=paging.page, limit=paging.limit)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.patch("/users/{user_id}")
async def update_user_endpoint(
	user_id: UUID,
	payload: dto.AdminUserUpdateRequest,
	actor: Actor = Depends(get_admin_actor),
	service: AdminService = Depends(get_admin_service),
) -> dict[str, Any]:
	try:
		return await service.update_user(actor, user_id, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.delete("/users/{user_id}")
async def deactivate_user_endpoint(
	user_id: UUID,
	actor: Actor = Depends(get_admin_actor),
	service: AdminService = Depends(get_admin_service),
) -> dict[str, Any]:
	try:
		return await service.deactivate_user(actor, user_id)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/reports")
async def reports_endpoint(
	report_type: str = Query(default="summary", alias="type"),
	start_date: Optional[datetime] = Query(default=None),
	end_date: Optional[datetime] = Query(default=None),
	service: ReportsService = Depends(get_reports_service),
) -> dict[str, Any]:
	try:
		return await service.generate(report_type, start_date=start_date, end_date=end_date)
	except Exception as exc:
		raise to_http_error(exc) from exc
