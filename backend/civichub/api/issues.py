"""Issues API endpoints."""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from civichub.api._errors import to_http_error
from civichub.api.deps import get_actor, get_issues_service
from civichub.api.pagination import PageParams, page_params
from civichub.domain.issues_service import IssuesService
from civichub.domain.policies import Actor
from civichub.schemas import dto

router = APIRouter(tags=["issues"])


@router.get("/issues")
async def list_issues_endpoint(
	category: Optional[UUID] = Query(default=None),
	status: Optional[str] = Query(default=None),
	priority: Optional[str] = Query(default=None),
	sort_by: str = Query(default="created_at"),
	sort_order: str = Query(default="desc"),
	paging: PageParams = Depends(page_params(10)),
	service: IssuesService = Depends(get_issues_service),
) -> dict[str, Any]:
	try:
		return await service.list_issues(
			category_id=category,
			status=status,
			priority=priority,
			sort_by=sort_by,
			sort_order=sort_order,
			page=paging.page,
			limit=paging.limit,
		)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.post("/issues", status_code=201)
async def create_issue_endpoint(
	payload: dto.IssueCreateRequest,
	actor: Actor = Depends(get_actor),
	service: IssuesService = Depends(get_issues_service),
) -> dict[str, Any]:
	try:
		return await service.create_issue(actor, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/issues/stats")
async def issue_stats_endpoint(service: IssuesService = Depends(get_issues_service)) -> dict[str, Any]:
	try:
		return await service.stats()
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/issues/{issue_id}")
async def get_issue_endpoint(
	issue_id: UUID,
	service: IssuesService = Depends(get_issues_service),
) -> dict[str, Any]:
	try:
		return await service.get_issue(issue_id)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.put("/issues/{issue_id}")
async def update_issue_endpoint(
	issue_id: UUID,
	payload: dto.IssueUpdateRequest,
	actor: Actor = Depends(get_actor),
	service: IssuesService = Depends(get_issues_service),
) -> dict[str, Any]:
	try:
		return await service.update_issue(actor, issue_id, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.delete("/issues/{issue_id}")
async def delete_issue_endpoint(
	issue_id: UUID,
	actor: Actor = Depends(get_actor),
	service: IssuesService = Depends(get_issues_service),
) -> dict[str, Any]:
	try:
		return await service.delete_issue(actor, issue_id)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/issues/{issue_id}/updates")
async def list_issue_updates_endpoint(
	issue_id: UUID,
	service: IssuesService = Depends(get_issues_service),
) -> dict[str, Any]:
	try:
		return await service.list_updates(issue_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
