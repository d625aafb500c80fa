"""Issue comment endpoints."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends

from civichub.api._errors import to_http_error
from civichub.api.deps import get_actor, get_comments_service
from civichub.domain.comments_service import CommentsService
from civichub.domain.policies import Actor
from civichub.schemas import dto

router = APIRouter(tags=["comments"])


@router.get("/issues/{issue_id}/comments")
async def list_comments_endpoint(
	issue_id: UUID,
	service: CommentsService = Depends(get_comments_service),
) -> dict[str, Any]:
	try:
		return await service.list_comments(issue_id)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.post("/issues/{issue_id}/comments", status_code=201)
async def create_comment_endpoint(
	issue_id: UUID,
	payload: dto.CommentCreateRequest,
	actor: Actor = Depends(get_actor),
	service: CommentsService = Depends(get_comments_service),
) -> dict[str, Any]:
	try:
		return await service.create_comment(actor, issue_id, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc
