"""Issue vote endpoints."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends

from civichub.api._errors import to_http_error
from civichub.api.deps import get_actor, get_votes_service
from civichub.domain.policies import Actor
from civichub.domain.votes_service import VotesService
from civichub.schemas import dto

router = APIRouter(tags=["votes"])


@router.post("/issues/{issue_id}/vote", response_model=dto.VoteResult)
async def toggle_vote_endpoint(
	issue_id: UUID,
	payload: dto.VoteRequest,
	actor: Actor = Depends(get_actor),
	service: VotesService = Depends(get_votes_service),
) -> dto.VoteResult:
	try:
		return await service.toggle_vote(actor, issue_id, payload.vote_type)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/issues/{issue_id}/vote")
async def get_vote_endpoint(
	issue_id: UUID,
	actor: Actor = Depends(get_actor),
	service: VotesService = Depends(get_votes_service),
) -> dict[str, Any]:
	try:
		return await service.get_vote(actor, issue_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
