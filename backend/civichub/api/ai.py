"""AI assist endpoints backed by the hosted LLM."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from civichub.api._errors import to_http_error
from civichub.api.deps import get_actor, get_admin_actor, get_ai_service
from civichub.domain.ai_service import AIService
from civichub.domain.policies import Actor
from civichub.schemas import dto

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/categorize", response_model=dto.CategorizeResult)
async def categorize_endpoint(
	payload: dto.CategorizeRequest,
	actor: Actor = Depends(get_actor),
	service: AIService = Depends(get_ai_service),
) -> dto.CategorizeResult:
	try:
		return await service.categorize(actor, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.post("/moderate", response_model=dto.ModerationResult, response_model_exclude_none=True)
async def moderate_endpoint(
	payload: dto.ModerateRequest,
	actor: Actor = Depends(get_actor),
	service: AIService = Depends(get_ai_service),
) -> dto.ModerationResult:
	try:
		return await service.moderate(actor, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.post("/solutions", response_model=dto.SolutionsResult)
async def solutions_endpoint(
	payload: dto.IssueReferenceRequest,
	actor: Actor = Depends(get_actor),
	service: AIService = Depends(get_ai_service),
) -> dto.SolutionsResult:
	try:
		return await service.solutions(actor, payload.issue_id)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.post("/summarize", response_model=dto.SummaryResult)
async def summarize_endpoint(
	payload: dto.IssueReferenceRequest,
	actor: Actor = Depends(get_admin_actor),
	service: AIService = Depends(get_ai_service),
) -> dto.SummaryResult:
	try:
		return await service.summarize(actor, payload.issue_id)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/analytics", response_model=dto.AnalyticsResult)
async def analytics_endpoint(
	actor: Actor = Depends(get_admin_actor),
	service: AIService = Depends(get_ai_service),
) -> dto.AnalyticsResult:
	try:
		return await service.analytics(actor)
	except Exception as exc:
		raise to_http_error(exc) from exc
