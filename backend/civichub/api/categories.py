"""Issue category endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from civichub.api._errors import to_http_error
from civichub.api.deps import get_actor, get_categories_service
from civichub.domain.categories_service import CategoriesService
from civichub.domain.policies import Actor
from civichub.schemas import dto

router = APIRouter(tags=["categories"])


@router.get("/issues/categories")
async def list_categories_endpoint(
	service: CategoriesService = Depends(get_categories_service),
) -> dict[str, Any]:
	try:
		return await service.list_categories()
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.post("/issues/categories", status_code=201)
async def create_category_endpoint(
	payload: dto.CategoryCreateRequest,
	actor: Actor = Depends(get_actor),
	service: CategoriesService = Depends(get_categories_service),
) -> dict[str, Any]:
	try:
		return await service.create_category(actor, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc
