"""Profile search and edit endpoints."""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from civichub.api._errors import to_http_error
from civichub.api.deps import get_actor, get_optional_actor, get_profiles_service
from civichub.api.pagination import PageParams, page_params
from civichub.domain.policies import Actor
from civichub.domain.profiles_service import ProfilesService
from civichub.schemas import dto

router = APIRouter(tags=["profiles"])


@router.get("/profiles")
async def search_profiles_endpoint(
	search: Optional[str] = Query(default=None, max_length=100),
	paging: PageParams = Depends(page_params(10)),
	service: ProfilesService = Depends(get_profiles_service),
) -> dict[str, Any]:
	try:
		return await service.search_profiles(search=search, page=paging.page, limit=paging.limit)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/profiles/{profile_id}")
async def get_profile_endpoint(
	profile_id: UUID,
	viewer: Optional[Actor] = Depends(get_optional_actor),
	service: ProfilesService = Depends(get_profiles_service),
) -> dict[str, Any]:
	try:
		return await service.get_profile(viewer, profile_id)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.put("/profiles/{profile_id}")
async def update_profile_endpoint(
	profile_id: UUID,
	payload: dto.ProfileUpdateRequest,
	actor: Actor = Depends(get_actor),
	service: ProfilesService = Depends(get_profiles_service),
) -> dict[str, Any]:
	try:
		return await service.update_profile(actor, profile_id, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc
