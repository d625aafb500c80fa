"""Request-scoped dependencies: repository, actor resolution and services."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials

from civichub.ai.client import LLMClient, build_llm_client
from civichub.api._errors import to_http_error
from civichub.domain import policies
from civichub.domain.admin_service import AdminService
from civichub.domain.ai_service import AIService
from civichub.domain.attendance_service import AttendanceService
from civichub.domain.categories_service import CategoriesService
from civichub.domain.comments_service import CommentsService
from civichub.domain.events_service import EventsService
from civichub.domain.exceptions import ForbiddenError
from civichub.domain.issues_service import IssuesService
from civichub.domain.notifications_service import NotificationsService
from civichub.domain.policies import Actor
from civichub.domain.profiles_service import ProfilesService
from civichub.domain.reports_service import ReportsService
from civichub.domain.repo import CivicRepository
from civichub.domain.votes_service import VotesService
from civichub.infra.auth import AuthenticatedUser, bearer_scheme, get_current_user


def get_repository() -> CivicRepository:
	"""Fresh repository per request over the process-wide pool."""
	return CivicRepository()


async def _resolve_actor(user: AuthenticatedUser, repository: CivicRepository) -> Actor:
	profile = await repository.get_profile(user.uuid)
	if profile is None:
		profile = await repository.ensure_profile(user.uuid, email=user.email, display_name=user.display_name)
	actor = policies.actor_from_profile(user.uuid, profile)
	try:
		return policies.require_active(actor)
	except ForbiddenError as exc:
		raise to_http_error(exc) from exc


async def get_actor(
	user: AuthenticatedUser = Depends(get_current_user),
	repository: CivicRepository = Depends(get_repository),
) -> Actor:
	return await _resolve_actor(user, repository)


async def get_optional_actor(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
	repository: CivicRepository = Depends(get_repository),
) -> Actor | None:
	"""Resolve the caller on public routes; anonymous requests yield None."""
	if credentials is None and not x_user_id:
		return None
	user = await get_current_user(x_user_id=x_user_id, credentials=credentials)
	return await _resolve_actor(user, repository)


async def get_admin_actor(actor: Actor = Depends(get_actor)) -> Actor:
	if not actor.is_admin:
		raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="admin_access_required")
	return actor


def get_llm_client(request: Request) -> LLMClient:
	client = getattr(request.app.state, "llm_client", None)
	if client is None:
		client = build_llm_client(getattr(request.app.state, "http_client", None))
		request.app.state.llm_client = client
	return client


def get_issues_service(repository: CivicRepository = Depends(get_repository)) -> IssuesService:
	return IssuesService(repository)


def get_votes_service(repository: CivicRepository = Depends(get_repository)) -> VotesService:
	return VotesService(repository)


def get_comments_service(repository: CivicRepository = Depends(get_repository)) -> CommentsService:
	return CommentsService(repository)


def get_categories_service(repository: CivicRepository = Depends(get_repository)) -> CategoriesService:
	return CategoriesService(repository)


def get_events_service(repository: CivicRepository = Depends(get_repository)) -> EventsService:
	return EventsService(repository)


def get_attendance_service(repository: CivicRepository = Depends(get_repository)) -> AttendanceService:
	return AttendanceService(repository)


def get_profiles_service(repository: CivicRepository = Depends(get_repository)) -> ProfilesService:
	return ProfilesService(repository)


def get_notifications_service(repository: CivicRepository = Depends(get_repository)) -> NotificationsService:
	return NotificationsService(repository)


def get_admin_service(repository: CivicRepository = Depends(get_repository)) -> AdminService:
	return AdminService(repository)


def get_reports_service(repository: CivicRepository = Depends(get_repository)) -> ReportsService:
	return ReportsService(repository)


def get_ai_service(
	repository: CivicRepository = Depends(get_repository),
	llm: LLMClient = Depends(get_llm_client),
) -> AIService:
	return AIService(repository, llm=llm)
