"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from civichub.ai.client import build_llm_client
from civichub.api import (
	admin,
	ai,
	attendance,
	categories,
	comments,
	events,
	issues,
	notifications,
	ops,
	profiles,
	votes,
)
from civichub.api.errors import install_error_handlers
from civichub.infra import postgres
from civichub.infra.redis import redis_client
from civichub.obs import init as obs_init
from civichub.settings import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
	try:
		await postgres.init_pool()
	except Exception:  # pragma: no cover - readiness reports the outage
		logger.exception("postgres_pool_init_failed")
	http_client: httpx.AsyncClient | None = None
	if settings.ai_api_key:
		http_client = httpx.AsyncClient(timeout=settings.ai_timeout_seconds)
	app.state.http_client = http_client
	app.state.llm_client = build_llm_client(http_client)
	try:
		yield
	finally:
		if http_client is not None:
			await http_client.aclose()
		await postgres.close_pool()
		await redis_client.close()


app = FastAPI(title="CivicHub API", lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(getattr(settings, "cors_allow_origins", []))
if not allow_origins:
	allow_origins = ["http://localhost:3000"] if settings.is_dev() else []

# Starlette disallows wildcard '*' with allow_credentials=True. Replace '*' with explicit origins.
if "*" in allow_origins:
	if settings.is_dev():
		allow_origins = [
			"http://localhost:3000",
			"http://127.0.0.1:3000",
			"http://localhost:5173",
			"http://127.0.0.1:5173",
		]
	else:
		allow_origins = [origin for origin in allow_origins if origin != "*"]

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

obs_init(app)

app.include_router(ops.router)
# /issues/categories must be matched before /issues/{issue_id}
app.include_router(categories.router)
app.include_router(issues.router)
app.include_router(votes.router)
app.include_router(comments.router)
app.include_router(events.router)
app.include_router(attendance.router)
app.include_router(profiles.router)
app.include_router(notifications.router)
app.include_router(admin.router)
app.include_router(ai.router)
