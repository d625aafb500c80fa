import sys
from pathlib import Path

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from civichub.api import deps
from civichub.domain import policies
from civichub.infra import postgres
from civichub.main import app
from civichub.settings import settings

from fakes import FakeCivicRepository, FakeLLM


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from civichub.infra.redis import redis_client, set_redis_client
	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop():
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)


@pytest.fixture(autouse=True)
def force_test_settings():
	"""Ensure a consistent test environment.

	API tests authenticate via the X-User-Id header, which is only accepted in
	dev mode.
	"""
	original_env = settings.environment
	original_ai_limit = settings.ai_rate_limit_per_minute
	settings.environment = "dev"
	settings.ai_rate_limit_per_minute = 20
	try:
		yield
	finally:
		settings.environment = original_env
		settings.ai_rate_limit_per_minute = original_ai_limit


@pytest.fixture
def repo() -> FakeCivicRepository:
	return FakeCivicRepository()


@pytest.fixture
def llm() -> FakeLLM:
	return FakeLLM()


@pytest.fixture
def citizen(repo):
	return repo.add_profile(first_name="Ada", last_name="Park", display_name="ada", city="Springfield", email="ada@example.com")


@pytest.fixture
def neighbour(repo):
	return repo.add_profile(first_name="Ben", last_name="Ruiz", display_name="ben", city="Shelbyville")


@pytest.fixture
def admin(repo):
	return repo.add_profile(role="admin", first_name="Cleo", last_name="Hart", display_name="cleo")


def actor_for(profile) -> policies.Actor:
	return policies.actor_from_profile(profile.id, profile)


@pytest.fixture
def as_actor():
	return actor_for


def auth_headers(profile) -> dict[str, str]:
	return {"X-User-Id": str(profile.id)}


@pytest.fixture
def headers_for():
	return auth_headers


@pytest_asyncio.fixture
async def api_client(repo, llm):
	app.dependency_overrides[deps.get_repository] = lambda: repo
	app.dependency_overrides[deps.get_llm_client] = lambda: llm
	transport = ASGITransport(app=app)
	try:
		async with AsyncClient(transport=transport, base_url="http://testserver") as client:
			yield client
	finally:
		app.dependency_overrides.pop(deps.get_repository, None)
		app.dependency_overrides.pop(deps.get_llm_client, None)
