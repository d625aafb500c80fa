"""Process-wide asyncpg pool shared by every request's CivicRepository."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import asyncpg

from civichub.settings import settings

logger = logging.getLogger(__name__)

_pool: Optional[asyncpg.pool.Pool] = None


async def init_pool() -> asyncpg.pool.Pool:
	"""Create the pool on first use; later calls return the same pool."""
	global _pool
	if _pool is None:
		_pool = await asyncpg.create_pool(
			dsn=settings.postgres_url,
			min_size=settings.postgres_min_pool_size,
			max_size=settings.postgres_max_pool_size,
			server_settings={"application_name": settings.service_name},
		)
		logger.info(
			"postgres_pool_ready",
			extra={"min_size": settings.postgres_min_pool_size, "max_size": settings.postgres_max_pool_size},
		)
	return _pool


async def get_pool() -> asyncpg.pool.Pool:
	return _pool if _pool is not None else await init_pool()


@asynccontextmanager
async def acquire() -> AsyncIterator[asyncpg.Connection]:
	pool = await get_pool()
	async with pool.acquire() as conn:
		yield conn


async def close_pool() -> None:
	global _pool
	pool, _pool = _pool, None
	if pool is not None:
		await pool.close()
