"""Liveness and readiness probes over the stores the civic API depends on."""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Awaitable, Callable, Dict, Tuple

from civichub.infra import postgres
from civichub.infra.redis import redis_client
from civichub.obs import metrics
from civichub.settings import settings

LOGGER = logging.getLogger(__name__)

Probe = Callable[[], Awaitable[Any]]


async def _ping_postgres() -> None:
	async with postgres.acquire() as conn:
		await conn.execute("SELECT 1")


async def _ping_redis() -> None:
	await redis_client.ping()


async def _check(name: str, probe: Probe, timeout: float) -> Dict[str, Any]:
	start = perf_counter()
	try:
		await asyncio.wait_for(probe(), timeout=timeout)
	except Exception as exc:  # pragma: no cover - depends on runtime
		metrics.mark_dependency(name, False)
		LOGGER.warning("readiness_probe_failed", extra={"dependency": name}, exc_info=True)
		return {"ok": False, "error": type(exc).__name__}
	latency = perf_counter() - start
	metrics.mark_dependency(name, True, latency_seconds=latency)
	return {"ok": True, "latency_ms": round(latency * 1000, 2)}


async def liveness() -> Dict[str, Any]:
	return {"status": "ok", "service": settings.service_name}


async def readiness() -> Tuple[int, Dict[str, Any]]:
	"""Postgres gates readiness; Redis only backs the AI budget, so it degrades instead."""
	postgres_state, redis_state = await asyncio.gather(
		_check("postgres", _ping_postgres, timeout=0.5),
		_check("redis", _ping_redis, timeout=0.2),
	)
	checks = {
		"postgres": postgres_state,
		"redis": redis_state,
		"llm": {"configured": bool(settings.ai_api_key)},
	}
	if not postgres_state["ok"]:
		return 503, {"status": "unavailable", "checks": checks}
	return 200, {"status": "ok" if redis_state["ok"] else "degraded", "checks": checks}
