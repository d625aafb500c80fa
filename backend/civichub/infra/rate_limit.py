"""Fixed-window request budgets kept in Redis."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from civichub.infra.redis import redis_client


@dataclass(slots=True, frozen=True)
class Budget:
	allowed: bool
	remaining: int
	reset_after: int


async def consume(
	scope: str,
	subject: str,
	*,
	limit: int,
	window_seconds: int = 60,
	now: Optional[float] = None,
) -> Budget:
	"""Spend one unit of `subject`'s budget for the current window.

	Counters are keyed per window slot and expire with it, so a new window
	starts from zero without any cleanup.
	"""
	window = max(1, int(window_seconds))
	if now is None:
		now = time.time()
	slot, elapsed = divmod(int(now), window)
	reset_after = window - elapsed
	if limit <= 0:
		return Budget(allowed=False, remaining=0, reset_after=reset_after)
	key = f"civic:budget:{scope}:{subject}:{window}:{slot}"
	async with redis_client.pipeline(transaction=True) as pipe:
		pipe.incr(key)
		pipe.expire(key, window)
		count, _ = await pipe.execute()
	used = int(count)
	return Budget(allowed=used <= limit, remaining=max(0, limit - used), reset_after=reset_after)
