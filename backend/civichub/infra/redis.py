"""Redis client holder for the AI request budget.

`redis_client` is a proxy so modules can import it once while the underlying
client is created lazily from `settings.redis_url`, closed on shutdown, or
swapped for fakeredis in tests.
"""

from __future__ import annotations

from typing import Optional

import redis.asyncio as redis

from civichub.settings import settings


class RedisProxy:
	def __init__(self) -> None:
		self._client: Optional[redis.Redis] = None

	@property
	def client(self) -> redis.Redis:
		if self._client is None:
			self._client = redis.from_url(settings.redis_url, decode_responses=True)
		return self._client

	def set_client(self, client: Optional[redis.Redis]) -> None:
		self._client = client

	async def close(self) -> None:
		client, self._client = self._client, None
		if client is not None:
			await client.aclose()

	def __getattr__(self, item):
		return getattr(self.client, item)


redis_client = RedisProxy()


def set_redis_client(client: Optional[redis.Redis]) -> None:
	redis_client.set_client(client)
