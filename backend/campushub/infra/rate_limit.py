"""Redis-backed fixed-window rate limiting."""

from __future__ import annotations

from campushub.infra.redis import redis_client


async def hit(key: str, *, ttl_seconds: int) -> int:
	"""Increment a bucket and return the new count; the bucket expires after ttl_seconds."""

	async with redis_client.pipeline(transaction=True) as pipe:
		pipe.incr(key)
		pipe.expire(key, ttl_seconds)
		count, _ = await pipe.execute()
	return int(count)
