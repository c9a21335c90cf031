"""Read-through cache for food listing responses.

Keys are derived deterministically so the same query shape always lands on
the same entry:

- list results:   ``food:list:`` + compact JSON of the sorted query params
- detail results: ``food:detail:`` + listing id

The cache is an optimisation only. Every backend call is wrapped so a Redis
outage (or a slow one, bounded by the socket timeouts in settings) degrades
to a miss and the request falls through to the database.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Mapping

logger = logging.getLogger(__name__)

LIST_PREFIX = "food:list:"
DETAIL_PREFIX = "food:detail:"
LIST_TTL = 300
DETAIL_TTL = 900


def list_cache_key(params: Mapping[str, Any]) -> str:
    ordered = {key: params[key] for key in sorted(params)}
    return LIST_PREFIX + json.dumps(ordered, separators=(",", ":"), ensure_ascii=False)


def detail_cache_key(listing_id) -> str:
    return f"{DETAIL_PREFIX}{listing_id}"


class ListingCache:
    """Best-effort wrapper around a Django cache backend.

    ``backend`` is any Django cache; pattern deletes and key scans need the
    ``django-redis`` backend and are skipped (with a warning) elsewhere.
    """

    def __init__(self, backend, list_ttl: int = LIST_TTL, detail_ttl: int = DETAIL_TTL, alias: str | None = None):
        self.backend = backend
        self.list_ttl = list_ttl
        self.detail_ttl = detail_ttl
        self.alias = alias

    def get(self, key: str):
        try:
            return self.backend.get(key)
        except Exception as e:
            logger.warning(f"Cache get failed for {key}: {e}")
            return None

    def set(self, key: str, value, ttl: int) -> bool:
        try:
            self.backend.set(key, value, ttl)
            return True
        except Exception as e:
            logger.warning(f"Cache set failed for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        try:
            self.backend.delete(key)
            return True
        except Exception as e:
            logger.warning(f"Cache delete failed for {key}: {e}")
            return False

    def delete_pattern(self, pattern: str) -> int:
        try:
            return self.backend.delete_pattern(pattern) or 0
        except Exception as e:
            logger.warning(f"Cache delete by pattern failed for {pattern}: {e}")
            return 0

    def keys(self, pattern: str) -> list[str]:
        try:
            return list(self.backend.keys(pattern))
        except Exception as e:
            logger.warning(f"Cache key scan failed for {pattern}: {e}")
            return []

    # ----- listing helpers -----

    def get_list(self, params: Mapping[str, Any]):
        return self.get(list_cache_key(params))

    def set_list(self, params: Mapping[str, Any], payload) -> bool:
        return self.set(list_cache_key(params), payload, self.list_ttl)

    def get_detail(self, listing_id):
        return self.get(detail_cache_key(listing_id))

    def set_detail(self, listing_id, payload) -> bool:
        return self.set(detail_cache_key(listing_id), payload, self.detail_ttl)

    def invalidate_listing(self, listing_id=None) -> None:
        """Drop the detail entry for ``listing_id`` and every cached list."""
        if listing_id is not None:
            self.delete(detail_cache_key(listing_id))
        removed = self.delete_pattern(f"{LIST_PREFIX}*")
        logger.debug(f"Invalidated listing cache (listing={listing_id}, lists={removed})")

    # ----- operator tooling -----

    def flush(self, pattern: str = "food:*") -> int:
        return self.delete_pattern(pattern)

    def stats(self) -> dict:
        stats = {
            "food_list_cache_count": len(self.keys(f"{LIST_PREFIX}*")),
            "food_detail_cache_count": len(self.keys(f"{DETAIL_PREFIX}*")),
        }
        if self.alias is None:
            return stats
        try:
            from django_redis import get_redis_connection

            conn = get_redis_connection(self.alias)
            info = conn.info()
            stats.update(
                {
                    "total_keys": conn.dbsize(),
                    "uptime": info.get("uptime_in_seconds"),
                    "used_memory": info.get("used_memory_human"),
                    "connected_clients": info.get("connected_clients"),
                }
            )
        except Exception as e:
            logger.warning(f"Could not read Redis server stats: {e}")
            stats["error"] = "Failed to retrieve Redis server statistics"
        return stats

    def close(self) -> None:
        try:
            self.backend.close()
        except Exception as e:
            logger.warning(f"Cache close failed: {e}")


def build_listing_cache(settings) -> ListingCache:
    from django.core.cache import caches

    alias = getattr(settings, "FOOD_CACHE_ALIAS", "default")
    return ListingCache(
        caches[alias],
        list_ttl=getattr(settings, "FOOD_LIST_CACHE_TTL", LIST_TTL),
        detail_ttl=getattr(settings, "FOOD_DETAIL_CACHE_TTL", DETAIL_TTL),
        alias=alias,
    )
