"""
Tastebook - Query cache.

Per-process cache of query results, keyed by tuples such as
("recipes", "detail", recipe_id). Entries go stale after a per-query time,
mutations drop whole key families by prefix, and optimistic edits roll
back when the write fails.
"""

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

logger = logging.getLogger(__name__)

QueryKey = tuple

MINUTE = 60.0

# Stale times (seconds)
RECIPE_LIST_STALE = 5 * MINUTE
RECIPE_DETAIL_STALE = 10 * MINUTE
MEAL_PLAN_STALE = 5 * MINUTE
SHOPPING_LIST_STALE = 5 * MINUTE
STREAK_STALE = 5 * MINUTE
DASHBOARD_STALE = 2 * MINUTE
POPULAR_RECIPES_STALE = 10 * MINUTE
COMMON_INGREDIENTS_STALE = 60 * MINUTE
DEFAULT_STALE = 5 * MINUTE


# =============================================================================
# Query keys
# =============================================================================


RECIPE_LISTS: QueryKey = ("recipes", "list")


def recipe_list_key(user_id: str | None, filters: tuple = ()) -> QueryKey:
    return ("recipes", "list", user_id, filters)


def recipe_detail_key(recipe_id: str, viewer_id: str | None = None) -> QueryKey:
    """Detail key per viewer; without `viewer_id` it is the prefix for every viewer."""
    if viewer_id is None:
        return ("recipes", "detail", recipe_id)
    return ("recipes", "detail", recipe_id, viewer_id)


def meal_plan_key(user_id: str, week_start: str | None = None) -> QueryKey:
    """Week key; without `week_start` it is the prefix for every week of the user."""
    if week_start is None:
        return ("meal-plans", "detail", user_id)
    return ("meal-plans", "detail", user_id, week_start)


def meal_plan_list_key(user_id: str) -> QueryKey:
    return ("meal-plans", "list", user_id)


def shopping_list_key(user_id: str) -> QueryKey:
    return ("shopping-lists", user_id)


def favorites_key(user_id: str) -> QueryKey:
    return ("favorites", user_id)


def is_favorite_key(user_id: str, recipe_id: str) -> QueryKey:
    return ("is-favorite", user_id, recipe_id)


def reviews_key(recipe_id: str) -> QueryKey:
    return ("reviews", recipe_id)


def user_stats_key(user_id: str) -> QueryKey:
    return ("user-stats", user_id)


def streak_key(user_id: str) -> QueryKey:
    return ("streak", user_id)


def achievements_key(user_id: str) -> QueryKey:
    return ("achievements", user_id)


def recent_achievements_key(user_id: str) -> QueryKey:
    return ("recent-achievements", user_id)


def dashboard_stats_key(user_id: str) -> QueryKey:
    return ("dashboard-stats", user_id)


def upcoming_meals_key(user_id: str) -> QueryKey:
    return ("upcoming-meals", user_id)


def popular_recipes_key(limit: int) -> QueryKey:
    return ("popular-recipes", limit)


def common_ingredients_key() -> QueryKey:
    return ("common-ingredients",)


def user_profile_key(user_id: str) -> QueryKey:
    return ("user-profile", user_id)


# =============================================================================
# Cache
# =============================================================================


class QueryCache:
    """
    Time-based cache of query results.

    `clock` returns seconds and is injectable for tests. No retries: a failing
    fetch propagates and nothing is stored.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[QueryKey, dict[str, Any]] = {}

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._entries

    def get(self, key: QueryKey, default: Any = None) -> Any:
        """Cached value regardless of staleness."""
        entry = self._entries.get(key)
        return entry["data"] if entry else default

    def is_stale(self, key: QueryKey) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return True
        return self._clock() - entry["updated_at"] >= entry["stale_time"]

    def set(self, key: QueryKey, data: Any, stale_time: float = DEFAULT_STALE) -> None:
        self._entries[key] = {
            "data": data,
            "updated_at": self._clock(),
            "stale_time": stale_time,
        }

    def get_or_fetch(
        self,
        key: QueryKey,
        fetch: Callable[[], Any],
        stale_time: float = DEFAULT_STALE,
    ) -> Any:
        """Return the cached value while fresh, otherwise call `fetch` and store it."""
        if not self.is_stale(key):
            return self._entries[key]["data"]

        data = fetch()
        self.set(key, data, stale_time)
        return data

    def invalidate(self, *prefixes: QueryKey) -> int:
        """Drop every entry whose key starts with one of `prefixes`. Returns the count."""
        dropped = [
            key for key in self._entries
            if any(key[: len(p)] == p for p in prefixes)
        ]
        for key in dropped:
            del self._entries[key]
        if dropped:
            logger.debug(f"Invalidated {len(dropped)} cached queries")
        return len(dropped)

    def clear(self) -> None:
        self._entries.clear()

    @contextmanager
    def optimistic(self, key: QueryKey, updater: Callable[[Any], Any]) -> Iterator[Any]:
        """
        Apply `updater` to the cached value for the duration of a write.

        Yields the optimistic value. If the body raises, the previous entry
        (or its absence) is restored and the error propagates.
        """
        previous = self._entries.get(key)
        stale_time = previous["stale_time"] if previous else DEFAULT_STALE
        optimistic_value = updater(previous["data"] if previous else None)
        self.set(key, optimistic_value, stale_time)

        try:
            yield optimistic_value
        except Exception:
            if previous is None:
                self._entries.pop(key, None)
            else:
                self._entries[key] = previous
            logger.info(f"Rolled back optimistic update for {key[0]}")
            raise


query_cache = QueryCache()


def get_query_cache() -> QueryCache:
    """FastAPI dependency for the process-wide cache."""
    return query_cache
