"""
Tastebook - Achievement progress.

Unlocking happens in the database (check_and_unlock_achievements RPC); this
module only works out what the user is closest to next.
"""

from collections.abc import Iterable
from typing import Literal, TypedDict

from tastebook.models.entities import Achievement

Criterion = Literal["recipes_created", "favorites_count", "plans_created", "streak_days"]

# Progress category -> criteria field it is measured against
PROGRESS_CRITERIA: dict[str, Criterion] = {
    "recipes": "recipes_created",
    "favorites": "favorites_count",
    "plans": "plans_created",
    "streak": "streak_days",
}


class ProgressEntry(TypedDict):
    current: int
    next: Achievement | None


def find_next_achievement(
    achievements: Iterable[Achievement],
    unlocked_ids: set[str],
    criterion: Criterion,
    current: int,
) -> Achievement | None:
    """Locked achievement with the lowest threshold above `current` for `criterion`."""
    candidates = [
        a for a in achievements
        if a.id not in unlocked_ids
        and (getattr(a.criteria, criterion) or 0) > current
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda a: getattr(a.criteria, criterion))


def build_progress(
    counts: dict[str, int],
    achievements: list[Achievement],
    unlocked_ids: set[str],
) -> dict[str, ProgressEntry]:
    """
    Current value and next target per category.

    `counts` is keyed by category ("recipes", "favorites", "plans", "streak");
    missing categories count as 0.
    """
    progress: dict[str, ProgressEntry] = {}
    for category, criterion in PROGRESS_CRITERIA.items():
        current = counts.get(category) or 0
        progress[category] = ProgressEntry(
            current=current,
            next=find_next_achievement(achievements, unlocked_ids, criterion, current),
        )
    return progress
