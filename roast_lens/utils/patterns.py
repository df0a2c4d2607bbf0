from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from roast_lens.models import PostSample


def average_engagement(posts: Iterable[PostSample]) -> int:
    """Mean of likes + replies + reposts + quotes across posts, 0 when there are none."""
    totals = [p.engagement for p in posts]
    if not totals:
        return 0
    return round(sum(totals) / len(totals))


def hours_since(created_at: datetime, now: datetime) -> int:
    """Whole hours between created_at and now, clamped at 0 for clock skew."""
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return max(0, round((now - created_at).total_seconds() / 3600))
