from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, Mapping

from portal.common.schemas import ArticleRow
from portal.ranking.weights import DEFAULT_WEIGHTS, RankingWeights

SECONDS_PER_HOUR = 3600.0
HOURS_PER_DAY = 24.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _age_hours(published_at: datetime | None, now: datetime | None) -> float | None:
    """Hours since publication, clamped at zero; ``None`` when unknown."""
    if published_at is None:
        return None
    reference = now or _utcnow()
    published = published_at if published_at.tzinfo is not None else published_at.replace(tzinfo=timezone.utc)
    return max((reference - published).total_seconds() / SECONDS_PER_HOUR, 0.0)


def _views(article: ArticleRow) -> float:
    return float(article.view_count or 0)


def category_preferences(
    category_ids: Iterable[int | None],
    *,
    weights: RankingWeights = DEFAULT_WEIGHTS,
) -> dict[int, int]:
    counts = Counter(category_id for category_id in category_ids if category_id is not None)
    return dict(counts.most_common(weights.preferred_category_limit))


def relevance_score(
    article: ArticleRow,
    category_counts: Mapping[int, int],
    *,
    now: datetime | None = None,
    weights: RankingWeights = DEFAULT_WEIGHTS,
) -> float:
    score = 0.0

    if article.category_id is not None:
        affinity = category_counts.get(article.category_id, 0)
        score += min(affinity * weights.affinity_per_interaction, weights.affinity_cap)

    score += min(_views(article) / weights.popularity_divisor, weights.popularity_cap)

    age_hours = _age_hours(article.published_at, now)
    if age_hours is not None:
        score += max(weights.recency_days - age_hours / HOURS_PER_DAY, 0.0)

    return score


def growth_rate(
    article: ArticleRow,
    *,
    now: datetime | None = None,
    weights: RankingWeights = DEFAULT_WEIGHTS,
) -> float:
    """Views per hour since publication."""
    age_hours = _age_hours(article.published_at, now)
    if age_hours is None:
        return 0.0
    return _views(article) / max(age_hours, weights.min_age_hours)


def trending_score(
    article: ArticleRow,
    *,
    now: datetime | None = None,
    weights: RankingWeights = DEFAULT_WEIGHTS,
) -> float:
    age_hours = _age_hours(article.published_at, now)
    if age_hours is None:
        return 0.0

    velocity = _views(article) / max(age_hours, weights.min_age_hours)
    recency = max(weights.recency_window_hours - age_hours, 0.0)
    return velocity * weights.velocity_multiplier + recency


def search_relevance(
    article: ArticleRow,
    query: str,
    *,
    weights: RankingWeights = DEFAULT_WEIGHTS,
) -> float:
    score = 0.0
    needle = (query or "").strip().lower()
    title = (article.title or "").lower()
    excerpt = (article.excerpt or "").lower()

    if needle and needle in title:
        score += weights.title_match
        if title.startswith(needle):
            score += weights.title_prefix_bonus

    if needle and needle in excerpt:
        score += weights.excerpt_match

    score += min(_views(article) / weights.search_view_divisor, weights.search_view_cap)
    return score
