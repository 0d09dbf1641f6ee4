from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from portal.common.schemas import ArticleRow, TrendingTopic
from portal.common.slug import topic_slug
from portal.ranking.scoring import growth_rate
from portal.ranking.weights import DEFAULT_WEIGHTS, RankingWeights

MAX_TRENDING_TOPICS = 20


@dataclass
class TopicStats:
    score: float = 0.0
    count: int = 0
    growth: float = 0.0


def extract_keywords(title: str, *, weights: RankingWeights = DEFAULT_WEIGHTS) -> list[str]:
    words = [word for word in (title or "").split() if len(word) >= weights.topic_min_token_length]
    return words[: weights.topic_keyword_count]


def analyze_topics(
    articles: Iterable[ArticleRow],
    *,
    now: datetime | None = None,
    weights: RankingWeights = DEFAULT_WEIGHTS,
) -> dict[str, TopicStats]:
    topics: dict[str, TopicStats] = {}

    for article in articles:
        view_score = math.log10((article.view_count or 0) + 1) * weights.topic_view_multiplier

        for keyword in extract_keywords(article.title, weights=weights):
            stats = topics.setdefault(keyword, TopicStats())
            stats.score += view_score
            stats.count += 1
            stats.growth += growth_rate(article, now=now, weights=weights)

        if article.category_name:
            stats = topics.setdefault(article.category_name, TopicStats())
            stats.score += view_score * weights.category_topic_weight
            stats.count += 1

    return topics


def select_top_topics(topics: dict[str, TopicStats], limit: int = MAX_TRENDING_TOPICS) -> list[TrendingTopic]:
    ranked = sorted(topics.items(), key=lambda item: (-item[1].score, item[0]))
    return [
        TrendingTopic(
            name=name,
            slug=topic_slug(name),
            score=stats.score,
            article_count=stats.count,
            growth_rate=stats.growth,
        )
        for name, stats in ranked[: max(0, limit)]
    ]
