from .scoring import (
    category_preferences,
    growth_rate,
    relevance_score,
    search_relevance,
    trending_score,
)
from .topics import MAX_TRENDING_TOPICS, TopicStats, analyze_topics, extract_keywords, select_top_topics
from .weights import DEFAULT_WEIGHTS, RankingWeights

__all__ = [
    "DEFAULT_WEIGHTS",
    "MAX_TRENDING_TOPICS",
    "RankingWeights",
    "TopicStats",
    "analyze_topics",
    "category_preferences",
    "extract_keywords",
    "growth_rate",
    "relevance_score",
    "search_relevance",
    "select_top_topics",
    "trending_score",
]
