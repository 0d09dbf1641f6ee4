from dataclasses import dataclass


@dataclass(frozen=True)
class RankingWeights:
    """Every constant the ranking heuristics use, in one place.

    Relevance (personalized recommendations):
        min(affinity * affinity_per_interaction, affinity_cap)
        + min(views / popularity_divisor, popularity_cap)
        + max(recency_days - age_days, 0)

    Trending (article velocity):
        views / max(age_hours, min_age_hours) * velocity_multiplier
        + max(recency_window_hours - age_hours, 0)

    Search:
        title_match (+ title_prefix_bonus) + excerpt_match
        + min(views / search_view_divisor, search_view_cap)
    """

    affinity_per_interaction: float = 10.0
    affinity_cap: float = 50.0
    popularity_divisor: float = 100.0
    popularity_cap: float = 30.0
    recency_days: float = 20.0

    velocity_multiplier: float = 10.0
    recency_window_hours: float = 168.0
    min_age_hours: float = 1.0

    title_match: float = 100.0
    title_prefix_bonus: float = 50.0
    excerpt_match: float = 30.0
    search_view_divisor: float = 10.0
    search_view_cap: float = 20.0

    topic_keyword_count: int = 3
    topic_min_token_length: int = 3
    topic_view_multiplier: float = 10.0
    category_topic_weight: float = 0.5

    preferred_category_limit: int = 5
    popular_base_score: float = 100.0


DEFAULT_WEIGHTS = RankingWeights()
