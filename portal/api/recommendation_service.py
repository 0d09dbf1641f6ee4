from __future__ import annotations

import logging
import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from portal.common.config import Settings, settings as default_settings
from portal.common.db import get_conn
from portal.common.schemas import (
    ArticleRow,
    RankedArticle,
    TrendingSearch,
    TrendingTopic,
    UserAnalytics,
)
from portal.ranking.scoring import category_preferences, relevance_score, trending_score
from portal.ranking.weights import DEFAULT_WEIGHTS, RankingWeights

logger = logging.getLogger(__name__)

ARTICLE_COLUMNS = """
       a.id,
       a.title,
       a.slug,
       a.excerpt,
       a.image_url,
       a.category_id,
       c.name AS category_name,
       a.published_at,
       a.view_count
"""

USER_CATEGORY_SQL = """
SELECT a.category_id
FROM user_interactions ui
JOIN articles a ON a.id = ui.article_id
WHERE ui.user_id = %s
  AND ui.created_at >= %s
  AND a.category_id IS NOT NULL
"""

CATEGORY_ARTICLES_SQL = f"""
SELECT {ARTICLE_COLUMNS}
FROM articles a
LEFT JOIN categories c ON c.id = a.category_id
WHERE a.category_id = ANY(%s)
ORDER BY a.view_count DESC NULLS LAST, a.published_at DESC NULLS LAST
LIMIT %s
"""

POPULAR_SQL = f"""
SELECT {ARTICLE_COLUMNS}
FROM articles a
LEFT JOIN categories c ON c.id = a.category_id
WHERE (%(since)s::timestamptz IS NULL OR a.published_at >= %(since)s::timestamptz)
ORDER BY a.view_count DESC NULLS LAST, a.published_at DESC NULLS LAST
LIMIT %(limit)s
"""

TRENDING_ARTICLES_SQL = f"""
SELECT {ARTICLE_COLUMNS}
FROM articles a
LEFT JOIN categories c ON c.id = a.category_id
WHERE a.published_at >= %s
ORDER BY a.view_count DESC NULLS LAST
LIMIT %s
"""

INSERT_INTERACTION_SQL = """
INSERT INTO user_interactions(user_id, article_id, interaction_type, metadata, created_at)
VALUES (%s, %s, %s, %s, %s)
"""

UPSERT_READING_HISTORY_SQL = """
INSERT INTO user_reading_history(user_id, article_id, read_at, read_duration)
VALUES (%s, %s, %s, %s)
ON CONFLICT (user_id, article_id) DO UPDATE
SET read_at = EXCLUDED.read_at,
    read_duration = EXCLUDED.read_duration
"""

INCREMENT_VIEWS_SQL = "UPDATE articles SET view_count = COALESCE(view_count, 0) + 1 WHERE id = %s"

READING_HISTORY_SQL = """
SELECT h.read_at, h.read_duration, c.name AS category_name
FROM user_reading_history h
LEFT JOIN articles a ON a.id = h.article_id
LEFT JOIN categories c ON c.id = a.category_id
WHERE h.user_id = %s
ORDER BY h.read_at ASC
"""

TRENDING_TOPICS_SQL = """
SELECT name, slug, score, article_count, growth_rate
FROM trending_topics
ORDER BY score DESC
LIMIT %s
"""

SEARCH_QUERIES_SQL = """
SELECT metadata
FROM user_interactions
WHERE interaction_type = 'search'
  AND created_at >= %s
ORDER BY created_at DESC
LIMIT %s
"""

TIME_RANGE_DAYS = {"today": 1, "week": 7, "month": 30}
TRENDING_CANDIDATE_FACTOR = 5
MAX_TRENDING_CANDIDATES = 500
SEARCH_QUERY_SAMPLE = 1000
SEARCH_TRENDING_DAYS = 7
FAVORITE_CATEGORY_LIMIT = 3


def reading_streak(read_times: Iterable[datetime], now: datetime | None = None) -> int:
    """Consecutive reads, newest first, each within a day of the one after it."""
    cursor = now or datetime.now(timezone.utc)
    streak = 0
    for read_at in sorted(read_times, reverse=True):
        gap_days = math.floor((cursor - read_at).total_seconds() / 86400)
        if gap_days > 1:
            break
        streak += 1
        cursor = read_at
    return streak


def _duration_seconds(raw: Any) -> int:
    if isinstance(raw, bool):
        return 0
    try:
        return max(int(float(raw or 0)), 0)
    except (TypeError, ValueError, OverflowError):
        logger.warning("ignoring malformed read duration=%r", raw)
        return 0


def engagement_score(durations: list[int], recent_reads: int) -> int:
    total_reads = len(durations)
    if total_reads == 0:
        return 0
    average_duration = sum(durations) / total_reads
    reads_score = min(total_reads * 2, 40)
    time_score = min(average_duration / 60, 30)
    activity_score = min(recent_reads * 3, 30)
    return round(reads_score + time_score + activity_score)


class RecommendationService:
    def __init__(self, *, config: Settings | None = None, weights: RankingWeights = DEFAULT_WEIGHTS) -> None:
        self.config = config or default_settings
        self.weights = weights

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _fetch_articles(self, sql: str, params: Any) -> list[ArticleRow]:
        with get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(sql, params)
                return [ArticleRow.model_validate(row) for row in cur.fetchall()]

    def get_popular_articles(self, limit: int = 10, time_range: str = "all") -> list[RankedArticle]:
        days = TIME_RANGE_DAYS.get(time_range)
        since = self._now() - timedelta(days=days) if days else None
        try:
            rows = self._fetch_articles(POPULAR_SQL, {"since": since, "limit": limit})
        except psycopg.Error:
            logger.exception("failed fetching popular articles time_range=%s", time_range)
            return []

        return [
            RankedArticle.from_row(row, self.weights.popular_base_score - index)
            for index, row in enumerate(rows)
        ]

    def get_personalized_recommendations(self, user_id: str | None, limit: int = 10) -> list[RankedArticle]:
        if not user_id:
            return self.get_popular_articles(limit)

        now = self._now()
        since = now - timedelta(days=self.config.recommendation_lookback_days)
        try:
            with get_conn() as conn:
                rows = conn.execute(USER_CATEGORY_SQL, (user_id, since)).fetchall()
            preferences = category_preferences((row[0] for row in rows), weights=self.weights)
            if not preferences:
                logger.info("no category preferences user_id=%s; using popular articles", user_id)
                return self.get_popular_articles(limit)

            candidates = self._fetch_articles(CATEGORY_ARTICLES_SQL, (list(preferences), limit))
        except psycopg.Error:
            logger.exception("failed building recommendations user_id=%s", user_id)
            return self.get_popular_articles(limit)

        ranked = [
            RankedArticle.from_row(
                article,
                relevance_score(article, preferences, now=now, weights=self.weights),
            )
            for article in candidates
        ]
        ranked.sort(key=lambda item: (-item.relevance_score, item.id))
        return ranked

    def get_trending_articles(self, limit: int = 10) -> list[RankedArticle]:
        now = self._now()
        since = now - timedelta(days=self.config.trending_window_days)
        pool = min(MAX_TRENDING_CANDIDATES, max(limit, limit * TRENDING_CANDIDATE_FACTOR))
        try:
            candidates = self._fetch_articles(TRENDING_ARTICLES_SQL, (since, pool))
        except psycopg.Error:
            logger.exception("failed fetching trending articles")
            return []

        ranked = [
            RankedArticle.from_row(article, trending_score(article, now=now, weights=self.weights))
            for article in candidates
        ]
        ranked.sort(key=lambda item: (-item.relevance_score, item.id))
        return ranked[:limit]

    def track_user_interaction(
        self,
        user_id: str,
        article_id: int,
        interaction_type: str,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        payload = metadata or {}
        now = self._now()
        try:
            with get_conn() as conn:
                conn.execute(INSERT_INTERACTION_SQL, (user_id, article_id, interaction_type, Jsonb(payload), now))
                if interaction_type == "read":
                    duration = _duration_seconds(payload.get("duration"))
                    conn.execute(UPSERT_READING_HISTORY_SQL, (user_id, article_id, now, duration))
                elif interaction_type == "view":
                    conn.execute(INCREMENT_VIEWS_SQL, (article_id,))
        except psycopg.Error:
            logger.exception(
                "failed tracking interaction user_id=%s article_id=%s type=%s",
                user_id,
                article_id,
                interaction_type,
            )
            return False

        logger.info("tracked interaction user_id=%s article_id=%s type=%s", user_id, article_id, interaction_type)
        return True

    def get_user_analytics(self, user_id: str) -> UserAnalytics:
        try:
            with get_conn() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(READING_HISTORY_SQL, (user_id,))
                    history = cur.fetchall()
        except psycopg.Error:
            logger.exception("failed fetching analytics user_id=%s", user_id)
            return UserAnalytics()

        if not history:
            return UserAnalytics()

        now = self._now()
        read_times = [row["read_at"] for row in history if row["read_at"] is not None]
        durations = [int(row["read_duration"] or 0) for row in history]
        recent_reads = sum(1 for read_at in read_times if (now - read_at).total_seconds() / 86400 <= 30)
        categories = Counter(row["category_name"] for row in history if row["category_name"])

        return UserAnalytics(
            total_reads=len(history),
            reading_streak=reading_streak(read_times, now),
            favorite_categories=[name for name, _ in categories.most_common(FAVORITE_CATEGORY_LIMIT)],
            reading_time=sum(durations),
            engagement_score=engagement_score(durations, recent_reads),
        )

    def get_trending_topics(self, limit: int = 10) -> list[TrendingTopic]:
        try:
            with get_conn() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(TRENDING_TOPICS_SQL, (limit,))
                    rows = cur.fetchall()
        except psycopg.Error:
            logger.exception("failed fetching trending topics")
            return []
        return [TrendingTopic.model_validate(row) for row in rows]

    def get_trending_searches(self, limit: int = 5) -> list[TrendingSearch]:
        since = self._now() - timedelta(days=SEARCH_TRENDING_DAYS)
        try:
            with get_conn() as conn:
                rows = conn.execute(SEARCH_QUERIES_SQL, (since, SEARCH_QUERY_SAMPLE)).fetchall()
        except psycopg.Error:
            logger.exception("failed fetching trending searches")
            return []

        counts: Counter[str] = Counter()
        for (metadata,) in rows:
            if not isinstance(metadata, dict):
                continue
            query = str(metadata.get("query") or "").strip().lower()
            if query:
                counts[query] += 1

        return [TrendingSearch(query=query, count=count) for query, count in counts.most_common(limit)]


recommendation_service = RecommendationService()
