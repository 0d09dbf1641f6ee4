from __future__ import annotations

import logging
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from portal.common.db import get_conn
from portal.common.schemas import ArticleRow, SearchItem, SearchResponse
from portal.ranking.scoring import search_relevance

logger = logging.getLogger(__name__)

SEARCH_SQL = """
SELECT a.id,
       a.title,
       a.slug,
       a.excerpt,
       a.image_url,
       a.category_id,
       c.name AS category_name,
       a.published_at,
       a.view_count
FROM articles a
LEFT JOIN categories c ON c.id = a.category_id
WHERE (a.title ILIKE %(pattern)s OR a.content ILIKE %(pattern)s OR a.excerpt ILIKE %(pattern)s)
  AND (%(category_id)s::bigint IS NULL OR a.category_id = %(category_id)s::bigint)
ORDER BY a.view_count DESC NULLS LAST, a.published_at DESC NULLS LAST
LIMIT %(limit)s
"""

LOG_SEARCH_SQL = """
INSERT INTO user_interactions(user_id, article_id, interaction_type, metadata, created_at)
VALUES (%s, NULL, 'search', %s, now())
"""

CANDIDATE_BUFFER = 200
MAX_CANDIDATES = 2000


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SearchService:
    def _clean_query(self, q: str) -> str:
        return (q or "").strip().lower()

    def _candidate_limit(self, limit: int, offset: int) -> int:
        return min(MAX_CANDIDATES, offset + limit + CANDIDATE_BUFFER)

    def _rank_rows(self, rows: list[dict[str, Any]], query: str) -> list[SearchItem]:
        ranked: list[SearchItem] = []
        for row in rows:
            article = ArticleRow.model_validate(row)
            ranked.append(
                SearchItem(
                    id=article.id,
                    title=article.title,
                    slug=article.slug,
                    excerpt=article.excerpt or "",
                    image_url=article.image_url or "",
                    published_at=article.published_at,
                    category_name=article.category_name,
                    view_count=article.view_count or 0,
                    score=search_relevance(article, query),
                )
            )

        ranked.sort(key=lambda item: (-item.score, item.id))
        return ranked

    def _log_search(self, user_id: str, query: str, results_count: int) -> None:
        try:
            with get_conn() as conn:
                conn.execute(LOG_SEARCH_SQL, (user_id, Jsonb({"query": query, "results_count": results_count})))
        except psycopg.Error:
            logger.exception("failed logging search user_id=%s", user_id)

    def search_articles(
        self,
        *,
        q: str,
        category_id: int | None = None,
        limit: int = 20,
        offset: int = 0,
        user_id: str | None = None,
    ) -> SearchResponse:
        query = self._clean_query(q)
        if not query:
            return SearchResponse(results=[], count=0)

        params = {
            "pattern": _like_pattern(query),
            "category_id": category_id,
            "limit": self._candidate_limit(limit, offset),
        }
        try:
            with get_conn() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(SEARCH_SQL, params)
                    rows = cur.fetchall()
        except psycopg.Error:
            logger.exception("article search failed q=%r", query)
            return SearchResponse(results=[], count=0)

        ranked = self._rank_rows(rows, query)
        if user_id:
            self._log_search(user_id, query, len(ranked))

        page = ranked[offset : offset + limit]
        return SearchResponse(results=page, count=len(ranked))


search_service = SearchService()


def perform_search(
    *,
    q: str,
    category_id: int | None = None,
    limit: int = 20,
    offset: int = 0,
    user_id: str | None = None,
) -> SearchResponse:
    return search_service.search_articles(q=q, category_id=category_id, limit=limit, offset=offset, user_id=user_id)
