import asyncio
import logging
from datetime import datetime, timedelta, timezone

from psycopg.rows import dict_row

from portal.common.config import settings
from portal.common.db import get_conn_async
from portal.common.schemas import ArticleRow
from portal.ranking.topics import MAX_TRENDING_TOPICS, analyze_topics, select_top_topics

logger = logging.getLogger(__name__)

RECENT_ARTICLES_SQL = """
SELECT a.id, a.title, a.view_count, a.published_at, a.category_id, c.name AS category_name
FROM articles a
LEFT JOIN categories c ON c.id = a.category_id
WHERE a.published_at >= %s
"""

INSERT_TOPIC_SQL = """
INSERT INTO trending_topics(name, slug, score, article_count, growth_rate, updated_at)
VALUES (%s, %s, %s, %s, %s, %s)
"""


async def run() -> int | None:
    """Rebuild ``trending_topics`` from recent articles.

    The delete and insert share one transaction, so readers keep seeing the
    previous generation until commit. A transaction-scoped advisory lock keeps
    overlapping runs (other processes, or a slow previous cycle) from
    interleaving; a run that cannot take the lock does nothing and returns None.
    """
    now = datetime.now(timezone.utc)
    since = now - timedelta(hours=settings.trending_topics_lookback_hours)

    async with get_conn_async() as conn:
        async with conn.cursor(row_factory=dict_row) as cur:
            await cur.execute("SELECT pg_try_advisory_xact_lock(%s) AS acquired", (settings.trending_topics_lock_key,))
            lock = await cur.fetchone()
            if not lock or not lock["acquired"]:
                logger.info("trending topics refresh already running; skipping")
                return None

            await cur.execute(RECENT_ARTICLES_SQL, (since,))
            articles = [ArticleRow.model_validate(row) for row in await cur.fetchall()]

            limit = min(settings.trending_topics_limit, MAX_TRENDING_TOPICS)
            topics = select_top_topics(analyze_topics(articles, now=now), limit=limit)

            await cur.execute("DELETE FROM trending_topics")
            if topics:
                await cur.executemany(
                    INSERT_TOPIC_SQL,
                    [
                        (topic.name, topic.slug, topic.score, topic.article_count, topic.growth_rate, now)
                        for topic in topics
                    ],
                )

    logger.info("updated trending topics count=%s from articles=%s", len(topics), len(articles))
    return len(topics)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(run())
