"""portal ranking schema

Revision ID: 0001_portal_schema
Revises: 
Create Date: 2026-10-18 00:00:00
"""

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_portal_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS categories (
          id BIGSERIAL PRIMARY KEY,
          name TEXT NOT NULL,
          slug TEXT UNIQUE NOT NULL
        );

        CREATE TABLE IF NOT EXISTS articles (
          id BIGSERIAL PRIMARY KEY,
          title TEXT NOT NULL,
          slug TEXT UNIQUE,
          excerpt TEXT,
          content TEXT,
          image_url TEXT,
          category_id BIGINT REFERENCES categories(id) ON DELETE SET NULL,
          published_at TIMESTAMPTZ DEFAULT now(),
          view_count INT NOT NULL DEFAULT 0
        );
        CREATE INDEX IF NOT EXISTS idx_articles_published ON articles(published_at DESC);
        CREATE INDEX IF NOT EXISTS idx_articles_view_count ON articles(view_count DESC);
        CREATE INDEX IF NOT EXISTS idx_articles_category ON articles(category_id);
        """
    )

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS user_interactions (
          id BIGSERIAL PRIMARY KEY,
          user_id TEXT NOT NULL,
          article_id BIGINT REFERENCES articles(id) ON DELETE CASCADE,
          interaction_type TEXT NOT NULL,
          metadata JSONB NOT NULL DEFAULT '{}'::jsonb,
          created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
        CREATE INDEX IF NOT EXISTS idx_user_interactions_user_created
          ON user_interactions(user_id, created_at DESC);
        CREATE INDEX IF NOT EXISTS idx_user_interactions_type_created
          ON user_interactions(interaction_type, created_at DESC);

        CREATE TABLE IF NOT EXISTS user_reading_history (
          user_id TEXT NOT NULL,
          article_id BIGINT NOT NULL REFERENCES articles(id) ON DELETE CASCADE,
          read_at TIMESTAMPTZ NOT NULL DEFAULT now(),
          read_duration INT NOT NULL DEFAULT 0,
          PRIMARY KEY(user_id, article_id)
        );

        CREATE TABLE IF NOT EXISTS trending_topics (
          id BIGSERIAL PRIMARY KEY,
          name TEXT NOT NULL,
          slug TEXT NOT NULL,
          score DOUBLE PRECISION NOT NULL DEFAULT 0,
          article_count INT NOT NULL DEFAULT 0,
          growth_rate DOUBLE PRECISION NOT NULL DEFAULT 0,
          updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
        CREATE INDEX IF NOT EXISTS idx_trending_topics_score ON trending_topics(score DESC);
        """
    )

    op.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm")
    op.execute("CREATE INDEX IF NOT EXISTS idx_articles_title_trgm ON articles USING GIN(title gin_trgm_ops)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_articles_excerpt_trgm ON articles USING GIN(excerpt gin_trgm_ops)")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS trending_topics")
    op.execute("DROP TABLE IF EXISTS user_reading_history")
    op.execute("DROP TABLE IF EXISTS user_interactions")
    op.execute("DROP TABLE IF EXISTS articles")
    op.execute("DROP TABLE IF EXISTS categories")
