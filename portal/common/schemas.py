from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

InteractionType = Literal["view", "like", "share", "save", "read", "comment", "search"]


class ArticleRow(BaseModel):
    id: int
    title: str = ""
    slug: str | None = None
    excerpt: str | None = None
    content: str | None = None
    image_url: str | None = None
    category_id: int | None = None
    category_name: str | None = None
    published_at: datetime | None = None
    view_count: int | None = None


class RankedArticle(BaseModel):
    id: int
    title: str
    slug: str | None = None
    excerpt: str = ""
    image_url: str = ""
    published_at: datetime | None = None
    category_name: str | None = None
    relevance_score: float

    @classmethod
    def from_row(cls, row: ArticleRow, score: float) -> RankedArticle:
        return cls(
            id=row.id,
            title=row.title,
            slug=row.slug,
            excerpt=row.excerpt or "",
            image_url=row.image_url or "",
            published_at=row.published_at,
            category_name=row.category_name,
            relevance_score=score,
        )


class TrendingTopic(BaseModel):
    name: str
    slug: str
    score: float
    article_count: int
    growth_rate: float


class TrendingSearch(BaseModel):
    query: str
    count: int


class UserAnalytics(BaseModel):
    total_reads: int = 0
    reading_streak: int = 0
    favorite_categories: list[str] = Field(default_factory=list)
    reading_time: int = 0
    engagement_score: int = 0


class InteractionRequest(BaseModel):
    user_id: str = Field(min_length=1)
    article_id: int
    interaction_type: InteractionType
    metadata: dict[str, Any] = Field(default_factory=dict)


class InteractionResponse(BaseModel):
    success: bool


class SearchItem(BaseModel):
    id: int
    title: str
    slug: str | None = None
    excerpt: str = ""
    image_url: str = ""
    published_at: datetime | None = None
    category_name: str | None = None
    view_count: int = 0
    score: float


class SearchResponse(BaseModel):
    results: list[SearchItem]
    count: int
