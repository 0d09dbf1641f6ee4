from typing import Literal

from fastapi import FastAPI, Query

from portal.api.recommendation_service import recommendation_service
from portal.api.search_service import perform_search
from portal.common.schemas import (
    InteractionRequest,
    InteractionResponse,
    RankedArticle,
    SearchResponse,
    TrendingSearch,
    TrendingTopic,
    UserAnalytics,
)

app = FastAPI(title="News Portal API")


@app.get("/search", response_model=SearchResponse)
def search(
    q: str = Query(..., min_length=1),
    category_id: int | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: str | None = Query(None),
) -> SearchResponse:
    return perform_search(q=q, category_id=category_id, limit=limit, offset=offset, user_id=user_id)


@app.get("/recommendations", response_model=list[RankedArticle])
def recommendations(
    user_id: str | None = Query(None),
    limit: int = Query(10, ge=1, le=100),
) -> list[RankedArticle]:
    return recommendation_service.get_personalized_recommendations(user_id, limit)


@app.get("/articles/popular", response_model=list[RankedArticle])
def popular_articles(
    limit: int = Query(10, ge=1, le=100),
    time_range: Literal["all", "today", "week", "month"] = Query("all"),
) -> list[RankedArticle]:
    return recommendation_service.get_popular_articles(limit, time_range)


@app.get("/articles/trending", response_model=list[RankedArticle])
def trending_articles(limit: int = Query(10, ge=1, le=100)) -> list[RankedArticle]:
    return recommendation_service.get_trending_articles(limit)


@app.get("/trending-topics", response_model=list[TrendingTopic])
def trending_topics(limit: int = Query(10, ge=1, le=100)) -> list[TrendingTopic]:
    return recommendation_service.get_trending_topics(limit)


@app.get("/trending-searches", response_model=list[TrendingSearch])
def trending_searches(limit: int = Query(5, ge=1, le=50)) -> list[TrendingSearch]:
    return recommendation_service.get_trending_searches(limit)


@app.post("/interactions", response_model=InteractionResponse)
def track_interaction(body: InteractionRequest) -> InteractionResponse:
    success = recommendation_service.track_user_interaction(
        body.user_id,
        body.article_id,
        body.interaction_type,
        body.metadata,
    )
    return InteractionResponse(success=success)


@app.get("/users/{user_id}/analytics", response_model=UserAnalytics)
def user_analytics(user_id: str) -> UserAnalytics:
    return recommendation_service.get_user_analytics(user_id)
