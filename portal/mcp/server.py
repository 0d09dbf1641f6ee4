from __future__ import annotations

from portal.api.recommendation_service import recommendation_service
from portal.api.search_service import perform_search

try:
    from fastmcp import FastMCP
except ImportError as exc:  # pragma: no cover - runtime dependency guard
    raise RuntimeError(
        "FastMCP is required to run the MCP server. Install the project dependencies first."
    ) from exc


SERVER_TITLE = "NewsPortal"
SERVER_INSTRUCTIONS = (
    "Use search_articles to find news articles by title, excerpt or body text, "
    "and trending_topics for what readers are following right now. "
    "Set limit and offset for pagination."
)

mcp = FastMCP(name=SERVER_TITLE, instructions=SERVER_INSTRUCTIONS)


def _bounded(limit: int, offset: int = 0) -> tuple[int, int]:
    return max(1, min(limit, 100)), max(0, offset)


def search_articles(query: str, limit: int = 10, offset: int = 0) -> str:
    """Search published articles."""
    bounded_limit, bounded_offset = _bounded(limit, offset)
    results = perform_search(q=query, limit=bounded_limit, offset=bounded_offset)

    llm_results = ""
    for result in results.results:
        llm_results += f"[{result.title}](/article/{result.slug or result.id})"
        llm_results += "\n"
        llm_results += result.excerpt
        llm_results += "\n\n"

    return llm_results.strip()


def trending_topics(limit: int = 10) -> str:
    """List the current trending topics, highest score first."""
    bounded_limit, _ = _bounded(limit)
    topics = recommendation_service.get_trending_topics(bounded_limit)
    return "\n".join(
        f"{index}. {topic.name} (score={topic.score:.1f}, articles={topic.article_count})"
        for index, topic in enumerate(topics, start=1)
    )


mcp.tool(name="search_articles", description="Search news articles.")(search_articles)
mcp.tool(name="trending_topics", description="List trending news topics.")(trending_topics)


if __name__ == "__main__":
    mcp.run("http")
