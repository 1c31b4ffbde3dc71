"""Local search tool: keyword search over this forum's own content."""

from bot.backend import ContentBackend
from utils.text import strip_html

DEFAULT_LIMIT = 3
MAX_LIMIT = 10

LOCAL_SEARCH_TOOL = {
    "name": "local_search",
    "description": (
        "Search this forum's content for relevant information. Use this to find "
        "related posts, topics, replies and pages that might help answer the "
        "user's question."
    ),
    "parameters": {
        "query": {
            "type": "string",
            "description": "Search query or keywords to find relevant content",
            "required": True,
        },
        "limit": {
            "type": "integer",
            "description": "Maximum number of results to return (default: 3, max: 10)",
            "required": False,
            "default": DEFAULT_LIMIT,
            "minimum": 1,
            "maximum": MAX_LIMIT,
        },
        "exclude_post_id": {
            "type": "integer",
            "description": "Post ID to exclude from search results",
            "required": False,
        },
        "topic_id": {
            "type": "integer",
            "description": "Current topic ID to exclude replies from this topic",
            "required": False,
        },
    },
}


def clamp_limit(value, default: int = DEFAULT_LIMIT) -> int:
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return default
    return max(1, min(limit, MAX_LIMIT))


def _int_or_none(value) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class LocalSearchTool:
    """Wraps ContentBackend.search_posts in the tool executor interface.

    Args:
        backend: Forum content backend to search.
    """

    def __init__(self, backend: ContentBackend):
        self.backend = backend

    def __call__(self, parameters: dict) -> dict:
        query = str(parameters.get("query") or "").strip()
        if not query:
            return {"error": "Search query is required", "results": []}

        limit = clamp_limit(parameters.get("limit", DEFAULT_LIMIT))
        posts = self.backend.search_posts(
            query,
            limit,
            exclude_post_id=_int_or_none(parameters.get("exclude_post_id")),
            topic_id=_int_or_none(parameters.get("topic_id")),
        )

        results = []
        for post in posts[:limit]:
            result = {
                "id": post.get("id"),
                "title": post.get("title", ""),
                "type": post.get("type", ""),
                "date": post.get("date", ""),
                "url": post.get("url", ""),
                "content": strip_html(post.get("content", "")),
            }
            if post.get("forum"):
                result["forum"] = post["forum"]
            results.append(result)

        return {"query": query, "results_count": len(results), "results": results}
