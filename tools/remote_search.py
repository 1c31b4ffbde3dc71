"""Remote search tool: queries an external knowledge-base endpoint over HTTP.

The endpoint is called as GET <url>?keyword=<query>&limit=<n> and must answer
with JSON of the form {"results": [{title, author, date, url, content}, ...]}.
"""

import html as html_module
from urllib.parse import urlparse

import requests

from config import REMOTE_SEARCH_TIMEOUT
from .local_search import DEFAULT_LIMIT, MAX_LIMIT, clamp_limit

_REQUIRED_FIELDS = ("title", "author", "url", "content", "date")

REMOTE_SEARCH_TOOL = {
    "name": "remote_search",
    "description": (
        "Search a remote knowledge base for relevant information. Use this to "
        "find content from external sources that might help answer the user's "
        "question."
    ),
    "parameters": {
        "query": {
            "type": "string",
            "description": "Search query or keywords to find relevant content on the remote site",
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
    },
}


def remote_hostname(endpoint_url: str) -> str:
    host = urlparse(endpoint_url).hostname if endpoint_url else None
    return host or "Remote Source"


class RemoteSearchTool:
    """Calls the configured remote endpoint.

    Args:
        endpoint_url: Search endpoint; the tool reports an error if empty.
        timeout: Request timeout in seconds.
    """

    def __init__(self, endpoint_url: str, timeout: float = REMOTE_SEARCH_TIMEOUT):
        self.endpoint_url = endpoint_url
        self.timeout = timeout

    def __call__(self, parameters: dict) -> dict:
        query = str(parameters.get("query") or "").strip()
        if not query:
            return {"error": "Search query is required", "results": []}
        if not self.endpoint_url:
            return {"error": "Remote endpoint URL not configured", "results": []}

        limit = clamp_limit(parameters.get("limit", DEFAULT_LIMIT))
        try:
            resp = requests.get(
                self.endpoint_url,
                params={"keyword": query, "limit": limit},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            return {"error": f"Remote request failed: {str(exc)}", "results": []}

        if resp.status_code != 200:
            return {"error": f"Remote server returned error code: {resp.status_code}", "results": []}

        try:
            data = resp.json()
        except ValueError:
            data = None
        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            return {"error": "Invalid response format from remote server", "results": []}

        hostname = remote_hostname(self.endpoint_url)
        results = [
            {
                "title": html_module.escape(str(item["title"])),
                "author": html_module.escape(str(item["author"])),
                "date": html_module.escape(str(item["date"])),
                "url": str(item["url"]),
                "content": html_module.escape(str(item["content"])),
                "source": hostname,
            }
            for item in data["results"]
            if isinstance(item, dict) and all(k in item for k in _REQUIRED_FIELDS)
        ]

        return {
            "query": query,
            "source": hostname,
            "results_count": len(results),
            "results": results,
        }
