"""Tools the bot can offer to the model during a reply."""

import config
from bot.backend import ContentBackend
from tools.local_search import LOCAL_SEARCH_TOOL, LocalSearchTool
from tools.registry import SEARCH_CATEGORY, ToolRegistry, to_json_schema
from tools.remote_search import REMOTE_SEARCH_TOOL, RemoteSearchTool


# Filled in by the host from the post being answered, never by the model
CONTEXT_PARAMETERS = ("exclude_post_id", "topic_id")


def build_search_registry(
    backend: ContentBackend, remote_endpoint_url: str | None = None
) -> ToolRegistry:
    """Return a registry with the local search tool, plus remote search when configured.

    Args:
        backend: Forum content backend used by local search.
        remote_endpoint_url: Remote knowledge-base URL; defaults to
            config.AI_BOT_REMOTE_ENDPOINT_URL.
    """
    registry = ToolRegistry()
    registry.register(
        LOCAL_SEARCH_TOOL["name"],
        LOCAL_SEARCH_TOOL["description"],
        LOCAL_SEARCH_TOOL["parameters"],
        LocalSearchTool(backend),
        category=SEARCH_CATEGORY,
        hidden_parameters=CONTEXT_PARAMETERS,
    )

    endpoint = config.AI_BOT_REMOTE_ENDPOINT_URL if remote_endpoint_url is None else remote_endpoint_url
    if endpoint:
        registry.register(
            REMOTE_SEARCH_TOOL["name"],
            REMOTE_SEARCH_TOOL["description"],
            REMOTE_SEARCH_TOOL["parameters"],
            RemoteSearchTool(endpoint),
            category=SEARCH_CATEGORY,
        )
    return registry


__all__ = [
    "CONTEXT_PARAMETERS",
    "SEARCH_CATEGORY",
    "ToolRegistry",
    "build_search_registry",
    "to_json_schema",
]
