"""Shared fixtures: an in-memory forum backend and a scripted provider."""

from unittest.mock import patch

import pytest

from bot.backend import ContentBackend, ForumPost
from llm import AIHttpClient
from llm.base import BaseProvider

BOT_USER_ID = 99


# ── Test doubles ──────────────────────────────────────────────────────────────


class FakeBackend(ContentBackend):
    """Holds posts in memory and records replies and searches."""

    def __init__(self, posts=None, starters=None, search_results=None, forum_structure=None):
        self.posts = {p.post_id: p for p in posts or []}
        self.starters = starters or {}
        self.search_results = search_results or []
        self.forum_structure = forum_structure
        self.searches = []
        self.replies = []

    def get_post(self, post_id):
        return self.posts.get(post_id)

    def get_topic_starter(self, topic_id):
        return self.starters.get(topic_id)

    def get_thread_messages(self, topic_id, limit, excluded_ids):
        replies = [
            p for p in self.posts.values()
            if p.topic_id == topic_id and not p.is_topic and p.post_id not in excluded_ids
        ]
        replies.sort(key=lambda p: p.post_id, reverse=True)
        return replies[:limit]

    def get_topic_title(self, topic_id):
        return f"Topic {topic_id}"

    def get_forum_title(self, forum_id):
        return f"Forum {forum_id}"

    def search_posts(self, query, limit, exclude_post_id=None, topic_id=None):
        self.searches.append(
            {"query": query, "limit": limit, "exclude_post_id": exclude_post_id, "topic_id": topic_id}
        )
        return self.search_results[:limit]

    def post_reply(self, topic_id, content):
        self.replies.append((topic_id, content))
        return 1000 + len(self.replies)

    def get_forum_structure(self):
        return self.forum_structure


class FakeProvider(BaseProvider):
    """Speaks the OpenAI wire format and replays scripted raw responses."""

    name = "openai"
    wire_format = "openai"

    def __init__(self, settings, responses=None, chunks=None, models=None):
        super().__init__(settings)
        self.responses = list(responses or [])
        self.chunks = list(chunks or [])
        self.models = models or []
        self.requests = []

    def send_raw_request(self, wire_request):
        self.requests.append(wire_request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def send_raw_streaming_request(self, wire_request, on_chunk):
        self.requests.append(wire_request)
        for chunk in self.chunks:
            if isinstance(chunk, Exception):
                raise chunk
            on_chunk(chunk)

    def get_raw_models(self):
        if isinstance(self.models, Exception):
            raise self.models
        return self.models


def openai_text(content, model="gpt-4o-mini"):
    return {
        "id": "chatcmpl-1",
        "model": model,
        "choices": [{"message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
    }


def openai_tool_call(name, arguments, call_id="call_abc"):
    return {
        "id": "chatcmpl-2",
        "model": "gpt-4o-mini",
        "choices": [
            {
                "message": {
                    "role": "assistant",
                    "content": None,
                    "tool_calls": [
                        {
                            "id": call_id,
                            "type": "function",
                            "function": {"name": name, "arguments": arguments},
                        }
                    ],
                },
                "finish_reason": "tool_calls",
            }
        ],
    }


def make_post(post_id, topic_id=1, author_id=5, slug="alice", content="hello", is_topic=False):
    return ForumPost(
        post_id=post_id,
        topic_id=topic_id,
        author_id=author_id,
        author_slug=slug,
        content=content,
        is_topic=is_topic,
    )


# ── Fixtures ──────────────────────────────────────────────────────────────────


def _settings(name):
    return {"api_key": "sk-test", "model": "gpt-4o-mini", "base_url": "https://api.example.test/v1"}


@pytest.fixture
def provider():
    return FakeProvider(_settings("openai"))


@pytest.fixture
def client(provider):
    """AIHttpClient whose "openai" adapter is the scripted FakeProvider."""
    with patch("llm.client.create_provider", return_value=provider):
        yield AIHttpClient(default_provider="openai", settings_loader=_settings)


@pytest.fixture
def backend():
    return FakeBackend()
