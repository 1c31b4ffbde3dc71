"""Forum content backend interface: reads thread content, writes replies."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass
class ForumPost:
    post_id: int
    topic_id: int
    author_id: int | None
    author_slug: str | None
    content: str
    timestamp: datetime | None = None
    is_topic: bool = False


class ContentBackend(ABC):
    """Storage-agnostic access to forum posts, topics and authors."""

    @abstractmethod
    def get_post(self, post_id: int) -> ForumPost | None:
        """Return a topic or reply by id."""

    @abstractmethod
    def get_topic_starter(self, topic_id: int) -> ForumPost | None:
        """Return the opening post of a topic."""

    @abstractmethod
    def get_thread_messages(
        self, topic_id: int, limit: int, excluded_ids: list[int]
    ) -> list[ForumPost]:
        """Return up to `limit` replies in a topic, newest first."""

    @abstractmethod
    def get_topic_title(self, topic_id: int) -> str:
        ...

    @abstractmethod
    def get_forum_title(self, forum_id: int) -> str:
        ...

    @abstractmethod
    def search_posts(
        self,
        query: str,
        limit: int,
        exclude_post_id: int | None = None,
        topic_id: int | None = None,
    ) -> list[dict]:
        """Keyword search across forum content.

        Returns dicts with 'id', 'title', 'type', 'date', 'url', 'content' and
        optionally 'forum'.
        """

    @abstractmethod
    def post_reply(self, topic_id: int, content: str) -> int:
        """Publish a reply as the bot user and return its post id."""

    def get_forum_structure(self) -> dict | None:
        """Optional description of the site's forums, shown to the model."""
        return None
