"""Decides whether a new forum post should get a bot reply."""

import logging
import re

from .backend import ForumPost

logger = logging.getLogger(__name__)


def parse_keywords(keywords: str) -> list[str]:
    """Split a comma/whitespace separated keyword string."""
    return [k for k in re.split(r"[\s,]+", keywords or "") if k]


class TriggerPolicy:
    """Mention / keyword trigger with an optional forum allow-list.

    Args:
        bot_username: Login of the bot; '@<username>' triggers a reply.
        bot_user_id: Author id of the bot; its own posts never trigger.
        keywords: Words that trigger a reply (whole-word, case-insensitive).
        forum_restriction: "all" or "selected".
        allowed_forums: Forum ids allowed when restriction is "selected".
    """

    def __init__(
        self,
        bot_username: str | None = None,
        bot_user_id: int | None = None,
        keywords: list[str] | None = None,
        forum_restriction: str = "all",
        allowed_forums: list | None = None,
    ):
        self.bot_username = bot_username
        self.bot_user_id = bot_user_id
        self.keywords = keywords or []
        self.forum_restriction = forum_restriction
        self.allowed_forums = {str(f) for f in allowed_forums or []}

        self._keyword_pattern = None
        if self.keywords:
            alternatives = "|".join(re.escape(k) for k in self.keywords)
            self._keyword_pattern = re.compile(rf"\b({alternatives})\b", re.IGNORECASE)

    def is_forum_allowed(self, forum_id) -> bool:
        if self.forum_restriction != "selected" or not self.allowed_forums:
            return True
        return str(forum_id) in self.allowed_forums

    def has_mention(self, content: str) -> bool:
        if not self.bot_username:
            return False
        return re.search("@" + re.escape(self.bot_username), content or "", re.IGNORECASE) is not None

    def has_keyword(self, content: str) -> bool:
        return self._keyword_pattern is not None and bool(self._keyword_pattern.search(content or ""))

    def should_respond(self, post: ForumPost, forum_id) -> bool:
        if self.bot_user_id is not None and post.author_id == self.bot_user_id:
            logger.debug("Skipping post %s: written by the bot", post.post_id)
            return False
        if not self.is_forum_allowed(forum_id):
            logger.debug("Skipping post %s: forum %s not allowed", post.post_id, forum_id)
            return False
        if self.has_mention(post.content):
            logger.debug("Post %s mentions the bot", post.post_id)
            return True
        if self.has_keyword(post.content):
            logger.debug("Post %s matches a trigger keyword", post.post_id)
            return True
        return False
