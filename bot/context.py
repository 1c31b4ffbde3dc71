"""Builds the conversational context the model sees for a forum post."""

from llm import Message
from utils.text import strip_html

from .backend import ContentBackend, ForumPost


def _mention(post: ForumPost | None) -> str:
    if post is None or not post.author_slug:
        return "@anonymous"
    return f"@{post.author_slug}"


class ConversationContextBuilder:
    """Turns a topic's posts into canonical chat messages.

    Args:
        backend: Forum content backend.
        bot_user_id: Author id of the bot; its posts become assistant turns.
        reply_history_limit: Maximum number of earlier replies to include.
    """

    def __init__(
        self,
        backend: ContentBackend,
        bot_user_id: int | None = None,
        reply_history_limit: int = 10,
    ):
        self.backend = backend
        self.bot_user_id = bot_user_id
        self.reply_history_limit = reply_history_limit

    def _is_bot(self, post: ForumPost) -> bool:
        return self.bot_user_id is not None and post.author_id == self.bot_user_id

    def current_interaction(self, post: ForumPost, topic_id: int, forum_id: int) -> str:
        """Text block describing the post that triggered the bot."""
        return (
            "--- CURRENT INTERACTION ---\n"
            f"Forum: {self.backend.get_forum_title(forum_id)}\n"
            f"Topic: {self.backend.get_topic_title(topic_id)}\n"
            f"Author of Current Post: {_mention(post)}\n"
            f"Current Post Content:\n{strip_html(post.content)}\n"
            "--- END CURRENT INTERACTION ---\n\n"
        )

    def conversation_messages(self, post: ForumPost, topic_id: int) -> list[Message]:
        """Topic starter, earlier replies oldest-first, then the triggering post."""
        messages = []

        starter = self.backend.get_topic_starter(topic_id)
        if starter is not None and starter.post_id != post.post_id and not self._is_bot(starter):
            messages.append(
                Message(role="user", content=f"{_mention(starter)}: {strip_html(starter.content)}")
            )

        replies = self.backend.get_thread_messages(
            topic_id, self.reply_history_limit, [post.post_id]
        )
        for reply in reversed(replies):
            content = strip_html(reply.content)
            if self._is_bot(reply):
                messages.append(Message(role="assistant", content=content))
            else:
                messages.append(Message(role="user", content=f"{_mention(reply)}: {content}"))

        messages.append(
            Message(role="user", content=f"{_mention(post)}: {strip_html(post.content)}")
        )
        return messages
