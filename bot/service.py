"""Forum bot service: wires the trigger, responder and backend together."""

import logging

import config
from llm import AIHttpClient

from .backend import ContentBackend
from .context import ConversationContextBuilder
from .prompts import SystemPromptBuilder
from .responder import BotResponder
from .trigger import TriggerPolicy, parse_keywords

logger = logging.getLogger(__name__)


class ForumBot:
    """Answers new forum posts that trigger it.

    Args:
        backend: Forum content backend.
        responder: Generates reply text.
        trigger: Decides which posts get a reply.
    """

    def __init__(self, backend: ContentBackend, responder: BotResponder, trigger: TriggerPolicy):
        self.backend = backend
        self.responder = responder
        self.trigger = trigger

    def handle_new_post(self, post_id: int, topic_id: int, forum_id: int) -> int | None:
        """Reply to a post if it triggers the bot.

        Returns:
            The id of the posted reply, or None when no reply was made.
        """
        post = self.backend.get_post(post_id)
        if post is None:
            logger.warning("Post %s not found", post_id)
            return None
        if not self.trigger.should_respond(post, forum_id):
            return None

        reply = self.responder.generate(post, topic_id, forum_id)
        reply_id = self.backend.post_reply(topic_id, reply.content)
        logger.info(
            "Replied to post %s in topic %s (reply=%s, tool_rounds=%d, fallback=%s)",
            post_id, topic_id, reply_id, reply.tool_rounds, reply.used_fallback,
        )
        return reply_id


def create_forum_bot(backend: ContentBackend, registry, client: AIHttpClient | None = None) -> ForumBot:
    """Build a ForumBot from the AI_BOT_* settings in config."""
    client = client or AIHttpClient()
    context_builder = ConversationContextBuilder(
        backend, config.AI_BOT_USER_ID, config.AI_BOT_REPLY_HISTORY_LIMIT
    )
    responder = BotResponder(
        client,
        registry,
        context_builder,
        SystemPromptBuilder(config.AI_BOT_SYSTEM_PROMPT),
        bot_username=config.AI_BOT_USERNAME,
        provider=config.AI_BOT_PROVIDER or None,
        model=config.AI_BOT_MODEL or None,
        temperature=config.AI_BOT_TEMPERATURE,
        max_tool_rounds=config.AI_BOT_MAX_TOOL_ROUNDS,
    )
    trigger = TriggerPolicy(
        bot_username=config.AI_BOT_USERNAME,
        bot_user_id=config.AI_BOT_USER_ID,
        keywords=parse_keywords(config.AI_BOT_TRIGGER_KEYWORDS),
        forum_restriction=config.AI_BOT_FORUM_RESTRICTION,
        allowed_forums=config.AI_BOT_ALLOWED_FORUMS,
    )
    return ForumBot(backend, responder, trigger)
