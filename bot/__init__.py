"""Forum bot: decides when to answer a post and generates the reply."""

from .backend import ContentBackend, ForumPost
from .context import ConversationContextBuilder
from .prompts import SystemPromptBuilder
from .responder import FALLBACK_MESSAGE, BotReply, BotResponder
from .service import ForumBot, create_forum_bot
from .trigger import TriggerPolicy, parse_keywords

__all__ = [
    "BotReply",
    "BotResponder",
    "ContentBackend",
    "ConversationContextBuilder",
    "FALLBACK_MESSAGE",
    "ForumBot",
    "ForumPost",
    "SystemPromptBuilder",
    "TriggerPolicy",
    "create_forum_bot",
    "parse_keywords",
]
