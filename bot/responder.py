"""Generates a bot reply, running the model's search tool calls in between.

Flow for one reply:
    initial request → tool calls? → execute tools → continuation request → reply

The number of tool round-trips is bounded by `max_tool_rounds`. A model that
still asks for tools once the bound is reached gets no further round; the
reply resolves with whatever content that last response carried.
"""

import logging
from dataclasses import dataclass

from llm import (
    AIHttpClient,
    ChatRequest,
    ChatResponse,
    ContinuationContext,
    Message,
    ToolChoice,
    ToolResult,
)
from llm.normalizers import ToolResultsNormalizer
from tools.registry import SEARCH_CATEGORY

from .backend import ForumPost
from .context import ConversationContextBuilder
from .prompts import RESPONSE_INSTRUCTION, SystemPromptBuilder

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = (
    "Sorry, I'm having trouble generating a response right now. Please try again later."
)


@dataclass
class BotReply:
    content: str
    tool_rounds: int = 0
    used_fallback: bool = False


class BotResponder:
    """Drives the propose → execute → finalize exchange with the model.

    Args:
        client: Configured AIHttpClient.
        registry: Tool registry; tools in the "search" category are offered.
        context_builder: Builds conversation history for the post.
        prompt_builder: Builds the system prompt.
        bot_username: Login the bot posts under.
        provider: Provider name; the client's default when None.
        model: Model override for every request.
        temperature: Sampling temperature override.
        max_tool_rounds: Maximum tool round-trips per reply.
    """

    def __init__(
        self,
        client: AIHttpClient,
        registry,
        context_builder: ConversationContextBuilder,
        prompt_builder: SystemPromptBuilder,
        bot_username: str = "",
        provider: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tool_rounds: int = 1,
    ):
        self.client = client
        self.registry = registry
        self.context_builder = context_builder
        self.prompt_builder = prompt_builder
        self.bot_username = bot_username
        self.provider = provider
        self.model = model
        self.temperature = temperature
        self.max_tool_rounds = max(0, int(max_tool_rounds))
        self._continuations = ToolResultsNormalizer()

    # ── Request assembly ─────────────────────────────────────────────────────

    def build_initial_request(self, post: ForumPost, topic_id: int, forum_id: int) -> ChatRequest:
        """System prompt, conversation history, then the current interaction."""
        system_prompt = self.prompt_builder.build(
            self.bot_username,
            self.prompt_builder.forum_structure(self.context_builder.backend.get_forum_structure),
        )
        history = self.context_builder.conversation_messages(post, topic_id)
        context = self.context_builder.current_interaction(post, topic_id, forum_id)

        # History goes between the system prompt and the final user turn
        messages = [Message(role="system", content=system_prompt)]
        messages.extend(history)
        messages.append(Message(role="user", content=context + RESPONSE_INSTRUCTION))

        tools = self.registry.list_tools(SEARCH_CATEGORY)
        return ChatRequest(
            messages=messages,
            tools=tools,
            tool_choice=ToolChoice.AUTO if tools else None,
            model=self.model,
            temperature=self.temperature,
        )

    # ── Tool execution ───────────────────────────────────────────────────────

    def execute_tool_calls(self, response: ChatResponse, post: ForumPost, topic_id: int) -> list[ToolResult]:
        results = []
        for call in response.tool_calls:
            parameters = dict(call.parameters)
            parameters["exclude_post_id"] = post.post_id
            parameters["topic_id"] = topic_id
            logger.info("Executing tool %s for post %s", call.name, post.post_id)
            result = self.registry.execute(call.name, parameters)
            results.append(ToolResult(tool_name=call.name, result=result, call_id=call.call_id))
        return results

    # ── Reply generation ─────────────────────────────────────────────────────

    def generate(self, post: ForumPost, topic_id: int, forum_id: int) -> BotReply:
        """Produce the reply text for a post. Never returns an empty string."""
        request = self.build_initial_request(post, topic_id, forum_id)
        response = self.client.send_request(request, self.provider)

        rounds = 0
        while response.success and response.tool_calls and rounds < self.max_tool_rounds:
            results = self.execute_tool_calls(response, post, topic_id)
            context = ContinuationContext(
                request=request,
                tool_calls=list(response.tool_calls),
                assistant_content=response.data.content,
                keep_tools=rounds + 1 < self.max_tool_rounds,
            )
            response = self.client.continue_with_tool_results(context, results, self.provider)
            rounds += 1
            if response.success and response.tool_calls and rounds < self.max_tool_rounds:
                request = self._continuations.build_continuation_request(context, results)

        if response.tool_calls and rounds >= self.max_tool_rounds:
            logger.info("Tool round limit (%d) reached for post %s", self.max_tool_rounds, post.post_id)

        if not response.success:
            logger.warning("AI request failed for post %s: %s", post.post_id, response.error)
        content = response.content.strip()
        if not content:
            logger.warning("No content generated for post %s; using fallback reply", post.post_id)
            return BotReply(content=FALLBACK_MESSAGE, tool_rounds=rounds, used_fallback=True)
        return BotReply(content=content, tool_rounds=rounds)
