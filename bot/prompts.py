"""System prompt assembly for the forum bot."""

import json
from collections.abc import Callable
from datetime import datetime, timedelta

FORUM_STRUCTURE_TTL = timedelta(days=1)


def build_date_time_instruction(now: datetime) -> str:
    current_datetime = now.strftime("%Y-%m-%d %H:%M:%S")
    current_date = now.strftime("%Y-%m-%d")
    return (
        "--- MANDATORY TIME CONTEXT ---\n"
        f"CURRENT DATE & TIME: {current_datetime}\n"
        f"RULE: You MUST treat {current_date} as the definitive 'today' for determining "
        "past/present/future tense.\n"
        f"ACTION: Frame all events relative to {current_date}. Use past tense for completed events.\n"
        f"CONSTRAINT: DO NOT discuss events completed before {current_date} as if they are still upcoming.\n"
        "KNOWLEDGE CUTOFF: Your internal knowledge cutoff is irrelevant; operate solely based "
        "on this date and provided context.\n"
        "--- END TIME CONTEXT ---"
    )


def build_identity_instruction(bot_username: str) -> str:
    return (
        "\n--- YOUR IDENTITY ---\n"
        f"YOUR USERNAME: @{bot_username}\n"
        f"IMPORTANT: You are @{bot_username} in this forum. When users mention "
        f"@{bot_username}, they are talking TO YOU, not about someone else.\n"
        f"SELF-REFERENCE: You may refer to yourself as @{bot_username} when appropriate.\n"
        "--- END IDENTITY ---"
    )


def build_forum_context_instruction(forum_structure: dict | None) -> str:
    if not forum_structure:
        return ""
    return (
        "\n--- FORUM CONTEXT ---\n"
        "The following JSON object describes the structure of this forum site. Use it to "
        "understand the site's organization and purpose when formulating your responses:\n"
        f"{json.dumps(forum_structure, default=str)}"
        "\n--- END FORUM CONTEXT ---\n"
    )


class SystemPromptBuilder:
    """Date + identity + forum structure + the configured base prompt.

    The forum structure changes rarely, so it is fetched at most once per
    `structure_ttl`.

    Args:
        base_prompt: Operator-supplied instructions appended last.
        clock: Returns the current time; injectable for tests.
        structure_ttl: How long a fetched forum structure is reused.
    """

    def __init__(
        self,
        base_prompt: str,
        clock=datetime.now,
        structure_ttl: timedelta = FORUM_STRUCTURE_TTL,
    ):
        self.base_prompt = base_prompt
        self.clock = clock
        self.structure_ttl = structure_ttl
        self._structure: dict | None = None
        self._structure_expires: datetime | None = None

    def forum_structure(self, loader: Callable[[], dict | None]) -> dict | None:
        """Return the cached forum structure, calling `loader` once it has expired."""
        now = self.clock()
        if self._structure_expires is None or now >= self._structure_expires:
            self._structure = loader()
            self._structure_expires = now + self.structure_ttl
        return self._structure

    def build(self, bot_username: str, forum_structure: dict | None = None) -> str:
        return (
            build_date_time_instruction(self.clock())
            + build_identity_instruction(bot_username)
            + build_forum_context_instruction(forum_structure)
            + "\n\n"
            + (self.base_prompt or "")
        )


RESPONSE_INSTRUCTION = (
    "Please help respond to this user's question. "
    "You have access to search tools if you need to find relevant information."
)
