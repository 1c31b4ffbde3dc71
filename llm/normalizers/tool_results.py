"""Packages executed tool results into a continuation request."""

import json
from collections.abc import Mapping, Sequence
from dataclasses import replace

from ..base import ChatRequest, ContinuationContext, Message, ToolCall, ToolResult
from ..errors import ValidationError
from .request import RequestNormalizer


def serialize_result(result) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, default=str)


def _match_call_ids(
    tool_results: Sequence[ToolResult], tool_calls: Sequence[ToolCall]
) -> list[str]:
    """Pair each result with the provider-issued call id it answers.

    An explicit `call_id` on the result must name one of the issued calls;
    otherwise the first unused call with the same tool name is taken, in the
    order the provider issued them. Every issued call must be answered exactly
    once, since providers reject a tool turn that leaves a call open.

    Raises:
        ValidationError: On an unknown or repeated call id, a result with no
            matching call, or a call left without a result.
    """
    used: set[int] = set()
    call_ids: list[str | None] = [None] * len(tool_results)

    # Explicit ids claim their calls before name matching runs
    for position, result in enumerate(tool_results):
        if not result.call_id:
            continue
        index = next((i for i, tc in enumerate(tool_calls) if tc.call_id == result.call_id), None)
        if index is None:
            raise ValidationError(f"Tool result references unknown call id '{result.call_id}'")
        if index in used:
            raise ValidationError(f"Tool call '{result.call_id}' answered more than once")
        used.add(index)
        call_ids[position] = result.call_id

    for position, result in enumerate(tool_results):
        if result.call_id:
            continue
        for index, tc in enumerate(tool_calls):
            if index not in used and tc.name == result.tool_name:
                used.add(index)
                call_ids[position] = tc.call_id
                break
        else:
            raise ValidationError(f"Tool result for '{result.tool_name}' has no matching tool call")

    unanswered = [tc.call_id for i, tc in enumerate(tool_calls) if i not in used]
    if unanswered:
        raise ValidationError(f"Tool calls left without a result: {', '.join(unanswered)}")
    return call_ids


class ToolResultsNormalizer:
    """Builds the follow-up request that hands tool output back to the model."""

    def __init__(self, request_normalizer: RequestNormalizer | None = None):
        self.request_normalizer = request_normalizer or RequestNormalizer()

    def build_continuation_request(
        self,
        context: ContinuationContext | Mapping,
        tool_results: Sequence[ToolResult | Mapping],
    ) -> ChatRequest:
        """Append the assistant tool-call turn and one tool message per result.

        Args:
            context: The originating request and the tool calls it produced.
                A mapping with 'request', 'tool_calls' and optional
                'assistant_content' / 'keep_tools' keys is also accepted.
            tool_results: `ToolResult`s or mappings with 'tool_name', 'result'
                and optional 'call_id'.

        Returns:
            The canonical continuation request. Tools and tool_choice are
            removed unless the context asks to keep them.
        """
        if isinstance(context, Mapping):
            request = context.get("request")
            if isinstance(request, Mapping):
                request = ChatRequest.from_dict(request)
            context = ContinuationContext(
                request=request,
                tool_calls=[
                    tc if isinstance(tc, ToolCall) else ToolCall.from_dict(tc)
                    for tc in context.get("tool_calls") or []
                ],
                assistant_content=context.get("assistant_content"),
                keep_tools=bool(context.get("keep_tools")),
            )
        if not isinstance(context.request, ChatRequest):
            raise ValidationError("Continuation context must include the originating request")

        results = [
            r if isinstance(r, ToolResult) else ToolResult(
                tool_name=r.get("tool_name", ""), result=r.get("result"), call_id=r.get("call_id")
            )
            for r in tool_results
        ]
        call_ids = _match_call_ids(results, context.tool_calls)

        messages = list(context.request.messages)
        messages.append(
            Message(
                role="assistant",
                content=context.assistant_content,
                tool_calls=list(context.tool_calls),
            )
        )
        for result, call_id in zip(results, call_ids):
            messages.append(
                Message(role="tool", content=serialize_result(result.result), tool_call_id=call_id)
            )

        if context.keep_tools:
            return replace(context.request, messages=messages)
        return replace(context.request, messages=messages, tools=[], tool_choice=None)

    def normalize_for_continuation(
        self,
        tool_results: Sequence[ToolResult | Mapping],
        provider_name: str,
        context: ContinuationContext | Mapping,
        provider_config: Mapping,
    ) -> dict:
        """Build the continuation request directly in the provider's wire format."""
        request = self.build_continuation_request(context, tool_results)
        return self.request_normalizer.normalize(request, provider_name, provider_config)
