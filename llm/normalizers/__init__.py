"""Translators between the canonical request/response shape and provider wire formats."""

from .connection_test import ConnectionTestNormalizer
from .request import RequestNormalizer
from .response import ResponseNormalizer
from .streaming import StreamingNormalizer
from .tool_results import ToolResultsNormalizer

__all__ = [
    "ConnectionTestNormalizer",
    "RequestNormalizer",
    "ResponseNormalizer",
    "StreamingNormalizer",
    "ToolResultsNormalizer",
]
