"""Entry point: check the configured AI provider and list its models."""

import argparse
import logging
import sys
import os

# Ensure project root is on the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from llm import SUPPORTED_PROVIDERS, AIHttpClient
from observability.logging_config import configure_logging
from observability.tracing import setup_observability

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Check the forum bot's AI provider connection.")
    parser.add_argument("--provider", choices=SUPPORTED_PROVIDERS, help="Provider to check (default: AI_DEFAULT_PROVIDER)")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--trace", action="store_true", help="Export spans to Phoenix")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    if args.trace:
        setup_observability()

    client = AIHttpClient()
    result = client.test_connection(args.provider)
    print(f"[{result.provider}] {result.message}")
    if not result.success:
        return 1

    models = client.get_available_models(args.provider)
    print(f"{len(models)} models available")
    for model in models:
        print(f"  {model}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
