"""``ask`` subcommand: answer a question from the stored documents.

Usage::

    python -m yucabot.cli ask "What time does the studio open?"
    python -m yucabot.cli ask "Do you offer yoga?" --json
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from yucabot.utils.errors import YucaBotError


def register(subparsers: Any) -> None:
    """Attach the ``ask`` command."""
    ask_parser = subparsers.add_parser("ask", help="Ask a question")
    ask_parser.add_argument("question", help="The question to answer")
    ask_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the raw {answer, sources} JSON instead of formatted text",
    )
    ask_parser.set_defaults(handler=_handle_ask)


async def _handle_ask(args: argparse.Namespace, components: dict) -> int:
    try:
        result = await components["query_pipeline"].query(args.question)
    except YucaBotError as exc:
        print(f"Error ({type(exc).__name__}): {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.model_dump(), indent=2))
        return 0

    print(result.answer)
    if result.sources:
        print("\nSources:")
        for source in result.sources:
            print(f"  {source.id}  (similarity {source.similarity:.3f})")
    return 0
