"""Command-line tools for the YucaBot knowledge base.

    python -m yucabot.cli ingest file PATH     -- store a PDF, DOCX or TXT file
    python -m yucabot.cli ingest text TEXT     -- store raw text
    python -m yucabot.cli ask QUESTION         -- answer from stored documents

Each command builds the same components as the web app (see
:func:`yucabot.main.build_components`) and runs one request.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence

from yucabot.cli import ask, ingest


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with the ingest and ask subcommands."""
    parser = argparse.ArgumentParser(
        prog="python -m yucabot.cli",
        description="Manage and query the YucaBot knowledge base.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")
    ingest.register(subparsers)
    ask.register(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point: parse arguments, build components, run the handler."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None or not hasattr(args, "handler"):
        parser.print_help()
        sys.exit(1)

    # Deferred so --help works without credentials or a config file.
    from yucabot.main import build_components

    components = build_components()
    exit_code = asyncio.run(_run(args, components))
    sys.exit(exit_code)


async def _run(args: argparse.Namespace, components: dict) -> int:
    try:
        return await args.handler(args, components)
    finally:
        await components["http_client"].aclose()
