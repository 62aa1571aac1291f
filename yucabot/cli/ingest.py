"""``ingest`` subcommand: store a document or raw text in the knowledge base.

Usage::

    python -m yucabot.cli ingest file ./docs/schedule.pdf
    python -m yucabot.cli ingest text "Classes start at 7am on weekdays."
"""

from __future__ import annotations

import argparse
import mimetypes
import sys
from pathlib import Path
from typing import Any

from yucabot.models.rag import IngestionResult
from yucabot.utils.errors import YucaBotError


def register(subparsers: Any) -> None:
    """Attach the ``ingest`` command and its ``file`` / ``text`` subcommands."""
    ingest_parser = subparsers.add_parser("ingest", help="Store a document or text")
    ingest_sub = ingest_parser.add_subparsers(dest="ingest_command", help="What to ingest")

    # -- file --
    file_parser = ingest_sub.add_parser("file", help="Ingest a PDF, DOCX or TXT file")
    file_parser.add_argument("path", help="Path to the document")
    file_parser.add_argument(
        "--mime-type",
        default=None,
        help="Override the MIME type guessed from the file extension",
    )
    file_parser.set_defaults(handler=_handle_file)

    # -- text --
    text_parser = ingest_sub.add_parser("text", help="Ingest a raw text string")
    text_parser.add_argument("text", help="The text to store")
    text_parser.add_argument("--source", default=None, help="Label recorded in the logs")
    text_parser.set_defaults(handler=_handle_text)


async def _handle_file(args: argparse.Namespace, components: dict) -> int:
    """Ingest one document from disk."""
    path = Path(args.path)
    if not path.is_file():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 1

    mime_type = args.mime_type or mimetypes.guess_type(path.name)[0]
    print(f"Ingesting file: {path} ({mime_type or 'unknown type'})")
    try:
        result = await components["ingest_pipeline"].ingest_document(
            path.read_bytes(), mime_type, path.name
        )
    except YucaBotError as exc:
        print(f"Error ({type(exc).__name__}): {exc}", file=sys.stderr)
        return 1
    _print_result(result)
    return 0


async def _handle_text(args: argparse.Namespace, components: dict) -> int:
    """Ingest a text string given on the command line."""
    try:
        result = await components["ingest_pipeline"].ingest_text(args.text, args.source)
    except YucaBotError as exc:
        print(f"Error ({type(exc).__name__}): {exc}", file=sys.stderr)
        return 1
    _print_result(result)
    return 0


def _print_result(result: IngestionResult) -> None:
    print("\nIngestion complete:")
    print(f"  Stored chars:  {result.stored_length}")
    print(f"  Dimensions:    {result.embedding_dimensions}")
    print(f"  Provider:      {result.provider or 'n/a'}")
