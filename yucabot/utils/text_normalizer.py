"""Text normalization applied before embedding or storage.

Extracted document text (PDF text layers especially) is full of NUL bytes,
hard line breaks and runs of spaces.  Everything that reaches an embedding
provider or the vector store goes through :func:`normalize_text` first.

Long documents are cut, not chunked: :func:`truncate_for_embedding` keeps
the head of the text and drops the tail once a provider's input limit is
reached.
"""

from __future__ import annotations

import re

_NUL = "\x00"
_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_text(raw: str | None) -> str:
    """Remove NUL characters, collapse whitespace runs and trim.

    Never raises: ``None`` or non-string input yields ``""``.  The result is
    a fixed point, so ``normalize_text(normalize_text(x)) == normalize_text(x)``.

    >>> normalize_text("a\\x00  b\\n\\tc")
    'a b c'
    """
    if not raw or not isinstance(raw, str):
        return ""
    return _WHITESPACE_RUN.sub(" ", raw.replace(_NUL, "")).strip()


def truncate_for_embedding(text: str | None, max_len: int) -> str:
    """Return the first ``max_len`` characters of ``text`` (hard cut)."""
    if not text:
        return ""
    if max_len <= 0:
        return ""
    if len(text) <= max_len:
        return text
    return text[:max_len]
