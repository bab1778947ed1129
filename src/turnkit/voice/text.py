"""Text normalization for transcript comparison."""

from __future__ import annotations

import re

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lower-case, drop punctuation and collapse whitespace.

    ``\\w`` is Unicode-aware, so accented letters ("é", "ç") survive.
    """
    lowered = text.lower()
    stripped = _NON_WORD.sub("", lowered)
    return _WHITESPACE.sub(" ", stripped).strip()
