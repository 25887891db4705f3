"""Content similarity used for last-resort message reconciliation."""

from __future__ import annotations

import difflib
import re

_WS_RE = re.compile(r"\s+")


def normalize_content(text: str) -> str:
    """Lower-case and collapse whitespace so echoes with trimmed or reflowed
    text still compare equal."""
    return _WS_RE.sub(" ", text or "").strip().lower()


def content_similarity(a: str, b: str) -> float:
    """Return a ratio in [0, 1]; 1.0 means identical after normalization."""
    left = normalize_content(a)
    right = normalize_content(b)
    if not left and not right:
        return 1.0
    if not left or not right:
        return 0.0
    if left == right:
        return 1.0
    return difflib.SequenceMatcher(None, left, right, autojunk=False).ratio()


__all__ = ["content_similarity", "normalize_content"]
