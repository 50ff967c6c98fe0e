"""Formatting helpers for terminal reports.

Design principles:
- Every summary line fits on one line (~80 chars max)
- Paths compressed for deep nesting
- Grammatically correct (1 file vs 2 files)
"""

from __future__ import annotations

import math


def compress_path(path: str, max_len: int = 30) -> str:
    """Compress path to fit within max_len.

    Examples:
        src/readgate/optimizer/engine.py -> src/.../engine.py
        short/path.py -> short/path.py (unchanged)
    """
    if len(path) <= max_len:
        return path

    parts = path.split("/")
    if len(parts) <= 2:
        return path  # Can't compress further

    compressed = f"{parts[0]}/.../{parts[-1]}"
    if len(compressed) <= max_len:
        return compressed

    return parts[-1]


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return grammatically correct singular/plural form.

    Examples:
        pluralize(1, "read") -> "1 read"
        pluralize(3, "hypothesis", "hypotheses") -> "3 hypotheses"
    """
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count} {word}"


def truncate_at_word(text: str, max_len: int = 40, suffix: str = "...") -> str:
    """Truncate text at word boundary.

    Examples:
        "fix: update parser to handle edge cases" -> "fix: update parser to..."
    """
    if len(text) <= max_len:
        return text

    cut_at = max_len - len(suffix)
    if cut_at <= 0:
        return suffix

    space_idx = text.rfind(" ", 0, cut_at)
    if space_idx > 0:
        return text[:space_idx] + suffix

    return text[:cut_at] + suffix


def percent(part: float, whole: float) -> int:
    """Rounded percentage, 0 when whole is 0.

    Rounds half up so 95.5 -> 96, matching how budget alerts read.
    """
    if whole <= 0:
        return 0
    return int(math.floor(part / whole * 100 + 0.5))


def progress_bar(value: float, maximum: float, width: int = 10) -> str:
    """Render a fixed-width block bar for a score.

    Examples:
        progress_bar(45, 100) -> "████░░░░░░"
    """
    if maximum <= 0:
        filled = 0
    else:
        filled = int(max(0.0, min(1.0, value / maximum)) * width)
    return "█" * filled + "░" * (width - filled)


def format_tokens(count: int) -> str:
    """Format a token count with thousands separators."""
    return f"{count:,}"
