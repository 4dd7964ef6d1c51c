"""Highlight styles for search matches and user marks."""

from __future__ import annotations

import functools
import logging

from rich.color import Color, ColorParseError
from rich.style import Style

logger = logging.getLogger(__name__)

# (normal, current) backgrounds for search hits. White foreground on tinted backgrounds.
_SEARCH_COLORS: tuple[str, str] = ("#6e5600", "#9e7c00")

_FALLBACK_MARK_COLOR = "#e5c07b"


def search_match_style() -> Style:
    """Highlight for a search hit that is not the current one."""
    return Style(bgcolor=_SEARCH_COLORS[0], color="#ffffff")


def search_current_style() -> Style:
    """Highlight for the current search hit (brighter + bold)."""
    return Style(bgcolor=_SEARCH_COLORS[1], color="#ffffff", bold=True)


@functools.lru_cache(maxsize=256)
def mark_color(name: str) -> Color:
    """Resolve a user supplied colour name.

    Accepts anything rich understands ("red", "#ff8800", "rgb(1,2,3)", "color(42)")
    plus multi-word names such as "bright blue". Unknown names fall back to amber.
    """
    for candidate in (name, name.strip().lower().replace(" ", "_").replace("-", "_")):
        try:
            return Color.parse(candidate)
        except ColorParseError:
            continue
    logger.debug("Unknown mark colour %r, using fallback", name)
    return Color.parse(_FALLBACK_MARK_COLOR)


def mark_style(name: str) -> Style:
    """Background style for a marked span, with a readable foreground."""
    color = mark_color(name)
    triplet = color.get_truecolor()
    luminance = 0.299 * triplet.red + 0.587 * triplet.green + 0.114 * triplet.blue
    foreground = "#000000" if luminance > 140 else "#ffffff"  # noqa: PLR2004
    return Style(bgcolor=color, color=foreground)
