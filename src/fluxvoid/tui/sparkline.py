"""Sparkline rendering for metric histories.

One column per history value. Each value maps to one of eight glyphs
and is coloured by load threshold, so a spike stands out even when the
panel is narrow.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence

from rich.text import Text

# 8 levels: blank for idle up to a full block
GLYPHS = " ▂▃▄▅▆▇█"
MAX_LEVEL = len(GLYPHS) - 1


def glyph_index(value: float) -> int:
    """Map a percentage to a glyph index in 0..7.

    index = clamp(round(value / 100 * 7), 0, 7), rounding half up, so
    50% lands on index 4 (3.5 rounds up) rather than on an even index.
    """
    scaled = value / 100 * MAX_LEVEL
    return max(0, min(MAX_LEVEL, math.floor(scaled + 0.5)))


def threshold_color(
    value: float,
    base: str,
    *,
    warning: float,
    danger: float,
    warning_color: str,
    danger_color: str,
) -> str:
    """Colour for a load value: danger above danger, warning above warning."""
    if value > danger:
        return danger_color
    if value > warning:
        return warning_color
    return base


def render_sparkline(
    values: Sequence[float],
    width: int,
    color_func: Callable[[float], str] | None = None,
) -> Text:
    """Render values as a single-row sparkline exactly width columns wide.

    Args:
        values: History, oldest first. Only the newest width values are drawn.
        width: Column count. Short histories are right-padded with blanks.
        color_func: Maps a value to a Rich colour; None leaves glyphs unstyled.

    Returns:
        Rich Text with one styled span per drawn value.
    """
    text = Text(no_wrap=True, overflow="crop")
    if width <= 0:
        return text

    for value in list(values)[-width:]:
        glyph = GLYPHS[glyph_index(value)]
        if color_func is None:
            text.append(glyph)
        else:
            text.append(glyph, style=color_func(value))

    pad = width - len(text)
    if pad > 0:
        text.append(GLYPHS[0] * pad)
    return text
