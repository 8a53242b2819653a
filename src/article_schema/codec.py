"""Attribute codec: canonical forms for loosely formatted markup values.

Decode functions turn whatever an author or a browser wrote into a value
from a small closed set; encode functions render canonical values back
into strings that can go into markup. All functions here are pure.
"""

from __future__ import annotations

import re

from PIL import ImageColor

from article_schema.errors import AttributeDecodeFailure

ALIGNMENTS = ("left", "center", "right")
DEFAULT_ALIGNMENT = "left"

BORDER_STYLES = ("1", "2", "3", "4")
DEFAULT_BORDER_STYLE = "1"

FONT_SIZE_PERCENTS: dict[int, str] = {
    1: "60%",
    2: "80%",
    3: "100%",
    4: "120%",
    5: "140%",
}
DEFAULT_FONT_SIZE_LEVEL = 3
_PERCENT_TO_LEVEL = {percent: level for level, percent in FONT_SIZE_PERCENTS.items()}

# CSS writes rgba()/hsla() alpha as a fraction or percentage; the alpha
# channel is dropped anyway, so both are rewritten without it before lookup.
_CSS_ALPHA_PATTERN = re.compile(
    r"^(rgb|hsl)a\(\s*([^,]+?)\s*,\s*([^,]+?)\s*,\s*([^,]+?)\s*,\s*[\d.]+%?\s*\)$"
)
# Fully transparent black, which loses its alpha like any other color
TRANSPARENT = "transparent"
_COLWIDTH_PATTERN = re.compile(r"^\d+(,\d+)*$")
_SPAN_PATTERN = re.compile(r"^\d+$")


def normalize_color(value: str) -> str:
    """Normalize any CSS color to ``#rrggbb``.

    Accepts color names (including ``transparent``), 3/4/6/8-digit hex,
    ``rgb()``, ``rgba()``, ``hsl()``, ``hsla()`` and ``hsv()``. The alpha
    channel is discarded.

    Args:
        value: The color as written in markup.

    Returns:
        The lowercase six-digit hex color with a leading ``#``.

    Raises:
        AttributeDecodeFailure: If the value is not a recognized color.
    """
    text = value.strip().lower()
    match = _CSS_ALPHA_PATTERN.match(text)
    if match:
        text = f"{match.group(1)}({match.group(2)}, {match.group(3)}, {match.group(4)})"

    try:
        channels = (0, 0, 0, 0) if text == TRANSPARENT else ImageColor.getrgb(text)
    except ValueError as exc:
        raise AttributeDecodeFailure(value, "unrecognized color") from exc

    red, green, blue = (min(max(c, 0), 255) for c in channels[:3])
    alpha = min(max(channels[3], 0), 255) if len(channels) > 3 else 255
    pixel = (red << 24) | (green << 16) | (blue << 8) | alpha

    return "#" + format(pixel, "x").rjust(8, "0")[:6]


def normalize_alignment(value: str | None) -> str:
    """Restrict an alignment to left, center or right (default left)."""
    if value is None:
        return DEFAULT_ALIGNMENT
    candidate = value.strip().lower()
    return candidate if candidate in ALIGNMENTS else DEFAULT_ALIGNMENT


def normalize_border_style(value: str | None) -> str:
    """Restrict a divider style to "1".."4" (default "1")."""
    if value is None:
        return DEFAULT_BORDER_STYLE
    candidate = value.strip()
    return candidate if candidate in BORDER_STYLES else DEFAULT_BORDER_STYLE


def map_font_size_level_to_percent(level: int) -> str:
    """Render a font size level (1-5) as a CSS percentage.

    Raises:
        ValueError: If the level is outside the table. Levels come from
            canonical storage, so this is a caller error.
    """
    try:
        return FONT_SIZE_PERCENTS[level]
    except KeyError:
        raise ValueError(f"Font size level must be 1-5, got {level!r}") from None


def map_percent_to_font_size_level(percent: str | None) -> int:
    """Map a CSS percentage back to a font size level (default 3)."""
    if percent is None:
        return DEFAULT_FONT_SIZE_LEVEL
    return _PERCENT_TO_LEVEL.get(percent.strip(), DEFAULT_FONT_SIZE_LEVEL)


def parse_style(style: str | None) -> dict[str, str]:
    """Split an inline ``style`` attribute into property/value pairs.

    Property names are lowercased. A later declaration of the same
    property wins, as it does in a browser. Declarations without a colon
    are ignored.
    """
    declarations: dict[str, str] = {}
    if not style:
        return declarations

    for chunk in style.split(";"):
        prop, sep, value = chunk.partition(":")
        if not sep:
            continue
        prop = prop.strip().lower()
        value = value.strip()
        if prop and value:
            declarations[prop] = value

    return declarations


def append_style(style: str | None, prop: str, value: str, terminator: str = "") -> str:
    """Append a ``prop: value`` declaration to an existing style string.

    Existing declarations are kept as they are. A ``"; "`` separator is
    inserted when the existing style does not already end with ``;``.
    """
    fragment = f"{prop}: {value}{terminator}"
    if not style or not style.strip():
        return fragment

    existing = style.rstrip()
    if existing.endswith(";"):
        return existing + fragment
    return f"{existing}; {fragment}"


def parse_span(value: str) -> int:
    """Decode a table cell ``colspan``/``rowspan`` value."""
    text = value.strip()
    if not _SPAN_PATTERN.match(text) or int(text) < 1:
        raise AttributeDecodeFailure(value, "span must be a positive integer")
    return int(text)


def parse_colwidth(value: str) -> list[int]:
    """Decode a ``data-colwidth`` list such as ``"120,80"``."""
    text = value.strip()
    if not _COLWIDTH_PATTERN.match(text):
        raise AttributeDecodeFailure(value, "expected comma-separated integers")
    return [int(width) for width in text.split(",")]


def format_colwidth(widths: list[int]) -> str:
    return ",".join(str(width) for width in widths)
