"""Mark types of the article catalog.

The catalog defines every mark the article format knows how to carry.
Which of them a deployment actually offers is decided by
``SchemaConfig.excluded_marks``, not here.
"""

from __future__ import annotations

import re

from lxml import etree

from article_schema.codec import (
    DEFAULT_FONT_SIZE_LEVEL,
    map_font_size_level_to_percent,
    map_percent_to_font_size_level,
    normalize_color,
    parse_style,
)
from article_schema.schema.spec import (
    AttributeSpec,
    DomAttribute,
    MarkTypeSpec,
    MatchedStyleValue,
    ParseRule,
    RenderRule,
    StyleProperty,
)

_BOLD_WEIGHT = re.compile(r"^(bold(er)?|[5-9]\d{2,})$")


def _not_normal_weight(element: etree._Element) -> bool:
    # <b style="font-weight: normal"> is how some editors undo bold
    return parse_style(element.get("style")).get("font-weight") != "normal"


def _is_bold_weight(value: str) -> bool:
    return bool(_BOLD_WEIGHT.match(value.strip().lower()))


def strong_mark() -> MarkTypeSpec:
    return MarkTypeSpec(
        name="strong",
        parse_rules=(
            ParseRule(tag="strong"),
            ParseRule(tag="b", accept=_not_normal_weight),
            ParseRule(style="font-weight", accept=_is_bold_weight),
        ),
        render=RenderRule(tag="strong"),
    )


def em_mark() -> MarkTypeSpec:
    return MarkTypeSpec(
        name="em",
        parse_rules=(
            ParseRule(tag="i"),
            ParseRule(tag="em"),
            ParseRule(style="font-style", style_value="italic"),
        ),
        render=RenderRule(tag="em"),
    )


def code_mark() -> MarkTypeSpec:
    return MarkTypeSpec(
        name="code",
        parse_rules=(ParseRule(tag="code"),),
        render=RenderRule(tag="code"),
    )


def link_mark() -> MarkTypeSpec:
    attrs = {"href": DomAttribute("href"), "title": DomAttribute("title")}
    return MarkTypeSpec(
        name="link",
        attrs={"href": AttributeSpec(), "title": AttributeSpec(default=None)},
        parse_rules=(ParseRule(tag="a", require_attr="href", sources=attrs),),
        render=RenderRule(tag="a", targets=attrs),
    )


def underline_mark() -> MarkTypeSpec:
    return MarkTypeSpec(
        name="underline",
        parse_rules=(
            ParseRule(style="text-decoration", style_value="underline"),
            ParseRule(tag="u"),
        ),
        render=RenderRule(tag="span", fixed_attrs={"style": "text-decoration: underline"}),
    )


def font_size_mark() -> MarkTypeSpec:
    return MarkTypeSpec(
        name="font_size",
        attrs={
            "size": AttributeSpec(
                default=DEFAULT_FONT_SIZE_LEVEL,
                decode=map_percent_to_font_size_level,
                encode=map_font_size_level_to_percent,
            ),
        },
        parse_rules=(ParseRule(style="font-size", sources={"size": MatchedStyleValue()}),),
        render=RenderRule(tag="span", targets={"size": StyleProperty("font-size")}),
    )


def color_mark() -> MarkTypeSpec:
    color = AttributeSpec(default="#000000", decode=normalize_color)
    return MarkTypeSpec(
        name="color",
        attrs={"color": color},
        parse_rules=(
            ParseRule(style="color", sources={"color": MatchedStyleValue()}),
            ParseRule(tag="font", require_attr="color", sources={"color": DomAttribute("color")}),
        ),
        render=RenderRule(tag="span", targets={"color": StyleProperty("color")}),
    )


def base_marks() -> list[MarkTypeSpec]:
    """Build every mark type the article format defines."""
    return [
        link_mark(),
        em_mark(),
        strong_mark(),
        code_mark(),
        font_size_mark(),
        color_mark(),
        underline_mark(),
    ]
