"""Node types of the article catalog.

Block content of an article is a sequence of paragraphs, media embeds,
quotes, dividers, headings and tables. Paragraphs hold text and line
breaks; quotes and headings hold text and line breaks without marks.
"""

from __future__ import annotations

from article_schema.codec import (
    DEFAULT_ALIGNMENT,
    DEFAULT_BORDER_STYLE,
    normalize_alignment,
    normalize_border_style,
)
from article_schema.model import HOLE
from article_schema.schema.spec import (
    AttributeSpec,
    DomAttribute,
    NodeTypeSpec,
    ParseRule,
    RenderRule,
    StyleProperty,
)

BLOCK = frozenset({"block"})
INLINE = frozenset({"inline"})

# Attribute name -> data attribute carrying it on the video wrapper
VIDEO_ATTRIBUTES = {
    "source": "data-source",
    "source_id": "data-source-id",
    "url": "data-url",
    "title": "data-title",
    "thumbnail": "data-thumbnail",
}


def doc_node() -> NodeTypeSpec:
    return NodeTypeSpec(name="doc", content="block+")


def text_node() -> NodeTypeSpec:
    return NodeTypeSpec(name="text", groups=INLINE, inline=True)


def hard_break_node() -> NodeTypeSpec:
    return NodeTypeSpec(
        name="hard_break",
        groups=INLINE,
        inline=True,
        selectable=False,
        parse_rules=(ParseRule(tag="br"),),
        render=RenderRule(tag="br", content=None),
    )


def paragraph_node() -> NodeTypeSpec:
    align = StyleProperty("text-align")
    return NodeTypeSpec(
        name="paragraph",
        content="inline*",
        groups=BLOCK,
        attrs={"align": AttributeSpec(default=DEFAULT_ALIGNMENT, decode=normalize_alignment)},
        parse_rules=(ParseRule(tag="p", sources={"align": align}),),
        render=RenderRule(tag="p", targets={"align": align}),
    )


def image_node() -> NodeTypeSpec:
    attrs = {"src": DomAttribute("src"), "desc": DomAttribute("alt")}
    return NodeTypeSpec(
        name="image",
        groups=BLOCK,
        atom=True,
        attrs={"src": AttributeSpec(), "desc": AttributeSpec(default=None)},
        parse_rules=(ParseRule(tag="img", sources=attrs),),
        render=RenderRule(tag="img", targets=attrs, content=None),
    )


def video_node() -> NodeTypeSpec:
    """Embedded video, a ``div`` marked with ``data-node="video"``.

    Values are carried verbatim; nothing is normalized.
    """
    attrs = {name: DomAttribute(data) for name, data in VIDEO_ATTRIBUTES.items()}
    return NodeTypeSpec(
        name="video",
        groups=BLOCK,
        atom=True,
        attrs={name: AttributeSpec() for name in VIDEO_ATTRIBUTES},
        parse_rules=(
            ParseRule(tag="div", require_attr="data-node", require_value="video", sources=attrs),
        ),
        render=RenderRule(
            tag="div",
            fixed_attrs={"data-node": "video"},
            targets=attrs,
            content=None,
        ),
    )


def quote_node() -> NodeTypeSpec:
    return NodeTypeSpec(
        name="quote",
        content="(text | hard_break)+",
        groups=BLOCK,
        marks="",
        parse_rules=(ParseRule(tag="blockquote"),),
        render=RenderRule(tag="blockquote", content=HOLE),
    )


def divider_node() -> NodeTypeSpec:
    style = DomAttribute("data-style")
    return NodeTypeSpec(
        name="divider",
        groups=BLOCK,
        attrs={"style": AttributeSpec(default=DEFAULT_BORDER_STYLE, decode=normalize_border_style)},
        parse_rules=(ParseRule(tag="hr", sources={"style": style}),),
        render=RenderRule(tag="hr", targets={"style": style}, content=None),
    )


def heading_node() -> NodeTypeSpec:
    return NodeTypeSpec(
        name="heading",
        content="(text | hard_break)+",
        groups=BLOCK,
        marks="",
        parse_rules=(ParseRule(tag="h2"),),
        render=RenderRule(tag="h2", content=HOLE),
    )


def base_nodes() -> list[NodeTypeSpec]:
    """Build the non-table node types, in matching priority order."""
    return [
        doc_node(),
        text_node(),
        hard_break_node(),
        paragraph_node(),
        image_node(),
        video_node(),
        quote_node(),
        divider_node(),
        heading_node(),
    ]
