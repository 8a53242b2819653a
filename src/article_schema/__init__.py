"""Article Schema - node and mark types for rich-text articles.

Decode HTML into structured article nodes and encode them back.

Example:
    from article_schema import ARTICLE_SCHEMA, DocumentParser, DocumentSerializer

    doc = DocumentParser().parse('<p style="text-align: center">Hello</p>')
    html = DocumentSerializer().serialize(doc)

    # Single elements
    import lxml.html
    node = ARTICLE_SCHEMA.decode(lxml.html.fragment_fromstring('<hr data-style="9">'))
    assert node.attrs == {"style": "1"}

    # With more marks enabled
    from article_schema import SchemaConfig, build_schema

    registry = build_schema(SchemaConfig().enabling("em", "link"))
"""

from article_schema.codec import (
    map_font_size_level_to_percent,
    map_percent_to_font_size_level,
    normalize_alignment,
    normalize_border_style,
    normalize_color,
)
from article_schema.errors import (
    AttributeDecodeFailure,
    ContentModelError,
    ContentViolation,
    DecodeMismatch,
    DuplicateTypeError,
    MissingAttributeError,
    SchemaError,
    UnknownTypeError,
    ViolationType,
)
from article_schema.markup import DocumentParser, DocumentSerializer
from article_schema.model import HOLE, Mark, MarkupTemplate, Node
from article_schema.schema import (
    ARTICLE_SCHEMA,
    AttributeSpec,
    MarkTypeSpec,
    NodeTypeSpec,
    SchemaConfig,
    TypeRegistry,
    build_schema,
)

__version__ = "0.1.0"

__all__ = [
    # Main API
    "ARTICLE_SCHEMA",
    "build_schema",
    "SchemaConfig",
    "TypeRegistry",
    "DocumentParser",
    "DocumentSerializer",
    # Document values
    "Node",
    "Mark",
    "MarkupTemplate",
    "HOLE",
    # Specs
    "NodeTypeSpec",
    "MarkTypeSpec",
    "AttributeSpec",
    # Codec
    "normalize_color",
    "normalize_alignment",
    "normalize_border_style",
    "map_font_size_level_to_percent",
    "map_percent_to_font_size_level",
    # Errors
    "SchemaError",
    "DuplicateTypeError",
    "UnknownTypeError",
    "ContentModelError",
    "MissingAttributeError",
    "DecodeMismatch",
    "AttributeDecodeFailure",
    "ContentViolation",
    "ViolationType",
]
