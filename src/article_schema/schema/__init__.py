"""Node and mark type registry for articles."""

from article_schema.schema.article import ARTICLE_SCHEMA, build_schema, catalog_marks, catalog_nodes
from article_schema.schema.config import DEFAULT_CONFIG, DEFAULT_EXCLUDED_MARKS, SchemaConfig
from article_schema.schema.content import (
    ChoiceParticle,
    CompositeParticle,
    ContentModel,
    NodeParticle,
    Particle,
    ParticleType,
    SequenceParticle,
)
from article_schema.schema.registry import TypeRegistry
from article_schema.schema.spec import (
    REQUIRED,
    AttributeSpec,
    DomAttribute,
    MarkTypeSpec,
    MatchedStyleValue,
    NodeTypeSpec,
    ParseRule,
    RenderRule,
    StyleProperty,
)
from article_schema.schema.tables import BACKGROUND, CellAttribute, table_nodes

__all__ = [
    # Assembly
    "ARTICLE_SCHEMA",
    "build_schema",
    "catalog_nodes",
    "catalog_marks",
    # Configuration
    "DEFAULT_CONFIG",
    "DEFAULT_EXCLUDED_MARKS",
    "SchemaConfig",
    # Content models
    "ChoiceParticle",
    "CompositeParticle",
    "ContentModel",
    "NodeParticle",
    "Particle",
    "ParticleType",
    "SequenceParticle",
    # Registry
    "TypeRegistry",
    # Specs
    "REQUIRED",
    "AttributeSpec",
    "DomAttribute",
    "MarkTypeSpec",
    "MatchedStyleValue",
    "NodeTypeSpec",
    "ParseRule",
    "RenderRule",
    "StyleProperty",
    # Tables
    "BACKGROUND",
    "CellAttribute",
    "table_nodes",
]
