"""Assembly of the article schema.

The full catalog is rebuilt from its factories on every call, then the
configured exclusions are filtered out, and only the remaining specs are
registered. Nothing shared is ever modified, so registries built with
different configurations do not affect each other.
"""

from __future__ import annotations

import logging
from typing import Iterable, TypeVar

from article_schema.errors import UnknownTypeError
from article_schema.schema.config import DEFAULT_CONFIG, SchemaConfig
from article_schema.schema.marks import base_marks
from article_schema.schema.nodes import base_nodes
from article_schema.schema.registry import TypeRegistry
from article_schema.schema.spec import MarkTypeSpec, NodeTypeSpec
from article_schema.schema.tables import BACKGROUND, table_nodes

logger = logging.getLogger(__name__)

SpecT = TypeVar("SpecT", NodeTypeSpec, MarkTypeSpec)


def catalog_nodes() -> list[NodeTypeSpec]:
    """Every node type of the article format, in matching priority order."""
    return base_nodes() + table_nodes(
        table_group="block",
        cell_content="paragraph+",
        cell_attributes={"background": BACKGROUND},
    )


def catalog_marks() -> list[MarkTypeSpec]:
    """Every mark type of the article format."""
    return base_marks()


def _exclude(kind: str, specs: list[SpecT], excluded: Iterable[str]) -> list[SpecT]:
    names = set(excluded)
    known = {spec.name for spec in specs}
    unknown = sorted(names - known)
    if unknown:
        raise UnknownTypeError(kind, unknown[0])
    return [spec for spec in specs if spec.name not in names]


def build_schema(config: SchemaConfig | None = None) -> TypeRegistry:
    """Build a frozen article registry.

    Args:
        config: Which catalog types to leave out. Defaults to the
            product configuration (only strong and underline marks).

    Returns:
        The frozen registry.

    Raises:
        UnknownTypeError: If an exclusion names a type the catalog lacks.
        ContentModelError: If an exclusion leaves a content model with a
            dangling reference.
    """
    config = config or DEFAULT_CONFIG
    nodes = _exclude("node", catalog_nodes(), config.excluded_nodes)
    marks = _exclude("mark", catalog_marks(), config.excluded_marks)

    registry = TypeRegistry(top_node="doc")
    for spec in nodes:
        registry.register(spec)
    for spec in marks:
        registry.register(spec)

    logger.debug("Building article schema; excluded marks: %s", sorted(config.excluded_marks))
    return registry.freeze()


# Global registry instance
ARTICLE_SCHEMA = build_schema()
