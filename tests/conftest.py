"""pytest configuration and fixtures for article_schema tests."""

from __future__ import annotations

from typing import Callable

import lxml.html
import pytest
from lxml import etree

from article_schema import (
    ARTICLE_SCHEMA,
    DocumentParser,
    DocumentSerializer,
    SchemaConfig,
    TypeRegistry,
    build_schema,
)


@pytest.fixture
def registry() -> TypeRegistry:
    """Provide the product registry (strong and underline marks only)."""
    return ARTICLE_SCHEMA


@pytest.fixture
def full_registry() -> TypeRegistry:
    """Provide a registry with every catalog mark enabled."""
    return build_schema(SchemaConfig(excluded_marks=frozenset()))


@pytest.fixture
def parser(registry: TypeRegistry) -> DocumentParser:
    return DocumentParser(registry)


@pytest.fixture
def serializer(registry: TypeRegistry) -> DocumentSerializer:
    return DocumentSerializer(registry)


@pytest.fixture
def element() -> Callable[[str], etree._Element]:
    """Build a single markup element from an HTML snippet."""

    def build(html: str) -> etree._Element:
        return lxml.html.fragment_fromstring(html)

    return build
