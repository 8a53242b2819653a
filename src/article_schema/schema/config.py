"""Deployment configuration for building the article schema."""

from __future__ import annotations

from dataclasses import dataclass, replace

# Marks the product does not offer. Color and size are out of the
# product's scope; code, links and italics are not offered to authors.
DEFAULT_EXCLUDED_MARKS = frozenset({"code", "link", "em", "font_size", "color"})


@dataclass(frozen=True)
class SchemaConfig:
    """Which catalog types a registry leaves out.

    Attributes:
        excluded_marks: Mark type names removed from the catalog.
        excluded_nodes: Node type names removed from the catalog.
    """

    excluded_marks: frozenset[str] = DEFAULT_EXCLUDED_MARKS
    excluded_nodes: frozenset[str] = frozenset()

    def enabling(self, *marks: str) -> SchemaConfig:
        """Return a copy with the given marks no longer excluded."""
        return replace(self, excluded_marks=self.excluded_marks - frozenset(marks))

    def excluding(self, *marks: str) -> SchemaConfig:
        """Return a copy with the given marks excluded as well."""
        return replace(self, excluded_marks=self.excluded_marks | frozenset(marks))


DEFAULT_CONFIG = SchemaConfig()
