"""Tests for mark types and the configured mark policy."""

from __future__ import annotations

import pytest

from article_schema import (
    ARTICLE_SCHEMA,
    HOLE,
    ContentModelError,
    Mark,
    MarkupTemplate,
    SchemaConfig,
    TypeRegistry,
    UnknownTypeError,
    build_schema,
)
from article_schema.schema import DEFAULT_EXCLUDED_MARKS


def mark_types(registry: TypeRegistry, element, html: str) -> list[str]:
    return [mark.type for mark in registry.decode_marks(element(html))]


class TestMarkPolicy:
    """Tests for which marks a built registry offers."""

    def test_product_marks(self, registry: TypeRegistry) -> None:
        """Test that only bold and underline are offered by default."""
        assert registry.mark_names == ("strong", "underline")

    def test_default_exclusions(self) -> None:
        """Test default exclusions."""
        assert DEFAULT_EXCLUDED_MARKS == frozenset({"code", "link", "em", "font_size", "color"})

    def test_full_catalog(self, full_registry: TypeRegistry) -> None:
        """Test full catalog."""
        assert full_registry.mark_names == (
            "link",
            "em",
            "strong",
            "code",
            "font_size",
            "color",
            "underline",
        )

    def test_enabling(self) -> None:
        """Test enabling."""
        registry = build_schema(SchemaConfig().enabling("em"))
        assert registry.mark_names == ("em", "strong", "underline")
        assert registry.allowed_marks("paragraph") == frozenset({"em", "strong", "underline"})

    def test_excluding(self) -> None:
        """Test excluding."""
        registry = build_schema(SchemaConfig().excluding("underline"))
        assert registry.mark_names == ("strong",)

    def test_registries_are_independent(self) -> None:
        """Test that building another configuration leaves the shared one alone."""
        build_schema(SchemaConfig(excluded_marks=frozenset()))
        assert ARTICLE_SCHEMA.mark_names == ("strong", "underline")

    def test_unknown_exclusion(self) -> None:
        """Test unknown exclusion."""
        with pytest.raises(UnknownTypeError, match="'blink'"):
            build_schema(SchemaConfig(excluded_marks=frozenset({"blink"})))

    def test_excluding_video(self) -> None:
        """Test excluding video."""
        registry = build_schema(SchemaConfig(excluded_nodes=frozenset({"video"})))
        assert not registry.has_node("video")
        assert "video" not in registry.group_members("block")

    def test_excluding_a_referenced_node(self) -> None:
        """Test that removing a type other content depends on fails to build."""
        with pytest.raises(ContentModelError, match="'paragraph'"):
            build_schema(SchemaConfig(excluded_nodes=frozenset({"paragraph"})))


class TestDecodeMarks:
    """Tests for decoding marks from elements."""

    @pytest.mark.parametrize(
        "html",
        [
            "<strong>x</strong>",
            "<b>x</b>",
            '<span style="font-weight: bold">x</span>',
            '<span style="font-weight: 700">x</span>',
        ],
    )
    def test_strong(self, registry: TypeRegistry, element, html: str) -> None:
        """Test strong."""
        assert mark_types(registry, element, html) == ["strong"]

    @pytest.mark.parametrize(
        "html",
        [
            '<b style="font-weight: normal">x</b>',
            '<span style="font-weight: 400">x</span>',
        ],
    )
    def test_not_strong(self, registry: TypeRegistry, element, html: str) -> None:
        """Test not strong."""
        assert mark_types(registry, element, html) == []

    @pytest.mark.parametrize(
        "html",
        ["<u>x</u>", '<span style="text-decoration: underline">x</span>'],
    )
    def test_underline(self, registry: TypeRegistry, element, html: str) -> None:
        """Test underline."""
        assert mark_types(registry, element, html) == ["underline"]

    def test_excluded_marks_are_ignored(self, registry: TypeRegistry, element) -> None:
        """Test excluded marks are ignored."""
        assert mark_types(registry, element, "<em>x</em>") == []
        assert mark_types(registry, element, '<a href="/x">x</a>') == []
        assert mark_types(registry, element, '<span style="color: red">x</span>') == []

    def test_several_marks_in_registration_order(self, registry: TypeRegistry, element) -> None:
        """Test several marks in registration order."""
        html = '<span style="text-decoration: underline; font-weight: bold">x</span>'
        assert mark_types(registry, element, html) == ["strong", "underline"]

    @pytest.mark.parametrize(
        "html",
        ["<em>x</em>", "<i>x</i>", '<span style="font-style: Italic">x</span>'],
    )
    def test_em(self, full_registry: TypeRegistry, element, html: str) -> None:
        """Test em."""
        assert mark_types(full_registry, element, html) == ["em"]

    def test_link(self, full_registry: TypeRegistry, element) -> None:
        """Test link."""
        marks = full_registry.decode_marks(element('<a href="/x" title="More">x</a>'))
        assert marks == [Mark("link", {"href": "/x", "title": "More"})]
        assert full_registry.decode_marks(element('<a name="anchor">x</a>')) == []

    @pytest.mark.parametrize(
        ("size", "level"),
        [("60%", 1), ("120%", 4), ("140%", 5), ("13px", 3)],
    )
    def test_font_size(self, full_registry: TypeRegistry, element, size: str, level: int) -> None:
        """Test font size."""
        marks = full_registry.decode_marks(element(f'<span style="font-size: {size}">x</span>'))
        assert marks == [Mark("font_size", {"size": level})]

    @pytest.mark.parametrize(
        ("html", "color"),
        [
            ('<span style="color: rgb(0, 0, 255)">x</span>', "#0000ff"),
            ('<font color="Red">x</font>', "#ff0000"),
            ('<span style="color: nope">x</span>', "#000000"),
            ('<span style="color: hsla(0,100%,50%,0.5)">x</span>', "#ff0000"),
        ],
    )
    def test_color(self, full_registry: TypeRegistry, element, html: str, color: str) -> None:
        """Test color."""
        assert full_registry.decode_marks(element(html)) == [Mark("color", {"color": color})]

    def test_tag_and_style_together(self, full_registry: TypeRegistry, element) -> None:
        """Test tag and style together."""
        marks = full_registry.decode_marks(
            element('<strong style="color: #00f; font-size: 80%">x</strong>')
        )
        assert marks == [
            Mark("strong"),
            Mark("font_size", {"size": 2}),
            Mark("color", {"color": "#0000ff"}),
        ]


class TestEncodeMarks:
    """Tests for encoding marks."""

    def test_strong(self, registry: TypeRegistry) -> None:
        """Test strong."""
        assert registry.encode_mark(Mark("strong")) == MarkupTemplate("strong", {}, HOLE)

    def test_underline(self, registry: TypeRegistry) -> None:
        """Test underline."""
        assert registry.encode_mark(Mark("underline")) == MarkupTemplate(
            "span", {"style": "text-decoration: underline"}, HOLE
        )

    def test_link(self, full_registry: TypeRegistry) -> None:
        """Test link."""
        template = full_registry.encode_mark(Mark("link", {"href": "/x", "title": None}))
        assert template == MarkupTemplate("a", {"href": "/x"}, HOLE)

    def test_font_size(self, full_registry: TypeRegistry) -> None:
        """Test font size."""
        template = full_registry.encode_mark(Mark("font_size", {"size": 5}))
        assert template.attrs == {"style": "font-size: 140%"}

    def test_font_size_out_of_range(self, full_registry: TypeRegistry) -> None:
        """Test font size out of range."""
        with pytest.raises(ValueError):
            full_registry.encode_mark(Mark("font_size", {"size": 9}))

    def test_color(self, full_registry: TypeRegistry) -> None:
        """Test color."""
        template = full_registry.encode_mark(Mark("color", {"color": "#ff0000"}))
        assert template == MarkupTemplate("span", {"style": "color: #ff0000"}, HOLE)

    def test_excluded_mark(self, registry: TypeRegistry) -> None:
        """Test excluded mark."""
        with pytest.raises(UnknownTypeError):
            registry.encode_mark(Mark("em"))
