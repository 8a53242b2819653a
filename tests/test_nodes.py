"""Tests for node type decode and encode rules."""

from __future__ import annotations

import pytest

from article_schema import HOLE, DecodeMismatch, MarkupTemplate, Node, TypeRegistry


class TestParagraph:
    """Tests for the paragraph type."""

    @pytest.mark.parametrize(
        ("style", "expected"),
        [
            ("text-align: center", "center"),
            ("TEXT-ALIGN:Right", "right"),
            ("text-align: justify", "left"),
            ("color: red", "left"),
        ],
    )
    def test_alignment(self, registry: TypeRegistry, element, style: str, expected: str) -> None:
        """Test alignment."""
        node = registry.decode(element(f'<p style="{style}">x</p>'))
        assert node.attrs == {"align": expected}

    def test_no_style(self, registry: TypeRegistry, element) -> None:
        """Test no style."""
        assert registry.decode(element("<p>x</p>")).attrs == {"align": "left"}

    def test_encode(self, registry: TypeRegistry) -> None:
        """Test encode."""
        template = registry.encode(Node("paragraph", {"align": "center"}))
        assert template == MarkupTemplate("p", {"style": "text-align: center"}, HOLE)

    def test_encode_default_alignment(self, registry: TypeRegistry) -> None:
        """Test that the default alignment is still written out."""
        template = registry.encode(registry.create_node("paragraph"))
        assert template.attrs == {"style": "text-align: left"}


class TestImage:
    """Tests for the image type."""

    def test_decode(self, registry: TypeRegistry, element) -> None:
        """Test decode."""
        node = registry.decode(element('<img src="/a.png" alt="A tree">'))
        assert node == Node("image", {"src": "/a.png", "desc": "A tree"})

    def test_missing_values(self, registry: TypeRegistry, element) -> None:
        """Test missing values."""
        node = registry.decode(element("<img>"))
        assert node.attrs == {"src": None, "desc": None}

    def test_encode_skips_empty_description(self, registry: TypeRegistry) -> None:
        """Test encode skips empty description."""
        template = registry.encode(registry.create_node("image", {"src": "/a.png"}))
        assert template == MarkupTemplate("img", {"src": "/a.png"}, None)
        assert not template.has_hole


class TestVideo:
    """Tests for the video embed type."""

    MARKUP = (
        '<div data-node="video" data-source="YouTube " data-source-id="x1"'
        ' data-url="https://youtu.be/x1" data-title="A &amp; B"'
        ' data-thumbnail="https://img/x1.jpg"></div>'
    )

    def test_values_are_verbatim(self, registry: TypeRegistry, element) -> None:
        """Test values are verbatim."""
        node = registry.decode(element(self.MARKUP))
        assert node.attrs == {
            "source": "YouTube ",
            "source_id": "x1",
            "url": "https://youtu.be/x1",
            "title": "A & B",
            "thumbnail": "https://img/x1.jpg",
        }

    def test_encode(self, registry: TypeRegistry) -> None:
        """Test encode."""
        node = registry.create_node(
            "video",
            {
                "source": "vimeo",
                "source_id": "42",
                "url": "https://vimeo.com/42",
                "title": "Clip",
                "thumbnail": "https://img/42.jpg",
            },
        )
        template = registry.encode(node)
        assert template.tag == "div"
        assert list(template.attrs.items()) == [
            ("data-node", "video"),
            ("data-source", "vimeo"),
            ("data-source-id", "42"),
            ("data-url", "https://vimeo.com/42"),
            ("data-title", "Clip"),
            ("data-thumbnail", "https://img/42.jpg"),
        ]
        assert template.content is None

    @pytest.mark.parametrize(
        "markup",
        ['<div data-source="youtube"></div>', '<div data-node="audio"></div>'],
    )
    def test_other_divs_do_not_match(self, registry: TypeRegistry, element, markup: str) -> None:
        """Test other divs do not match."""
        with pytest.raises(DecodeMismatch):
            registry.decode(element(markup))


class TestDivider:
    """Tests for the divider type."""

    @pytest.mark.parametrize(
        ("markup", "expected"),
        [
            ('<hr data-style="3">', "3"),
            ('<hr data-style="9">', "1"),
            ('<hr data-style="dotted">', "1"),
            ("<hr>", "1"),
        ],
    )
    def test_decode(self, registry: TypeRegistry, element, markup: str, expected: str) -> None:
        """Test decode."""
        assert registry.decode(element(markup)).attrs == {"style": expected}

    def test_encode(self, registry: TypeRegistry) -> None:
        """Test encode."""
        template = registry.encode(Node("divider", {"style": "4"}))
        assert template == MarkupTemplate("hr", {"data-style": "4"}, None)


class TestTextBlocks:
    """Tests for quote, heading and hard break."""

    def test_quote(self, registry: TypeRegistry, element) -> None:
        """Test quote."""
        assert registry.decode(element("<blockquote>q</blockquote>")) == Node("quote")
        assert registry.encode(Node("quote")) == MarkupTemplate("blockquote", {}, HOLE)

    def test_heading(self, registry: TypeRegistry, element) -> None:
        """Test heading."""
        assert registry.decode(element("<h2>t</h2>")) == Node("heading")
        assert registry.encode(Node("heading")) == MarkupTemplate("h2", {}, HOLE)

    def test_other_heading_levels_do_not_match(self, registry: TypeRegistry, element) -> None:
        """Test other heading levels do not match."""
        with pytest.raises(DecodeMismatch):
            registry.decode(element("<h3>t</h3>"))

    def test_hard_break(self, registry: TypeRegistry, element) -> None:
        """Test hard break."""
        assert registry.decode(element("<br>")) == Node("hard_break")
        assert registry.encode(Node("hard_break")) == MarkupTemplate("br", {}, None)
        assert not registry.node_type("hard_break").selectable

    def test_text_has_no_markup_form(self, registry: TypeRegistry) -> None:
        """Test text has no markup form."""
        with pytest.raises(ValueError):
            registry.encode(registry.create_text("x"))


class TestRoundTrip:
    """decode(encode(node)) reproduces every node with canonical attributes."""

    @pytest.mark.parametrize(
        "node",
        [
            Node("hard_break"),
            Node("paragraph", {"align": "left"}),
            Node("paragraph", {"align": "right"}),
            Node("image", {"src": "/a.png", "desc": "A"}),
            Node("image", {"src": "/a.png", "desc": None}),
            Node(
                "video",
                {
                    "source": "youtube",
                    "source_id": "abc",
                    "url": "https://youtu.be/abc",
                    "title": "T",
                    "thumbnail": "https://img/abc.jpg",
                },
            ),
            Node("quote"),
            Node("divider", {"style": "2"}),
            Node("heading"),
            Node("table"),
            Node("table_row"),
            Node(
                "table_cell",
                {"colspan": 1, "rowspan": 1, "colwidth": None, "background": None},
            ),
            Node(
                "table_cell",
                {"colspan": 2, "rowspan": 3, "colwidth": [120, 80], "background": "#00ff00"},
            ),
            Node(
                "table_header",
                {"colspan": 1, "rowspan": 1, "colwidth": [50], "background": "#ff0000"},
            ),
        ],
        ids=lambda node: f"{node.type}-{sorted(node.attrs.items())}",
    )
    def test_round_trip(self, registry: TypeRegistry, node: Node) -> None:
        """Test round trip."""
        outer, _ = registry.encode(node).to_element()
        assert registry.decode(outer) == node
