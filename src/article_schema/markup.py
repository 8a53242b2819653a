"""Reference walker between HTML and article node trees.

``DocumentParser`` feeds every element of an HTML tree to the registry's
decode rules and assembles the resulting nodes; ``DocumentSerializer``
does the reverse through the encode rules. Both stay deliberately
simple: elements no rule knows are transparent, and content that does
not fit where it appears is wrapped in a paragraph, merged into or
lifted out of its parent, or else dropped.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Sequence

import lxml.html
from lxml import etree

from article_schema.errors import DecodeMismatch
from article_schema.model import Mark, Node
from article_schema.schema.article import ARTICLE_SCHEMA
from article_schema.schema.registry import TypeRegistry

logger = logging.getLogger(__name__)

IGNORED_TAGS = frozenset({"head", "link", "meta", "noscript", "script", "style", "template", "title"})

_WHITESPACE = re.compile(r"\s+")

IMPLICIT_BLOCK = "paragraph"

# Elements that start a new line of content even when no rule knows them.
BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "dd", "details", "dialog", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6",
    "header", "hgroup", "hr", "li", "main", "nav", "ol", "p", "pre", "section", "summary",
    "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
})


def _merge_marks(outer: Sequence[Mark], inner: Iterable[Mark]) -> tuple[Mark, ...]:
    """Add marks, an inner mark replacing an outer one of the same type."""
    merged = {mark.type: mark for mark in outer}
    for mark in inner:
        merged[mark.type] = mark
    return tuple(merged.values())


class _ContentBuilder:
    """Collects the children of one node while the walker visits markup."""

    def __init__(self, registry: TypeRegistry, parent_type: str):
        self.registry = registry
        self.parent_type = parent_type
        self.model = registry.content_model(parent_type)
        self.allowed_marks = registry.allowed_marks(parent_type)
        self.accepts_inline = self.model.allows("text")
        self.nodes: list[Node] = []
        self._sections: list[tuple[list[Node], Node]] = []
        self._implicit: _ContentBuilder | None = None
        self._break_pending = False

    def add_text(self, text: str, marks: Sequence[Mark]) -> None:
        text = _WHITESPACE.sub(" ", text)
        if not text:
            return

        if not self.accepts_inline:
            implicit = self._implicit_block() if text.strip() else self._implicit
            if implicit is not None:
                implicit.add_text(text, marks)
            return

        if text.strip():
            self._resolve_break()
        last = self.nodes[-1] if self.nodes else None
        if last is None or last.type == "hard_break" or (last.is_text and (last.text or "").endswith(" ")):
            text = text.lstrip(" ")
        if not text:
            return

        node_marks = self._allowed(marks)
        if last is not None and last.is_text and last.marks == node_marks:
            self.nodes[-1] = Node("text", marks=node_marks, text=(last.text or "") + text)
        else:
            self.nodes.append(Node("text", marks=node_marks, text=text))

    def add_node(self, node: Node) -> None:
        spec = self.registry.node_type(node.type)

        if spec.inline:
            if not self.accepts_inline:
                implicit = self._implicit_block()
                if implicit is not None:
                    implicit.add_node(node)
            elif self.model.allows(node.type):
                if node.type == "hard_break":
                    self._break_pending = False
                self._resolve_break()
                self.nodes.append(node.with_marks(self._allowed(node.marks)))
            else:
                logger.debug("Dropping inline '%s' inside '%s'", node.type, self.parent_type)
            return

        self._flush_implicit()
        self._break_pending = False
        if self.model.allows(node.type):
            self.nodes.append(node)
        elif self.accepts_inline and node.content and all(
            child.type in self.model.type_names for child in node.content
        ):
            # e.g. paragraphs inside a quote: keep their lines
            if self.nodes and self.model.allows("hard_break"):
                self.nodes.append(self.registry.create_node("hard_break"))
            for child in node.content:
                if child.is_text:
                    self.add_text(child.text or "", child.marks)
                else:
                    self.add_node(child)
        elif self.accepts_inline:
            # e.g. an image inside a paragraph: split the paragraph around it
            self._sections.append((self.nodes, node))
            self.nodes = []
        else:
            logger.debug("Dropping '%s' inside '%s'", node.type, self.parent_type)

    def end_block(self) -> None:
        """Mark the edge of a block-level element no rule matched.

        Block content gets a new implicit paragraph; inline content gets a
        line break (or a space) once more content follows.
        """
        if not self.accepts_inline:
            self._flush_implicit()
        elif self.nodes and self.nodes[-1].type != "hard_break":
            self._break_pending = True

    def _resolve_break(self) -> None:
        if not self._break_pending:
            return
        self._break_pending = False
        last = self.nodes[-1]
        if self.model.allows("hard_break"):
            if last.is_text:
                self.nodes.pop()
                kept = (last.text or "").rstrip(" ")
                if kept:
                    self.nodes.append(Node("text", marks=last.marks, text=kept))
            self.nodes.append(self.registry.create_node("hard_break"))
        elif last.is_text and not (last.text or "").endswith(" "):
            self.nodes[-1] = Node("text", marks=last.marks, text=(last.text or "") + " ")

    def finish(self) -> list[Node]:
        self._flush_implicit()
        return self._complete(self.nodes)

    def finish_split(self) -> list[tuple[list[Node], Node | None]]:
        """Content runs, each followed by the block that interrupted it."""
        self._flush_implicit()
        if not self._sections:
            return [(self._complete(self.nodes), None)]
        runs = [(self._trim(before), block) for before, block in self._sections]
        runs.append((self._trim(self.nodes), None))
        return runs

    def _complete(self, nodes: list[Node]) -> list[Node]:
        nodes = self._trim(nodes)
        if not nodes and not self.model.matches([]):
            filler = self._filler()
            if filler is not None:
                nodes = [self.registry.create_node(filler)]
        return nodes

    def _filler(self) -> str | None:
        """First type that can be created bare and alone fills this node."""
        candidates = [IMPLICIT_BLOCK] if self.registry.has_node(IMPLICIT_BLOCK) else []
        candidates.extend(self.registry.node_names)
        for name in candidates:
            spec = self.registry.node_type(name)
            if spec.is_text or not all(attr.has_default for attr in spec.attrs.values()):
                continue
            if self.registry.content_model(name).matches([]) and self.model.matches([name]):
                return name
        return None

    def _allowed(self, marks: Sequence[Mark]) -> tuple[Mark, ...]:
        kept = [mark for mark in marks if mark.type in self.allowed_marks]
        return tuple(self.registry.sort_marks(kept))

    def _implicit_block(self) -> _ContentBuilder | None:
        if self._implicit is None and self.registry.has_node(IMPLICIT_BLOCK):
            self._implicit = _ContentBuilder(self.registry, IMPLICIT_BLOCK)
        return self._implicit

    def _flush_implicit(self) -> None:
        if self._implicit is None:
            return
        content = self._implicit.finish()
        self._implicit = None
        if content and self.model.allows(IMPLICIT_BLOCK):
            self.nodes.append(self.registry.create_node(IMPLICIT_BLOCK, content=content))
        elif content:
            logger.debug("Dropping stray inline content inside '%s'", self.parent_type)

    @staticmethod
    def _trim(nodes: list[Node]) -> list[Node]:
        if not nodes:
            return nodes
        trimmed = list(nodes)
        first = trimmed[0]
        if first.is_text:
            trimmed[0] = Node("text", marks=first.marks, text=(first.text or "").lstrip(" "))
        last = trimmed[-1]
        if last.is_text:
            trimmed[-1] = Node("text", marks=last.marks, text=(last.text or "").rstrip(" "))
        return [node for node in trimmed if not node.is_text or node.text]


class DocumentParser:
    """Builds article node trees from HTML."""

    def __init__(self, registry: TypeRegistry | None = None):
        self.registry = registry or ARTICLE_SCHEMA

    def parse(self, html: str) -> Node:
        """Parse an HTML document or fragment into a ``doc`` node."""
        top = self.registry.top_node
        content = self.parse_fragment(html, parent=top)
        if not content:
            content = _ContentBuilder(self.registry, top).finish()
        return self.registry.create_node(top, content=content)

    def parse_fragment(self, html: str, parent: str | None = None) -> list[Node]:
        """Parse HTML into the children of a node of type ``parent``."""
        parent = parent or self.registry.top_node
        if not html or not html.strip():
            return []
        body = lxml.html.document_fromstring(html).find("body")
        if body is None:
            return []
        return self.parse_element_content(body, parent)

    def parse_element_content(self, element: etree._Element, parent: str) -> list[Node]:
        """Parse the children of an element as the content of ``parent``."""
        builder = _ContentBuilder(self.registry, parent)
        self._add_children(element, builder, ())
        return builder.finish()

    def _add_children(self, element: etree._Element, builder: _ContentBuilder, marks: tuple[Mark, ...]) -> None:
        if element.text:
            builder.add_text(element.text, marks)
        for child in element:
            self._add_element(child, builder, marks)
            if child.tail:
                builder.add_text(child.tail, marks)

    def _add_element(self, element: etree._Element, builder: _ContentBuilder, marks: tuple[Mark, ...]) -> None:
        if not isinstance(element.tag, str) or element.tag in IGNORED_TAGS:
            return

        try:
            node = self.registry.decode(element)
        except DecodeMismatch:
            node = None

        if node is not None:
            spec = self.registry.node_type(node.type)
            if spec.is_leaf:
                builder.add_node(node.with_marks(marks) if spec.inline else node)
            else:
                child_builder = _ContentBuilder(self.registry, node.type)
                self._add_children(element, child_builder, ())
                runs = child_builder.finish_split()
                for content, block in runs:
                    if not content and not child_builder.model.matches([]):
                        logger.debug("Dropping empty '%s'", node.type)
                    elif content or len(runs) == 1:
                        builder.add_node(node.with_content(content))
                    if block is not None:
                        builder.add_node(block)
            return

        element_marks = self.registry.decode_marks(element)
        if not element_marks:
            logger.debug("No rule for <%s>; parsing its content in place", element.tag)
        block = element.tag in BLOCK_TAGS
        if block:
            builder.end_block()
        self._add_children(element, builder, _merge_marks(marks, element_marks))
        if block:
            builder.end_block()


class DocumentSerializer:
    """Renders article node trees as HTML."""

    def __init__(self, registry: TypeRegistry | None = None):
        self.registry = registry or ARTICLE_SCHEMA

    def serialize(self, node: Node) -> str:
        """Render a node (a ``doc`` renders as its children) as HTML."""
        container = self.to_element(node)
        parts = [container.text or ""]
        parts.extend(lxml.html.tostring(child, encoding="unicode") for child in container)
        return "".join(parts)

    def to_element(self, node: Node) -> etree._Element:
        """Render a node into a ``div`` container element."""
        container = etree.Element("div")
        if node.type == self.registry.top_node:
            self._append_content(container, node.content)
        else:
            self._append_content(container, (node,))
        return container

    def _append_content(self, parent: etree._Element, nodes: Iterable[Node]) -> None:
        for node in nodes:
            target = self._wrap_marks(parent, node.marks)
            if node.is_text:
                _append_text(target, node.text or "")
                continue

            outer, hole = self.registry.encode(node).to_element()
            target.append(outer)
            if hole is not None:
                self._append_content(hole, node.content)

    def _wrap_marks(self, parent: etree._Element, marks: Sequence[Mark]) -> etree._Element:
        for mark in self.registry.sort_marks(marks):
            outer, hole = self.registry.encode_mark(mark).to_element()
            parent.append(outer)
            parent = hole if hole is not None else outer
        return parent


def _append_text(element: etree._Element, text: str) -> None:
    if len(element):
        last = element[-1]
        last.tail = (last.tail or "") + text
    else:
        element.text = (element.text or "") + text
