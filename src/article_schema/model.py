"""Structured document values and markup templates."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Hashable, Mapping, Union

from lxml import etree


def _frozen_key(value: Any) -> Hashable:
    """Hashable stand-in for an attribute value (lists and dicts included)."""
    if isinstance(value, Mapping):
        return tuple(sorted((key, _frozen_key(item)) for key, item in value.items()))
    if isinstance(value, (list, tuple)):
        return tuple(_frozen_key(item) for item in value)
    return value


def _readonly(attrs: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(attrs))


@dataclass(frozen=True)
class Mark:
    """An inline formatting annotation on a text node."""

    type: str
    attrs: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attrs", _readonly(self.attrs))

    def __hash__(self) -> int:
        return hash((self.type, _frozen_key(self.attrs)))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type}
        if self.attrs:
            data["attrs"] = dict(self.attrs)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Mark:
        return cls(type=data["type"], attrs=dict(data.get("attrs") or {}))


@dataclass(frozen=True)
class Node:
    """A node in a structured article.

    Text nodes carry ``text`` and ``marks``; every other node carries
    ``content``. Nodes are values: two nodes with the same type,
    attributes, children, marks and text compare equal and hash alike.
    ``attrs`` is a read-only mapping.
    """

    type: str
    attrs: Mapping[str, Any] = field(default_factory=dict)
    content: tuple[Node, ...] = ()
    marks: tuple[Mark, ...] = ()
    text: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "attrs", _readonly(self.attrs))
        object.__setattr__(self, "content", tuple(self.content))
        object.__setattr__(self, "marks", tuple(self.marks))

    def __hash__(self) -> int:
        return hash((self.type, _frozen_key(self.attrs), self.content, self.marks, self.text))

    @property
    def is_text(self) -> bool:
        return self.text is not None

    @property
    def text_content(self) -> str:
        """Concatenated text of this node and its descendants."""
        if self.text is not None:
            return self.text
        return "".join(child.text_content for child in self.content)

    def with_content(self, content: list[Node] | tuple[Node, ...]) -> Node:
        return Node(self.type, dict(self.attrs), tuple(content), self.marks, self.text)

    def with_marks(self, marks: list[Mark] | tuple[Mark, ...]) -> Node:
        return Node(self.type, dict(self.attrs), self.content, tuple(marks), self.text)

    def to_dict(self) -> dict[str, Any]:
        """Return the plain JSON view of this node tree."""
        data: dict[str, Any] = {"type": self.type}
        if self.attrs:
            data["attrs"] = dict(self.attrs)
        if self.content:
            data["content"] = [child.to_dict() for child in self.content]
        if self.marks:
            data["marks"] = [mark.to_dict() for mark in self.marks]
        if self.text is not None:
            data["text"] = self.text
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Node:
        """Build a node tree from its JSON view without schema checks."""
        return cls(
            type=data["type"],
            attrs=dict(data.get("attrs") or {}),
            content=tuple(cls.from_dict(child) for child in data.get("content") or ()),
            marks=tuple(Mark.from_dict(mark) for mark in data.get("marks") or ()),
            text=data.get("text"),
        )


class _Hole:
    """Placeholder for a node's children inside a markup template."""

    _instance: _Hole | None = None

    def __new__(cls) -> _Hole:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "HOLE"


HOLE = _Hole()

TemplateContent = Union["MarkupTemplate", _Hole, None]


@dataclass(frozen=True)
class MarkupTemplate:
    """Markup descriptor produced when encoding a node or mark.

    ``content`` is ``HOLE`` when children go directly inside the element,
    a nested template when they go inside a fixed wrapper (a table's
    ``tbody``), or ``None`` for elements without children.
    """

    tag: str
    attrs: Mapping[str, str] = field(default_factory=dict)
    content: TemplateContent = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "attrs", _readonly(self.attrs))

    def __hash__(self) -> int:
        return hash((self.tag, _frozen_key(self.attrs), self.content))

    @property
    def has_hole(self) -> bool:
        if self.content is HOLE:
            return True
        if isinstance(self.content, MarkupTemplate):
            return self.content.has_hole
        return False

    def to_element(self) -> tuple[etree._Element, etree._Element | None]:
        """Materialize the template as an lxml element.

        Returns:
            The outer element and the element that receives children
            (``None`` when the template has no content hole).
        """
        element = etree.Element(self.tag)
        for name, value in self.attrs.items():
            element.set(name, value)

        if self.content is HOLE:
            return element, element
        if isinstance(self.content, MarkupTemplate):
            inner, hole = self.content.to_element()
            element.append(inner)
            return element, hole
        return element, None
