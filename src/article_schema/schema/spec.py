"""Node, mark and attribute specs.

A type spec is data: its attributes carry a default and a codec pair,
its parse rules say which markup elements it matches and where each
attribute's raw value is read from, and its render rule says which
element it becomes and where each encoded attribute is written to.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Union

from lxml import etree

from article_schema.codec import append_style, parse_style
from article_schema.errors import AttributeDecodeFailure, DecodeMismatch
from article_schema.model import HOLE, MarkupTemplate, TemplateContent

logger = logging.getLogger(__name__)


class _Required:
    def __repr__(self) -> str:
        return "REQUIRED"


# Default marker for attributes that must be given a value explicitly.
REQUIRED: Any = _Required()


@dataclass(frozen=True)
class AttributeSpec:
    """Default value and codec pair for one attribute.

    ``decode`` turns the external string into the canonical value and may
    raise ``AttributeDecodeFailure``; ``encode`` renders the canonical
    value as a string. Both default to passing strings through unchanged.
    """

    default: Any = REQUIRED
    decode: Callable[[str], Any] | None = None
    encode: Callable[[Any], str] | None = None
    omit_default: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not REQUIRED

    @property
    def fallback(self) -> Any:
        """Value used when markup lacks the attribute or it fails to decode."""
        return self.default if self.has_default else None

    def decode_value(self, raw: str | None) -> Any:
        """Decode a raw markup value, falling back to the default."""
        if raw is None:
            return self.fallback
        if self.decode is None:
            return raw
        try:
            return self.decode(raw)
        except AttributeDecodeFailure as exc:
            logger.debug("Falling back to %r: %s", self.fallback, exc)
            return self.fallback

    def encode_value(self, value: Any) -> str | None:
        """Encode a canonical value; ``None`` means "do not write".

        Empty values are not written either.
        """
        if value is None:
            return None
        if self.omit_default and self.has_default and value == self.default:
            return None
        encoded = str(value) if self.encode is None else self.encode(value)
        return encoded or None


@dataclass(frozen=True)
class DomAttribute:
    """Reads and writes a plain element attribute."""

    name: str

    def read(self, element: etree._Element, style_value: str | None = None) -> str | None:
        return element.get(self.name)

    def write(self, attrs: dict[str, str], value: str) -> None:
        attrs[self.name] = value


@dataclass(frozen=True)
class StyleProperty:
    """Reads and writes one property of the inline ``style`` attribute.

    Writing appends to whatever style is already there.
    """

    prop: str
    terminator: str = ""

    def read(self, element: etree._Element, style_value: str | None = None) -> str | None:
        return parse_style(element.get("style")).get(self.prop)

    def write(self, attrs: dict[str, str], value: str) -> None:
        attrs["style"] = append_style(attrs.get("style"), self.prop, value, self.terminator)


@dataclass(frozen=True)
class MatchedStyleValue:
    """Reads the style value a style-based parse rule matched on."""

    def read(self, element: etree._Element, style_value: str | None = None) -> str | None:
        return style_value


Source = Union[DomAttribute, StyleProperty, MatchedStyleValue]
Target = Union[DomAttribute, StyleProperty]


def _freeze_mappings(instance: Any, *names: str) -> None:
    """Replace mapping fields of a frozen dataclass with read-only copies."""
    for name in names:
        object.__setattr__(instance, name, MappingProxyType(dict(getattr(instance, name))))


@dataclass(frozen=True)
class ParseRule:
    """Describes which markup a type is decoded from.

    A rule matches either by ``tag`` (optionally refined by a required
    attribute, and a required value for it) or by an inline ``style``
    property (optionally with a required value). Style rules are only
    used for marks.
    """

    tag: str | None = None
    style: str | None = None
    style_value: str | None = None
    require_attr: str | None = None
    require_value: str | None = None
    sources: Mapping[str, Source] = field(default_factory=dict)
    accept: Callable[[Any], bool] | None = None  # element for tag rules, value for style rules

    def __post_init__(self) -> None:
        if (self.tag is None) == (self.style is None):
            raise ValueError("A parse rule needs exactly one of 'tag' or 'style'")
        _freeze_mappings(self, "sources")

    @property
    def is_style_rule(self) -> bool:
        return self.style is not None

    def matches_element(self, element: etree._Element) -> bool:
        if self.tag is None or element.tag != self.tag:
            return False
        if self.require_attr is not None:
            actual = element.get(self.require_attr)
            if actual is None:
                return False
            if self.require_value is not None and actual != self.require_value:
                return False
        return self.accept is None or bool(self.accept(element))

    def matches_style(self, prop: str, value: str) -> bool:
        if self.style is None or prop != self.style:
            return False
        if self.style_value is not None and value.lower() != self.style_value:
            return False
        return self.accept is None or bool(self.accept(value))

    def describe(self) -> str:
        if self.style is not None:
            return f"style {self.style}={self.style_value}" if self.style_value else f"style {self.style}"
        if self.require_attr is None:
            return self.tag or ""
        if self.require_value is None:
            return f"{self.tag}[{self.require_attr}]"
        return f"{self.tag}[{self.require_attr}={self.require_value}]"


@dataclass(frozen=True)
class RenderRule:
    """Describes the markup a type is encoded to."""

    tag: str
    fixed_attrs: Mapping[str, str] = field(default_factory=dict)
    targets: Mapping[str, Target] = field(default_factory=dict)
    content: TemplateContent = HOLE

    def __post_init__(self) -> None:
        _freeze_mappings(self, "fixed_attrs", "targets")


def _decode_attrs(
    attrs: Mapping[str, AttributeSpec],
    rule: ParseRule,
    element: etree._Element,
    style_value: str | None = None,
) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for name, spec in attrs.items():
        source = rule.sources.get(name)
        raw = source.read(element, style_value) if source is not None else None
        values[name] = spec.decode_value(raw)
    return values


def _render(
    name: str,
    render: RenderRule | None,
    attrs: Mapping[str, AttributeSpec],
    values: Mapping[str, Any],
) -> MarkupTemplate:
    if render is None:
        raise ValueError(f"Type '{name}' has no markup form")

    markup_attrs = dict(render.fixed_attrs)
    for attr_name, spec in attrs.items():
        target = render.targets.get(attr_name)
        if target is None:
            continue
        encoded = spec.encode_value(values.get(attr_name, spec.fallback))
        if encoded is not None:
            target.write(markup_attrs, encoded)

    return MarkupTemplate(tag=render.tag, attrs=markup_attrs, content=render.content)


@dataclass(frozen=True)
class NodeTypeSpec:
    """Spec for a structural node type."""

    name: str
    content: str | None = None
    groups: frozenset[str] = frozenset()
    inline: bool = False
    atom: bool = False
    marks: str | None = None  # "_" = all marks, "" = none
    selectable: bool = True
    isolating: bool = False
    table_role: str | None = None
    attrs: Mapping[str, AttributeSpec] = field(default_factory=dict)
    parse_rules: tuple[ParseRule, ...] = ()
    render: RenderRule | None = None
    normalize_attrs: Callable[[dict[str, Any]], dict[str, Any]] | None = None

    def __post_init__(self) -> None:
        _freeze_mappings(self, "attrs")

    @property
    def is_text(self) -> bool:
        return self.name == "text"

    @property
    def is_leaf(self) -> bool:
        return not self.content

    def from_markup(self, element: etree._Element) -> dict[str, Any]:
        """Decode node attributes from the first parse rule that matches.

        Raises:
            DecodeMismatch: If no parse rule of this type matches.
        """
        for rule in self.parse_rules:
            if rule.matches_element(element):
                return self.decode_with(rule, element)
        raise DecodeMismatch(str(element.tag), self.name)

    def decode_with(self, rule: ParseRule, element: etree._Element) -> dict[str, Any]:
        values = _decode_attrs(self.attrs, rule, element)
        if self.normalize_attrs is not None:
            values = self.normalize_attrs(values)
        return values

    def to_markup(self, values: Mapping[str, Any]) -> MarkupTemplate:
        """Encode node attributes as a markup template."""
        return _render(self.name, self.render, self.attrs, values)


@dataclass(frozen=True)
class MarkTypeSpec:
    """Spec for an inline mark type."""

    name: str
    groups: frozenset[str] = frozenset()
    attrs: Mapping[str, AttributeSpec] = field(default_factory=dict)
    parse_rules: tuple[ParseRule, ...] = ()
    render: RenderRule | None = None

    def __post_init__(self) -> None:
        _freeze_mappings(self, "attrs")

    def from_markup(self, element: etree._Element) -> dict[str, Any]:
        """Decode mark attributes from a tag rule.

        Raises:
            DecodeMismatch: If no tag rule of this mark matches.
        """
        for rule in self.parse_rules:
            if not rule.is_style_rule and rule.matches_element(element):
                return _decode_attrs(self.attrs, rule, element)
        raise DecodeMismatch(str(element.tag), self.name)

    def from_style(self, element: etree._Element, prop: str, value: str) -> dict[str, Any]:
        """Decode mark attributes from one inline style declaration.

        Raises:
            DecodeMismatch: If no style rule of this mark matches.
        """
        for rule in self.parse_rules:
            if rule.is_style_rule and rule.matches_style(prop, value):
                return _decode_attrs(self.attrs, rule, element, style_value=value)
        raise DecodeMismatch(str(element.tag), self.name)

    def to_markup(self, values: Mapping[str, Any]) -> MarkupTemplate:
        return _render(self.name, self.render, self.attrs, values)
