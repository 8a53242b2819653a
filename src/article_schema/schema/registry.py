"""Registry of node and mark types.

The registry is filled with ``register`` during construction and then
frozen. Freezing compiles every content and mark expression, so a frozen
registry is known to have no dangling references. After that it is only
read: lookups, decoding and encoding never change it, and one instance
can be shared freely.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from lxml import etree

from article_schema.codec import parse_style
from article_schema.errors import (
    ContentModelError,
    ContentViolation,
    DecodeMismatch,
    DuplicateTypeError,
    MissingAttributeError,
    SchemaError,
    UnknownTypeError,
    ViolationType,
)
from article_schema.model import Mark, MarkupTemplate, Node
from article_schema.schema.content import ContentModel
from article_schema.schema.spec import MarkTypeSpec, NodeTypeSpec, ParseRule

logger = logging.getLogger(__name__)

ALL_MARKS = "_"


class TypeRegistry:
    """Catalog of node and mark types with their transcoding rules."""

    def __init__(self, top_node: str = "doc") -> None:
        self.top_node = top_node
        self._nodes: dict[str, NodeTypeSpec] = {}
        self._marks: dict[str, MarkTypeSpec] = {}
        self._content: Mapping[str, ContentModel] = MappingProxyType({})
        self._allowed_marks: Mapping[str, frozenset[str]] = MappingProxyType({})
        self._node_matchers: tuple[tuple[NodeTypeSpec, ParseRule], ...] = ()
        self._mark_matchers: tuple[tuple[MarkTypeSpec, ParseRule], ...] = ()
        self._frozen = False

    # -- construction -----------------------------------------------------

    def register(self, spec: NodeTypeSpec | MarkTypeSpec) -> None:
        """Register a node or mark type spec.

        Raises:
            DuplicateTypeError: If a type of the same kind has this name.
            SchemaError: If the registry is already frozen.
        """
        if self._frozen:
            raise SchemaError(f"Cannot register '{spec.name}': registry is frozen")

        if isinstance(spec, NodeTypeSpec):
            if spec.name in self._nodes:
                raise DuplicateTypeError("node", spec.name)
            self._nodes[spec.name] = spec
        else:
            if spec.name in self._marks:
                raise DuplicateTypeError("mark", spec.name)
            self._marks[spec.name] = spec
        logger.debug("Registered %s type '%s'", "node" if isinstance(spec, NodeTypeSpec) else "mark", spec.name)

    def freeze(self) -> TypeRegistry:
        """Validate and compile the catalog, then make it read-only.

        Raises:
            ContentModelError: If a content or mark expression is malformed
                or refers to a name that is not registered, or the top
                node type is missing.
        """
        if self._frozen:
            return self
        if self.top_node not in self._nodes:
            raise ContentModelError(f"Top node type '{self.top_node}' is not registered")
        if "text" not in self._nodes:
            raise ContentModelError("Every schema needs a 'text' node type")

        content: dict[str, ContentModel] = {}
        allowed_marks: dict[str, frozenset[str]] = {}
        for name, spec in self._nodes.items():
            content[name] = ContentModel.compile(spec.content, self._resolve_node_name)
            allowed_marks[name] = self._compile_marks(spec, content[name])

        self._content = MappingProxyType(content)
        self._allowed_marks = MappingProxyType(allowed_marks)
        self._node_matchers = tuple(
            (spec, rule) for spec in self._nodes.values() for rule in spec.parse_rules
        )
        self._mark_matchers = tuple(
            (spec, rule) for spec in self._marks.values() for rule in spec.parse_rules
        )
        self._nodes = MappingProxyType(self._nodes)  # type: ignore[assignment]
        self._marks = MappingProxyType(self._marks)  # type: ignore[assignment]
        self._frozen = True

        logger.debug(
            "Froze registry with %d node types and %d mark types",
            len(self._nodes),
            len(self._marks),
        )
        return self

    def _resolve_node_name(self, name: str) -> list[str]:
        if name in self._nodes:
            return [name]
        return self._members(self._nodes.values(), name)

    def _resolve_mark_name(self, name: str) -> list[str]:
        if name in self._marks:
            return [name]
        return self._members(self._marks.values(), name)

    @staticmethod
    def _members(specs: Iterable[NodeTypeSpec | MarkTypeSpec], group: str) -> list[str]:
        return [spec.name for spec in specs if group in spec.groups]

    def _compile_marks(self, spec: NodeTypeSpec, model: ContentModel) -> frozenset[str]:
        expression = spec.marks
        if expression is None:
            inline_content = any(self._nodes[name].inline for name in model.type_names)
            expression = ALL_MARKS if inline_content else ""

        if expression == ALL_MARKS:
            return frozenset(self._marks)

        names: set[str] = set()
        for token in expression.split():
            resolved = self._resolve_mark_name(token)
            if not resolved:
                raise ContentModelError(f"Unknown mark type or group '{token}' in marks of '{spec.name}'")
            names.update(resolved)
        return frozenset(names)

    # -- lookups ----------------------------------------------------------

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    @property
    def node_names(self) -> tuple[str, ...]:
        return tuple(self._nodes)

    @property
    def mark_names(self) -> tuple[str, ...]:
        return tuple(self._marks)

    def node_type(self, name: str) -> NodeTypeSpec:
        try:
            return self._nodes[name]
        except KeyError:
            raise UnknownTypeError("node", name) from None

    def mark_type(self, name: str) -> MarkTypeSpec:
        try:
            return self._marks[name]
        except KeyError:
            raise UnknownTypeError("mark", name) from None

    def has_node(self, name: str) -> bool:
        return name in self._nodes

    def has_mark(self, name: str) -> bool:
        return name in self._marks

    def group_members(self, group: str) -> tuple[str, ...]:
        """Node types in a group, in registration order."""
        return tuple(self._members(self._nodes.values(), group))

    def content_model(self, name: str) -> ContentModel:
        self._require_frozen()
        self.node_type(name)
        return self._content[name]

    def allowed_marks(self, name: str) -> frozenset[str]:
        self._require_frozen()
        self.node_type(name)
        return self._allowed_marks[name]

    def _require_frozen(self) -> None:
        if not self._frozen:
            raise SchemaError("Registry must be frozen before use")

    # -- node and mark creation -----------------------------------------

    def create_node(
        self,
        type_name: str,
        attrs: Mapping[str, Any] | None = None,
        content: Iterable[Node] = (),
        marks: Iterable[Mark] = (),
        text: str | None = None,
    ) -> Node:
        """Create a node, filling attribute defaults.

        Raises:
            UnknownTypeError: If the type is unknown.
            MissingAttributeError: If a required attribute is not given.
            SchemaError: If an attribute name is unknown.
        """
        spec = self.node_type(type_name)
        if spec.is_text and text is None:
            raise SchemaError("Text nodes need text")
        values = self._fill_attrs(spec.name, spec.attrs, attrs or {})
        return Node(type_name, values, tuple(content), tuple(marks), text)

    def create_text(self, text: str, marks: Iterable[Mark] = ()) -> Node:
        return self.create_node("text", text=text, marks=marks)

    def create_mark(self, type_name: str, attrs: Mapping[str, Any] | None = None) -> Mark:
        spec = self.mark_type(type_name)
        return Mark(type_name, self._fill_attrs(spec.name, spec.attrs, attrs or {}))

    @staticmethod
    def _fill_attrs(type_name: str, specs: Mapping[str, Any], given: Mapping[str, Any]) -> dict[str, Any]:
        for name in given:
            if name not in specs:
                raise SchemaError(f"Unknown attribute '{name}' for '{type_name}'")

        values: dict[str, Any] = {}
        for name, spec in specs.items():
            if name in given:
                values[name] = given[name]
            elif spec.has_default:
                values[name] = spec.default
            else:
                raise MissingAttributeError(type_name, name)
        return values

    def node_from_dict(self, data: Mapping[str, Any]) -> Node:
        """Build a node tree from its JSON view, checking type names."""
        return self.create_node(
            data["type"],
            attrs=data.get("attrs"),
            content=[self.node_from_dict(child) for child in data.get("content") or ()],
            marks=[self.create_mark(mark["type"], mark.get("attrs")) for mark in data.get("marks") or ()],
            text=data.get("text"),
        )

    # -- transcoding ------------------------------------------------------

    def decode(self, element: etree._Element) -> Node:
        """Decode a markup element into a node without children.

        Parse rules are tried in registration order; the first match wins.

        Raises:
            DecodeMismatch: If no node type matches the element.
        """
        self._require_frozen()
        for spec, rule in self._node_matchers:
            if rule.matches_element(element):
                return Node(spec.name, spec.decode_with(rule, element))
        raise DecodeMismatch(str(element.tag))

    def decode_marks(self, element: etree._Element) -> list[Mark]:
        """Decode the marks a markup element applies to its content.

        Tag rules match the element itself; style rules match its inline
        style declarations. Each mark type is applied at most once.
        """
        self._require_frozen()
        marks: dict[str, Mark] = {}

        for spec, rule in self._mark_matchers:
            if spec.name in marks or rule.is_style_rule:
                continue
            if rule.matches_element(element):
                marks[spec.name] = Mark(spec.name, spec.from_markup(element))

        declarations = parse_style(element.get("style"))
        for prop, value in declarations.items():
            for spec, rule in self._mark_matchers:
                if spec.name in marks or not rule.is_style_rule:
                    continue
                if rule.matches_style(prop, value):
                    marks[spec.name] = Mark(spec.name, spec.from_style(element, prop, value))

        return [marks[name] for name in self._marks if name in marks]

    def encode(self, node: Node) -> MarkupTemplate:
        """Encode a node as a markup template.

        Raises:
            UnknownTypeError: If the node's type is not registered.
            ValueError: If the type has no markup form (``doc``, ``text``).
        """
        spec = self.node_type(node.type)
        return spec.to_markup(node.attrs)

    def encode_mark(self, mark: Mark) -> MarkupTemplate:
        spec = self.mark_type(mark.type)
        return spec.to_markup(mark.attrs)

    def sort_marks(self, marks: Iterable[Mark]) -> list[Mark]:
        """Order marks by mark type registration order."""
        rank = {name: index for index, name in enumerate(self._marks)}
        return sorted(marks, key=lambda mark: rank.get(mark.type, len(rank)))

    # -- checking ---------------------------------------------------------

    def check(self, node: Node) -> list[ContentViolation]:
        """Check a node tree against the schema.

        Returns:
            List of violations; empty if the tree is valid.
        """
        self._require_frozen()
        violations: list[ContentViolation] = []
        self._check_node(node, f"/{node.type}", violations)
        return violations

    def _check_node(self, node: Node, path: str, violations: list[ContentViolation]) -> None:
        if node.type not in self._nodes:
            violations.append(ContentViolation(
                ViolationType.UNKNOWN_TYPE,
                f"Unknown node type '{node.type}'",
                path=path,
                node_type=node.type,
            ))
            return

        spec = self._nodes[node.type]
        for name in node.attrs:
            if name not in spec.attrs:
                violations.append(ContentViolation(
                    ViolationType.ATTRIBUTE,
                    f"Unexpected attribute '{name}'",
                    path=path,
                    node_type=node.type,
                ))
        for name, attr in spec.attrs.items():
            if name not in node.attrs and not attr.has_default:
                violations.append(ContentViolation(
                    ViolationType.ATTRIBUTE,
                    f"Required attribute '{name}' is missing",
                    path=path,
                    node_type=node.type,
                ))
            elif node.attrs.get(name) is None and not attr.has_default:
                violations.append(ContentViolation(
                    ViolationType.ATTRIBUTE,
                    f"Required attribute '{name}' has no value",
                    path=path,
                    node_type=node.type,
                ))

        model = self._content[node.type]
        child_types = [child.type for child in node.content]
        if not model.matches(child_types):
            expected = model.expression or "no content"
            violations.append(ContentViolation(
                ViolationType.CONTENT,
                f"Content [{', '.join(child_types)}] does not match '{expected}'",
                path=path,
                node_type=node.type,
            ))

        allowed = self._allowed_marks[node.type]
        for index, child in enumerate(node.content):
            child_path = f"{path}/{child.type}[{index}]"
            for mark in child.marks:
                if mark.type not in self._marks:
                    violations.append(ContentViolation(
                        ViolationType.UNKNOWN_TYPE,
                        f"Unknown mark type '{mark.type}'",
                        path=child_path,
                        node_type=child.type,
                    ))
                elif mark.type not in allowed:
                    violations.append(ContentViolation(
                        ViolationType.MARKS,
                        f"Mark '{mark.type}' is not allowed in '{node.type}'",
                        path=child_path,
                        node_type=child.type,
                    ))
            self._check_node(child, child_path, violations)
