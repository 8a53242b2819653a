"""Schema error types and content violation records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SchemaError(Exception):
    """Base class for errors raised by the article schema."""


class DuplicateTypeError(SchemaError):
    """Raised when two type specs are registered under the same name."""

    def __init__(self, kind: str, name: str):
        super().__init__(f"Duplicate {kind} type '{name}'")
        self.kind = kind
        self.name = name


class UnknownTypeError(SchemaError, KeyError):
    """Raised when a node or mark type name is not in the registry."""

    def __init__(self, kind: str, name: str):
        super().__init__(f"Unknown {kind} type '{name}'")
        self.kind = kind
        self.name = name

    def __str__(self) -> str:
        # KeyError would otherwise quote the message
        return str(self.args[0])


class ContentModelError(SchemaError):
    """Raised when a content or mark expression is malformed or dangling."""


class MissingAttributeError(SchemaError):
    """Raised when a required attribute has no value."""

    def __init__(self, type_name: str, attribute: str):
        super().__init__(f"No value supplied for attribute '{attribute}' of '{type_name}'")
        self.type_name = type_name
        self.attribute = attribute


class DecodeMismatch(SchemaError):
    """A markup element does not satisfy a type's matching rule."""

    def __init__(self, tag: str, type_name: str | None = None):
        target = f"type '{type_name}'" if type_name else "any registered type"
        super().__init__(f"Element <{tag}> does not match {target}")
        self.tag = tag
        self.type_name = type_name


class AttributeDecodeFailure(SchemaError, ValueError):
    """An external attribute value could not be decoded."""

    def __init__(self, value: object, reason: str):
        super().__init__(f"Cannot decode {value!r}: {reason}")
        self.value = value
        self.reason = reason


class ViolationType(Enum):
    """Kinds of structural problems found when checking a node tree."""

    UNKNOWN_TYPE = "unknown_type"
    ATTRIBUTE = "attribute"
    CONTENT = "content"
    MARKS = "marks"


@dataclass
class ContentViolation:
    """A structural problem found in a node tree."""

    violation_type: ViolationType
    description: str
    path: str = ""  # e.g. "/doc/table[0]/table_row[1]"
    node_type: str | None = None

    def __str__(self) -> str:
        location = self.path or "/"
        return f"[{self.violation_type.value}] {location}: {self.description}"
