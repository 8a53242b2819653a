"""Content models for node types.

A content expression such as ``"(text | hard_break)+"`` or ``"block+"``
is compiled into a tree of particles:
- Node: a single node of a named type
- Sequence: children must appear in order
- Choice: one of several options

Group names are expanded into a choice over the group's member types
when the expression is compiled, so a compiled model only ever refers to
concrete node type names.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Sequence

from article_schema.errors import ContentModelError

UNBOUNDED = -1

_TOKEN_PATTERN = re.compile(r"\w+|\S")


class ParticleType(Enum):
    """Types of particles in a content model."""

    NODE = "node"
    SEQUENCE = "sequence"
    CHOICE = "choice"


@dataclass
class Particle:
    """Base constraint for particles."""

    particle_type: ParticleType
    min_occurs: int = 1
    max_occurs: int = 1  # -1 means unbounded

    @property
    def is_optional(self) -> bool:
        return self.min_occurs == 0

    @property
    def is_unbounded(self) -> bool:
        return self.max_occurs == UNBOUNDED


@dataclass
class NodeParticle(Particle):
    """Particle for a specific node type."""

    type_name: str = ""

    def __init__(self, type_name: str, min_occurs: int = 1, max_occurs: int = 1):
        super().__init__(
            particle_type=ParticleType.NODE,
            min_occurs=min_occurs,
            max_occurs=max_occurs,
        )
        self.type_name = type_name


@dataclass
class CompositeParticle(Particle):
    """Particle containing child particles (sequence, choice)."""

    children: list[Particle] = field(default_factory=list)

    def add_child(self, child: Particle) -> None:
        self.children.append(child)


@dataclass
class SequenceParticle(CompositeParticle):
    """Sequence particle - children must appear in order."""

    def __init__(
        self,
        children: list[Particle] | None = None,
        min_occurs: int = 1,
        max_occurs: int = 1,
    ):
        super().__init__(
            particle_type=ParticleType.SEQUENCE,
            min_occurs=min_occurs,
            max_occurs=max_occurs,
        )
        if children:
            self.children = children


@dataclass
class ChoiceParticle(CompositeParticle):
    """Choice particle - one of the children must appear."""

    def __init__(
        self,
        children: list[Particle] | None = None,
        min_occurs: int = 1,
        max_occurs: int = 1,
    ):
        super().__init__(
            particle_type=ParticleType.CHOICE,
            min_occurs=min_occurs,
            max_occurs=max_occurs,
        )
        if children:
            self.children = children


# Resolves a name from an expression to the node types it stands for.
NameResolver = Callable[[str], Sequence[str]]


class _ExpressionParser:
    """Recursive-descent parser for content expressions.

    Grammar::

        expr      := seq ("|" seq)*
        seq       := subscript+
        subscript := atom ("*" | "+" | "?" | "{" n ["," [m]] "}")*
        atom      := "(" expr ")" | name
    """

    def __init__(self, expression: str, resolve: NameResolver):
        self.expression = expression
        self.tokens = _TOKEN_PATTERN.findall(expression)
        self.pos = 0
        self.resolve = resolve

    @property
    def next(self) -> str | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def eat(self, token: str) -> bool:
        if self.next == token:
            self.pos += 1
            return True
        return False

    def error(self, message: str) -> ContentModelError:
        return ContentModelError(f"{message} (in content expression '{self.expression}')")

    def parse(self) -> Particle:
        particle = self.parse_expr()
        if self.next is not None:
            raise self.error(f"Unexpected token '{self.next}'")
        return particle

    def parse_expr(self) -> Particle:
        options = [self.parse_seq()]
        while self.eat("|"):
            options.append(self.parse_seq())
        if len(options) == 1:
            return options[0]
        return ChoiceParticle(children=options)

    def parse_seq(self) -> Particle:
        items = []
        while self.next is not None and self.next not in (")", "|"):
            items.append(self.parse_subscript())
        if not items:
            raise self.error("Expected a type name or group")
        if len(items) == 1:
            return items[0]
        return SequenceParticle(children=items)

    def parse_subscript(self) -> Particle:
        particle = self.parse_atom()
        while True:
            if self.eat("+"):
                particle = _repeat(particle, 1, UNBOUNDED)
            elif self.eat("*"):
                particle = _repeat(particle, 0, UNBOUNDED)
            elif self.eat("?"):
                particle = _repeat(particle, 0, 1)
            elif self.eat("{"):
                particle = self.parse_range(particle)
            else:
                return particle

    def parse_range(self, particle: Particle) -> Particle:
        min_occurs = self.parse_number()
        max_occurs = min_occurs
        if self.eat(","):
            max_occurs = self.parse_number() if self.next != "}" else UNBOUNDED
        if not self.eat("}"):
            raise self.error("Unclosed braced range")
        if max_occurs != UNBOUNDED and max_occurs < min_occurs:
            raise self.error(f"Invalid range {{{min_occurs},{max_occurs}}}")
        return _repeat(particle, min_occurs, max_occurs)

    def parse_number(self) -> int:
        token = self.next
        if token is None or not token.isdigit():
            raise self.error(f"Expected number, got '{token}'")
        self.pos += 1
        return int(token)

    def parse_atom(self) -> Particle:
        if self.eat("("):
            particle = self.parse_expr()
            if not self.eat(")"):
                raise self.error("Missing closing paren")
            return particle

        token = self.next
        if token is None or not re.match(r"\w+$", token):
            raise self.error(f"Unexpected token '{token}'")
        self.pos += 1

        names = self.resolve(token)
        if not names:
            raise self.error(f"No node type or group '{token}' found")
        if len(names) == 1:
            return NodeParticle(names[0])
        return ChoiceParticle(children=[NodeParticle(name) for name in names])


def _repeat(particle: Particle, min_occurs: int, max_occurs: int) -> Particle:
    """Apply an occurrence range, wrapping if the particle already has one."""
    if particle.min_occurs == 1 and particle.max_occurs == 1:
        particle.min_occurs = min_occurs
        particle.max_occurs = max_occurs
        return particle
    return SequenceParticle(children=[particle], min_occurs=min_occurs, max_occurs=max_occurs)


def _end_positions(particle: Particle, names: Sequence[str], start: int) -> set[int]:
    """Every position where ``particle`` (with its occurrence range) can end."""
    reached = {start} if particle.min_occurs == 0 else set()
    frontier = {start}
    seen: set[int] = set()
    count = 0

    while frontier and (particle.is_unbounded or count < particle.max_occurs):
        count += 1
        following: set[int] = set()
        for pos in frontier:
            following |= _single_end_positions(particle, names, pos)

        if count >= particle.min_occurs:
            reached |= following
            if particle.is_unbounded:
                # Positions already expanded cannot lead anywhere new
                following -= seen
                seen |= following
        frontier = following

    return reached


def _single_end_positions(particle: Particle, names: Sequence[str], start: int) -> set[int]:
    """End positions for exactly one occurrence of ``particle``."""
    if isinstance(particle, NodeParticle):
        if start < len(names) and names[start] == particle.type_name:
            return {start + 1}
        return set()

    if isinstance(particle, SequenceParticle):
        positions = {start}
        for child in particle.children:
            following: set[int] = set()
            for pos in positions:
                following |= _end_positions(child, names, pos)
            positions = following
            if not positions:
                break
        return positions

    if isinstance(particle, ChoiceParticle):
        ends: set[int] = set()
        for child in particle.children:
            ends |= _end_positions(child, names, start)
        return ends

    return set()


def _collect_names(particle: Particle, into: set[str]) -> None:
    if isinstance(particle, NodeParticle):
        into.add(particle.type_name)
    elif isinstance(particle, CompositeParticle):
        for child in particle.children:
            _collect_names(child, into)


class ContentModel:
    """A compiled content expression.

    An empty expression describes a leaf: only the empty child sequence
    matches.
    """

    def __init__(self, expression: str, particle: Particle | None):
        self.expression = expression
        self.particle = particle
        names: set[str] = set()
        if particle is not None:
            _collect_names(particle, names)
        self.type_names = frozenset(names)

    @classmethod
    def compile(cls, expression: str | None, resolve: NameResolver) -> ContentModel:
        """Compile a content expression.

        Args:
            expression: The expression, e.g. ``"paragraph+"``. ``None`` or
                an empty string compiles to a leaf model.
            resolve: Maps a name to the node type names it stands for
                (one name for a type, all members for a group, none if
                the name is unknown).

        Raises:
            ContentModelError: On syntax errors or unknown names.
        """
        if not expression or not expression.strip():
            return cls("", None)
        return cls(expression, _ExpressionParser(expression, resolve).parse())

    @property
    def is_leaf(self) -> bool:
        return self.particle is None

    def allows(self, type_name: str) -> bool:
        """Whether a node of this type may appear anywhere in the content."""
        return type_name in self.type_names

    def matches(self, type_names: Sequence[str]) -> bool:
        """Whether a sequence of child type names satisfies the model."""
        if self.particle is None:
            return not type_names
        return len(type_names) in _end_positions(self.particle, type_names, 0)

    def __repr__(self) -> str:
        return f"ContentModel({self.expression!r})"
