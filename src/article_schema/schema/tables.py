"""Table node types.

``table_nodes`` builds the four table types (table, row, data cell,
header cell). Callers choose the group the table joins, what a cell may
contain, and extra cell attributes; every cell also gets ``colspan``,
``rowspan`` and ``colwidth``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from article_schema.codec import format_colwidth, normalize_color, parse_colwidth, parse_span
from article_schema.model import HOLE, MarkupTemplate
from article_schema.schema.spec import (
    AttributeSpec,
    DomAttribute,
    NodeTypeSpec,
    ParseRule,
    RenderRule,
    Source,
    StyleProperty,
    Target,
)


@dataclass(frozen=True)
class CellAttribute:
    """An extra table cell attribute and where it lives in markup."""

    spec: AttributeSpec
    source: Source
    target: Target


BACKGROUND = CellAttribute(
    spec=AttributeSpec(default=None, decode=normalize_color),
    source=StyleProperty("background-color"),
    target=StyleProperty("background-color", terminator=";"),
)

_SPAN = AttributeSpec(default=1, decode=parse_span, omit_default=True)
_COLWIDTH = AttributeSpec(default=None, decode=parse_colwidth, encode=format_colwidth)


def reconcile_colwidth(values: dict[str, Any]) -> dict[str, Any]:
    """Drop column widths that do not cover the cell's column span."""
    widths = values.get("colwidth")
    if widths is not None and len(widths) != values.get("colspan", 1):
        values = dict(values, colwidth=None)
    return values


def _cell_node(
    name: str,
    tag: str,
    cell_content: str,
    cell_attributes: Mapping[str, CellAttribute],
) -> NodeTypeSpec:
    sources = {
        "colspan": DomAttribute("colspan"),
        "rowspan": DomAttribute("rowspan"),
        "colwidth": DomAttribute("data-colwidth"),
    }
    targets = dict(sources)
    attrs = {"colspan": _SPAN, "rowspan": _SPAN, "colwidth": _COLWIDTH}

    for attr_name, extra in cell_attributes.items():
        attrs[attr_name] = extra.spec
        sources[attr_name] = extra.source
        targets[attr_name] = extra.target

    return NodeTypeSpec(
        name=name,
        content=cell_content,
        attrs=attrs,
        isolating=True,
        table_role="header_cell" if tag == "th" else "cell",
        parse_rules=(ParseRule(tag=tag, sources=sources),),
        render=RenderRule(tag=tag, targets=targets),
        normalize_attrs=reconcile_colwidth,
    )


def table_nodes(
    table_group: str | None = None,
    cell_content: str = "block+",
    cell_attributes: Mapping[str, CellAttribute] | None = None,
) -> list[NodeTypeSpec]:
    """Build the table node types.

    Args:
        table_group: Group the ``table`` type joins, e.g. ``"block"``.
        cell_content: Content expression for cells.
        cell_attributes: Extra attributes for both cell types.

    Returns:
        Specs for ``table``, ``table_row``, ``table_cell`` and
        ``table_header``.
    """
    extra = dict(cell_attributes or {})
    table = NodeTypeSpec(
        name="table",
        content="table_row+",
        groups=frozenset({table_group}) if table_group else frozenset(),
        isolating=True,
        table_role="table",
        parse_rules=(ParseRule(tag="table"),),
        render=RenderRule(tag="table", content=MarkupTemplate("tbody", content=HOLE)),
    )
    row = NodeTypeSpec(
        name="table_row",
        content="(table_cell | table_header)*",
        table_role="row",
        parse_rules=(ParseRule(tag="tr"),),
        render=RenderRule(tag="tr"),
    )
    return [
        table,
        row,
        _cell_node("table_cell", "td", cell_content, extra),
        _cell_node("table_header", "th", cell_content, extra),
    ]
