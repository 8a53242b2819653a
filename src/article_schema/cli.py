"""Command-line interface for article-schema."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from article_schema.errors import ContentViolation, SchemaError
from article_schema.markup import DocumentParser, DocumentSerializer
from article_schema.schema import DEFAULT_CONFIG, TypeRegistry, build_schema

console = Console()
error_console = Console(stderr=True)


def _describe_attrs(attrs: dict) -> str:
    parts = []
    for name, spec in attrs.items():
        if spec.has_default:
            parts.append(f"{name}={spec.default!r}")
        else:
            parts.append(f"{name} (required)")
    return ", ".join(parts)


def _registry(ctx: click.Context) -> TypeRegistry:
    return ctx.obj["registry"]


@click.group()
@click.option(
    "--enable-mark",
    "enabled_marks",
    multiple=True,
    metavar="NAME",
    help="Re-enable a mark the product configuration excludes (repeatable).",
)
@click.option("--verbose", "-v", is_flag=True, help="Log decode decisions to stderr.")
@click.pass_context
def main(ctx: click.Context, enabled_marks: tuple[str, ...], verbose: bool) -> None:
    """Inspect the article schema and convert articles between HTML and JSON."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=error_console, show_path=False)],
        )

    unknown = set(enabled_marks) - DEFAULT_CONFIG.excluded_marks
    if unknown:
        error_console.print(
            f"[red]Error:[/red] Not an excluded mark: {', '.join(sorted(unknown))}"
        )
        sys.exit(1)

    config = DEFAULT_CONFIG.enabling(*enabled_marks)
    ctx.obj = {"registry": build_schema(config)}


@main.command()
@click.pass_context
def types(ctx: click.Context) -> None:
    """List the active node and mark types."""
    registry = _registry(ctx)

    nodes = Table(title="Node types", show_header=True, header_style="bold")
    nodes.add_column("Name")
    nodes.add_column("Groups", style="dim")
    nodes.add_column("Content")
    nodes.add_column("Parse")
    nodes.add_column("Attributes")
    for name in registry.node_names:
        spec = registry.node_type(name)
        content = registry.content_model(name).expression or ("atom" if spec.atom else "-")
        nodes.add_row(
            name,
            " ".join(sorted(spec.groups)),
            content,
            ", ".join(rule.describe() for rule in spec.parse_rules),
            _describe_attrs(dict(spec.attrs)),
        )
    console.print(nodes)

    marks = Table(title="Mark types", show_header=True, header_style="bold")
    marks.add_column("Name")
    marks.add_column("Parse")
    marks.add_column("Attributes")
    for name in registry.mark_names:
        spec = registry.mark_type(name)
        marks.add_row(
            name,
            ", ".join(rule.describe() for rule in spec.parse_rules),
            _describe_attrs(dict(spec.attrs)),
        )
    console.print(marks)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def parse(ctx: click.Context, path: Path) -> None:
    """Convert an HTML article to its JSON node tree."""
    doc = DocumentParser(_registry(ctx)).parse(path.read_text(encoding="utf-8"))
    console.print_json(json.dumps(doc.to_dict(), indent=2, ensure_ascii=False))


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def render(ctx: click.Context, path: Path) -> None:
    """Convert a JSON node tree back to HTML."""
    registry = _registry(ctx)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        doc = registry.node_from_dict(data)
        html = DocumentSerializer(registry).serialize(doc)
    except (ValueError, KeyError, SchemaError) as exc:
        error_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    click.echo(html)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    help="Output format.",
)
@click.pass_context
def check(ctx: click.Context, path: Path, output: str) -> None:
    """Parse an HTML article and report structural problems."""
    registry = _registry(ctx)
    doc = DocumentParser(registry).parse(path.read_text(encoding="utf-8"))
    violations = registry.check(doc)

    if output == "json":
        _output_json(path, violations)
    else:
        _output_text(path, violations)

    sys.exit(1 if violations else 0)


def _output_text(path: Path, violations: list[ContentViolation]) -> None:
    """Output violations as a formatted table."""
    if not violations:
        console.print(f"[green]✓[/green] {path} - Valid")
        return

    console.print(f"[red]✗[/red] {path} - Invalid")
    table = Table(show_header=True, header_style="bold")
    table.add_column("Type", style="dim", width=12)
    table.add_column("Location", width=30)
    table.add_column("Description")
    for violation in violations:
        table.add_row(violation.violation_type.value, violation.path, violation.description)
    console.print(table)


def _output_json(path: Path, violations: list[ContentViolation]) -> None:
    """Output violations as JSON."""
    output = {
        "file": str(path),
        "valid": not violations,
        "violations": [
            {
                "type": v.violation_type.value,
                "path": v.path,
                "node_type": v.node_type,
                "description": v.description,
            }
            for v in violations
        ],
    }
    console.print_json(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
