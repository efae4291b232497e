#!/usr/bin/env python3
"""
Blueprint editor CLI - developer tool around the editor core.

Usage:
    blueprint-editor inspect 0eNqd...                 # Summarise a blueprint string
    blueprint-editor inspect outpost.txt --file       # Read the string from a file
    blueprint-editor inspect outpost.txt --file --json
    blueprint-editor pipes outpost.txt --file         # Connect pumpjacks with pipes
    blueprint-editor pipes outpost.txt --file --rotate -o piped.txt
"""

import json
import logging
import sys
from pathlib import Path

import click

from blueprint_editor.src.codec import (
    BlueprintStringError,
    EncodeError,
    UnsupportedBlueprintError,
    decode,
    document_to_dict,
    encode,
)
from blueprint_editor.src.common.constants import DEFAULT_CONFIG
from blueprint_editor.src.common.diagnostics import EditorDiagnostics
from blueprint_editor.src.model.book import Book


def setup_logging(level: str) -> None:
    """Setup logging configuration."""
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")
    logging.basicConfig(level=numeric_level, format="%(levelname)s: %(message)s")


def read_source(source: str, from_file: bool) -> str:
    if not from_file:
        return source
    try:
        return Path(source).read_text(encoding="utf-8")
    except OSError as e:
        click.echo(f"Failed to read input file: {e}", err=True)
        sys.exit(1)


def load_document(source: str, from_file: bool, diagnostics: EditorDiagnostics):
    raw = read_source(source, from_file)
    try:
        return decode(raw, diagnostics=diagnostics)
    except UnsupportedBlueprintError as e:
        click.echo(f"Unsupported blueprint: {e}", err=True)
        for kind in e.kinds:
            click.echo(f"  {kind}", err=True)
        sys.exit(1)
    except BlueprintStringError as e:
        click.echo(f"Invalid blueprint string: {e}", err=True)
        sys.exit(1)


def summarize(document) -> list:
    lines = []
    if isinstance(document, Book):
        lines.append(
            f"Book: {document.name} ({len(document)} page(s), active {document.active_index})"
        )
        pages = list(enumerate(document))
    else:
        pages = [(None, document)]
    for index, blueprint in pages:
        prefix = f"  [{index}] " if index is not None else "Blueprint: "
        lines.append(
            f"{prefix}{blueprint.name}: {len(blueprint.entities)} entities, "
            f"{len(blueprint.tiles)} tiles"
        )
        counts = {}
        for entity in blueprint.entities:
            counts[entity.name] = counts.get(entity.name, 0) + 1
        indent = "      " if index is not None else "    "
        for name, count in sorted(counts.items()):
            lines.append(f"{indent}{name}: {count}")
    return lines


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    help="Set the logging level",
)
@click.pass_context
def main(ctx, log_level):
    """Inspect and edit Factorio blueprint strings."""
    setup_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = log_level in ["debug", "info"]


@main.command()
@click.argument("source")
@click.option("--file", "from_file", is_flag=True, help="Treat SOURCE as a path to a file")
@click.option("--json", "as_json", is_flag=True, help="Print the decoded JSON document")
@click.pass_context
def inspect(ctx, source, from_file, as_json):
    """Decode a blueprint string and describe its contents."""
    diagnostics = EditorDiagnostics(verbose=ctx.obj["verbose"])
    document = load_document(source, from_file, diagnostics)

    if as_json:
        click.echo(json.dumps(document_to_dict(document), indent=2))
    else:
        for line in summarize(document):
            click.echo(line)

    for message in diagnostics.get_messages():
        click.echo(message, err=True)


@main.command()
@click.argument("source")
@click.option("--file", "from_file", is_flag=True, help="Treat SOURCE as a path to a file")
@click.option("--rotate", is_flag=True, help="Allow rotating pumpjacks to shorten the network")
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    help="Output file for the blueprint (default: stdout)",
)
@click.pass_context
def pipes(ctx, source, from_file, rotate, output):
    """Connect every pumpjack of the active blueprint with pipes."""
    diagnostics = EditorDiagnostics(verbose=ctx.obj["verbose"])
    document = load_document(source, from_file, diagnostics)
    blueprint = document.get_blueprint() if isinstance(document, Book) else document
    if blueprint is None:
        click.echo("Book has no blueprints", err=True)
        sys.exit(1)

    before = len(blueprint.entities)
    problem = blueprint.generate_pipes(allow_rotation=rotate)
    if problem:
        click.echo(problem, err=True)

    try:
        result = encode(document, DEFAULT_CONFIG)
    except EncodeError as e:
        click.echo(f"Encoding failed: {e}", err=True)
        sys.exit(1)

    if output:
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(result, encoding="utf-8")
        except OSError as e:
            click.echo(f"Failed to write output file: {e}", err=True)
            sys.exit(1)
    else:
        click.echo(result)

    if ctx.obj["verbose"]:
        click.echo(f"Placed {len(blueprint.entities) - before} pipe(s).", err=True)


if __name__ == "__main__":
    main()
