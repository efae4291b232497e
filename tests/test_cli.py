"""
Tests for the CLI module (blueprint_editor/cli.py).

These tests cover the command-line interface and its helpers.
"""

import json

import pytest
from click.testing import CliRunner
from draftsman.utils import JSON_to_string

from blueprint_editor.cli import main, setup_logging, summarize
from blueprint_editor.src.codec import bp_string
from blueprint_editor.src.model.blueprint import Blueprint
from blueprint_editor.src.model.book import Book


def outpost_string(catalog):
    blueprint = Blueprint(catalog, name="Outpost")
    blueprint.add_entity("pumpjack", (0.5, 0.5))
    blueprint.add_entity("pumpjack", (6.5, 0.5))
    return bp_string.encode(blueprint)


def encoded_lines(output):
    return [line for line in output.splitlines() if line.startswith("0")]


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_valid_levels(self):
        for level in ["debug", "info", "warning", "error", "DEBUG", "INFO"]:
            setup_logging(level)

    def test_invalid_level_raises(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            setup_logging("invalid_level")


class TestSummarize:
    def test_blueprint_summary(self, catalog):
        blueprint = Blueprint(catalog, name="Outpost")
        blueprint.add_entity("pumpjack", (0.5, 0.5))
        blueprint.add_entity("pipe", (4.5, 0.5))
        lines = summarize(blueprint)
        assert lines[0] == "Blueprint: Outpost: 2 entities, 0 tiles"
        assert "    pipe: 1" in lines

    def test_book_summary(self, catalog):
        book = Book([Blueprint(catalog, name="a"), Blueprint(catalog, name="b")])
        lines = summarize(book)
        assert lines[0].startswith("Book: Blueprint Book (2 page(s), active 0)")
        assert lines[1] == "  [0] a: 0 entities, 0 tiles"


class TestInspectCommand:
    def test_inspect_string(self, default_catalog):
        runner = CliRunner()
        result = runner.invoke(main, ["inspect", outpost_string(default_catalog)])
        assert result.exit_code == 0
        assert "Outpost: 2 entities" in result.output
        assert "pumpjack: 2" in result.output

    def test_inspect_file_as_json(self, default_catalog, tmp_path):
        source = tmp_path / "outpost.txt"
        source.write_text(outpost_string(default_catalog) + "\n", encoding="utf-8")
        runner = CliRunner()
        result = runner.invoke(main, ["inspect", str(source), "--file", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["blueprint"]["label"] == "Outpost"

    def test_missing_file(self, default_catalog, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ["inspect", str(tmp_path / "nope.txt"), "--file"])
        assert result.exit_code == 1
        assert "Failed to read input file" in result.output

    def test_invalid_string(self, default_catalog):
        runner = CliRunner()
        result = runner.invoke(main, ["inspect", "garbage"])
        assert result.exit_code == 1
        assert "Invalid blueprint string" in result.output

    def test_unsupported_kinds_are_listed(self, default_catalog):
        raw = JSON_to_string(
            {
                "blueprint": {
                    "item": "blueprint",
                    "entities": [
                        {"entity_number": 1, "name": "locomotive", "position": {"x": 0, "y": 0}}
                    ],
                }
            }
        )
        runner = CliRunner()
        result = runner.invoke(main, ["inspect", raw])
        assert result.exit_code == 1
        assert "train entities" in result.output
        assert "  locomotive" in result.output


class TestPipesCommand:
    def test_pipes_to_stdout(self, default_catalog):
        runner = CliRunner()
        result = runner.invoke(main, ["pipes", outpost_string(default_catalog)])
        assert result.exit_code == 0
        (encoded,) = encoded_lines(result.output)
        piped = bp_string.decode(encoded, default_catalog)
        assert any(entity.name == "pipe" for entity in piped.entities)

    def test_pipes_to_file(self, default_catalog, tmp_path):
        output = tmp_path / "out" / "piped.txt"
        runner = CliRunner()
        result = runner.invoke(
            main, ["pipes", outpost_string(default_catalog), "--rotate", "-o", str(output)]
        )
        assert result.exit_code == 0
        piped = bp_string.decode(output.read_text(encoding="utf-8"), default_catalog)
        assert len(piped.entities) > 2

    def test_pipes_reports_unconnected(self, default_catalog):
        blueprint = Blueprint(default_catalog)
        blueprint.add_entity("pumpjack", (0.5, 0.5))
        blueprint.add_entity("wooden-chest", (1.5, -1.5))
        runner = CliRunner()
        result = runner.invoke(main, ["pipes", bp_string.encode(blueprint)])
        assert result.exit_code == 0
        assert "1 of 1 extractors could not be connected" in result.output

    def test_verbose_reports_count(self, default_catalog):
        runner = CliRunner()
        result = runner.invoke(
            main, ["--log-level", "info", "pipes", outpost_string(default_catalog)]
        )
        assert result.exit_code == 0
        assert "pipe(s)" in result.output
