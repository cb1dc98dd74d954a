"""Unit tests for CLI handlers and the click command.

Each handler returns a Result, so it can be tested without a click context.
"""

import json

import pytest
from click.testing import CliRunner

from fakes import FakeLookup, RecordingAssembler, card
from proxy_printer.cli import main as cli_main
from proxy_printer.cli.common import ProgressPrinter
from proxy_printer.cli.handlers import handle_materialize
from proxy_printer.engine.materializer import DeckMaterializer
from proxy_printer.progress import ProgressEvent, Stage
from proxy_printer.result import failure, success


@pytest.fixture
def deck_file(tmp_path):
    path = tmp_path / "burn.txt"
    path.write_text("4 Lightning Bolt\n1 Misspelled Card\n", encoding="utf-8")
    return path


@pytest.fixture
def fake_materializer():
    lookup = FakeLookup().add(card("Lightning Bolt"))
    return DeckMaterializer(lookup, RecordingAssembler(), max_workers=1)


class TestMaterializeHandler:
    """Tests for handle_materialize()."""

    def test_returns_summary(self, deck_file, fake_materializer):
        """A successful run summarizes the document."""
        result = handle_materialize(deck_file=deck_file, materializer=fake_materializer)

        assert result["ok"] is True
        summary = result["value"]
        assert summary["deck"] == "burn"
        assert summary["cards"] == 4
        assert summary["unresolved"] == ["Misspelled Card"]
        assert summary["state"] == "completed"

    def test_invalid_options_become_errors(self, deck_file, fake_materializer):
        """Validation problems are returned, not raised."""
        result = handle_materialize(
            deck_file=deck_file, language_code="klingon", materializer=fake_materializer
        )

        assert result["ok"] is False
        assert "Unsupported language" in result["error"]

    def test_missing_deck_file(self, tmp_path, fake_materializer):
        """Deck source failures are structured errors."""
        result = handle_materialize(
            deck_file=tmp_path / "missing.txt", materializer=fake_materializer
        )

        assert result["ok"] is False
        assert result["error"].startswith("DeckSourceError")

    def test_no_source(self, fake_materializer):
        """Handlers need a deck to work on."""
        result = handle_materialize(materializer=fake_materializer)

        assert result["ok"] is False
        assert "ValueError" in result["error"]

    def test_unreachable_database(self, deck_file):
        """An errored run without exception is still a failure."""
        lookup = FakeLookup()
        lookup.unreachable.update({"lightning bolt", "misspelled card"})
        materializer = DeckMaterializer(lookup, RecordingAssembler(), max_workers=1)

        result = handle_materialize(deck_file=deck_file, materializer=materializer)

        assert result["ok"] is False
        assert "could not be reached" in result["error"]

    def test_default_token_copies_from_settings(self, deck_file, monkeypatch):
        """Token copies fall back to PP_DEFAULT_TOKEN_COPIES."""
        from proxy_printer.config import settings as settings_module

        goblin_id = "1d8b3a1c-1ff1-4a5e-8f3a-0c2a6c9e4b11"
        lookup = FakeLookup().add(card("Lightning Bolt", tokens=[("Goblin", goblin_id)]))
        lookup.add_token(goblin_id, card("Goblin"))
        materializer = DeckMaterializer(lookup, RecordingAssembler(), max_workers=1)

        monkeypatch.setenv("PP_DEFAULT_TOKEN_COPIES", "2")
        settings_module.reload_settings()
        try:
            result = handle_materialize(deck_file=deck_file, materializer=materializer)
        finally:
            monkeypatch.undo()
            settings_module.reload_settings()

        assert result["value"]["tokens"] == ["Goblin"]


class TestProgressPrinter:
    """Tests for the console progress observer."""

    def test_renders_history(self):
        """Events are rendered as progress lines."""
        printer = ProgressPrinter(enabled=False, keep_history=True)

        printer(ProgressEvent(Stage.DECK_DETAILS, 50.0))
        printer(ProgressEvent(Stage.DECK_DETAILS, None, "Card 'X' was not found"))

        assert printer.history[0].startswith("Resolving cards [")
        assert printer.history[1] == "Resolving cards - Card 'X' was not found"


class TestCommand:
    """Tests for the click command."""

    def test_requires_one_source(self):
        """Exactly one of --deck-file/--deck-url is required."""
        result = CliRunner().invoke(cli_main.cli, [])

        assert result.exit_code != 0
        assert "exactly one of" in result.output

    def test_success(self, monkeypatch, deck_file, tmp_path):
        """A successful run prints the document path and writes the summary."""
        summary = {
            "deck": "burn",
            "state": "completed",
            "document": "output/burn.pdf",
            "cards": 4,
            "entries": 1,
            "unresolved": ["Misspelled Card"],
            "tokens": [],
        }
        received = {}

        def fake_handler(**kwargs):
            received.update(kwargs)
            return success(summary)

        monkeypatch.setattr(cli_main, "handle_materialize", fake_handler)
        monkeypatch.setattr(cli_main, "setup_logging", lambda level=None: None)
        summary_path = tmp_path / "summary.json"

        result = CliRunner().invoke(
            cli_main.cli,
            [
                "--deck-file",
                str(deck_file),
                "--language",
                "de",
                "--token-copies",
                "2",
                "--summary",
                str(summary_path),
            ],
        )

        assert result.exit_code == 0
        assert "Saved 4 cards of 'burn' to output/burn.pdf" in result.output
        assert "Not printed: Misspelled Card" in result.output
        assert received["language_code"] == "de"
        assert received["token_copies"] == 2
        assert json.loads(summary_path.read_text(encoding="utf-8")) == summary

    def test_failure_exits_non_zero(self, monkeypatch, deck_file):
        """Handler failures end with exit code 1."""
        monkeypatch.setattr(
            cli_main, "handle_materialize", lambda **kwargs: failure("EmptyDeckError: nope")
        )
        monkeypatch.setattr(cli_main, "setup_logging", lambda level=None: None)

        result = CliRunner().invoke(cli_main.cli, ["--deck-file", str(deck_file)])

        assert result.exit_code == 1

    def test_token_copies_range(self, deck_file):
        """Token copies above 100 are rejected by click."""
        result = CliRunner().invoke(
            cli_main.cli, ["--deck-file", str(deck_file), "--token-copies", "101"]
        )

        assert result.exit_code == 2
