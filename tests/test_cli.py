"""End-to-end tests for the CLI against a temporary OLIVE_HOME."""

import sys

import pytest

from olive import cli
from olive.classifier import Classifier
from olive.storage import SqliteStorage
from olive.store import NoteStore


@pytest.fixture(autouse=True)
def offline(monkeypatch):
    """No network: remote classification always comes back empty."""
    monkeypatch.setattr(Classifier, "remote_classify", lambda self, text: None)


def run(monkeypatch, *args: str) -> int:
    monkeypatch.setattr(sys, "argv", ["olive", *args])
    return cli.main()


def stored_notes():
    store = NoteStore(SqliteStorage())
    store.load()
    return store.notes


def test_capture_stores_a_note(monkeypatch, capsys) -> None:
    assert run(monkeypatch, "buy", "lemons,", "bread", "and", "milk") == 0

    notes = stored_notes()
    assert len(notes) == 1
    assert notes[0].category == "Groceries"
    assert notes[0].items == ["lemons", "bread", "milk"]
    assert notes[0].added_by == "Partner 1"
    assert "Groceries" in capsys.readouterr().out


def test_capture_uses_current_partner(monkeypatch) -> None:
    assert run(monkeypatch, "setup", "Alex", "Sam") == 0
    assert run(monkeypatch, "switch") == 0
    assert run(monkeypatch, "fix kitchen sink") == 0
    assert stored_notes()[0].added_by == "Sam"


def test_list_filters_by_category(monkeypatch, capsys) -> None:
    run(monkeypatch, "buy lemons and milk")
    run(monkeypatch, "fix kitchen sink")
    capsys.readouterr()

    assert run(monkeypatch, "list", "--category", "groceries") == 0
    out = capsys.readouterr().out
    assert "buy lemons and milk" in out
    assert "fix kitchen sink" not in out


def test_done_toggles_by_prefix(monkeypatch, capsys) -> None:
    run(monkeypatch, "fix kitchen sink")
    note_id = stored_notes()[0].id

    assert run(monkeypatch, "done", note_id[:8]) == 0
    assert stored_notes()[0].completed is True
    assert "Completed" in capsys.readouterr().out

    assert run(monkeypatch, "done", note_id) == 0
    assert stored_notes()[0].completed is False


def test_delete(monkeypatch) -> None:
    run(monkeypatch, "fix kitchen sink")
    note_id = stored_notes()[0].id
    assert run(monkeypatch, "delete", note_id) == 0
    assert stored_notes() == ()


def test_unknown_id(monkeypatch, capsys) -> None:
    assert run(monkeypatch, "show", "nope") == 1
    assert "Not found" in capsys.readouterr().err


def test_usage_errors(monkeypatch) -> None:
    assert run(monkeypatch, "done") == 1
    assert run(monkeypatch, "setup", "OnlyOne") == 1


def test_whoami_and_version(monkeypatch, capsys) -> None:
    assert run(monkeypatch, "whoami") == 0
    assert capsys.readouterr().out.strip() == "Partner 1"
    assert run(monkeypatch, "--version") == 0
    assert capsys.readouterr().out.startswith("olive ")
