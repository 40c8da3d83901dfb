"""Tests for the Note model and category helpers."""

from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from olive.models import CATEGORIES, Note, canonical_category, is_iso_date, utcnow


def note_fields(**overrides):
    now = utcnow()
    fields = {
        "id": "abc",
        "original_text": "fix sink",
        "summary": "fix sink",
        "category": "Task",
        "added_by": "Alex",
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return fields


def test_canonical_category() -> None:
    assert canonical_category("travel idea") == "Travel Idea"
    assert canonical_category("  GROCERIES ") == "Groceries"
    assert canonical_category("Chores") is None
    assert all(canonical_category(category) == category for category in CATEGORIES)


@pytest.mark.parametrize("value", ["2026-10-20", "2026-10-20T09:30:00", "2026-10-20T09:30:00Z"])
def test_iso_dates(value) -> None:
    assert is_iso_date(value)


@pytest.mark.parametrize("value", ["tomorrow", "20/10/2026", ""])
def test_not_iso_dates(value) -> None:
    assert not is_iso_date(value)


def test_note_defaults() -> None:
    note = Note(**note_fields())
    assert note.completed is False
    assert note.tags == []
    assert note.items is None
    assert note.priority is None


@pytest.mark.parametrize("overrides", [
    {"id": ""},
    {"original_text": ""},
    {"added_by": ""},
    {"category": ""},
    {"tags": ["a", "b", "c", "d"]},
    {"priority": "urgent"},
])
def test_note_rejects_invalid_fields(overrides) -> None:
    with pytest.raises(ValidationError):
        Note(**note_fields(**overrides))


def test_updated_at_cannot_precede_created_at() -> None:
    now = utcnow()
    with pytest.raises(ValidationError):
        Note(**note_fields(created_at=now, updated_at=now - timedelta(seconds=1)))


def test_naive_timestamps_are_treated_as_utc() -> None:
    naive = datetime(2026, 10, 19, 12, 0, 0)
    note = Note(**note_fields(created_at=naive, updated_at=naive))
    assert note.created_at.tzinfo is not None


def test_notes_are_immutable() -> None:
    note = Note(**note_fields())
    with pytest.raises(ValidationError):
        note.summary = "changed"
