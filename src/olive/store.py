"""
Note store for Olive.

Owns the ordered note collection (newest first) and is the only writer of
its persisted copy. Every mutation updates memory, writes the whole
collection through the storage backend, then notifies subscribers.
"""

import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Mapping, get_args

from pydantic import TypeAdapter, ValidationError

from olive.models import MAX_TAGS, Note, Priority, utcnow
from olive.storage import KEY_NOTES, Storage, StorageError

logger = logging.getLogger(__name__)

NOTES_ADAPTER = TypeAdapter(list[Note])

PRIORITIES = frozenset(get_args(Priority))

# Fields only the store itself may set
PROTECTED_FIELDS = frozenset({"id", "original_text", "created_at", "updated_at", "completed"})

# Accept both attribute names and wire names in update()
_FIELD_NAMES = {name: name for name in Note.model_fields} | {
    field.alias: name for name, field in Note.model_fields.items() if field.alias
}

Subscriber = Callable[[tuple[Note, ...]], None]


def _repair(data: dict[str, Any]) -> dict[str, Any]:
    """Fix what older clients wrote: uncapped tags, free-form priority."""
    data = dict(data)
    tags = data.get("tags")
    if isinstance(tags, list):
        data["tags"] = tags[:MAX_TAGS]
    elif tags is None:
        data.pop("tags", None)
    if data.get("priority") not in PRIORITIES:
        data["priority"] = None
    return data


def _load_notes(payload: Any) -> list[Note]:
    """Validate stored notes one by one, repairing or skipping bad ones."""
    if not isinstance(payload, list):
        logger.error(f"Stored notes are not a list, starting empty: {type(payload).__name__}")
        return []

    notes: list[Note] = []
    seen: set[str] = set()
    for position, item in enumerate(payload):
        try:
            note = Note.model_validate(item)
        except ValidationError:
            if not isinstance(item, dict):
                logger.error(f"Skipping stored note #{position}: not an object")
                continue
            try:
                note = Note.model_validate(_repair(item))
            except ValidationError as e:
                logger.error(f"Skipping unreadable stored note #{position}: {e.error_count()} errors")
                continue
            logger.warning(f"Repaired stored note {note.id}")
        if note.id in seen:
            logger.warning(f"Skipping stored note with duplicate id {note.id}")
            continue
        seen.add(note.id)
        notes.append(note)
    return notes


class StoreState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class NoteStore:
    """In-memory note collection backed by key-value storage."""

    def __init__(self, storage: Storage, key: str = KEY_NOTES):
        self.storage = storage
        self.key = key
        self.state = StoreState.UNINITIALIZED
        self._notes: list[Note] = []
        self._subscribers: list[Subscriber] = []

    @property
    def is_loading(self) -> bool:
        return self.state is not StoreState.READY

    @property
    def notes(self) -> tuple[Note, ...] | None:
        """The current collection, or None while it is not yet known."""
        if self.state is not StoreState.READY:
            return None
        return tuple(self._notes)

    def load(self) -> None:
        """
        Hydrate the collection from storage.

        A missing or unparseable payload starts the store empty. Notes are
        validated one at a time, so a single bad note costs only itself.
        """
        self.state = StoreState.LOADING
        notes: list[Note] = []
        try:
            raw = self.storage.get_item(self.key)
            if raw:
                notes = _load_notes(json.loads(raw))
        except StorageError as e:
            logger.error(f"Error loading notes: {e}")
        except json.JSONDecodeError as e:
            logger.error(f"Stored notes are not valid JSON, starting empty: {e}")

        self._notes = notes
        self.state = StoreState.READY
        logger.debug(f"Loaded {len(notes)} notes")
        self._publish()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register for collection updates. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def add(self, note: Note) -> None:
        """Insert a note at the front of the collection."""
        self._ensure_loaded()
        if self._index_of(note.id) is not None:
            logger.warning(f"Ignoring note with duplicate id {note.id}")
            return
        self._commit([note, *self._notes])

    def update(self, note_id: str, changes: Mapping[str, Any]) -> None:
        """
        Merge changes into a note and bump its updated_at.

        Protected and unknown fields are ignored. Invalid values raise
        pydantic.ValidationError and leave the store untouched.
        """
        self._ensure_loaded()
        index = self._index_of(note_id)
        if index is None:
            return

        current = self._notes[index]
        data = current.model_dump()
        for key, value in changes.items():
            name = _FIELD_NAMES.get(key)
            if name is None:
                logger.warning(f"Ignoring unknown note field {key!r}")
            elif name in PROTECTED_FIELDS:
                logger.warning(f"Ignoring protected note field {key!r}")
            else:
                data[name] = value
        data["updated_at"] = self._next_timestamp(current)

        updated = Note.model_validate(data)
        self._replace(index, updated)

    def delete(self, note_id: str) -> None:
        self._ensure_loaded()
        if self._index_of(note_id) is None:
            return
        self._commit([note for note in self._notes if note.id != note_id])

    def toggle_completion(self, note_id: str) -> None:
        self._ensure_loaded()
        index = self._index_of(note_id)
        if index is None:
            return

        current = self._notes[index]
        updated = current.model_copy(update={
            "completed": not current.completed,
            "updated_at": self._next_timestamp(current),
        })
        self._replace(index, updated)

    def get_by_id(self, note_id: str) -> Note | None:
        self._ensure_loaded()
        index = self._index_of(note_id)
        return self._notes[index] if index is not None else None

    def get_by_category(self, category: str) -> list[Note]:
        """Notes in a category (case-insensitive), newest first."""
        self._ensure_loaded()
        wanted = category.lower()
        return [note for note in self._notes if note.category.lower() == wanted]

    def _ensure_loaded(self) -> None:
        if self.state is StoreState.UNINITIALIZED:
            self.load()

    def _index_of(self, note_id: str) -> int | None:
        for index, note in enumerate(self._notes):
            if note.id == note_id:
                return index
        return None

    @staticmethod
    def _next_timestamp(note: Note) -> datetime:
        # Never step backwards, even if the wall clock does
        return max(utcnow(), note.updated_at)

    def _replace(self, index: int, note: Note) -> None:
        notes = list(self._notes)
        notes[index] = note
        self._commit(notes)

    def _commit(self, notes: list[Note]) -> None:
        self._notes = notes
        self._persist()
        self._publish()

    def _persist(self) -> None:
        """Write the whole collection. Failures are logged, memory stays authoritative."""
        payload = NOTES_ADAPTER.dump_json(self._notes, by_alias=True, exclude_none=True)
        try:
            self.storage.set_item(self.key, payload.decode("utf-8"))
        except StorageError as e:
            logger.error(f"Error saving notes: {e}")

    def _publish(self) -> None:
        snapshot = tuple(self._notes)
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Note subscriber failed")
