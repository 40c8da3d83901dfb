"""
Data model for Olive.

A Note is the structured record derived from one captured thought.
ClassifiedFields is the subset of a Note that classification produces.
"""

from datetime import date, datetime, timezone
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Display order matters: the CLI lists categories in this order.
CATEGORIES = (
    "Groceries",
    "Task",
    "Home Improvement",
    "Travel Idea",
    "Date Idea",
)

LIST_CATEGORY = "Groceries"
DEFAULT_CATEGORY = "Task"

MAX_TAGS = 3
SUMMARY_FALLBACK_LENGTH = 100

Priority = Literal["low", "medium", "high"]


def generate_id() -> str:
    """Generate an opaque unique note ID."""
    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def canonical_category(value: str) -> str | None:
    """Map a category name onto CATEGORIES, ignoring case and padding."""
    wanted = value.strip().lower()
    for category in CATEGORIES:
        if category.lower() == wanted:
            return category
    return None


def is_iso_date(value: str) -> bool:
    """True for ISO-8601 dates ("2026-10-20") and datetimes."""
    try:
        date.fromisoformat(value)
        return True
    except ValueError:
        pass
    try:
        # fromisoformat only learned the Z suffix in 3.11
        datetime.fromisoformat(value.replace("Z", "+00:00"))
        return True
    except ValueError:
        return False


class Note(BaseModel):
    """A captured note. Serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(min_length=1)
    original_text: str = Field(min_length=1)
    summary: str
    category: str = Field(min_length=1)
    due_date: str | None = None
    added_by: str = Field(min_length=1)
    created_at: datetime
    updated_at: datetime
    completed: bool = False
    priority: Priority | None = None
    tags: list[str] = Field(default_factory=list, max_length=MAX_TAGS)
    items: list[str] | None = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_timestamps(self) -> "Note":
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not be earlier than created_at")
        return self


class ClassifiedFields(BaseModel):
    """
    Fields derived from note text, by the remote service or by heuristics.

    Every field is optional; absent means "not derived". Validators normalise
    values that are well-typed but unusable (blank strings, unknown
    categories, unparseable dates) to None.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    summary: str | None = None
    category: str | None = None
    due_date: str | None = None
    tags: list[str] | None = None
    priority: Priority | None = None
    items: list[str] | None = None

    @field_validator("summary")
    @classmethod
    def _blank_summary(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value

    @field_validator("category")
    @classmethod
    def _known_category(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return canonical_category(value)

    @field_validator("due_date")
    @classmethod
    def _iso_due_date(cls, value: str | None) -> str | None:
        if value is None or not is_iso_date(value.strip()):
            return None
        return value.strip()

    @field_validator("priority", mode="before")
    @classmethod
    def _lower_priority(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() or None
        return value

    @field_validator("tags")
    @classmethod
    def _cap_tags(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return [tag.strip() for tag in value if tag.strip()][:MAX_TAGS]

    @field_validator("items")
    @classmethod
    def _non_empty_items(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        cleaned = [item.strip() for item in value if item.strip()]
        return cleaned or None
