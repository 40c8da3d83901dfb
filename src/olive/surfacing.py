"""
Surfacing module for Olive.

Renders notes for the terminal.
"""

import os
from typing import Iterable

from olive.models import CATEGORIES, Note


# ANSI color codes
class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"

    # Bright foreground colors
    BRIGHT_BLACK = "\033[90m"  # Gray
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_BLUE = "\033[94m"
    BRIGHT_MAGENTA = "\033[95m"
    BRIGHT_CYAN = "\033[96m"

    @classmethod
    def enabled(cls) -> bool:
        """Check if colors should be enabled."""
        if os.environ.get("NO_COLOR"):
            return False
        return True


def c(text: str, *codes: str) -> str:
    """Apply color codes to text if colors are enabled."""
    if not Colors.enabled():
        return text
    return "".join(codes) + text + Colors.RESET


CATEGORY_COLORS = {
    "Groceries": Colors.BRIGHT_GREEN,
    "Task": Colors.BRIGHT_YELLOW,
    "Home Improvement": Colors.BRIGHT_BLUE,
    "Travel Idea": Colors.BRIGHT_CYAN,
    "Date Idea": Colors.BRIGHT_MAGENTA,
}

PRIORITY_MARKERS = {
    "high": "!!",
    "medium": "!",
    "low": "",
}

SHORT_ID_LENGTH = 8


def format_id(note_id: str) -> str:
    """Shorten a note ID for display. Prefixes are accepted on input."""
    return note_id[:SHORT_ID_LENGTH]


def format_note(note: Note) -> str:
    """One-line rendering: checkbox, id, category, summary, due date."""
    box = "[x]" if note.completed else "[ ]"
    color = CATEGORY_COLORS.get(note.category, Colors.RESET)
    marker = PRIORITY_MARKERS.get(note.priority or "", "")

    line = f"{box} {c(format_id(note.id), Colors.DIM)} {c(note.category, color)}  {marker}{note.summary}"
    if note.due_date:
        line += c(f" (due {note.due_date[:10]})", Colors.YELLOW)
    if note.completed:
        line = c(line, Colors.BRIGHT_BLACK)
    return line


def format_note_detail(note: Note) -> str:
    """Multi-line rendering of every field."""
    lines = [
        c(note.summary, Colors.BOLD),
        "",
        f"ID:        {note.id}",
        f"Category:  {c(note.category, CATEGORY_COLORS.get(note.category, Colors.RESET))}",
        f"Added by:  {note.added_by}",
        f"Created:   {note.created_at.isoformat()}",
        f"Updated:   {note.updated_at.isoformat()}",
        f"Completed: {'yes' if note.completed else 'no'}",
    ]
    if note.priority:
        lines.append(f"Priority:  {note.priority}")
    if note.due_date:
        lines.append(f"Due:       {note.due_date}")
    if note.tags:
        lines.append(f"Tags:      {', '.join('#' + tag for tag in note.tags)}")
    if note.items:
        lines.append("Items:")
        lines.extend(f"  - {item}" for item in note.items)
    lines.extend(["", c(note.original_text, Colors.DIM)])
    return "\n".join(lines)


def format_notes(notes: Iterable[Note], include_completed: bool = False) -> str:
    """Group notes by category, known categories first."""
    grouped: dict[str, list[Note]] = {}
    for note in notes:
        if note.completed and not include_completed:
            continue
        grouped.setdefault(note.category, []).append(note)

    if not grouped:
        return "No notes."

    order = [cat for cat in CATEGORIES if cat in grouped]
    order += sorted(cat for cat in grouped if cat not in CATEGORIES)

    lines: list[str] = []
    for category in order:
        lines.append(c(f"## {category} ({len(grouped[category])})", Colors.BOLD))
        lines.extend(format_note(note) for note in grouped[category])
        lines.append("")
    return "\n".join(lines).rstrip()
