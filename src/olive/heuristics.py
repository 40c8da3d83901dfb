"""
Deterministic classification heuristics.

Used as the backstop whenever the remote classifier is unavailable,
returns garbage, or leaves fields out.
"""

import re

from olive.models import LIST_CATEGORY, ClassifiedFields

ACTION_VERBS = ("buy", "get", "grab", "pick up", "purchase", "shop for")

GROCERY_WORDS = (
    r"lemons?", "bread", "milk", r"eggs?", r"tomatoes?", r"apples?", r"bananas?",
    "cheese", "butter", "yogurt", "flour", "sugar", "rice", "pasta", "coffee",
    "tea", r"onions?", "garlic", "lettuce", "spinach", "berries", "meat",
    "chicken", "beef", "fish",
)

MAX_ITEM_LENGTH = 50

_ACTION_RE = re.compile(r"\b(" + "|".join(ACTION_VERBS) + r")\b", re.IGNORECASE)
_GROCERY_RE = re.compile(r"\b(" + "|".join(GROCERY_WORDS) + r")\b", re.IGNORECASE)
_SPLIT_RE = re.compile(r",|\band\b|\n", re.IGNORECASE)
_LEADING_ACTION_RE = re.compile(r"^(" + "|".join(ACTION_VERBS) + r")\b\s+", re.IGNORECASE)
_LEADING_ARTICLE_RE = re.compile(r"^(some|a|an|the)\b\s+", re.IGNORECASE)


def is_list_note(text: str) -> bool:
    """True when the text reads like a shopping errand ("buy milk")."""
    return bool(_ACTION_RE.search(text)) and bool(_GROCERY_RE.search(text))


def heuristic_category(text: str) -> str | None:
    return LIST_CATEGORY if is_list_note(text) else None


def split_items(text: str) -> list[str] | None:
    """
    Split list-like text into individual entries.

    "buy lemons, bread and milk" -> ["lemons", "bread", "milk"]

    Returns None unless at least two usable fragments come out.
    """
    items = []
    for fragment in _SPLIT_RE.split(text):
        fragment = fragment.strip()
        if not fragment:
            continue
        fragment = _LEADING_ACTION_RE.sub("", fragment).strip()
        fragment = _LEADING_ARTICLE_RE.sub("", fragment).strip()
        if fragment and len(fragment) <= MAX_ITEM_LENGTH:
            items.append(fragment)

    if len(items) > 1:
        return items
    return None


def heuristic_fields(text: str) -> ClassifiedFields:
    """Run every heuristic over the text."""
    return ClassifiedFields(
        category=heuristic_category(text),
        items=split_items(text),
    )
