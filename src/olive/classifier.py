"""
LLM Classifier for Olive.

Turns a raw note into a structured Note. The remote completion endpoint is
asked for a JSON object; whatever comes back is validated field by field and
merged with local heuristics, so a Note is produced even when the endpoint
is down or talking nonsense.
"""

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import ValidationError

from olive.config import DEFAULT_LLM_ENDPOINT, DEFAULT_LLM_TIMEOUT, load_config
from olive.heuristics import heuristic_fields
from olive.models import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    SUMMARY_FALLBACK_LENGTH,
    ClassifiedFields,
    Note,
    generate_id,
    utcnow,
)

logger = logging.getLogger(__name__)


CLASSIFIER_PROMPT = """You are an AI assistant that processes raw notes for a couples' second-brain app called Olive.
Return a single valid JSON object only. Do not include markdown, code fences, or any extra text.

## Context
Today's date: {today}

## Fields
- summary: concise summary
- category: one of [{categories}]
- dueDate: ISO 8601 date if a date is detected, else null.
  Resolve relative phrases ("tomorrow", "next week", weekday names) against today's date.
- tags: string[] (max 3)
- priority: "low" | "medium" | "high"
- items: string[] of atomic entries for list-like notes (e.g. split groceries on commas or "and")

## Rules
- If the text clearly describes groceries or a shopping list, set category to "Groceries" and split into items.
- Prefer "Groceries" over generic "Task" for phrases like "buy" + food or store items.
- Do not invent fields. Always return valid JSON only."""


def _strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code block, if any."""
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = lines[1:]  # Remove first line (```json)
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)
    return text


def validate_fields(payload: dict[str, Any]) -> ClassifiedFields:
    """
    Validate a decoded payload one field at a time.

    An ill-typed field is dropped rather than failing the whole payload,
    so a wrong `tags` type does not cost us a good summary.
    """
    accepted: dict[str, Any] = {}
    for name, field in ClassifiedFields.model_fields.items():
        key = field.alias if field.alias in payload else name
        if key not in payload:
            continue
        try:
            single = ClassifiedFields.model_validate({key: payload[key]})
        except ValidationError as e:
            logger.debug(f"Dropping ill-typed field {key!r}: {e.errors()[0]['msg']}")
            continue
        accepted[name] = getattr(single, name)
    return ClassifiedFields.model_validate(accepted)


def parse_completion(completion: Any) -> ClassifiedFields | None:
    """
    Parse the endpoint's `completion` value.

    Returns None when the value is not a JSON-encoded object.
    """
    if not isinstance(completion, str):
        logger.warning(f"Completion is not a string: {type(completion).__name__}")
        return None

    try:
        data = json.loads(_strip_code_fence(completion))
    except json.JSONDecodeError:
        logger.warning(f"Completion is not valid JSON: {completion[:200]!r}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"Completion is not a JSON object: {type(data).__name__}")
        return None

    return validate_fields(data)


def merge_fields(
    remote: ClassifiedFields | None,
    heuristic: ClassifiedFields,
    text: str,
) -> ClassifiedFields:
    """
    Merge remote and heuristic fields. Pure; no I/O.

    Per field: remote value, then heuristic value, then the default.
    """
    remote = remote or ClassifiedFields()
    tags = remote.tags if remote.tags is not None else heuristic.tags
    return ClassifiedFields(
        summary=remote.summary or heuristic.summary or text[:SUMMARY_FALLBACK_LENGTH],
        category=remote.category or heuristic.category or DEFAULT_CATEGORY,
        due_date=remote.due_date or heuristic.due_date,
        tags=tags or [],
        priority=remote.priority or heuristic.priority,
        items=remote.items or heuristic.items,
    )


def build_note(text: str, author: str, fields: ClassifiedFields) -> Note:
    """Assemble a fresh Note from merged fields."""
    now = utcnow()
    return Note(
        id=generate_id(),
        original_text=text,
        summary=fields.summary or text[:SUMMARY_FALLBACK_LENGTH],
        category=fields.category or DEFAULT_CATEGORY,
        due_date=fields.due_date,
        added_by=author,
        created_at=now,
        updated_at=now,
        completed=False,
        priority=fields.priority,
        tags=list(fields.tags or []),
        items=fields.items,
    )


class Classifier:
    """Remote classifier with a local heuristic backstop."""

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.config = config or load_config()
        self.llm_config = self.config.get("llm", {})
        self.endpoint = self.llm_config.get("endpoint", DEFAULT_LLM_ENDPOINT)
        self.timeout = float(self.llm_config.get("timeout", DEFAULT_LLM_TIMEOUT))
        self.transport = transport

    def classify(self, text: str, author: str) -> Note:
        """
        Classify raw note text into a Note.

        Remote and network failures never reach the caller; they degrade to
        heuristic and default fields. Only an empty string for text or
        author raises ValueError, since no Note can carry it.
        """
        if text == "":
            raise ValueError("Cannot classify an empty note")
        if author == "":
            raise ValueError("A note needs an author")

        start_time = time.time()
        remote = self.remote_classify(text)

        try:
            fields = merge_fields(remote, heuristic_fields(text), text)
            note = build_note(text, author, fields)
        except Exception:
            # Never lose a note
            logger.exception("Field merge failed, using defaults")
            note = build_note(text, author, ClassifiedFields())

        processing_time = int((time.time() - start_time) * 1000)
        source = "remote" if remote is not None else "heuristic"
        logger.info(f"Classified {note.id} as {note.category} via {source} in {processing_time}ms")
        return note

    def remote_classify(self, text: str) -> ClassifiedFields | None:
        """
        Ask the remote endpoint for fields. Single attempt, no retries.

        Returns None on any failure.
        """
        today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        prompt = CLASSIFIER_PROMPT.format(categories=", ".join(CATEGORIES), today=today)
        messages = [
            {"role": "system", "content": prompt},
            {"role": "user", "content": text},
        ]

        try:
            completion = self._call_endpoint(messages)
        except httpx.HTTPError as e:
            logger.warning(f"Remote classification failed: {e}")
            return None
        except ValueError as e:
            logger.warning(f"Remote classification returned malformed JSON: {e}")
            return None
        except Exception as e:
            logger.warning(f"Unexpected error during remote classification: {e!r}")
            return None

        return parse_completion(completion)

    def _call_endpoint(self, messages: list[dict[str, str]]) -> Any:
        """POST the messages and return the raw `completion` value."""
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            response = client.post(
                self.endpoint,
                headers={"Content-Type": "application/json"},
                json={"messages": messages},
            )
            response.raise_for_status()
            data = response.json()

        if not isinstance(data, dict):
            return None
        return data.get("completion")


def classify_text(text: str, author: str) -> Note:
    """Convenience function to classify a single note."""
    classifier = Classifier()
    return classifier.classify(text, author)
