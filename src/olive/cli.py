"""
CLI for Olive.

Minimal CLI using stdlib argument handling. Subcommands are imported lazily
so the capture path stays fast.

Usage:
    olive "buy lemons, bread and milk"   # Capture (primary interface)
    olive list --category groceries      # List notes
    olive --help                         # Show help
"""

import logging
import sys
from typing import Any


def print_help() -> None:
    """Print help message."""
    print("""olive - a shared second brain for couples

Usage:
    olive "your note here"        Capture a note as the current partner

Commands:
    olive list [options]          List notes (--category <name>, --all)
    olive show <id>               Show every field of a note
    olive done <id>               Toggle a note's completion
    olive delete <id>             Delete a note
    olive categories              List categories with note counts
    olive setup <name1> <name2>   Save the couple's names
    olive switch                  Switch the current partner
    olive whoami                  Show the current partner

Options:
    olive --help, -h              Show this help
    olive --version, -v           Show version

Examples:
    olive "Buy lemons, bread and milk"
    olive "Fix the kitchen sink this weekend"
    olive list --category groceries
    olive done 3f2a9c1e

IDs may be abbreviated to any unique prefix.""")


def print_version() -> None:
    """Print version."""
    from olive import __version__
    print(f"olive {__version__}")


def setup_logging(config: dict[str, Any]) -> None:
    level = str(config.get("logging", {}).get("level", "WARNING")).upper()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, level, logging.WARNING),
    )


def _open_storage():
    from olive.config import ensure_dirs
    from olive.storage import SqliteStorage

    ensure_dirs()
    return SqliteStorage()


def _open_store(storage=None):
    from olive.store import NoteStore

    store = NoteStore(storage or _open_storage())
    store.load()
    return store


def _resolve_id(store, prefix: str) -> str | None:
    """Expand an abbreviated ID. None if missing or ambiguous."""
    if store.get_by_id(prefix):
        return prefix
    matches = [note.id for note in store.notes or () if note.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        print(f"Ambiguous id {prefix}: {len(matches)} notes match", file=sys.stderr)
    return None


def capture(text: str, config: dict[str, Any] | None = None):
    """
    Classify a note as the current partner and store it.

    Returns the stored Note.
    """
    from olive.classifier import Classifier
    from olive.couple import Couple

    storage = _open_storage()
    couple = Couple(storage)
    couple.load()
    store = _open_store(storage)

    note = Classifier(config).classify(text, couple.active_user)
    store.add(note)
    return note


def cmd_capture(text: str, config: dict[str, Any]) -> int:
    from olive.surfacing import format_note

    try:
        note = capture(text, config)
        print(format_note(note))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_list(args: list[str]) -> int:
    """List notes with optional filters."""
    from olive.surfacing import format_notes

    category = None
    include_completed = False

    # Parse arguments
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in ("--category", "-c") and i + 1 < len(args):
            category = args[i + 1]
            i += 2
        elif arg in ("--all", "-a"):
            include_completed = True
            i += 1
        else:
            i += 1

    try:
        store = _open_store()
        notes = store.get_by_category(category) if category else store.notes
        print(format_notes(notes or (), include_completed=include_completed))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_show(args: list[str]) -> int:
    """Show a single note."""
    from olive.surfacing import format_note_detail

    if not args:
        print("Usage: olive show <id>", file=sys.stderr)
        return 1

    try:
        store = _open_store()
        note_id = _resolve_id(store, args[0])
        if note_id is None:
            print(f"Not found: {args[0]}", file=sys.stderr)
            return 1
        print(format_note_detail(store.get_by_id(note_id)))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_done(args: list[str]) -> int:
    """Toggle a note's completion."""
    if not args:
        print("Usage: olive done <id>", file=sys.stderr)
        return 1

    try:
        store = _open_store()
        note_id = _resolve_id(store, args[0])
        if note_id is None:
            print(f"Not found: {args[0]}", file=sys.stderr)
            return 1
        store.toggle_completion(note_id)
        note = store.get_by_id(note_id)
        state = "Completed" if note.completed else "Reopened"
        print(f"{state}: {note.summary}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_delete(args: list[str]) -> int:
    """Delete a note."""
    if not args:
        print("Usage: olive delete <id>", file=sys.stderr)
        return 1

    try:
        store = _open_store()
        note_id = _resolve_id(store, args[0])
        if note_id is None:
            print(f"Not found: {args[0]}", file=sys.stderr)
            return 1
        summary = store.get_by_id(note_id).summary
        store.delete(note_id)
        print(f"Deleted: {summary}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_categories() -> int:
    """Show categories with open/total counts."""
    from olive.models import CATEGORIES

    try:
        store = _open_store()
        for category in CATEGORIES:
            notes = store.get_by_category(category)
            open_count = sum(1 for note in notes if not note.completed)
            print(f"{category}: {open_count} open, {len(notes)} total")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_setup(args: list[str]) -> int:
    """Save the couple's names and finish onboarding."""
    from olive.couple import Couple, Onboarding

    if len(args) != 2 or not all(name.strip() for name in args):
        print("Usage: olive setup <name1> <name2>", file=sys.stderr)
        return 1

    try:
        storage = _open_storage()
        couple = Couple(storage)
        couple.load()
        couple.save_names(args[0], args[1])
        Onboarding(storage).complete()
        print(f"Welcome, {couple.partner1} & {couple.partner2}. Capturing as {couple.active_user}.")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_switch() -> int:
    """Hand the app to the other partner."""
    from olive.couple import Couple

    try:
        couple = Couple(_open_storage())
        couple.load()
        print(f"Now capturing as {couple.switch_user()}.")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_whoami() -> int:
    from olive.couple import Couple, Onboarding

    try:
        storage = _open_storage()
        couple = Couple(storage)
        couple.load()
        onboarding = Onboarding(storage)
        onboarding.load()
        print(couple.active_user)
        if not onboarding.is_onboarded:
            print("(not set up yet - run: olive setup <name1> <name2>)", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main() -> int:
    """
    Main entry point.

    Anything that is not a known command is captured as a note.
    """
    from olive.config import load_config

    args = sys.argv[1:]
    config = load_config()
    setup_logging(config)

    # No args - check for piped input
    if not args:
        if not sys.stdin.isatty():
            text = sys.stdin.read().strip()
            if text:
                return cmd_capture(text, config)
        print_help()
        return 0

    first_arg = args[0]

    if first_arg in ("--help", "-h", "help"):
        print_help()
        return 0

    if first_arg in ("--version", "-v", "version"):
        print_version()
        return 0

    if first_arg == "list":
        return cmd_list(args[1:])

    if first_arg == "show":
        return cmd_show(args[1:])

    if first_arg == "done":
        return cmd_done(args[1:])

    if first_arg == "delete":
        return cmd_delete(args[1:])

    if first_arg == "categories":
        return cmd_categories()

    if first_arg == "setup":
        return cmd_setup(args[1:])

    if first_arg == "switch":
        return cmd_switch()

    if first_arg == "whoami":
        return cmd_whoami()

    # Join all args (allows: olive buy lemons and bread)
    text = " ".join(args)

    if not text.strip():
        print("Error: Empty note", file=sys.stderr)
        return 1

    return cmd_capture(text, config)


if __name__ == "__main__":
    sys.exit(main())
