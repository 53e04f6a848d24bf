import sys
from pathlib import Path

import pytest


def _add_src_to_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_add_src_to_path()


NOTES_SOURCE = "\n".join(
    [
        "from dataclasses import dataclass",
        "",
        "@dataclass",
        "class Note:",
        "    text: str",
        "    pinned: bool = False",
        "",
        "def save_notes(notes, dry_run=False):",
        "    if dry_run:",
        "        return 0",
        "    return len(notes)",
        "",
    ]
)

NOTES_INTENT = "\n".join(
    [
        "---",
        "id: notes-storage",
        "from: abc1234",
        "status: active",
        "tags: [storage, notes]",
        "files:",
        "  - src/notes.py",
        "---",
        "",
        "# Notes storage",
        "# fr: Stockage des notes",
        "",
        "## Summary",
        "en: Persist notes on disk.",
        "fr: Enregistre les notes sur disque.",
        "",
        "### @class:Note | Note model",
        "A note entry.",
        "> Decision: Use a dataclass",
        "",
        "### @function:save_notes | Save notes",
        "Writes notes unless dry_run is set.",
        "@link @class:Note | Persists note entries",
        "",
        "### @function:load_notes | Load notes",
        "Reads notes back.",
        "",
    ]
)

MANIFEST = "\n".join(
    [
        "version: 2",
        "default_lang: en",
        "intents:",
        "  - id: notes-storage",
        "    file: 001-notes.intent.md",
        "    status: active",
        "  - id: legacy-notes",
        "    file: 000-legacy.intent.md",
        "    status: superseded",
        "    superseded_by: notes-storage",
        "",
    ]
)


def write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    """Build a repository with one active intent documenting ``src/notes.py``."""
    root = tmp_path / "repo"
    write_file(root / "src" / "notes.py", NOTES_SOURCE)
    write_file(root / ".intent" / "manifest.yaml", MANIFEST)
    write_file(root / ".intent" / "intents" / "001-notes.intent.md", NOTES_INTENT)
    return root
