# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the intent CLI harness."""

import io
import json
import re
from pathlib import Path

from cli.intent_harness import resolve_source, run
from iar.loader import LoadError, LoadedIntent
from iar.manifest import Manifest, ManifestIntent
from iar.parser import parse_intent
from iar.resolver import resolve_anchor


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def test_cli_001_requires_a_command() -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run([], stdout=stdout, stderr=stderr)

    assert exit_code == 2


def test_cli_002_resolve_json_reports_chunk_status(repo_root: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["resolve", "--path", str(repo_root), "--format", "json"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    payload = json.loads(_strip_ansi(stdout.getvalue()))
    assert payload["errors"] == []
    intent = payload["intents"][0]
    assert intent["intent_file_path"] == ".intent/intents/001-notes.intent.md"
    assert intent["document"]["frontmatter"]["id"] == "notes-storage"
    assert "raw" not in intent["document"]
    chunks = intent["resolved_chunks"]
    assert [chunk["chunk"]["anchor"] for chunk in chunks] == [
        "@class:Note",
        "@function:save_notes",
        "@function:load_notes",
    ]
    assert [chunk["status"] for chunk in chunks] == ["untracked", "untracked", "unresolved"]
    assert chunks[0]["resolved"]["start_line"] == 3
    assert chunks[0]["resolved"]["end_line"] == 6
    assert chunks[0]["resolved_file"] == "src/notes.py"
    assert chunks[2]["resolved"] is None


def test_cli_003_resolve_json_can_be_written_to_file(repo_root: Path, tmp_path: Path) -> None:
    output_path = tmp_path / "out" / "resolved.json"
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [
            "resolve",
            "--path",
            str(repo_root),
            "--format",
            "json",
            "--output",
            str(output_path),
            "--lang",
            "fr",
        ],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert stdout.getvalue() == ""
    payload = json.loads(output_path.read_text(encoding="utf-8"))
    assert payload["intents"][0]["document"]["title"] == "Stockage des notes"


def test_cli_004_resolve_table_lists_each_intent(repo_root: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(["resolve", "--path", str(repo_root)], stdout=stdout, stderr=stderr)

    assert exit_code == 0
    assert "notes-storage: Notes storage" in _strip_ansi(stdout.getvalue())


def test_cli_005_resolve_reports_load_errors_and_suggestions(repo_root: Path) -> None:
    _write_file(
        repo_root / ".intent" / "manifest.yaml",
        "intents:\n"
        "  - id: notes-storage\n"
        "    file: 001-notes.intent.md\n"
        "  - id: gone\n"
        "    file: 002-gone.intent.md\n",
    )
    _write_file(
        repo_root / "src" / "notes.py",
        "class Note:\n    pass\n\ndef save_note(notes):\n    return notes\n",
    )
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["resolve", "--path", str(repo_root), "--format", "json"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert "load_error:" in stderr.getvalue()
    assert "002-gone.intent.md" in stderr.getvalue()
    payload = json.loads(_strip_ansi(stdout.getvalue()))
    assert payload["errors"] == [
        {"file_path": ".intent/intents/002-gone.intent.md", "message": "intent document not found"}
    ]
    save = payload["intents"][0]["resolved_chunks"][1]
    assert save["status"] == "unresolved"
    assert save["suggestions"] == ["@function:save_note"]


def test_cli_006_resolve_rejects_invalid_inputs(repo_root: Path, tmp_path: Path) -> None:
    cases = [
        (["resolve", "--path", str(tmp_path / "missing")], "Path does not exist"),
        (["resolve", "--path", str(repo_root), "--workers", "0"], "workers must be > 0"),
        (["resolve", "--path", str(repo_root), "--lang", "french"], "Invalid language code"),
        (["resolve", "--path", str(tmp_path)], "No manifest found"),
    ]
    for argv, message in cases:
        stdout = io.StringIO()
        stderr = io.StringIO()

        exit_code = run(argv, stdout=stdout, stderr=stderr)

        assert exit_code == 2
        assert message in stderr.getvalue()


def test_cli_007_resolve_rejects_invalid_manifest(tmp_path: Path) -> None:
    _write_file(tmp_path / ".intent" / "manifest.yaml", "intents: [unclosed\n")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(["resolve", "--path", str(tmp_path)], stdout=stdout, stderr=stderr)

    assert exit_code == 2
    assert "Invalid manifest" in stderr.getvalue()


def test_cli_008_parse_prints_projected_document(repo_root: Path) -> None:
    intent_path = repo_root / ".intent" / "intents" / "001-notes.intent.md"
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["parse", "--intent", str(intent_path), "--lang", "fr"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    payload = json.loads(_strip_ansi(stdout.getvalue()))
    assert payload["title"] == "Stockage des notes"
    assert payload["lang"] == "fr"
    assert "raw" not in payload
    assert [chunk["anchor"] for chunk in payload["chunks"]] == [
        "@class:Note",
        "@function:save_notes",
        "@function:load_notes",
    ]


def test_cli_009_parse_rejects_malformed_documents(tmp_path: Path) -> None:
    intent_path = tmp_path / "broken.intent.md"
    _write_file(intent_path, "# No frontmatter\n")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(["parse", "--intent", str(intent_path)], stdout=stdout, stderr=stderr)
    missing_code = run(
        ["parse", "--intent", str(tmp_path / "missing.intent.md")],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert missing_code == 2
    assert "Malformed intent document" in stderr.getvalue()
    assert "Cannot read intent document" in stderr.getvalue()


def test_cli_010_fingerprint_prints_hash_comment(repo_root: Path) -> None:
    source_path = repo_root / "src" / "notes.py"
    expected = resolve_anchor("@class:Note", source_path.read_text(encoding="utf-8"))
    assert expected is not None
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["fingerprint", "--file", str(source_path), "--anchor", "@class:Note"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert stdout.getvalue() == (
        f"@class:Note lines=3-6 <!-- hash: {expected.fingerprint} -->\n"
    )


def test_cli_011_fingerprint_reports_missing_anchor_with_suggestion(repo_root: Path) -> None:
    source_path = repo_root / "src" / "notes.py"
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["fingerprint", "--file", str(source_path), "--anchor", "@function:save_note"],
        stdout=stdout,
        stderr=stderr,
    )
    missing_code = run(
        ["fingerprint", "--file", str(repo_root / "nope.py"), "--anchor", "@line:1"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 1
    assert missing_code == 2
    assert "Anchor not found: @function:save_note" in stderr.getvalue()
    assert "did you mean: @function:save_notes" in stderr.getvalue()
    assert stdout.getvalue() == ""


class _InMemorySource:
    def __init__(self, intents: dict[str, str], files: dict[str, str]) -> None:
        self._intents = intents
        self._files = files

    def load_manifest(self) -> Manifest | None:
        return Manifest(
            intents=[ManifestIntent(id=name, file=name) for name in self._intents]
        )

    def load_intents(
        self, manifest: Manifest, lang: str | None = None
    ) -> tuple[list[LoadedIntent], list[LoadError]]:
        loaded = [
            LoadedIntent(
                document=parse_intent(self._intents[entry.file], lang=lang or "en"),
                intent_file_path=entry.file,
            )
            for entry in manifest.active()
        ]
        return loaded, []

    def read_text(self, path: str) -> str | None:
        return self._files.get(path)


def test_cli_012_resolve_source_accepts_any_intent_source() -> None:
    intent = "\n".join(
        [
            "---",
            "id: memory",
            "from: abc1234",
            "status: active",
            "files: [app.py]",
            "---",
            "",
            "# Memory",
            "",
            "### @function:run_job | Runner",
            "Runs the job.",
            "",
            "### @function:stop_jobs | Stopper",
            "Stops jobs.",
            "",
        ]
    )
    source = _InMemorySource(
        intents={"memory.intent.md": intent},
        files={"app.py": "def run_job():\n    return 1\n\ndef stop_job():\n    return 0\n"},
    )
    manifest = source.load_manifest()
    assert manifest is not None

    resolved, errors, hints = resolve_source(source, manifest, workers=2)

    assert errors == []
    assert resolved[0].intent_file_path == "memory.intent.md"
    runner, stopper = resolved[0].resolved_chunks
    assert runner.resolved_file == "app.py"
    assert runner.status == "untracked"
    assert stopper.status == "unresolved"
    assert hints == {("memory", "@function:stop_jobs"): ["@function:stop_job"]}
