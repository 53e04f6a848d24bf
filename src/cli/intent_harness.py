# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""CLI harness for intent parsing, anchor resolution and fingerprinting."""

import argparse
import json
import logging
import re
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.table import Table
from rich.text import Text

from iar.frontmatter import ParseError
from iar.loader import IntentSource, LoadError, LocalIntentRepository
from iar.manifest import Manifest, ManifestError
from iar.model import ResolvedChunk, ResolvedIntent
from iar.orchestrator import IntentResolver
from iar.parser import DEFAULT_LANG, parse_intent
from iar.resolver import resolve_anchor
from iar.suggestions import suggest_anchors

logger = logging.getLogger(__name__)

TABLE_COLUMN_RATIOS: dict[str, int] = {
    "anchor": 3,
    "title": 3,
    "file": 2,
    "lines": 1,
    "status": 1,
    "overlaps": 2,
    "hint": 2,
}

STATUS_STYLES: dict[str, str] = {
    "current": "green",
    "untracked": "cyan",
    "stale": "yellow",
    "unresolved": "red",
}

_LANG_RE = re.compile(r"^[a-z]{2}$")


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="iar")
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve_parser = subparsers.add_parser("resolve")
    resolve_parser.add_argument(
        "--path", required=True, help="Repository root containing .intent/."
    )
    resolve_parser.add_argument(
        "--lang", required=False, help="Language code; manifest default if omitted."
    )
    resolve_parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Worker threads used for anchor resolution.",
    )
    resolve_parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format.",
    )
    resolve_parser.add_argument(
        "--output",
        required=False,
        help="Optional output file path for raw JSON when --format json is used.",
    )

    parse_parser = subparsers.add_parser("parse")
    parse_parser.add_argument("--intent", required=True, help="Intent document path.")
    parse_parser.add_argument("--lang", default=DEFAULT_LANG, help="Language code.")
    parse_parser.add_argument(
        "--default-lang", default=DEFAULT_LANG, help="Fallback language code."
    )

    fingerprint_parser = subparsers.add_parser("fingerprint")
    fingerprint_parser.add_argument("--file", required=True, help="Source file path.")
    fingerprint_parser.add_argument(
        "--anchor", required=True, help="Anchor such as @function:name."
    )
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2
    if args.command == "resolve":
        return _run_resolve(args=args, stdout=stdout, stderr=stderr)
    if args.command == "parse":
        return _run_parse(args=args, stdout=stdout, stderr=stderr)
    if args.command == "fingerprint":
        return _run_fingerprint(args=args, stdout=stdout, stderr=stderr)

    logger.warning(f"Unsupported command (command={args.command})")
    stderr.write(f"Unsupported command: {args.command}\n")
    return 2


def _run_resolve(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run resolve command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    root_path = Path(args.path)
    if not root_path.is_dir():
        logger.warning(f"Path does not exist (path={root_path})")
        stderr.write(f"Path does not exist: {root_path}\n")
        return 2
    if args.workers <= 0:
        logger.warning(f"Invalid worker count (workers={args.workers})")
        stderr.write("workers must be > 0\n")
        return 2
    if args.lang is not None and not _LANG_RE.match(args.lang):
        logger.warning(f"Invalid language code (lang={args.lang})")
        stderr.write(f"Invalid language code: {args.lang}\n")
        return 2

    repository: IntentSource = LocalIntentRepository(root_path=root_path)
    try:
        manifest = repository.load_manifest()
    except ManifestError as exc:
        logger.warning(f"Manifest could not be loaded (path={root_path} error={exc})")
        stderr.write(f"Invalid manifest: {exc}\n")
        return 2
    if manifest is None:
        stderr.write(f"No manifest found under: {root_path}\n")
        return 2

    resolved, errors, hints = resolve_source(
        source=repository, manifest=manifest, lang=args.lang, workers=args.workers
    )
    logger.info(
        f"Resolve completed (path={root_path} intents={len(resolved)} errors={len(errors)})"
    )
    _write_errors(errors=errors, stderr=stderr)

    if args.format == "json":
        payload = _build_payload(resolved=resolved, errors=errors, hints=hints)
        if args.output:
            try:
                output_path = Path(args.output)
                output_path.parent.mkdir(parents=True, exist_ok=True)
                output_path.write_text(
                    json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
                )
            except OSError as exc:
                logger.warning(
                    f"Failed to write JSON output file (output_path={args.output} error={exc})"
                )
                stderr.write(f"Failed to write JSON output file: {args.output}\n")
                return 2
        else:
            _write_json(payload=payload, stdout=stdout)
    else:
        _write_table(resolved=resolved, hints=hints, stdout=stdout)
    return 0


def resolve_source(
    source: IntentSource, manifest: Manifest, lang: str | None = None, workers: int = 1
) -> tuple[list[ResolvedIntent], list[LoadError], dict[tuple[str, str], list[str]]]:
    """Load, resolve and hint the active intents of one intent source.

    Args:
        source: Supplier of intent documents and source file text.
        manifest: Parsed manifest of the source.
        lang: Requested language; the manifest default when omitted.
        workers: Worker threads used for anchor resolution.

    Returns:
        Resolved intents, recoverable load errors, and rename suggestions keyed
        by ``(intent_id, anchor)``.
    """
    loaded, errors = source.load_intents(manifest, lang=lang)
    resolved = IntentResolver(max_workers=workers).resolve(
        documents=[item.document for item in loaded],
        files=source,
        intent_file_paths=[item.intent_file_path for item in loaded],
    )
    return resolved, errors, _collect_hints(resolved, source)


def _run_parse(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run parse command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    intent_path = Path(args.intent)
    try:
        text = intent_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Intent document unreadable (path={intent_path} error={exc})")
        stderr.write(f"Cannot read intent document: {intent_path}\n")
        return 2
    try:
        document = parse_intent(text, lang=args.lang, default_lang=args.default_lang)
    except ParseError as exc:
        logger.warning(f"Intent document is malformed (path={intent_path} error={exc})")
        stderr.write(f"Malformed intent document: {exc}\n")
        return 2
    payload = asdict(document)
    payload.pop("raw", None)
    _write_json(payload=payload, stdout=stdout)
    return 0


def _run_fingerprint(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run fingerprint command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code: 0 when resolved, 1 when not found, 2 on input errors.
    """
    source_path = Path(args.file)
    try:
        text = source_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Source file unreadable (path={source_path} error={exc})")
        stderr.write(f"Cannot read source file: {source_path}\n")
        return 2
    span = resolve_anchor(args.anchor, text)
    if span is None:
        stderr.write(f"Anchor not found: {args.anchor}\n")
        for suggestion in suggest_anchors(args.anchor, text):
            stderr.write(f"did you mean: {suggestion}\n")
        return 1
    stdout.write(
        f"{args.anchor} lines={span.start_line}-{span.end_line} "
        f"<!-- hash: {span.fingerprint} -->\n"
    )
    return 0


def _collect_hints(
    resolved: list[ResolvedIntent], source: IntentSource
) -> dict[tuple[str, str], list[str]]:
    """Compute rename suggestions for unresolved chunks.

    Returns:
        Suggestions keyed by ``(intent_id, anchor)``.
    """
    hints: dict[tuple[str, str], list[str]] = {}
    for intent in resolved:
        for chunk in intent.resolved_chunks:
            if chunk.resolved is not None:
                continue
            suggestions: list[str] = []
            for path in intent.document.frontmatter.files:
                text = source.read_text(path)
                if text is None:
                    continue
                for suggestion in suggest_anchors(chunk.anchor, text):
                    if suggestion not in suggestions:
                        suggestions.append(suggestion)
            if suggestions:
                hints[(intent.document.frontmatter.id, chunk.anchor)] = suggestions
    return hints


def _write_errors(errors: list[LoadError], stderr: TextIO) -> None:
    """Write load errors to stderr.

    Args:
        errors: Recoverable load errors.
        stderr: Standard error stream.
    """
    for error in errors:
        stderr.write(f"load_error: {error}\n")


def _build_payload(
    resolved: list[ResolvedIntent],
    errors: list[LoadError],
    hints: dict[tuple[str, str], list[str]],
) -> dict[str, Any]:
    intents: list[dict[str, Any]] = []
    for intent in resolved:
        document = asdict(intent.document)
        document.pop("raw", None)
        document.pop("chunks", None)
        intents.append(
            {
                "intent_file_path": intent.intent_file_path,
                "document": document,
                "resolved_chunks": [
                    _chunk_payload(
                        chunk, hints.get((intent.document.frontmatter.id, chunk.anchor), [])
                    )
                    for chunk in intent.resolved_chunks
                ],
            }
        )
    return {"intents": intents, "errors": [asdict(error) for error in errors]}


def _chunk_payload(chunk: ResolvedChunk, suggestions: list[str]) -> dict[str, Any]:
    payload = asdict(chunk)
    payload["status"] = chunk.status
    payload["suggestions"] = suggestions
    return payload


def _write_json(payload: dict[str, Any], stdout: TextIO) -> None:
    """Write a payload in JSON format.

    Args:
        payload: JSON-serializable payload.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print(
        json.dumps(payload, indent=2, sort_keys=True),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def _write_table(
    resolved: list[ResolvedIntent],
    hints: dict[tuple[str, str], list[str]],
    stdout: TextIO,
) -> None:
    """Write one table of resolved chunks per intent.

    Args:
        resolved: Resolved intents.
        hints: Rename suggestions keyed by ``(intent_id, anchor)``.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    for intent in resolved:
        frontmatter = intent.document.frontmatter
        console.rule(
            Text(f"{frontmatter.id}: {intent.document.title}"),
            style=Style(color="cyan"),
            characters="-",
        )
        table = Table(show_header=True, show_lines=True, expand=True)
        for column in ("anchor", "title", "file", "lines", "status", "overlaps", "hint"):
            table.add_column(
                column,
                ratio=TABLE_COLUMN_RATIOS[column],
                justify="right" if column == "lines" else "left",
                overflow="fold",
            )
        for chunk in intent.resolved_chunks:
            lines = (
                f"{chunk.resolved.start_line}-{chunk.resolved.end_line}"
                if chunk.resolved is not None
                else "-"
            )
            status = chunk.status
            table.add_row(
                Text(chunk.anchor),
                Text(chunk.chunk.title),
                Text(chunk.resolved_file or "-"),
                Text(lines),
                Text(status, style=STATUS_STYLES[status]),
                Text(", ".join(chunk.overlaps)),
                Text(", ".join(hints.get((frontmatter.id, chunk.anchor), []))),
            )
        console.print(table)


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
