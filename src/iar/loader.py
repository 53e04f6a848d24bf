# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Local filesystem source for manifests, intent documents and file text."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from iar.frontmatter import ParseError
from iar.manifest import Manifest, ManifestError, parse_manifest
from iar.model import IntentDocument
from iar.parser import parse_intent

logger = logging.getLogger(__name__)

INTENT_DIR = ".intent"
MANIFEST_FILE = "manifest.yaml"
INTENTS_DIR = "intents"
INTENT_SUFFIX = ".intent.md"


@dataclass(frozen=True)
class LoadError:
    """Represent a recoverable failure to load one intent document."""

    file_path: str
    message: str


@dataclass(frozen=True)
class LoadedIntent:
    """Represent a parsed intent document and where it was read from."""

    document: IntentDocument
    intent_file_path: str


class IntentSource(Protocol):
    """Supply manifests, intent documents and source file text."""

    def load_manifest(self) -> Manifest | None:
        """Return the project manifest, or ``None`` when absent."""

    def load_intents(
        self, manifest: Manifest, lang: str | None = None
    ) -> tuple[list[LoadedIntent], list[LoadError]]:
        """Load and parse the manifest's active intent documents."""

    def read_text(self, path: str) -> str | None:
        """Return source file text, or ``None`` when unavailable."""


def language_variant(file_name: str, lang: str) -> str:
    """Return the language-specific name of an intent document.

    ``001-notes.intent.md`` becomes ``001-notes.intent.fr.md`` for ``fr``.
    """
    if file_name.endswith(INTENT_SUFFIX):
        base = file_name[: -len(INTENT_SUFFIX)]
        return f"{base}.intent.{lang}.md"
    return file_name


class LocalIntentRepository:
    """Read intent data from a checked-out repository."""

    def __init__(self, root_path: Path) -> None:
        """Initialize repository source.

        Args:
            root_path: Repository root containing the ``.intent`` directory.
        """
        self._root_path = root_path

    @property
    def intents_path(self) -> Path:
        return self._root_path / INTENT_DIR / INTENTS_DIR

    def load_manifest(self) -> Manifest | None:
        """Read ``.intent/manifest.yaml``.

        Raises:
            ManifestError: If the manifest exists but cannot be read or parsed.
        """
        manifest_path = self._root_path / INTENT_DIR / MANIFEST_FILE
        if not manifest_path.is_file():
            logger.info(f"No manifest found (path={manifest_path})")
            return None
        try:
            text = manifest_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ManifestError(f"Cannot read manifest {manifest_path}: {exc}") from exc
        return parse_manifest(text)

    def load_intents(
        self, manifest: Manifest, lang: str | None = None
    ) -> tuple[list[LoadedIntent], list[LoadError]]:
        """Load active intents, preferring ``<name>.intent.<lang>.md`` variants.

        Args:
            manifest: Parsed manifest.
            lang: Requested language; the manifest default when omitted.

        Returns:
            Loaded intents in manifest order and recoverable load errors.
        """
        effective_lang = lang or manifest.default_lang
        loaded: list[LoadedIntent] = []
        errors: list[LoadError] = []
        for entry in manifest.active():
            candidates = [entry.file]
            if lang:
                candidates.insert(0, language_variant(entry.file, lang))
            intent_path = next(
                (
                    self.intents_path / name
                    for name in candidates
                    if (self.intents_path / name).is_file()
                ),
                None,
            )
            relative = f"{INTENT_DIR}/{INTENTS_DIR}/{entry.file}"
            if intent_path is None:
                logger.warning(f"Intent document not found (id={entry.id} file={relative})")
                errors.append(LoadError(file_path=relative, message="intent document not found"))
                continue
            relative = str(intent_path.relative_to(self._root_path))
            try:
                text = intent_path.read_text(encoding="utf-8")
                document = parse_intent(
                    text, lang=effective_lang, default_lang=manifest.default_lang
                )
            except (OSError, UnicodeDecodeError, ParseError) as exc:
                logger.warning(
                    f"Skipping intent document due to read/parse failure "
                    f"(file_path={relative} error={exc})"
                )
                errors.append(LoadError(file_path=relative, message=str(exc)))
                continue
            loaded.append(LoadedIntent(document=document, intent_file_path=relative))
        return loaded, errors

    def read_text(self, path: str) -> str | None:
        """Read a project-relative file; ``None`` if missing, unreadable or outside the root."""
        root = self._root_path.resolve()
        full_path = (root / path).resolve()
        if not full_path.is_relative_to(root) or not full_path.is_file():
            return None
        try:
            return full_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(f"Skipping unreadable file (file_path={path} error={exc})")
            return None
