# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Intent manifest parsing."""

import logging
from dataclasses import dataclass, field
from typing import Any, cast

import yaml

from iar.model import INTENT_STATUSES, IntentStatus

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_VERSION = 1
DEFAULT_MANIFEST_LANG = "en"


class ManifestError(RuntimeError):
    """Represent an unreadable or structurally invalid manifest."""


@dataclass(frozen=True)
class ManifestIntent:
    """Represent one intent entry of the manifest.

    Attributes:
        id: Intent identifier.
        file: Intent document file name, relative to the intents directory.
        status: Lifecycle status used for upstream filtering.
        superseded_by: Identifier of the replacing intent, if any.
    """

    id: str
    file: str
    status: IntentStatus = "active"
    superseded_by: str | None = None


@dataclass(frozen=True)
class Manifest:
    """Represent the manifest listing a project's intent documents."""

    version: int = DEFAULT_MANIFEST_VERSION
    default_lang: str = DEFAULT_MANIFEST_LANG
    intents: list[ManifestIntent] = field(default_factory=list)

    def active(self) -> list[ManifestIntent]:
        """Return active entries in manifest order."""
        return [intent for intent in self.intents if intent.status == "active"]


def parse_manifest(text: str) -> Manifest:
    """Parse manifest YAML text.

    Args:
        text: Manifest file content.

    Returns:
        Parsed manifest. Entries missing ``id`` or ``file`` are skipped.

    Raises:
        ManifestError: If the YAML is invalid or its root is not a mapping.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        logger.warning(f"Manifest YAML could not be parsed (error={exc})")
        raise ManifestError(str(exc)) from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ManifestError("Manifest root must be a mapping.")

    try:
        version = int(data.get("version", DEFAULT_MANIFEST_VERSION))
    except (TypeError, ValueError) as exc:
        raise ManifestError(f"Invalid manifest version: {data.get('version')!r}") from exc
    default_lang = str(data.get("default_lang") or DEFAULT_MANIFEST_LANG)

    raw_intents = data.get("intents") or []
    if not isinstance(raw_intents, list):
        raise ManifestError("Manifest 'intents' must be a list.")
    intents: list[ManifestIntent] = []
    for index, entry in enumerate(raw_intents):
        intent = _parse_entry(index, entry)
        if intent is not None:
            intents.append(intent)
    return Manifest(version=version, default_lang=default_lang, intents=intents)


def _parse_entry(index: int, entry: Any) -> ManifestIntent | None:
    if not isinstance(entry, dict) or not entry.get("id") or not entry.get("file"):
        logger.warning(f"Skipping manifest entry without id or file (index={index})")
        return None
    status = str(entry.get("status") or "active")
    if status not in INTENT_STATUSES:
        logger.warning(
            f"Skipping manifest entry with unsupported status (id={entry['id']} status={status})"
        )
        return None
    superseded_by = entry.get("superseded_by")
    return ManifestIntent(
        id=str(entry["id"]),
        file=str(entry["file"]),
        status=cast(IntentStatus, status),
        superseded_by=str(superseded_by) if superseded_by else None,
    )
