# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for intent documents and resolution results."""

from dataclasses import dataclass, field
from typing import Literal

IntentStatus = Literal["active", "superseded", "archived"]
RiskLevel = Literal["low", "medium", "high"]
ChunkStatus = Literal["unresolved", "stale", "current", "untracked"]

INTENT_STATUSES: frozenset[str] = frozenset({"active", "superseded", "archived"})
RISK_LEVELS: frozenset[str] = frozenset({"low", "medium", "high"})


@dataclass(frozen=True)
class IntentFrontmatter:
    """Represent the identity and metadata block of one intent record.

    Attributes:
        id: Intent identifier, unique within a project.
        from_ref: Base revision reference (the ``from`` key), kept opaque.
        status: Lifecycle status of the intent.
        files: Project-relative paths the intent documents, in declared order.
        author: Optional author name.
        date: Optional authoring date, kept as written.
        superseded_by: Identifier of the replacing intent when superseded.
        risk: Optional risk level.
        tags: Free-form tags in declared order.
    """

    id: str
    from_ref: str
    status: IntentStatus
    files: list[str]
    author: str | None = None
    date: str | None = None
    superseded_by: str | None = None
    risk: RiskLevel | None = None
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ChunkLink:
    """Represent one ``@link`` line of a chunk."""

    target: str
    reason: str


@dataclass(frozen=True)
class ChunkSpec:
    """Represent one documented code unit bound to an anchor.

    Attributes:
        anchor: Anchor string such as ``@class:Note`` or ``@line:3-9``.
        title: Chunk title projected to the requested language.
        description: Free text projected to the requested language.
        decisions: Rationale lines in source order.
        links: Related anchors in source order.
        stored_hash: Fingerprint captured when the chunk was authored.
    """

    anchor: str
    title: str
    description: str = ""
    decisions: list[str] = field(default_factory=list)
    links: list[ChunkLink] = field(default_factory=list)
    stored_hash: str | None = None


@dataclass(frozen=True)
class IntentDocument:
    """Represent one parsed intent document projected to a single language."""

    frontmatter: IntentFrontmatter
    title: str
    summary: str
    motivation: str | None
    chunks: list[ChunkSpec]
    lang: str = "en"
    raw: str = ""


@dataclass(frozen=True)
class ResolvedSpan:
    """Represent the source span an anchor resolved to.

    Attributes:
        found: Whether the anchor was located.
        start_line: First line of the span (1-based, inclusive).
        end_line: Last line of the span (1-based, inclusive).
        content: Exact span text joined with ``\\n``.
        fingerprint: Stable hash of ``content``.
    """

    found: bool
    start_line: int
    end_line: int
    content: str
    fingerprint: str


@dataclass(frozen=True)
class ResolvedChunk:
    """Represent a chunk joined with its resolution outcome."""

    chunk: ChunkSpec
    resolved_file: str | None
    resolved: ResolvedSpan | None
    hash_match: bool | None
    overlaps: list[str] = field(default_factory=list)

    @property
    def anchor(self) -> str:
        return self.chunk.anchor

    @property
    def status(self) -> ChunkStatus:
        """Summarize the chunk health for presentation layers."""
        if self.resolved is None or not self.resolved.found:
            return "unresolved"
        if self.hash_match is None:
            return "untracked"
        return "current" if self.hash_match else "stale"


@dataclass(frozen=True)
class ResolvedIntent:
    """Represent one intent document with all of its chunks resolved."""

    document: IntentDocument
    resolved_chunks: list[ResolvedChunk]
    intent_file_path: str | None = None
