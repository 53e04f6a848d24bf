# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Resolution orchestration across intent documents and their files."""

import concurrent.futures
import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Protocol

from iar.anchor import parse_anchor, split_link_target
from iar.fingerprint import drift_status
from iar.model import (
    ChunkLink,
    ChunkSpec,
    IntentDocument,
    ResolvedChunk,
    ResolvedIntent,
    ResolvedSpan,
)
from iar.overlap import detect_overlaps, overlaps_for
from iar.resolver import AnchorResolver

logger = logging.getLogger(__name__)


class FileSource(Protocol):
    """Supply raw file text by project-relative path."""

    def read_text(self, path: str) -> str | None:
        """Return file text, or ``None`` when the file is unavailable."""


class MappingFileSource:
    """Serve file text from an in-memory mapping."""

    def __init__(self, files: Mapping[str, str]) -> None:
        self._files = files

    def read_text(self, path: str) -> str | None:
        return self._files.get(path)


class IntentResolver:
    """Resolve every chunk of a batch of intent documents, then detect overlaps."""

    def __init__(
        self, resolver: AnchorResolver | None = None, max_workers: int = 1
    ) -> None:
        """Initialize orchestration settings.

        Args:
            resolver: Anchor resolver to use; default boundary strategies if omitted.
            max_workers: Worker threads used for chunk resolution. ``1`` resolves
                sequentially.

        Raises:
            ValueError: If ``max_workers`` is not greater than zero.
        """
        if max_workers <= 0:
            raise ValueError("max_workers must be > 0")
        self._resolver = resolver or AnchorResolver()
        self._max_workers = max_workers

    def resolve(
        self,
        documents: Sequence[IntentDocument],
        files: Mapping[str, str] | FileSource,
        intent_file_paths: Sequence[str | None] | None = None,
    ) -> list[ResolvedIntent]:
        """Resolve all chunks of all documents against the supplied file text.

        Each chunk is tried against the document's declared files in order and
        the first file where the anchor resolves wins. Overlaps are computed only
        after every chunk of every document has been resolved.

        Args:
            documents: Parsed intent documents.
            files: File text by path, or a file source.
            intent_file_paths: Optional intent document paths aligned with
                ``documents``.

        Returns:
            One resolved intent per document, chunks in source order.
        """
        source = _as_file_source(files)
        texts = self._read_declared_files(documents, source)

        tasks: list[tuple[int, ChunkSpec]] = [
            (doc_index, chunk)
            for doc_index, document in enumerate(documents)
            for chunk in document.chunks
        ]
        resolved_chunks = self._resolve_tasks(documents, tasks, texts)

        overlaps = detect_overlaps(resolved_chunks)
        per_document: list[list[ResolvedChunk]] = [[] for _ in documents]
        for (doc_index, _), resolved in zip(tasks, resolved_chunks):
            per_document[doc_index].append(
                replace(resolved, overlaps=overlaps_for(overlaps, resolved))
            )

        results: list[ResolvedIntent] = []
        for doc_index, document in enumerate(documents):
            intent_file_path = None
            if intent_file_paths is not None and doc_index < len(intent_file_paths):
                intent_file_path = intent_file_paths[doc_index]
            results.append(
                ResolvedIntent(
                    document=document,
                    resolved_chunks=per_document[doc_index],
                    intent_file_path=intent_file_path,
                )
            )
        unresolved = sum(
            1 for chunk in resolved_chunks if chunk.resolved is None
        )
        logger.info(
            f"Resolution completed (documents={len(documents)} chunks={len(resolved_chunks)} "
            f"unresolved={unresolved} overlapping={len(overlaps)})"
        )
        return results

    def resolve_chunk(
        self,
        chunk: ChunkSpec,
        declared_files: Sequence[str],
        files: Mapping[str, str] | FileSource,
        intent_id: str = "",
    ) -> ResolvedChunk:
        """Resolve one chunk against declared files, first match wins.

        Overlaps are not computed here; see :meth:`resolve`.
        """
        source = _as_file_source(files)
        texts = {path: source.read_text(path) for path in declared_files}
        return self._resolve_one(chunk, declared_files, texts, intent_id)

    def resolve_link(
        self,
        link: ChunkLink,
        owner: ResolvedChunk,
        declared_files: Sequence[str],
        files: Mapping[str, str] | FileSource,
    ) -> tuple[str | None, ResolvedSpan | None]:
        """Resolve a chunk link target.

        Cross-file targets (``path@anchor``) are resolved in the named file.
        Same-file targets use the owning chunk's file, or the declared files in
        order when the owner itself is unresolved.

        Returns:
            The file the target resolved in and its span, or ``(None, None)``.
        """
        source = _as_file_source(files)
        file_path, anchor = split_link_target(link.target)
        if file_path is not None:
            candidates: Sequence[str] = [file_path]
        elif owner.resolved_file is not None:
            candidates = [owner.resolved_file]
        else:
            candidates = declared_files
        for candidate in candidates:
            text = source.read_text(candidate)
            if text is None:
                continue
            span = self._resolver.resolve(anchor, text)
            if span is not None:
                return candidate, span
        return None, None

    def _read_declared_files(
        self, documents: Sequence[IntentDocument], source: FileSource
    ) -> dict[str, str | None]:
        texts: dict[str, str | None] = {}
        for document in documents:
            for path in document.frontmatter.files:
                if path not in texts:
                    texts[path] = source.read_text(path)
                    if texts[path] is None:
                        logger.warning(
                            f"Declared file unavailable (intent_id={document.frontmatter.id} "
                            f"file_path={path})"
                        )
        return texts

    def _resolve_tasks(
        self,
        documents: Sequence[IntentDocument],
        tasks: list[tuple[int, ChunkSpec]],
        texts: Mapping[str, str | None],
    ) -> list[ResolvedChunk]:
        if self._max_workers == 1 or len(tasks) <= 1:
            return [
                self._resolve_one(
                    chunk,
                    documents[doc_index].frontmatter.files,
                    texts,
                    documents[doc_index].frontmatter.id,
                )
                for doc_index, chunk in tasks
            ]

        results: list[ResolvedChunk | None] = [None] * len(tasks)
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=self._max_workers
        ) as executor:
            future_to_index = {
                executor.submit(
                    self._resolve_one,
                    chunk,
                    documents[doc_index].frontmatter.files,
                    texts,
                    documents[doc_index].frontmatter.id,
                ): index
                for index, (doc_index, chunk) in enumerate(tasks)
            }
            for future in concurrent.futures.as_completed(future_to_index):
                results[future_to_index[future]] = future.result()
        return [result for result in results if result is not None]

    def _resolve_one(
        self,
        chunk: ChunkSpec,
        declared_files: Sequence[str],
        texts: Mapping[str, str | None],
        intent_id: str,
    ) -> ResolvedChunk:
        parsed = parse_anchor(chunk.anchor)
        if parsed is None or not parsed.known:
            logger.warning(
                f"Unknown anchor kind (intent_id={intent_id} anchor={chunk.anchor})"
            )
            return ResolvedChunk(
                chunk=chunk, resolved_file=None, resolved=None, hash_match=None
            )

        for path in declared_files:
            text = texts.get(path)
            if text is None:
                continue
            span = self._resolver.resolve(chunk.anchor, text)
            if span is None:
                continue
            return ResolvedChunk(
                chunk=chunk,
                resolved_file=path,
                resolved=span,
                hash_match=drift_status(span, chunk.stored_hash),
            )

        logger.warning(
            f"Anchor not resolved in declared files (intent_id={intent_id} "
            f"anchor={chunk.anchor} files={list(declared_files)})"
        )
        return ResolvedChunk(chunk=chunk, resolved_file=None, resolved=None, hash_match=None)


def _as_file_source(files: Mapping[str, str] | FileSource) -> FileSource:
    if isinstance(files, Mapping):
        return MappingFileSource(files)
    return files
