# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Overlap detection between resolved chunk spans."""

import logging
from collections.abc import Iterable

from iar.model import ResolvedChunk, ResolvedSpan

logger = logging.getLogger(__name__)

OverlapKey = tuple[str, str]


def spans_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Tell whether two inclusive line ranges share at least one line."""
    return a_start <= b_end and b_start <= a_end


def detect_overlaps(chunks: Iterable[ResolvedChunk]) -> dict[OverlapKey, list[str]]:
    """Map each ``(file, anchor)`` to the anchors whose spans intersect it there.

    Only found chunks with a resolved file take part. Chunks are grouped by
    file in first-seen order and scanned pairwise (``i < j``) in input order,
    so each list is in order of first discovery. The same anchor string
    resolved in two files gets two independent entries.

    Args:
        chunks: Resolved chunks from one or more intent documents.

    Returns:
        Symmetric overlap lists without duplicates or self references, keyed by
        ``(resolved_file, anchor)``. Chunks without overlaps are absent.
    """
    by_file: dict[str, list[tuple[str, ResolvedSpan]]] = {}
    for chunk in chunks:
        if chunk.resolved is None or not chunk.resolved.found or not chunk.resolved_file:
            continue
        by_file.setdefault(chunk.resolved_file, []).append((chunk.anchor, chunk.resolved))

    overlaps: dict[OverlapKey, list[str]] = {}
    for file_path, spans in by_file.items():
        for index, (left_anchor, left) in enumerate(spans):
            for right_anchor, right in spans[index + 1 :]:
                if left_anchor == right_anchor:
                    continue
                if not spans_overlap(
                    left.start_line, left.end_line, right.start_line, right.end_line
                ):
                    continue
                _append_unique(overlaps, (file_path, left_anchor), right_anchor)
                _append_unique(overlaps, (file_path, right_anchor), left_anchor)
                logger.debug(
                    f"Overlapping chunks detected (file_path={file_path} "
                    f"left={left_anchor} right={right_anchor})"
                )
    return overlaps


def overlaps_for(overlaps: dict[OverlapKey, list[str]], chunk: ResolvedChunk) -> list[str]:
    """Return a copy of the overlap list of one resolved chunk."""
    if chunk.resolved_file is None:
        return []
    return list(overlaps.get((chunk.resolved_file, chunk.anchor), []))


def _append_unique(overlaps: dict[OverlapKey, list[str]], key: OverlapKey, other: str) -> None:
    existing = overlaps.setdefault(key, [])
    if other not in existing:
        existing.append(other)
