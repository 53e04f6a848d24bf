# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Rename suggestions for unresolved declaration anchors."""

import logging
import re

import Levenshtein

from iar.anchor import parse_anchor
from iar.resolver import split_lines

logger = logging.getLogger(__name__)

_DECLARED_NAME_RES: dict[str, list[re.Pattern[str]]] = {
    "class": [re.compile(r"^\s*(?:[\w]+\s+)*class\s+(\w+)")],
    "function": [
        re.compile(r"^\s*(?:export\s+)?(?:default\s+)?(?:async\s+)?(?:def|function)\s+(\w+)"),
        re.compile(r"^\s*(?:export\s+)?(?:const|let|var)\s+(\w+)\s*(?::[^=]+)?=(?![=>])"),
    ],
}


def declared_names(kind: str, file_text: str) -> list[str]:
    """List class or function names declared in a file, in first-seen order."""
    names: list[str] = []
    for line in split_lines(file_text):
        for pattern in _DECLARED_NAME_RES.get(kind, []):
            match = pattern.match(line)
            if match is not None and match.group(1) not in names:
                names.append(match.group(1))
    return names


def suggest_anchors(
    anchor: str, file_text: str, threshold: float = 0.75, limit: int = 3
) -> list[str]:
    """Suggest anchors for a declaration that may have been renamed.

    Args:
        anchor: Unresolved ``@class:`` or ``@function:`` anchor.
        file_text: Current text of the file the anchor was expected in.
        threshold: Inclusive minimum ``Levenshtein.ratio`` in [0.0, 1.0].
        limit: Maximum number of suggestions.

    Returns:
        Candidate anchors, most similar first. Other anchor kinds yield ``[]``.

    Raises:
        ValueError: If ``threshold`` is outside [0.0, 1.0] or ``limit`` < 1.
    """
    if threshold < 0.0 or threshold > 1.0:
        raise ValueError("threshold must be between 0.0 and 1.0.")
    if limit < 1:
        raise ValueError("limit must be > 0")
    parsed = parse_anchor(anchor)
    if parsed is None or parsed.kind not in _DECLARED_NAME_RES:
        return []
    wanted = parsed.spec.strip()

    scored: list[tuple[float, str]] = []
    for name in declared_names(parsed.kind, file_text):
        if name == wanted:
            continue
        ratio = float(Levenshtein.ratio(wanted, name))
        if ratio >= threshold:
            scored.append((ratio, name))
    scored.sort(key=lambda item: (-item[0], item[1]))
    suggestions = [f"@{parsed.kind}:{name}" for _, name in scored[:limit]]
    if suggestions:
        logger.debug(f"Rename suggestions computed (anchor={anchor} suggestions={suggestions})")
    return suggestions
