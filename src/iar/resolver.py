# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Anchor resolution against raw source text."""

import logging
import re

from iar.anchor import parse_anchor, parse_line_spec
from iar.boundaries import DelimiterBounded, IndentationBounded
from iar.boundary import BoundaryFinder
from iar.fingerprint import fingerprint
from iar.model import ResolvedSpan

logger = logging.getLogger(__name__)

_CLASS_MODIFIERS = (
    r"(?:(?:export|default|abstract|public|private|protected|internal|"
    r"final|sealed|static|data|partial)\s+)*"
)
_METHOD_MODIFIERS = (
    r"(?:(?:public|private|protected|static|async|override|readonly|get|set)\s+)*"
)
_NAME_END = r"(?!\w)"


def split_lines(text: str) -> list[str]:
    """Split source text on ``\\n``, counting a trailing newline as an empty line.

    Carriage returns stay on their lines so span content and fingerprints are
    those of the exact file text.
    """
    return text.split("\n")


class AnchorResolver:
    """Resolve semantic anchors to line spans using lexical heuristics."""

    def __init__(
        self,
        class_boundary: BoundaryFinder | None = None,
        function_boundary: BoundaryFinder | None = None,
    ) -> None:
        """Initialize boundary strategies.

        Args:
            class_boundary: Finder for ``@class`` bodies; indentation by default.
            function_boundary: Finder for ``@function`` bodies; delimiter
                balancing with indentation fallback by default.
        """
        self._class_boundary = class_boundary or IndentationBounded()
        self._function_boundary = function_boundary or DelimiterBounded()

    def resolve(self, anchor: str, file_text: str) -> ResolvedSpan | None:
        """Resolve one anchor against one file.

        Args:
            anchor: Anchor string (``@class:``, ``@function:``, ``@pattern:``
                or ``@line:``).
            file_text: Current text of the file.

        Returns:
            The resolved span, or ``None`` when the target cannot be located,
            the anchor kind is unknown, or a line spec is invalid.
        """
        parsed = parse_anchor(anchor)
        if parsed is None or not parsed.known:
            logger.debug(f"Unknown anchor kind; treating as not found (anchor={anchor!r})")
            return None

        lines = split_lines(file_text)
        if parsed.kind == "class":
            return self._find_class(lines, parsed.spec.strip())
        if parsed.kind == "function":
            return self._find_function(lines, parsed.spec.strip())
        if parsed.kind == "pattern":
            return self._find_pattern(lines, parsed.spec)
        return self._find_lines(lines, parsed.spec)

    def _find_class(self, lines: list[str], name: str) -> ResolvedSpan | None:
        if not name:
            return None
        declaration = re.compile(
            rf"^(\s*){_CLASS_MODIFIERS}class\s+{re.escape(name)}{_NAME_END}"
        )
        for index, line in enumerate(lines):
            match = declaration.match(line)
            if match is None:
                continue
            indent = len(match.group(1))
            end = self._class_boundary.find_end(lines, index, indent)
            start = index
            if index > 0 and lines[index - 1].strip().startswith("@"):
                start = index - 1
            return _build_span(lines, start, end)
        logger.debug(f"Class declaration not found (name={name})")
        return None

    def _find_function(self, lines: list[str], name: str) -> ResolvedSpan | None:
        if not name:
            return None
        escaped = re.escape(name)
        patterns = [
            re.compile(
                rf"^(\s*)(?:export\s+)?(?:default\s+)?(?:async\s+)?"
                rf"(?:def|function)\s+{escaped}\s*[(<]"
            ),
            re.compile(
                rf"^(\s*)(?:export\s+)?(?:const|let|var)\s+{escaped}{_NAME_END}"
                rf"\s*(?::[^=]+)?=(?![=>])"
            ),
            re.compile(rf"^(\s*){escaped}\s+=\s"),
            re.compile(rf"^(\s*){_METHOD_MODIFIERS}{escaped}\s*\("),
        ]
        for index, line in enumerate(lines):
            for pattern in patterns:
                match = pattern.match(line)
                if match is None:
                    continue
                indent = len(match.group(1))
                end = self._function_boundary.find_end(lines, index, indent)
                return _build_span(lines, index, end)
        logger.debug(f"Function declaration not found (name={name})")
        return None

    def _find_pattern(self, lines: list[str], literal: str) -> ResolvedSpan | None:
        if not literal:
            return None
        for index, line in enumerate(lines):
            if literal in line:
                return _build_span(lines, index, index)
        logger.debug(f"Pattern not found (pattern={literal!r})")
        return None

    def _find_lines(self, lines: list[str], spec: str) -> ResolvedSpan | None:
        line_range = parse_line_spec(spec)
        if line_range is None:
            logger.debug(f"Invalid line spec (spec={spec!r})")
            return None
        start, end = line_range
        if start < 1 or end < start or end > len(lines):
            logger.debug(
                f"Line spec out of range (spec={spec!r} line_count={len(lines)})"
            )
            return None
        return _build_span(lines, start - 1, end - 1)


def _build_span(lines: list[str], start: int, end: int) -> ResolvedSpan:
    content = "\n".join(lines[start : end + 1])
    return ResolvedSpan(
        found=True,
        start_line=start + 1,
        end_line=end + 1,
        content=content,
        fingerprint=fingerprint(content),
    )


_DEFAULT_RESOLVER = AnchorResolver()


def resolve_anchor(anchor: str, file_text: str) -> ResolvedSpan | None:
    """Resolve an anchor with the default boundary strategies."""
    return _DEFAULT_RESOLVER.resolve(anchor, file_text)
